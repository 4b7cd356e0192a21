"""Document style values and the clamping rules applied to style edits."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Mapping

from ..errors import ValidationError

LOGGER = logging.getLogger(__name__)

BACKGROUNDS: tuple[str, ...] = ("plain", "dots", "lines", "grid")
FONT_SIZE_PRESETS: tuple[str, ...] = ("small", "medium", "large")
FONT_FAMILIES: tuple[str, ...] = (
    "Inter",
    "Roboto",
    "Open Sans",
    "Lato",
    "Montserrat",
    "Poppins",
    "Playfair Display",
    "Merriweather",
)

# Slider ranges of the design panel.
MARGIN_RANGE: tuple[float, float] = (10.0, 50.0)
SPACING_RANGE: tuple[float, float] = (0.0, 50.0)
FONT_SIZE_RANGE: tuple[float, float] = (8.0, 24.0)
LINE_HEIGHT_RANGE: tuple[float, float] = (1.0, 2.5)
LEGACY_CATEGORIES: tuple[int, ...] = (1, 2, 3, 4)

DEFAULT_FONT_SIZE = 11
_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


@dataclass(slots=True, frozen=True)
class Style:
    """Visual settings shared by the live canvas and the PDF export.

    ``page_margins`` and ``section_spacing`` carry two encodings: values from
    the continuous sliders (millimetres and pixels) and legacy categories
    ``1..4`` written by older documents. ``font_size`` is either points or a
    legacy preset name.
    """

    primary_color: str = "#1e3a5f"
    accent_color: str = "#3b82f6"
    font_family: str = "Inter"
    font_size: float | str = DEFAULT_FONT_SIZE
    page_margins: float = 2
    section_spacing: float = 2
    line_height: float = 1.5
    background: str = "plain"

    def to_payload(self) -> dict[str, Any]:
        return {_WIRE_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "Style":
        """Build a style from a stored payload, clamping whatever it carries."""

        if not payload:
            return cls()
        return apply_style_updates(cls(), payload)


_WIRE_NAMES: dict[str, str] = {
    "primary_color": "primaryColor",
    "accent_color": "accentColor",
    "font_family": "fontFamily",
    "font_size": "fontSize",
    "page_margins": "pageMargins",
    "section_spacing": "sectionSpacing",
    "line_height": "lineHeight",
    "background": "background",
}
_FIELD_BY_KEY: dict[str, str] = {**{v: k for k, v in _WIRE_NAMES.items()}, **{k: k for k in _WIRE_NAMES}}


def _as_number(field_name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(message=f"{field_name} must be numeric", field_name=field_name, value=value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise ValidationError(
                message=f"{field_name} must be numeric", field_name=field_name, value=value
            ) from exc
    else:
        raise ValidationError(message=f"{field_name} must be numeric", field_name=field_name, value=value)
    if math.isnan(number):
        raise ValidationError(message=f"{field_name} is NaN", field_name=field_name, value=value)
    return number


def _tidy(number: float) -> float | int:
    return int(number) if float(number).is_integer() else number


def _clamp(number: float, bounds: tuple[float, float]) -> float | int:
    low, high = bounds
    return _tidy(min(max(number, low), high))


def _is_legacy_category(number: float) -> bool:
    return number.is_integer() and int(number) in LEGACY_CATEGORIES


def coerce_page_margins(value: Any) -> float | int:
    number = _as_number("page_margins", value)
    if number >= MARGIN_RANGE[0]:
        return _clamp(number, MARGIN_RANGE)
    if _is_legacy_category(number):
        return int(number)
    return _tidy(MARGIN_RANGE[0])


def coerce_section_spacing(value: Any) -> float | int:
    number = _as_number("section_spacing", value)
    return _clamp(number, SPACING_RANGE)


def coerce_font_size(value: Any) -> float | int | str:
    if isinstance(value, str) and value.strip().lower() in FONT_SIZE_PRESETS:
        return value.strip().lower()
    try:
        number = _as_number("font_size", value)
    except ValidationError:
        if isinstance(value, str):
            return DEFAULT_FONT_SIZE
        raise
    return _clamp(number, FONT_SIZE_RANGE)


def coerce_line_height(value: Any) -> float | int:
    return _clamp(_as_number("line_height", value), LINE_HEIGHT_RANGE)


def coerce_background(value: Any) -> str:
    if isinstance(value, str) and value in BACKGROUNDS:
        return value
    return "plain"


def coerce_color(value: Any) -> str:
    if isinstance(value, str) and _HEX_COLOR.match(value.strip()):
        return value.strip()
    raise ValidationError(message="Color must be a hex value", field_name="color", value=value)


def coerce_font_family(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise ValidationError(message="Font family must be a non-empty string", field_name="font_family", value=value)


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "primary_color": coerce_color,
    "accent_color": coerce_color,
    "font_family": coerce_font_family,
    "font_size": coerce_font_size,
    "page_margins": coerce_page_margins,
    "section_spacing": coerce_section_spacing,
    "line_height": coerce_line_height,
    "background": coerce_background,
}


def clamp_style_updates(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``partial`` keyed by field name with every value made valid.

    Keys may use either the wire (``fontSize``) or attribute (``font_size``)
    spelling. Unknown keys are dropped. Values that cannot be coerced at all
    are dropped too, so the current value is kept.
    """

    cleaned: dict[str, Any] = {}
    for key, value in partial.items():
        field_name = _FIELD_BY_KEY.get(key)
        if field_name is None:
            LOGGER.debug("Ignoring unknown style key %r", key)
            continue
        try:
            cleaned[field_name] = _COERCERS[field_name](value)
        except ValidationError as exc:
            LOGGER.debug("Keeping previous %s: %s", field_name, exc)
    return cleaned


def apply_style_updates(style: Style, partial: Mapping[str, Any]) -> Style:
    cleaned = clamp_style_updates(partial)
    if not cleaned:
        return style
    return replace(style, **cleaned)


def default_style() -> Style:
    return Style()


__all__ = [
    "BACKGROUNDS",
    "FONT_FAMILIES",
    "FONT_SIZE_PRESETS",
    "MARGIN_RANGE",
    "SPACING_RANGE",
    "FONT_SIZE_RANGE",
    "LINE_HEIGHT_RANGE",
    "LEGACY_CATEGORIES",
    "DEFAULT_FONT_SIZE",
    "Style",
    "apply_style_updates",
    "clamp_style_updates",
    "coerce_font_size",
    "coerce_page_margins",
    "coerce_section_spacing",
    "coerce_line_height",
    "default_style",
]
