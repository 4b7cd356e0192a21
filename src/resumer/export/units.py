"""Unit conversion from editor style values to PDF points.

Style values come in two encodings. Documents saved before the continuous
sliders store small category numbers (``1..4``) that the canvas mapped to
fixed pixel sizes; newer documents store millimetres (margins) or pixels
(spacing) directly. The encoding is inferred from the magnitude.
"""

from __future__ import annotations

from typing import Any, Mapping

MM_TO_PT = 2.83465
PX_TO_PT = 0.75

LEGACY_MARGIN_PX: Mapping[int, int] = {1: 24, 2: 40, 3: 56, 4: 80}
LEGACY_SPACING_PX: Mapping[int, int] = {1: 8, 2: 16, 3: 24, 4: 32}
LEGACY_FALLBACK_CATEGORY = 2

MARGIN_MM_THRESHOLD = 10
SPACING_PX_THRESHOLD = 5

FONT_SIZE_PRESETS_PT: Mapping[str, float] = {"small": 10.5, "medium": 11.0, "large": 12.5}
DEFAULT_FONT_SIZE_PT = 11.0

DEFAULT_PDF_FONT = "Helvetica"
PDF_FONT_FAMILIES: Mapping[str, str] = {
    "inter": "Helvetica",
    "roboto": "Helvetica",
    "open sans": "Helvetica",
    "lato": "Helvetica",
    "montserrat": "Helvetica",
    "poppins": "Helvetica",
    "arial": "Helvetica",
    "helvetica": "Helvetica",
    "sans-serif": "Helvetica",
    "playfair display": "Times-Roman",
    "merriweather": "Times-Roman",
    "georgia": "Times-Roman",
    "times new roman": "Times-Roman",
    "serif": "Times-Roman",
    "jetbrains mono": "Courier",
    "courier new": "Courier",
    "monospace": "Courier",
}

# Bold faces of the standard PDF fonts.
BOLD_FONTS: Mapping[str, str] = {
    "Helvetica": "Helvetica-Bold",
    "Times-Roman": "Times-Bold",
    "Courier": "Courier-Bold",
}
ITALIC_FONTS: Mapping[str, str] = {
    "Helvetica": "Helvetica-Oblique",
    "Times-Roman": "Times-Italic",
    "Courier": "Courier-Oblique",
}


def mm_to_points(value: float) -> float:
    """Convert millimetres to typographic points."""
    return value * MM_TO_PT


def px_to_points(value: float) -> float:
    """Convert CSS pixels to typographic points."""
    return value * PX_TO_PT


def _legacy_px(value: float, table: Mapping[int, int]) -> int:
    if float(value).is_integer() and int(value) in table:
        return table[int(value)]
    return table[LEGACY_FALLBACK_CATEGORY]


def page_margin_points(value: Any) -> float:
    """``>= 10`` is millimetres, anything smaller a legacy category."""

    number = _number(value, LEGACY_FALLBACK_CATEGORY)
    if number >= MARGIN_MM_THRESHOLD:
        return mm_to_points(number)
    return px_to_points(_legacy_px(number, LEGACY_MARGIN_PX))


def section_spacing_points(value: Any) -> float:
    """``> 5`` is pixels, anything up to 5 a legacy category."""

    number = _number(value, LEGACY_FALLBACK_CATEGORY)
    if number > SPACING_PX_THRESHOLD:
        return px_to_points(number)
    return px_to_points(_legacy_px(number, LEGACY_SPACING_PX))


def font_size_points(value: Any) -> float:
    if isinstance(value, bool):
        return DEFAULT_FONT_SIZE_PT
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        preset = FONT_SIZE_PRESETS_PT.get(value.strip().lower())
        if preset is not None:
            return preset
    return DEFAULT_FONT_SIZE_PT


def pdf_font(family: Any) -> str:
    """Map an editor font family to a standard PDF font."""

    if not isinstance(family, str):
        return DEFAULT_PDF_FONT
    return PDF_FONT_FAMILIES.get(family.strip().lower(), DEFAULT_PDF_FONT)


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return default


__all__ = [
    "BOLD_FONTS",
    "DEFAULT_FONT_SIZE_PT",
    "DEFAULT_PDF_FONT",
    "FONT_SIZE_PRESETS_PT",
    "ITALIC_FONTS",
    "LEGACY_MARGIN_PX",
    "LEGACY_SPACING_PX",
    "MM_TO_PT",
    "PX_TO_PT",
    "font_size_points",
    "mm_to_points",
    "page_margin_points",
    "pdf_font",
    "px_to_points",
    "section_spacing_points",
]
