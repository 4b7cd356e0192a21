"""Coerce loosely shaped resume data into canonical section data.

Content arrives from older saved builds and from the resume optimizer in a
handful of shapes. Everything funnels through :func:`normalize_section_data`
so renderers and mutations only ever see one layout per section type:

* skills are ``{"title": str, "categories": [{"id", "name", "items": [str]}]}``;
* list sections are ``{"items": [...]}`` with an ``id`` on every record item;
* text sections are ``{"content": str}``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Mapping

from .document_model import HEADER_SECTION_ID, Section, SectionType, new_id

LOGGER = logging.getLogger(__name__)

DEFAULT_SKILL_CATEGORY = "General"
_TEXT_TYPES = {SectionType.SUMMARY.value}


def _string_list(values: Iterable[Any]) -> List[str]:
    result: List[str] = []
    for value in values:
        if isinstance(value, str):
            text = value.strip()
        elif isinstance(value, Mapping):
            text = str(value.get("name") or value.get("skill") or "").strip()
        elif value is None:
            continue
        else:
            text = str(value).strip()
        if text:
            result.append(text)
    return result


def _split_skills(value: Any) -> List[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return _string_list(value)
    return []


def normalize_skills(data: Any) -> Dict[str, Any]:
    """Return skills data in the categorized layout.

    A flat list, or ``{"items": [...]}`` of strings, becomes a single
    ``General`` category. Categories carrying a comma separated ``skills``
    string are split into items.
    """

    if isinstance(data, (list, tuple)):
        data = {"items": list(data)}
    if not isinstance(data, Mapping):
        data = {}
    title = data.get("title") if isinstance(data.get("title"), str) else "Skills"

    raw_categories = data.get("categories")
    categories: List[Dict[str, Any]] = []
    if isinstance(raw_categories, list):
        for raw in raw_categories:
            if not isinstance(raw, Mapping):
                continue
            items = raw.get("items")
            if items is None:
                items = raw.get("skills")
            categories.append(
                {
                    "id": str(raw.get("id") or new_id()),
                    "name": str(raw.get("name") or DEFAULT_SKILL_CATEGORY),
                    "items": _split_skills(items),
                }
            )
    else:
        items = data.get("items")
        if isinstance(items, list) and items and all(isinstance(item, Mapping) and "items" in item for item in items):
            return normalize_skills({"title": title, "categories": items})
        categories.append(
            {
                "id": new_id(),
                "name": DEFAULT_SKILL_CATEGORY,
                "items": _split_skills(items),
            }
        )
    return {"title": title, "categories": categories}


def normalize_items(data: Any) -> Dict[str, Any]:
    """Wrap bare item lists and make sure every record item has an id."""

    if isinstance(data, (list, tuple)):
        normalized: Dict[str, Any] = {"items": list(data)}
    elif isinstance(data, Mapping):
        normalized = dict(data)
    else:
        normalized = {"items": []}
    items = normalized.get("items")
    if not isinstance(items, list):
        normalized["items"] = []
        return normalized
    fixed: List[Any] = []
    for item in items:
        if isinstance(item, Mapping):
            record = dict(item)
            if not record.get("id"):
                record["id"] = new_id()
            fixed.append(record)
        elif item is not None:
            fixed.append(item)
    normalized["items"] = fixed
    return normalized


def normalize_section_data(section_type: str, data: Any) -> Dict[str, Any]:
    data = copy.deepcopy(data)
    if section_type == SectionType.SKILLS.value:
        return normalize_skills(data)
    if section_type in _TEXT_TYPES:
        if isinstance(data, str):
            return {"content": data}
        return dict(data) if isinstance(data, Mapping) else {"content": ""}
    if section_type in (SectionType.HEADER.value, SectionType.CUSTOM.value):
        return dict(data) if isinstance(data, Mapping) else {}
    if isinstance(data, (list, tuple)) or (isinstance(data, Mapping) and "items" in data):
        return normalize_items(data)
    if isinstance(data, Mapping):
        return dict(data)
    if isinstance(data, str):
        return {"content": data}
    return {}


def header_section(data: Mapping[str, Any] | None = None) -> Section:
    from ..templates.catalog import blueprint_for

    blueprint = blueprint_for(SectionType.HEADER.value)
    base = blueprint.fresh_data() if blueprint is not None else {}
    if data:
        base.update(copy.deepcopy(dict(data)))
    return Section(id=HEADER_SECTION_ID, type=SectionType.HEADER.value, data=base, locked=True)


def ensure_header(sections: List[Section], *, fill_missing: bool = True) -> List[Section]:
    """Return ``sections`` with at most one locked header.

    A missing header is added at the front unless ``fill_missing`` is false.
    """

    result: List[Section] = []
    seen_header = False
    for section in sections:
        if section.type == SectionType.HEADER.value:
            if seen_header:
                LOGGER.debug("Dropping duplicate header section %s", section.id)
                continue
            seen_header = True
            section.locked = True
        result.append(section)
    if fill_missing and not seen_header:
        result.insert(0, header_section())
    return result


def sections_from_payload(raw_sections: Any, *, require_header: bool = True) -> List[Section]:
    """Build sections from a stored ``sections`` array, fixing ids and shapes.

    With ``require_header`` a missing header is filled in from the blueprint.
    """

    sections: List[Section] = []
    seen_ids: set[str] = set()
    if not isinstance(raw_sections, list):
        raw_sections = []
    for raw in raw_sections:
        if not isinstance(raw, Mapping) or not isinstance(raw.get("type"), str):
            LOGGER.debug("Skipping malformed section entry: %r", raw)
            continue
        section_type = raw["type"]
        section_id = str(raw.get("id") or "")
        if section_type == SectionType.HEADER.value and not section_id:
            section_id = HEADER_SECTION_ID
        if not section_id or section_id in seen_ids:
            section_id = new_id()
        seen_ids.add(section_id)
        sections.append(
            Section(
                id=section_id,
                type=section_type,
                data=normalize_section_data(section_type, raw.get("data") or {}),
                locked=bool(raw.get("locked", False)),
            )
        )
    return ensure_header(sections, fill_missing=require_header)


# Field names used by the resume optimizer's flat output.
_EXTERNAL_LIST_KEYS = (
    SectionType.EXPERIENCE.value,
    SectionType.EDUCATION.value,
    SectionType.PROJECTS.value,
    SectionType.CERTIFICATIONS.value,
    SectionType.ACHIEVEMENTS.value,
    SectionType.EXTRACURRICULAR.value,
    SectionType.LANGUAGES.value,
    SectionType.AWARDS.value,
    SectionType.PUBLICATIONS.value,
    SectionType.REFERENCES.value,
    SectionType.STRENGTHS.value,
)


def external_sections(payload: Mapping[str, Any]) -> List[Section]:
    """Convert an externally produced resume into sections.

    Two layouts are accepted: a builder payload with a ``sections`` array, or
    the optimizer's flat layout keyed by section type (``header``,
    ``summary``, ``experience`` ...). Keys that are absent produce no section;
    a header only carries the fields the payload provides.
    """

    if isinstance(payload.get("sections"), list):
        return sections_from_payload(payload["sections"], require_header=False)

    sections: List[Section] = []
    header = payload.get(SectionType.HEADER.value)
    if isinstance(header, Mapping):
        sections.append(
            Section(
                id=HEADER_SECTION_ID,
                type=SectionType.HEADER.value,
                data=normalize_section_data(SectionType.HEADER.value, header),
                locked=True,
            )
        )
    summary = payload.get(SectionType.SUMMARY.value)
    if summary:
        sections.append(
            Section(
                id=new_id(),
                type=SectionType.SUMMARY.value,
                data=normalize_section_data(SectionType.SUMMARY.value, summary),
            )
        )
    skills = payload.get(SectionType.SKILLS.value)
    for key in _EXTERNAL_LIST_KEYS:
        value = payload.get(key)
        if value:
            sections.append(Section(id=new_id(), type=key, data=normalize_section_data(key, value)))
        if key == SectionType.EDUCATION.value and skills:
            sections.append(
                Section(
                    id=new_id(),
                    type=SectionType.SKILLS.value,
                    data=normalize_skills(skills),
                )
            )
    return sections


__all__ = [
    "DEFAULT_SKILL_CATEGORY",
    "ensure_header",
    "external_sections",
    "header_section",
    "normalize_items",
    "normalize_section_data",
    "normalize_skills",
    "sections_from_payload",
]
