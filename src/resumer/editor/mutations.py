"""Pure mutation operations over :class:`~resumer.editor.document_model.Document`.

Every function takes a document and returns a document. When the operation
applies, the result is a fresh deep copy that shares nothing with the input.
When it does not (unknown id, locked section, unregistered template, value
already set) the input document itself is returned, which the session treats
as "nothing happened": no history entry, no change event.
"""

from __future__ import annotations

import copy
import functools
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from ..errors import ErrorCode, NotFoundError
from ..templates.catalog import STRING_ITEM_TYPES, blank_item
from ..templates.registry import TemplateRegistry
from .document_model import Document, Section, SectionType, default_section_settings, new_id, settings_from_payload
from .normalization import DEFAULT_SKILL_CATEGORY, header_section, normalize_skills
from .style import Style, apply_style_updates

LOGGER = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Document])


def _not_found_is_noop(func: F) -> F:
    @functools.wraps(func)
    def wrapper(document: Document, *args: Any, **kwargs: Any) -> Document:
        try:
            return func(document, *args, **kwargs)
        except NotFoundError as exc:
            LOGGER.debug("%s ignored: %s", func.__name__, exc)
            return document

    return wrapper  # type: ignore[return-value]


def _section_index(document: Document, section_id: str) -> int:
    for index, section in enumerate(document.sections):
        if section.id == section_id:
            return index
    raise NotFoundError(message=f"Unknown section '{section_id}'", identifier=section_id)


def _item_index(section: Section, item_id: str) -> int:
    items = section.data.get("items")
    if isinstance(items, list):
        for index, item in enumerate(items):
            if isinstance(item, Mapping) and item.get("id") == item_id:
                return index
    raise NotFoundError(
        error_code=ErrorCode.ITEM_NOT_FOUND,
        message=f"Unknown item '{item_id}' in section '{section.id}'",
        identifier=item_id,
    )


def _changed(original: Document, candidate: Document) -> Document:
    return original if candidate == original else candidate


# ---------------------------------------------------------------------------
# Section level
# ---------------------------------------------------------------------------


def add_section(document: Document, section_type: str, registry: TemplateRegistry) -> Document:
    """Append a new section of ``section_type`` built from the template defaults."""

    fragment = registry.default_fragment(document.template, section_type)
    if fragment is None:
        LOGGER.debug("Template %s does not register %s; add_section ignored", document.template, section_type)
        return document
    if section_type == SectionType.HEADER.value and document.sections_of_type(section_type):
        return document
    result = document.clone()
    section = Section(id=new_id(), type=section_type, data=fragment)
    result.sections.append(section)
    result.section_order.append(section.id)
    return result


@_not_found_is_noop
def remove_section(document: Document, section_id: str) -> Document:
    index = _section_index(document, section_id)
    if document.sections[index].locked:
        LOGGER.debug("Section %s is locked; remove_section ignored", section_id)
        return document
    result = document.clone()
    del result.sections[index]
    result.section_order = [existing for existing in result.section_order if existing != section_id]
    return result


def reorder_sections(document: Document, new_order: Iterable[str]) -> Document:
    """Reorder sections; omitted ids keep their relative order at the end.

    Unknown and repeated ids in ``new_order`` are ignored, so the result is
    always a permutation of the existing ids.
    """

    known = {section.id for section in document.sections}
    ordered: List[str] = []
    for section_id in new_order:
        if section_id in known and section_id not in ordered:
            ordered.append(section_id)
    for section_id in document.section_order:
        if section_id not in ordered:
            ordered.append(section_id)
    if ordered == document.section_order:
        return document
    result = document.clone()
    by_id = {section.id: section for section in result.sections}
    result.section_order = ordered
    result.sections = [by_id[section_id] for section_id in ordered]
    return result


@_not_found_is_noop
def update_section_data(document: Document, section_id: str, partial: Mapping[str, Any]) -> Document:
    index = _section_index(document, section_id)
    result = document.clone()
    result.sections[index].data.update(copy.deepcopy(dict(partial)))
    return _changed(document, result)


def update_section_settings(document: Document, section_type: str, partial: Mapping[str, Any]) -> Document:
    current = document.settings_for(section_type)
    updated = current.merged(partial)
    if updated == current:
        return document
    result = document.clone()
    result.section_settings[section_type] = updated
    return result


def reset_section_settings(document: Document) -> Document:
    defaults = default_section_settings()
    if document.section_settings == defaults:
        return document
    result = document.clone()
    result.section_settings = defaults
    return result


# ---------------------------------------------------------------------------
# Document level
# ---------------------------------------------------------------------------


def update_style(document: Document, partial: Mapping[str, Any]) -> Document:
    """Merge ``partial`` into the style after clamping every field to its bounds."""

    style = apply_style_updates(document.style, partial)
    if style == document.style:
        return document
    result = document.clone()
    result.style = style
    return result


def reset_style(document: Document) -> Document:
    if document.style == Style():
        return document
    result = document.clone()
    result.style = Style()
    return result


def change_template(document: Document, template_id: str, registry: TemplateRegistry) -> Document:
    """Switch the active template; section data is left untouched."""

    if template_id not in registry or template_id == document.template:
        return document
    result = document.clone()
    result.template = template_id
    return result


def set_title(document: Document, title: str) -> Document:
    title = (title or "").strip()
    if not title or title == document.title:
        return document
    result = document.clone()
    result.title = title
    return result


# ---------------------------------------------------------------------------
# Item level
# ---------------------------------------------------------------------------


@_not_found_is_noop
def add_item(document: Document, section_id: str, item: Any = None) -> Document:
    """Append ``item`` (or a blank item for the section type) to a list section."""

    index = _section_index(document, section_id)
    section = document.sections[index]
    if item is None:
        item = "" if section.type in STRING_ITEM_TYPES else blank_item(section.type)
        if item is None:
            return document
    elif isinstance(item, Mapping):
        item = copy.deepcopy(dict(item))
        item.setdefault("id", new_id())
    result = document.clone()
    data = result.sections[index].data
    if section.type == SectionType.SKILLS.value:
        if isinstance(item, str):
            item = {"id": new_id(), "name": item or DEFAULT_SKILL_CATEGORY, "items": []}
        skills = normalize_skills(data)
        skills["categories"].append(item)
        data.clear()
        data.update(skills)
    else:
        items = data.get("items")
        if not isinstance(items, list):
            items = data["items"] = []
        items.append(item)
    return result


@_not_found_is_noop
def remove_item(document: Document, section_id: str, item_id: str) -> Document:
    index = _section_index(document, section_id)
    section = document.sections[index]
    result = document.clone()
    data = result.sections[index].data
    if section.type == SectionType.SKILLS.value:
        skills = normalize_skills(data)
        remaining = [category for category in skills["categories"] if category["id"] != item_id]
        if len(remaining) == len(skills["categories"]):
            return document
        skills["categories"] = remaining
        data.clear()
        data.update(skills)
        return result
    del data["items"][_item_index(section, item_id)]
    return result


@_not_found_is_noop
def update_item(document: Document, section_id: str, item_id: str, partial: Mapping[str, Any]) -> Document:
    """Shallow-merge ``partial`` into one item; the item id cannot be changed."""

    index = _section_index(document, section_id)
    item_index = _item_index(document.sections[index], item_id)
    result = document.clone()
    item = result.sections[index].data["items"][item_index]
    item.update({key: copy.deepcopy(value) for key, value in partial.items() if key != "id"})
    return _changed(document, result)


@_not_found_is_noop
def add_bullet(document: Document, section_id: str, item_id: str, text: str = "") -> Document:
    index = _section_index(document, section_id)
    item_index = _item_index(document.sections[index], item_id)
    result = document.clone()
    item = result.sections[index].data["items"][item_index]
    bullets = item.get("bullets")
    if not isinstance(bullets, list):
        bullets = item["bullets"] = []
    bullets.append(text)
    return result


@_not_found_is_noop
def remove_bullet(document: Document, section_id: str, item_id: str, bullet_index: int) -> Document:
    index = _section_index(document, section_id)
    item_index = _item_index(document.sections[index], item_id)
    bullets = document.sections[index].data["items"][item_index].get("bullets")
    if not isinstance(bullets, list) or not 0 <= bullet_index < len(bullets):
        return document
    result = document.clone()
    del result.sections[index].data["items"][item_index]["bullets"][bullet_index]
    return result


def _skill_category(skills: Dict[str, Any], name: Optional[str]) -> Optional[Dict[str, Any]]:
    categories: List[Dict[str, Any]] = skills["categories"]
    if name is None:
        return categories[0] if categories else None
    for category in categories:
        if category["name"] == name:
            return category
    return None


@_not_found_is_noop
def add_skill(document: Document, section_id: str, skill: str, category: Optional[str] = None) -> Document:
    """Add ``skill`` to ``category`` (the first category when omitted).

    A missing category is created. Blank skills and skills already present in
    the category are ignored.
    """

    index = _section_index(document, section_id)
    if document.sections[index].type != SectionType.SKILLS.value:
        return document
    skill = (skill or "").strip()
    if not skill:
        return document
    result = document.clone()
    data = result.sections[index].data
    skills = normalize_skills(data)
    target = _skill_category(skills, category)
    if target is None:
        target = {"id": new_id(), "name": category or DEFAULT_SKILL_CATEGORY, "items": []}
        skills["categories"].append(target)
    if skill in target["items"]:
        return document
    target["items"].append(skill)
    data.clear()
    data.update(skills)
    return result


@_not_found_is_noop
def remove_skill(document: Document, section_id: str, skill: str, category: Optional[str] = None) -> Document:
    index = _section_index(document, section_id)
    if document.sections[index].type != SectionType.SKILLS.value:
        return document
    result = document.clone()
    data = result.sections[index].data
    skills = normalize_skills(data)
    candidates = skills["categories"] if category is None else [
        entry for entry in skills["categories"] if entry["name"] == category
    ]
    for entry in candidates:
        if skill in entry["items"]:
            entry["items"].remove(skill)
            data.clear()
            data.update(skills)
            return result
    return document


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def merge_sections(document: Document, incoming: List[Section]) -> Document:
    """Merge externally produced sections into ``document``.

    Incoming sections replace the existing sections of the same type (the
    first existing one keeps its position and id), the header stays locked
    with the non-blank incoming fields merged over the current ones, and new
    types are appended. Existing sections of types not in ``incoming`` are kept.
    """

    if not incoming:
        return document
    result = document.clone()
    consumed: set[str] = set()
    for section in incoming:
        section = copy.deepcopy(section)
        existing = result.sections_of_type(section.type)
        if section.type == SectionType.HEADER.value:
            if existing:
                existing[0].data.update(_carried_fields(section.data))
                continue
            section.data = header_section(section.data).data
        if existing and section.type not in consumed:
            keep = existing[0]
            keep.data = section.data
            for extra in existing[1:]:
                result.sections.remove(extra)
                result.section_order.remove(extra.id)
            consumed.add(section.type)
            continue
        if result.find_section(section.id) is not None:
            section.id = new_id()
        section.locked = section.type == SectionType.HEADER.value
        result.sections.append(section)
        result.section_order.append(section.id)
        consumed.add(section.type)
    return _changed(document, result)


def _carried_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    # Blank incoming values never overwrite what the user entered.
    return {key: value for key, value in data.items() if value is not None and value != ""}


def replace_settings(document: Document, raw_settings: Mapping[str, Any]) -> Document:
    result = document.clone()
    for section_type, payload in raw_settings.items():
        if isinstance(payload, Mapping):
            result.section_settings[section_type] = settings_from_payload(section_type, payload)
    return _changed(document, result)


__all__ = [
    "add_bullet",
    "add_item",
    "add_section",
    "add_skill",
    "change_template",
    "merge_sections",
    "remove_bullet",
    "remove_item",
    "remove_section",
    "remove_skill",
    "reorder_sections",
    "replace_settings",
    "reset_section_settings",
    "reset_style",
    "set_title",
    "update_item",
    "update_section_data",
    "update_section_settings",
    "update_style",
]
