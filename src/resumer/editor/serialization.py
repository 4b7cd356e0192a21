"""Convert documents to and from the persisted JSON payload."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping

from .document_model import (
    DEFAULT_TEMPLATE_ID,
    DEFAULT_TITLE,
    Document,
    default_section_settings,
    settings_from_payload,
)
from .normalization import sections_from_payload
from .style import Style

LOGGER = logging.getLogger(__name__)

PAYLOAD_KEYS: tuple[str, ...] = ("title", "sections", "sectionOrder", "sectionSettings", "style", "template")


def document_to_payload(document: Document) -> Dict[str, Any]:
    """Return the payload handed to the persistence collaborator.

    The result shares no mutable state with ``document``.
    """

    return {
        "title": document.title,
        "sections": [section.to_payload() for section in document.sections],
        "sectionOrder": list(document.section_order),
        "sectionSettings": {
            section_type: settings.to_payload() for section_type, settings in document.section_settings.items()
        },
        "style": document.style.to_payload(),
        "template": document.template,
    }


def document_from_payload(payload: Mapping[str, Any] | None, *, default_template: str = DEFAULT_TEMPLATE_ID) -> Document:
    """Build a document from a stored payload.

    The loader repairs what older builds may carry: a missing or locked-less
    header, a ``sectionOrder`` that is not a permutation of the section ids,
    legacy skills lists, and out-of-range style values.
    """

    payload = payload or {}
    sections = sections_from_payload(payload.get("sections"))
    known_ids = [section.id for section in sections]

    order: list[str] = []
    raw_order = payload.get("sectionOrder")
    if isinstance(raw_order, list):
        for section_id in raw_order:
            if section_id in known_ids and section_id not in order:
                order.append(section_id)
    for section_id in known_ids:
        if section_id not in order:
            order.append(section_id)
    if order != raw_order:
        LOGGER.debug("Repaired section order of loaded payload (%d sections)", len(order))
    by_id = {section.id: section for section in sections}

    settings = default_section_settings()
    raw_settings = payload.get("sectionSettings")
    if isinstance(raw_settings, Mapping):
        for section_type, raw in raw_settings.items():
            if isinstance(raw, Mapping):
                settings[section_type] = settings_from_payload(section_type, raw)

    raw_style = payload.get("style") or payload.get("theme")
    template = payload.get("template")
    title = payload.get("title")
    return Document(
        sections=[by_id[section_id] for section_id in order],
        section_order=order,
        section_settings=settings,
        style=Style.from_payload(raw_style if isinstance(raw_style, Mapping) else None),
        template=template if isinstance(template, str) and template else default_template,
        title=title if isinstance(title, str) and title.strip() else DEFAULT_TITLE,
    )


def dumps(document: Document, *, indent: int | None = 2) -> str:
    return json.dumps(document_to_payload(document), indent=indent, ensure_ascii=False)


def loads(text: str) -> Document:
    data = json.loads(text)
    if isinstance(data, Mapping) and isinstance(data.get("data"), Mapping):
        # Payloads fetched through the REST API arrive wrapped in an envelope.
        data = data["data"]
    if not isinstance(data, Mapping):
        raise ValueError("Resume JSON must be an object")
    return document_from_payload(data)


__all__ = ["PAYLOAD_KEYS", "document_from_payload", "document_to_payload", "dumps", "loads"]
