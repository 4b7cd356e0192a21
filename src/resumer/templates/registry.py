"""Lookup of rendering capabilities by template and section type."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional

from .catalog import blueprint_for, section_label, with_fresh_ids
from .renderers import RenderFn, RenderedSection, render_generic
from ..editor.document_model import Section, SectionSettings

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RendererCapability:
    """A template's ability to render one section type."""

    section_type: str
    label: str
    render: RenderFn

    def __call__(self, section: Section, settings: SectionSettings) -> RenderedSection:
        return self.render(section, settings)


@dataclass(slots=True)
class Template:
    """A named bundle of theme defaults plus the section renderers it supports.

    ``defaults`` overrides the catalog's default data fragment per section
    type; types without an override use the catalog.
    """

    id: str
    name: str
    theme_color: str
    font_family: str
    sections: Mapping[str, RendererCapability] = field(default_factory=dict)
    description: str = ""
    accent_color: str = "#3b82f6"
    header_align: str = "left"
    defaults: Mapping[str, Dict[str, Any]] = field(default_factory=dict)

    def supports(self, section_type: str) -> bool:
        return section_type in self.sections

    def default_fragment(self, section_type: str) -> Optional[Dict[str, Any]]:
        """Return a fresh copy of the data a new section of this type starts with."""

        if not self.supports(section_type):
            return None
        override = self.defaults.get(section_type)
        if override is not None:
            return with_fresh_ids(override)
        blueprint = blueprint_for(section_type)
        return blueprint.fresh_data() if blueprint is not None else {}

    def describe(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "themeColor": self.theme_color,
            "fontFamily": self.font_family,
            "sections": sorted(self.sections),
        }


class TemplateRegistry:
    """Pure lookup from ``(template_id, section_type)`` to a capability."""

    def __init__(self, templates: Optional[Mapping[str, Template]] = None) -> None:
        self._templates: Dict[str, Template] = dict(templates or {})

    def register(self, template: Template, *, replace: bool = False) -> None:
        if template.id in self._templates and not replace:
            raise ValueError(f"Template '{template.id}' is already registered")
        self._templates[template.id] = template
        LOGGER.debug("Registered template %s with %d section types", template.id, len(template.sections))

    def unregister(self, template_id: str) -> None:
        self._templates.pop(template_id, None)

    def get(self, template_id: str) -> Optional[Template]:
        return self._templates.get(template_id)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates.values())

    def ids(self) -> list[str]:
        return list(self._templates)

    def list(self) -> list[Dict[str, Any]]:
        return [template.describe() for template in self._templates.values()]

    def resolve(self, template_id: str, section_type: str) -> Optional[RendererCapability]:
        template = self._templates.get(template_id)
        if template is None:
            return None
        return template.sections.get(section_type)

    def resolve_or_generic(self, template_id: str, section_type: str) -> RendererCapability:
        capability = self.resolve(template_id, section_type)
        if capability is not None:
            return capability
        LOGGER.debug("Template %s has no renderer for %s; using generic", template_id, section_type)
        return RendererCapability(section_type, section_label(section_type), render_generic)

    def supports(self, template_id: str, section_type: str) -> bool:
        return self.resolve(template_id, section_type) is not None

    def default_fragment(self, template_id: str, section_type: str) -> Optional[Dict[str, Any]]:
        template = self._templates.get(template_id)
        if template is None:
            return None
        return template.default_fragment(section_type)

    def render(self, template_id: str, section: Section, settings: SectionSettings) -> RenderedSection:
        return self.resolve_or_generic(template_id, section.type)(section, settings)


__all__ = [
    "RendererCapability",
    "Template",
    "TemplateRegistry",
]
