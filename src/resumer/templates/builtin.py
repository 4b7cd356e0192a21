"""Built-in templates shipped with the editor."""

from __future__ import annotations

from typing import Iterable

from ..editor.document_model import SectionType
from .catalog import section_label
from .registry import RendererCapability, Template, TemplateRegistry
from .renderers import RENDERERS, render_generic

# The basic and shraddha templates render every catalog type; modern only the
# core resume sections, everything else falls back to the generic renderer.
_ALL_TYPES: tuple[str, ...] = tuple(section_type.value for section_type in SectionType)
_MODERN_TYPES: tuple[str, ...] = (
    SectionType.HEADER.value,
    SectionType.SUMMARY.value,
    SectionType.EXPERIENCE.value,
    SectionType.EDUCATION.value,
    SectionType.SKILLS.value,
    SectionType.PROJECTS.value,
    SectionType.CERTIFICATIONS.value,
    SectionType.LANGUAGES.value,
)


def _capabilities(section_types: Iterable[str]) -> dict[str, RendererCapability]:
    return {
        section_type: RendererCapability(
            section_type=section_type,
            label=section_label(section_type),
            render=RENDERERS.get(section_type, render_generic),
        )
        for section_type in section_types
    }


def basic_template() -> Template:
    return Template(
        id="basic",
        name="Basic",
        description="Clean and simple template with teal accents",
        theme_color="#0d9488",
        accent_color="#0f766e",
        font_family="Inter",
        header_align="center",
        sections=_capabilities(_ALL_TYPES),
    )


def modern_template() -> Template:
    return Template(
        id="modern",
        name="Modern",
        description="Left aligned header with indigo accents",
        theme_color="#4f46e5",
        accent_color="#4338ca",
        font_family="Inter",
        header_align="left",
        sections=_capabilities(_MODERN_TYPES),
    )


def shraddha_template() -> Template:
    return Template(
        id="shraddha",
        name="Shraddha Khapra",
        description="Professional template with blue headers and yellow highlight",
        theme_color="#0ea5e9",
        accent_color="#0284c7",
        font_family="Roboto",
        header_align="center",
        sections=_capabilities(_ALL_TYPES),
        defaults={
            SectionType.SKILLS.value: {
                "title": "Technical Skills",
                "categories": [{"id": "", "name": "General", "items": []}],
            },
        },
    )


def builtin_registry() -> TemplateRegistry:
    """Return a new registry holding the built-in templates."""

    registry = TemplateRegistry()
    for factory in (basic_template, modern_template, shraddha_template):
        registry.register(factory())
    return registry


__all__ = ["basic_template", "builtin_registry", "modern_template", "shraddha_template"]
