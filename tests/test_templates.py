"""Tests for the template registry, catalog, and section renderers."""

from __future__ import annotations

import pytest

from resumer.editor.document_model import (
    EducationSettings,
    ExperienceSettings,
    GenericSettings,
    Section,
    SectionType,
    SkillsSettings,
)
from resumer.templates import RendererCapability, Template, TemplateRegistry
from resumer.templates.catalog import SECTION_BLUEPRINTS, blank_item, section_label
from resumer.templates.renderers import RenderedSection, render_experience, render_generic, render_skills


# =============================================================================
# Registry
# =============================================================================


class TestRegistry:
    def test_builtin_templates(self, registry: TemplateRegistry) -> None:
        assert registry.ids() == ["basic", "modern", "shraddha"]
        assert {entry["id"] for entry in registry.list()} == {"basic", "modern", "shraddha"}

    def test_resolve(self, registry: TemplateRegistry) -> None:
        capability = registry.resolve("basic", "experience")

        assert isinstance(capability, RendererCapability)
        assert capability.label == "Experience"
        assert registry.resolve("modern", "awards") is None
        assert registry.resolve("glossy", "summary") is None

    def test_resolve_or_generic_never_drops_a_section(self, registry: TemplateRegistry) -> None:
        section = Section(id="a", type="awards", data={"items": [{"id": "1", "title": "Best Paper", "issuer": "ACM"}]})

        capability = registry.resolve_or_generic("modern", "awards")
        rendered = capability(section, GenericSettings())

        assert rendered.renderer == "generic"
        assert "Best Paper" in rendered.texts("subheading")

    def test_register_custom_template(self, registry: TemplateRegistry) -> None:
        summary_only = Template(
            id="minimal",
            name="Minimal",
            theme_color="#000000",
            font_family="Georgia",
            sections={"summary": RendererCapability("summary", "About", render_generic)},
        )

        registry.register(summary_only)

        assert registry.supports("minimal", "summary")
        assert not registry.supports("minimal", "experience")
        assert registry.default_fragment("minimal", "summary") == {"content": ""}
        with pytest.raises(ValueError):
            registry.register(summary_only)
        registry.register(summary_only, replace=True)

    def test_default_fragment_is_fresh_each_time(self, registry: TemplateRegistry) -> None:
        first = registry.default_fragment("basic", "experience")
        second = registry.default_fragment("basic", "experience")

        assert first is not None and second is not None
        assert first["items"][0]["id"] != second["items"][0]["id"]


class TestCatalog:
    def test_every_known_type_has_a_blueprint(self) -> None:
        assert set(SECTION_BLUEPRINTS) == {section_type.value for section_type in SectionType}

    def test_labels(self) -> None:
        assert section_label("socialLinks") == "Find Me Online"
        assert section_label("timeline") == "Timeline"

    def test_blank_items(self) -> None:
        item = blank_item("education")

        assert item is not None
        assert item["degree"] == "" and item["id"]
        assert blank_item("summary") is None


# =============================================================================
# Renderers
# =============================================================================


class TestRenderers:
    def test_experience_honours_settings(self) -> None:
        section = Section(
            id="e",
            type="experience",
            data={
                "items": [
                    {
                        "id": "1",
                        "title": "Engineer",
                        "company": "Engines Ltd",
                        "location": "London",
                        "startDate": "1840",
                        "endDate": "1843",
                        "bullets": ["Wrote the first program"],
                    }
                ]
            },
        )

        full = render_experience(section, ExperienceSettings())
        trimmed = render_experience(section, ExperienceSettings(show_bullets=False, show_location=False))

        assert full.texts("subheading") == ["Engineer, Engines Ltd"]
        assert full.texts("meta") == ["1840 - 1843 | London"]
        assert full.texts("bullet") == ["Wrote the first program"]
        assert trimmed.texts("bullet") == []
        assert trimmed.texts("meta") == ["1840 - 1843"]

    def test_legacy_flat_skills_render_as_general(self) -> None:
        section = Section(id="s", type="skills", data={"items": ["Python", "SQL"]})

        rendered = render_skills(section, SkillsSettings())

        assert rendered.heading == "Skills"
        assert rendered.texts() == ["General: Python, SQL"]

    def test_skills_without_categories(self) -> None:
        section = Section(
            id="s",
            type="skills",
            data={"categories": [{"id": "1", "name": "A", "items": ["x"]}, {"id": "2", "name": "B", "items": ["y"]}]},
        )

        rendered = render_skills(section, SkillsSettings(show_categories=False))

        assert rendered.texts() == ["x, y"]

    def test_education_gpa_toggle(self, registry: TemplateRegistry) -> None:
        section = Section(id="ed", type="education", data={"items": [{"id": "1", "degree": "BSc", "gpa": "3.9"}]})

        shown = registry.render("basic", section, EducationSettings())
        hidden = registry.render("basic", section, EducationSettings(show_gpa=False))

        assert shown.texts("meta") == ["GPA: 3.9"]
        assert hidden.texts("meta") == []

    def test_generic_renders_string_items_as_bullets(self) -> None:
        section = Section(id="st", type="strengths", data={"items": ["Curious", "Patient"]})

        rendered = render_generic(section, GenericSettings())

        assert rendered.heading == "Strengths"
        assert rendered.texts("bullet") == ["Curious", "Patient"]

    def test_blank_lines_are_skipped(self) -> None:
        rendered = RenderedSection("x", "summary", "Summary")

        rendered.add("   ")
        rendered.add(None)

        assert rendered.lines == []
