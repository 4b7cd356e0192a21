"""Tests for the document model, section normalization, and payload conversion."""

from __future__ import annotations

import json

from resumer.editor.document_model import (
    Document,
    EducationSettings,
    ExperienceSettings,
    GenericSettings,
    HeaderSettings,
    Section,
    SectionType,
    settings_from_payload,
)
from resumer.editor.normalization import (
    external_sections,
    normalize_items,
    normalize_section_data,
    normalize_skills,
    sections_from_payload,
)
from resumer.editor.serialization import document_from_payload, document_to_payload, dumps, loads


# =============================================================================
# Section settings
# =============================================================================


class TestSectionSettings:
    def test_typed_settings_use_wire_names(self) -> None:
        assert EducationSettings().to_payload() == {"showGPA": True, "showLocation": True, "showDescription": False}

    def test_merged_accepts_wire_and_attribute_names(self) -> None:
        settings = ExperienceSettings().merged({"showBullets": False, "show_location": False})

        assert settings.show_bullets is False
        assert settings.show_location is False
        assert settings.show_description is True

    def test_merged_ignores_non_boolean_values(self) -> None:
        settings = ExperienceSettings()

        assert settings.merged({"showBullets": "no"}) is settings

    def test_layout_choice_is_validated(self) -> None:
        assert HeaderSettings().merged({"layout": "center"}).layout == "center"
        assert HeaderSettings().merged({"layout": "diagonal"}).layout == "left"

    def test_unknown_type_yields_generic_bucket(self) -> None:
        settings = settings_from_payload("timeline", None)

        assert isinstance(settings, GenericSettings)
        assert settings.to_payload() == {}
        assert settings.merged({"compact": True}).enabled("compact") is True


# =============================================================================
# Document
# =============================================================================


class TestDocument:
    def test_ordered_sections_follow_section_order(self) -> None:
        a = Section(id="a", type="summary")
        b = Section(id="b", type="skills")
        document = Document(sections=[a, b], section_order=["b", "a"])

        assert [section.id for section in document.ordered_sections()] == ["b", "a"]
        assert document.is_consistent()

    def test_settings_for_missing_type_defaults(self) -> None:
        document = Document(section_settings={})

        assert document.settings_for("experience") == ExperienceSettings()

    def test_clone_shares_nothing(self) -> None:
        document = Document(sections=[Section(id="s", type="summary", data={"content": "x"})], section_order=["s"])

        clone = document.clone()
        clone.sections[0].data["content"] = "changed"

        assert document.sections[0].data["content"] == "x"

    def test_section_type_parse(self) -> None:
        assert SectionType.parse("socialLinks") is SectionType.SOCIAL_LINKS
        assert SectionType.parse("timeline") is None


# =============================================================================
# Normalization
# =============================================================================


class TestNormalizeSkills:
    def test_flat_list_becomes_general_category(self) -> None:
        data = normalize_skills(["Python", " SQL ", ""])

        assert data["title"] == "Skills"
        assert len(data["categories"]) == 1
        assert data["categories"][0]["name"] == "General"
        assert data["categories"][0]["items"] == ["Python", "SQL"]

    def test_legacy_items_mapping(self) -> None:
        data = normalize_skills({"title": "Tools", "items": ["Git", {"name": "Docker"}]})

        assert data["title"] == "Tools"
        assert data["categories"][0]["items"] == ["Git", "Docker"]

    def test_comma_separated_category_skills_are_split(self) -> None:
        data = normalize_skills({"categories": [{"name": "Languages", "skills": "Python, Go ,Rust"}]})

        category = data["categories"][0]
        assert category["name"] == "Languages"
        assert category["items"] == ["Python", "Go", "Rust"]
        assert category["id"]

    def test_item_list_of_categories_is_recognized(self) -> None:
        data = normalize_skills({"items": [{"name": "Cloud", "items": ["AWS"]}]})

        assert data["categories"][0]["name"] == "Cloud"


class TestNormalizeSections:
    def test_bare_list_is_wrapped_and_ids_assigned(self) -> None:
        data = normalize_items([{"title": "Engineer"}, "loose"])

        assert data["items"][0]["id"]
        assert data["items"][1] == "loose"

    def test_summary_string_becomes_content(self) -> None:
        assert normalize_section_data("summary", "Hello") == {"content": "Hello"}

    def test_payload_without_header_gets_one(self) -> None:
        sections = sections_from_payload([{"id": "s1", "type": "summary", "data": {"content": "x"}}])

        assert sections[0].type == "header"
        assert sections[0].locked is True

    def test_duplicate_ids_are_replaced(self) -> None:
        sections = sections_from_payload(
            [
                {"id": "header", "type": "header", "data": {}},
                {"id": "dup", "type": "summary", "data": {}},
                {"id": "dup", "type": "projects", "data": {"items": []}},
            ]
        )

        ids = [section.id for section in sections]
        assert len(set(ids)) == 3

    def test_unknown_section_types_survive(self) -> None:
        sections = sections_from_payload([{"id": "t", "type": "timeline", "data": {"points": [1, 2]}}])

        assert sections[1].type == "timeline"
        assert sections[1].data == {"points": [1, 2]}


class TestExternalSections:
    def test_flat_optimizer_layout(self) -> None:
        sections = external_sections(
            {
                "header": {"fullName": "Ada Lovelace"},
                "summary": "Analyst",
                "experience": [{"title": "Engineer", "company": "Engines"}],
                "education": [{"degree": "Mathematics"}],
                "skills": ["Python", "Maths"],
            }
        )

        types = [section.type for section in sections]
        assert types == ["header", "summary", "experience", "education", "skills"]
        assert sections[0].data["fullName"] == "Ada Lovelace"
        assert sections[2].data["items"][0]["id"]
        assert sections[4].data["categories"][0]["items"] == ["Python", "Maths"]

    def test_sections_array_layout(self) -> None:
        sections = external_sections({"sections": [{"type": "summary", "data": {"content": "x"}}]})

        assert [section.type for section in sections] == ["summary"]

    def test_flat_header_carries_only_given_fields(self) -> None:
        sections = external_sections({"header": {"fullName": "Ada"}})

        assert sections[0].data == {"fullName": "Ada"}
        assert sections[0].locked is True


# =============================================================================
# Serialization
# =============================================================================


class TestSerialization:
    def test_round_trip_preserves_document(self) -> None:
        document = document_from_payload(
            {
                "title": "Ada",
                "sections": [
                    {"id": "header", "type": "header", "data": {"fullName": "Ada"}, "locked": True},
                    {"id": "s", "type": "summary", "data": {"content": "Hi"}},
                ],
                "sectionOrder": ["header", "s"],
                "sectionSettings": {"experience": {"showBullets": False}},
                "style": {"fontSize": 12},
                "template": "modern",
            }
        )

        restored = loads(dumps(document))

        assert restored == document
        assert restored.section_settings["experience"].show_bullets is False

    def test_section_order_is_repaired(self) -> None:
        document = document_from_payload(
            {
                "sections": [
                    {"id": "header", "type": "header", "data": {}},
                    {"id": "a", "type": "summary", "data": {}},
                    {"id": "b", "type": "skills", "data": {}},
                ],
                "sectionOrder": ["b", "ghost", "b"],
            }
        )

        assert document.section_order == ["b", "header", "a"]
        assert document.is_consistent()

    def test_defaults_for_empty_payload(self) -> None:
        document = document_from_payload({}, default_template="shraddha")

        assert document.template == "shraddha"
        assert document.title == "Untitled Resume"
        assert document.section_order == ["header"]

    def test_payload_keys(self) -> None:
        payload = document_to_payload(Document())

        assert set(payload) == {"title", "sections", "sectionOrder", "sectionSettings", "style", "template"}

    def test_loads_unwraps_api_envelope(self) -> None:
        text = json.dumps({"data": {"title": "Wrapped", "sections": []}})

        assert loads(text).title == "Wrapped"

    def test_legacy_theme_key_is_read(self) -> None:
        document = document_from_payload({"theme": {"primaryColor": "#123456"}})

        assert document.style.primary_color == "#123456"
