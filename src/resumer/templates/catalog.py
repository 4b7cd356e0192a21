"""Default data fragments and blank items for every known section type."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..editor.document_model import SectionType, new_id

ItemFactory = Callable[[], Dict[str, Any]]


@dataclass(slots=True, frozen=True)
class SectionBlueprint:
    """What a freshly added section of one type starts with."""

    section_type: str
    label: str
    data: Dict[str, Any]
    blank_item: Optional[ItemFactory] = None

    def fresh_data(self) -> Dict[str, Any]:
        """Return a deep copy of the default data with new item ids."""

        return with_fresh_ids(self.data)


def with_fresh_ids(data: Dict[str, Any]) -> Dict[str, Any]:
    fresh = copy.deepcopy(data)
    for key in ("items", "categories"):
        entries = fresh.get(key)
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if isinstance(entry, dict):
                entry["id"] = new_id()
    return fresh


def _experience_item() -> Dict[str, Any]:
    return {
        "id": new_id(),
        "title": "",
        "company": "",
        "location": "",
        "startDate": "",
        "endDate": "",
        "description": "",
        "bullets": [],
    }


def _education_item() -> Dict[str, Any]:
    return {
        "id": new_id(),
        "degree": "",
        "institution": "",
        "location": "",
        "startDate": "",
        "endDate": "",
        "gpa": "",
        "description": "",
    }


def _project_item() -> Dict[str, Any]:
    return {
        "id": new_id(),
        "name": "",
        "subtitle": "",
        "date": "",
        "description": "",
        "bullets": [],
        "technologies": [],
        "link": "",
    }


def _skill_category() -> Dict[str, Any]:
    return {"id": new_id(), "name": "General", "items": []}


def _certification_item() -> Dict[str, Any]:
    return {"id": new_id(), "name": "", "issuer": "", "date": "", "expiryDate": "", "credentialId": ""}


def _extracurricular_item() -> Dict[str, Any]:
    return {
        "id": new_id(),
        "title": "",
        "organization": "",
        "startDate": "",
        "endDate": "",
        "description": "",
        "bullets": [],
    }


def _language_item() -> Dict[str, Any]:
    return {"id": new_id(), "language": "", "proficiency": ""}


def _award_item() -> Dict[str, Any]:
    return {"id": new_id(), "title": "", "issuer": "", "date": "", "description": ""}


def _reference_item() -> Dict[str, Any]:
    return {"id": new_id(), "name": "", "title": "", "company": "", "email": "", "phone": ""}


def _publication_item() -> Dict[str, Any]:
    return {"id": new_id(), "title": "", "publisher": "", "date": "", "link": ""}


def _social_link_item() -> Dict[str, Any]:
    return {"id": new_id(), "platform": "", "url": ""}


def _achievement_item() -> Dict[str, Any]:
    return {"id": new_id(), "title": "", "description": "", "date": ""}


def _blueprints() -> Dict[str, SectionBlueprint]:
    entries = [
        SectionBlueprint(
            SectionType.HEADER.value,
            "Header",
            {
                "fullName": "",
                "title": "",
                "email": "",
                "phone": "",
                "location": "",
                "linkedin": "",
                "website": "",
            },
        ),
        SectionBlueprint(SectionType.SUMMARY.value, "Summary", {"content": ""}),
        SectionBlueprint(
            SectionType.EXPERIENCE.value,
            "Experience",
            {"items": [_experience_item()]},
            _experience_item,
        ),
        SectionBlueprint(
            SectionType.EDUCATION.value,
            "Education",
            {"items": [_education_item()]},
            _education_item,
        ),
        SectionBlueprint(
            SectionType.SKILLS.value,
            "Skills",
            {"title": "Skills", "categories": [_skill_category()]},
            _skill_category,
        ),
        SectionBlueprint(
            SectionType.PROJECTS.value,
            "Projects",
            {"items": [_project_item()]},
            _project_item,
        ),
        SectionBlueprint(
            SectionType.CERTIFICATIONS.value,
            "Certifications",
            {
                "items": [
                    {
                        "id": "",
                        "name": "Certification Name",
                        "issuer": "Issuing Organization",
                        "date": "MM/YYYY",
                        "expiryDate": "",
                        "credentialId": "",
                    }
                ]
            },
            _certification_item,
        ),
        SectionBlueprint(
            SectionType.EXTRACURRICULAR.value,
            "Extracurricular Activities",
            {
                "items": [
                    {
                        "id": "",
                        "title": "Role/Position",
                        "organization": "Organization Name",
                        "startDate": "MM/YYYY",
                        "endDate": "MM/YYYY",
                        "description": "Brief description of your involvement",
                        "bullets": [],
                    }
                ]
            },
            _extracurricular_item,
        ),
        SectionBlueprint(
            SectionType.LANGUAGES.value,
            "Languages",
            {
                "items": [
                    {"id": "", "language": "English", "proficiency": "Native"},
                    {"id": "", "language": "Spanish", "proficiency": "Intermediate"},
                ]
            },
            _language_item,
        ),
        SectionBlueprint(
            SectionType.AWARDS.value,
            "Awards",
            {
                "items": [
                    {
                        "id": "",
                        "title": "Award Title",
                        "issuer": "Issuing Organization",
                        "date": "MM/YYYY",
                        "description": "",
                    }
                ]
            },
            _award_item,
        ),
        SectionBlueprint(
            SectionType.REFERENCES.value,
            "References",
            {
                "items": [
                    {
                        "id": "",
                        "name": "Reference Name",
                        "title": "Title",
                        "company": "Company",
                        "email": "email@example.com",
                        "phone": "",
                    }
                ]
            },
            _reference_item,
        ),
        SectionBlueprint(
            SectionType.PUBLICATIONS.value,
            "Publications",
            {
                "items": [
                    {
                        "id": "",
                        "title": "Publication Title",
                        "publisher": "Publisher",
                        "date": "MM/YYYY",
                        "link": "",
                    }
                ]
            },
            _publication_item,
        ),
        SectionBlueprint(
            SectionType.SOCIAL_LINKS.value,
            "Find Me Online",
            {
                "items": [
                    {"id": "", "platform": "LinkedIn", "url": ""},
                    {"id": "", "platform": "GitHub", "url": ""},
                    {"id": "", "platform": "Portfolio", "url": ""},
                ]
            },
            _social_link_item,
        ),
        SectionBlueprint(
            SectionType.STRENGTHS.value,
            "Strengths",
            {"items": ["Strength 1", "Strength 2", "Strength 3", "Strength 4"]},
        ),
        SectionBlueprint(
            SectionType.ACHIEVEMENTS.value,
            "Achievements",
            {
                "items": [
                    {"id": "", "title": "Achievement 1", "description": "Description of achievement 1", "date": ""},
                    {"id": "", "title": "Achievement 2", "description": "Description of achievement 2", "date": ""},
                ]
            },
            _achievement_item,
        ),
        SectionBlueprint(
            SectionType.CUSTOM.value,
            "Custom Section",
            {"title": "Custom Section", "content": "Add your custom content here."},
        ),
    ]
    return {entry.section_type: entry for entry in entries}


SECTION_BLUEPRINTS: Dict[str, SectionBlueprint] = _blueprints()

# Section types whose items are plain strings rather than records.
STRING_ITEM_TYPES: frozenset[str] = frozenset({SectionType.STRENGTHS.value})


def blueprint_for(section_type: str) -> Optional[SectionBlueprint]:
    return SECTION_BLUEPRINTS.get(section_type)


def section_label(section_type: str) -> str:
    blueprint = SECTION_BLUEPRINTS.get(section_type)
    if blueprint is not None:
        return blueprint.label
    return section_type[:1].upper() + section_type[1:]


def blank_item(section_type: str) -> Optional[Dict[str, Any]]:
    """Return an empty item for list-shaped sections, ``None`` otherwise."""

    blueprint = SECTION_BLUEPRINTS.get(section_type)
    if blueprint is None or blueprint.blank_item is None:
        return None
    return blueprint.blank_item()


__all__ = [
    "SECTION_BLUEPRINTS",
    "STRING_ITEM_TYPES",
    "SectionBlueprint",
    "blank_item",
    "blueprint_for",
    "section_label",
    "with_fresh_ids",
]
