"""Dataclasses representing the resume document and its section settings."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional

from .style import Style

HEADER_SECTION_ID = "header"
DEFAULT_TEMPLATE_ID = "basic"
DEFAULT_TITLE = "Untitled Resume"


def new_id() -> str:
    """Return a fresh identifier for a section or item."""

    return uuid.uuid4().hex


class SectionType(str, Enum):
    """Section types the engine knows how to edit and render."""

    HEADER = "header"
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"
    PROJECTS = "projects"
    CERTIFICATIONS = "certifications"
    LANGUAGES = "languages"
    AWARDS = "awards"
    REFERENCES = "references"
    PUBLICATIONS = "publications"
    SOCIAL_LINKS = "socialLinks"
    STRENGTHS = "strengths"
    ACHIEVEMENTS = "achievements"
    EXTRACURRICULAR = "extracurricular"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: str) -> Optional["SectionType"]:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(slots=True)
class Section:
    """A typed content block with a stable identity.

    ``type`` stays a plain string so sections written by newer clients with
    types this engine does not know survive a load/save round trip.
    """

    id: str
    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    locked: bool = False

    @property
    def known_type(self) -> Optional[SectionType]:
        return SectionType.parse(self.type)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "type": self.type, "data": copy.deepcopy(self.data)}
        if self.locked:
            payload["locked"] = True
        return payload


# ---------------------------------------------------------------------------
# Section settings
# ---------------------------------------------------------------------------


def _wire(name: str, metadata: Mapping[str, Any]) -> str:
    if "wire" in metadata:
        return metadata["wire"]
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass(slots=True, frozen=True)
class _TypedSettings:
    section_type: ClassVar[str] = ""

    def to_payload(self) -> Dict[str, Any]:
        return {_wire(f.name, f.metadata): getattr(self, f.name) for f in fields(self)}

    def merged(self, partial: Mapping[str, Any]) -> "_TypedSettings":
        """Return a copy with the recognised keys of ``partial`` applied.

        Keys may be camelCase wire names or attribute names. Values whose type
        does not match the field's current type are ignored.
        """

        updates: Dict[str, Any] = {}
        for f in fields(self):
            for key in (_wire(f.name, f.metadata), f.name):
                if key not in partial:
                    continue
                value = partial[key]
                allowed = f.metadata.get("choices")
                if allowed is not None:
                    if value in allowed:
                        updates[f.name] = value
                elif isinstance(value, bool):
                    updates[f.name] = value
                break
        if not updates:
            return self
        return replace(self, **updates)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "_TypedSettings":
        return cls().merged(payload or {})


@dataclass(slots=True, frozen=True)
class HeaderSettings(_TypedSettings):
    section_type: ClassVar[str] = SectionType.HEADER.value

    show_photo: bool = False
    show_social_icons: bool = True
    layout: str = field(default="left", metadata={"choices": ("left", "center", "right")})


@dataclass(slots=True, frozen=True)
class EducationSettings(_TypedSettings):
    section_type: ClassVar[str] = SectionType.EDUCATION.value

    show_gpa: bool = field(default=True, metadata={"wire": "showGPA"})
    show_location: bool = True
    show_description: bool = False


@dataclass(slots=True, frozen=True)
class ExperienceSettings(_TypedSettings):
    section_type: ClassVar[str] = SectionType.EXPERIENCE.value

    show_location: bool = True
    show_bullets: bool = True
    show_description: bool = True


@dataclass(slots=True, frozen=True)
class ProjectsSettings(_TypedSettings):
    section_type: ClassVar[str] = SectionType.PROJECTS.value

    show_date: bool = True
    show_link: bool = True
    show_bullets: bool = True
    show_technologies: bool = True


@dataclass(slots=True, frozen=True)
class SkillsSettings(_TypedSettings):
    section_type: ClassVar[str] = SectionType.SKILLS.value

    show_categories: bool = True
    show_proficiency: bool = False


@dataclass(slots=True, frozen=True)
class GenericSettings:
    """Settings bucket for section types without a typed settings class."""

    flags: Mapping[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return dict(self.flags)

    def merged(self, partial: Mapping[str, Any]) -> "GenericSettings":
        combined = {**self.flags, **partial}
        if combined == dict(self.flags):
            return self
        return GenericSettings(flags=combined)

    def enabled(self, flag: str, default: bool = True) -> bool:
        return bool(self.flags.get(flag, default))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "GenericSettings":
        return cls(flags=dict(payload or {}))


SectionSettings = HeaderSettings | EducationSettings | ExperienceSettings | ProjectsSettings | SkillsSettings | GenericSettings

SETTINGS_TYPES: Dict[str, type[_TypedSettings]] = {
    cls.section_type: cls
    for cls in (HeaderSettings, EducationSettings, ExperienceSettings, ProjectsSettings, SkillsSettings)
}


def settings_from_payload(section_type: str, payload: Mapping[str, Any] | None) -> SectionSettings:
    settings_cls = SETTINGS_TYPES.get(section_type)
    if settings_cls is None:
        return GenericSettings.from_payload(payload)
    return settings_cls.from_payload(payload)  # type: ignore[return-value]


def default_section_settings() -> Dict[str, SectionSettings]:
    return {name: settings_cls() for name, settings_cls in SETTINGS_TYPES.items()}


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Document:
    """Canonical in-memory representation of one resume.

    ``section_order`` is always a permutation of the section ids. Mutation
    functions in :mod:`resumer.editor.mutations` return new documents and
    never share nested structures with their input.
    """

    sections: list[Section] = field(default_factory=list)
    section_order: list[str] = field(default_factory=list)
    section_settings: Dict[str, SectionSettings] = field(default_factory=default_section_settings)
    style: Style = field(default_factory=Style)
    template: str = DEFAULT_TEMPLATE_ID
    title: str = DEFAULT_TITLE

    def find_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def sections_of_type(self, section_type: str) -> list[Section]:
        return [section for section in self.sections if section.type == section_type]

    def ordered_sections(self) -> list[Section]:
        by_id = {section.id: section for section in self.sections}
        return [by_id[section_id] for section_id in self.section_order if section_id in by_id]

    def settings_for(self, section_type: str) -> SectionSettings:
        """Return the settings for ``section_type``, defaulting when unset."""

        settings = self.section_settings.get(section_type)
        if settings is not None:
            return settings
        return settings_from_payload(section_type, None)

    def clone(self) -> "Document":
        return copy.deepcopy(self)

    def is_consistent(self) -> bool:
        ids = [section.id for section in self.sections]
        return len(set(ids)) == len(ids) and sorted(ids) == sorted(self.section_order)


__all__ = [
    "HEADER_SECTION_ID",
    "DEFAULT_TEMPLATE_ID",
    "DEFAULT_TITLE",
    "Document",
    "EducationSettings",
    "ExperienceSettings",
    "GenericSettings",
    "HeaderSettings",
    "ProjectsSettings",
    "Section",
    "SectionSettings",
    "SectionType",
    "SETTINGS_TYPES",
    "SkillsSettings",
    "default_section_settings",
    "new_id",
    "settings_from_payload",
]
