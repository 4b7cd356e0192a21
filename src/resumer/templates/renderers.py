"""Section renderers producing print-ready text lines.

A renderer receives a section and the settings of its type and returns a
:class:`RenderedSection`: an optional heading plus lines tagged with a role
(``title``, ``subheading``, ``meta``, ``body``, ``bullet``). Layout in points
is left to the export consumer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping

from ..editor.document_model import GenericSettings, Section, SectionSettings
from ..editor.normalization import normalize_skills
from .catalog import section_label

LINE_ROLES: tuple[str, ...] = ("title", "subheading", "meta", "body", "bullet")


@dataclass(slots=True, frozen=True)
class RenderedLine:
    text: str
    role: str = "body"


@dataclass(slots=True)
class RenderedSection:
    """Output of one renderer call."""

    section_id: str
    section_type: str
    heading: str
    lines: List[RenderedLine] = field(default_factory=list)
    renderer: str = "generic"

    def add(self, text: Any, role: str = "body") -> None:
        if text is None:
            return
        value = str(text).strip()
        if value:
            self.lines.append(RenderedLine(value, role))

    def texts(self, role: str | None = None) -> List[str]:
        return [line.text for line in self.lines if role is None or line.role == role]


RenderFn = Callable[[Section, SectionSettings], RenderedSection]


def _flag(settings: SectionSettings, name: str, default: bool = True) -> bool:
    if isinstance(settings, GenericSettings):
        return settings.enabled(name, default)
    return bool(getattr(settings, name, default))


def _join(parts: Iterable[Any], separator: str = " | ") -> str:
    return separator.join(str(part).strip() for part in parts if part and str(part).strip())


def _date_range(item: Mapping[str, Any]) -> str:
    return _join((item.get("startDate"), item.get("endDate")), " - ")


def _items(section: Section) -> List[Any]:
    items = section.data.get("items")
    return list(items) if isinstance(items, list) else []


def _heading(section: Section) -> str:
    title = section.data.get("title")
    if isinstance(title, str) and title.strip() and section.type != "header":
        return title.strip()
    return section_label(section.type)


def _bullets(rendered: RenderedSection, item: Mapping[str, Any]) -> None:
    bullets = item.get("bullets")
    if isinstance(bullets, list):
        for bullet in bullets:
            rendered.add(bullet, "bullet")


def render_header(section: Section, settings: SectionSettings) -> RenderedSection:
    data = section.data
    rendered = RenderedSection(section.id, section.type, "", renderer="header")
    rendered.add(data.get("fullName"), "title")
    rendered.add(data.get("title"), "subheading")
    rendered.add(_join((data.get("email"), data.get("phone"), data.get("location"))), "meta")
    if _flag(settings, "show_social_icons"):
        rendered.add(_join((data.get("linkedin"), data.get("website"))), "meta")
    return rendered


def render_summary(section: Section, settings: SectionSettings) -> RenderedSection:
    rendered = RenderedSection(section.id, section.type, _heading(section), renderer="summary")
    rendered.add(section.data.get("content"), "body")
    return rendered


def render_experience(section: Section, settings: SectionSettings) -> RenderedSection:
    rendered = RenderedSection(section.id, section.type, _heading(section), renderer="experience")
    for item in _items(section):
        if not isinstance(item, Mapping):
            continue
        rendered.add(_join((item.get("title"), item.get("company")), ", "), "subheading")
        location = item.get("location") if _flag(settings, "show_location") else None
        rendered.add(_join((_date_range(item), location)), "meta")
        if _flag(settings, "show_description"):
            rendered.add(item.get("description"), "body")
        if _flag(settings, "show_bullets"):
            _bullets(rendered, item)
    return rendered


def render_education(section: Section, settings: SectionSettings) -> RenderedSection:
    rendered = RenderedSection(section.id, section.type, _heading(section), renderer="education")
    for item in _items(section):
        if not isinstance(item, Mapping):
            continue
        rendered.add(_join((item.get("degree"), item.get("institution")), ", "), "subheading")
        location = item.get("location") if _flag(settings, "show_location") else None
        gpa = item.get("gpa") if _flag(settings, "show_gpa") else None
        rendered.add(_join((_date_range(item), location, f"GPA: {gpa}" if gpa else None)), "meta")
        if _flag(settings, "show_description", False):
            rendered.add(item.get("description"), "body")
    return rendered


def render_projects(section: Section, settings: SectionSettings) -> RenderedSection:
    rendered = RenderedSection(section.id, section.type, _heading(section), renderer="projects")
    for item in _items(section):
        if not isinstance(item, Mapping):
            continue
        rendered.add(_join((item.get("name"), item.get("subtitle")), " - "), "subheading")
        meta = [
            item.get("date") if _flag(settings, "show_date") else None,
            item.get("link") if _flag(settings, "show_link") else None,
        ]
        rendered.add(_join(meta), "meta")
        technologies = item.get("technologies")
        if _flag(settings, "show_technologies") and isinstance(technologies, list):
            rendered.add(_join(technologies, ", "), "meta")
        rendered.add(item.get("description"), "body")
        if _flag(settings, "show_bullets"):
            _bullets(rendered, item)
    return rendered


def render_skills(section: Section, settings: SectionSettings) -> RenderedSection:
    data = normalize_skills(section.data)
    heading = data.get("title") or section_label(section.type)
    rendered = RenderedSection(section.id, section.type, heading, renderer="skills")
    categories = data["categories"]
    if _flag(settings, "show_categories"):
        for category in categories:
            if category["items"]:
                rendered.add(f"{category['name']}: {', '.join(category['items'])}", "body")
    else:
        everything = [skill for category in categories for skill in category["items"]]
        rendered.add(", ".join(everything), "body")
    return rendered


_PRIMARY_KEYS = ("title", "name", "degree", "language", "platform")


def render_generic(section: Section, settings: SectionSettings) -> RenderedSection:
    """Render any section shape without knowing its type.

    Used for types the active template has no renderer for, so their data is
    still shown rather than dropped.
    """

    rendered = RenderedSection(section.id, section.type, _heading(section), renderer="generic")
    data = section.data
    for key, value in data.items():
        if key in ("items", "title", "id"):
            continue
        if isinstance(value, str):
            rendered.add(value, "body")
    for item in _items(section):
        if isinstance(item, str):
            rendered.add(item, "bullet")
            continue
        if not isinstance(item, Mapping):
            continue
        primary_key = next((key for key in _PRIMARY_KEYS if item.get(key)), None)
        if primary_key is not None:
            rendered.add(item[primary_key], "subheading")
        meta = [
            value
            for key, value in item.items()
            if key not in ("id", "description", "bullets", primary_key) and isinstance(value, str)
        ]
        rendered.add(_join(meta), "meta")
        rendered.add(item.get("description"), "body")
        _bullets(rendered, item)
    return rendered


RENDERERS: dict[str, RenderFn] = {
    "header": render_header,
    "summary": render_summary,
    "experience": render_experience,
    "education": render_education,
    "projects": render_projects,
    "skills": render_skills,
}


__all__ = [
    "LINE_ROLES",
    "RENDERERS",
    "RenderFn",
    "RenderedLine",
    "RenderedSection",
    "render_education",
    "render_experience",
    "render_generic",
    "render_header",
    "render_projects",
    "render_skills",
    "render_summary",
]
