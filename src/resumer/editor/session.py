"""Editing session owning one live document and its history."""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Callable, Iterable, Mapping, Optional

from ..events import DocumentChanged, EventBus, HistoryChanged
from ..templates.builtin import builtin_registry
from ..templates.registry import TemplateRegistry
from . import mutations
from .document_model import DEFAULT_TEMPLATE_ID, Document
from .history import MAX_HISTORY, HistoryManager, HistoryState
from .normalization import external_sections, header_section
from .serialization import document_from_payload, document_to_payload
from .style import Style

LOGGER = logging.getLogger(__name__)

Mutation = Callable[..., Document]


def new_document(registry: TemplateRegistry, *, template: str = DEFAULT_TEMPLATE_ID) -> Document:
    """Return a blank document holding only the locked header."""

    if template not in registry:
        template = DEFAULT_TEMPLATE_ID
    header = header_section()
    return Document(sections=[header], section_order=[header.id], template=template)


class EditorSession:
    """Applies mutations to one document, recording history and publishing changes.

    Sessions are independent: each owns its document, its history, and the
    event bus it publishes on, so several documents can be edited side by
    side.
    """

    def __init__(
        self,
        *,
        registry: TemplateRegistry | None = None,
        event_bus: EventBus | None = None,
        document: Document | None = None,
        history_limit: int = MAX_HISTORY,
        default_template: str = DEFAULT_TEMPLATE_ID,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.registry = registry or builtin_registry()
        self.event_bus = event_bus or EventBus()
        self.history = HistoryManager(limit=history_limit)
        self._default_template = default_template if default_template in self.registry else DEFAULT_TEMPLATE_ID
        self._document = document if document is not None else new_document(self.registry, template=self._default_template)
        self._revision = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def document(self) -> Document:
        """The live document. Treat it as read-only; edit through the session."""

        return self._document

    @property
    def revision(self) -> int:
        return self._revision

    def snapshot(self) -> Document:
        return copy.deepcopy(self._document)

    def to_payload(self) -> dict[str, Any]:
        return document_to_payload(self._document)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    @property
    def history_state(self) -> HistoryState:
        return self.history.state

    # ------------------------------------------------------------------
    # Core dispatch
    # ------------------------------------------------------------------
    def apply(self, operation: str, mutation: Mutation, *args: Any, **kwargs: Any) -> bool:
        """Run ``mutation`` against the live document.

        Returns ``True`` when the document changed. Unchanged results leave
        history untouched and publish nothing.
        """

        current = self._document
        updated = mutation(current, *args, **kwargs)
        if updated is current or updated == current:
            LOGGER.debug("%s produced no change", operation)
            return False
        self.history.record(current, operation)
        self._document = updated
        self._changed(operation)
        return True

    def _changed(self, operation: str) -> None:
        self._revision += 1
        self.event_bus.publish(DocumentChanged(self.session_id, operation, self._revision))
        self._publish_history()

    def _publish_history(self) -> None:
        self.event_bus.publish(HistoryChanged(self.session_id, self.can_undo, self.can_redo))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_document(self, source: Document | Mapping[str, Any] | None = None) -> Document:
        """Replace the document without recording history.

        Used for the initial load of a saved build and for starting a fresh
        document; the history of the previous document is discarded.
        """

        if source is None:
            document = new_document(self.registry, template=self._default_template)
        elif isinstance(source, Document):
            document = copy.deepcopy(source)
        else:
            document = document_from_payload(source, default_template=self._default_template)
        if document.template not in self.registry:
            LOGGER.warning("Loaded document uses unknown template %s", document.template)
        self._document = document
        self.history.clear()
        self._revision = 0
        self._publish_history()
        return document

    def load_external(self, payload: Mapping[str, Any]) -> bool:
        """Merge externally produced resume content as one undoable change."""

        incoming = external_sections(payload)

        def merge(document: Document) -> Document:
            result = mutations.merge_sections(document, incoming)
            settings = payload.get("sectionSettings")
            if isinstance(settings, Mapping):
                result = mutations.replace_settings(result, settings)
            style = payload.get("style")
            if isinstance(style, Mapping):
                result = mutations.update_style(result, style)
            title = payload.get("title")
            if isinstance(title, str):
                result = mutations.set_title(result, title)
            return result

        return self.apply("load_external", merge)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def undo(self) -> bool:
        restored = self.history.undo(self._document)
        if restored is None:
            return False
        self._document = restored
        self._changed("undo")
        return True

    def redo(self) -> bool:
        restored = self.history.redo(self._document)
        if restored is None:
            return False
        self._document = restored
        self._changed("redo")
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_section(self, section_type: str) -> Optional[str]:
        """Add a section and return its id, or ``None`` when nothing was added."""

        if not self.apply("add_section", mutations.add_section, section_type, self.registry):
            return None
        return self._document.section_order[-1]

    def remove_section(self, section_id: str) -> bool:
        return self.apply("remove_section", mutations.remove_section, section_id)

    def reorder_sections(self, new_order: Iterable[str]) -> bool:
        return self.apply("reorder_sections", mutations.reorder_sections, list(new_order))

    def update_section_data(self, section_id: str, partial: Mapping[str, Any]) -> bool:
        return self.apply("update_section_data", mutations.update_section_data, section_id, partial)

    def update_section_settings(self, section_type: str, partial: Mapping[str, Any]) -> bool:
        return self.apply("update_section_settings", mutations.update_section_settings, section_type, partial)

    def update_style(self, partial: Mapping[str, Any]) -> bool:
        return self.apply("update_style", mutations.update_style, partial)

    def reset_style(self) -> bool:
        return self.apply("reset_style", mutations.reset_style)

    def change_template(self, template_id: str) -> bool:
        return self.apply("change_template", mutations.change_template, template_id, self.registry)

    def set_title(self, title: str) -> bool:
        return self.apply("set_title", mutations.set_title, title)

    def add_item(self, section_id: str, item: Any = None) -> bool:
        return self.apply("add_item", mutations.add_item, section_id, item)

    def remove_item(self, section_id: str, item_id: str) -> bool:
        return self.apply("remove_item", mutations.remove_item, section_id, item_id)

    def update_item(self, section_id: str, item_id: str, partial: Mapping[str, Any]) -> bool:
        return self.apply("update_item", mutations.update_item, section_id, item_id, partial)

    def add_bullet(self, section_id: str, item_id: str, text: str = "") -> bool:
        return self.apply("add_bullet", mutations.add_bullet, section_id, item_id, text)

    def remove_bullet(self, section_id: str, item_id: str, index: int) -> bool:
        return self.apply("remove_bullet", mutations.remove_bullet, section_id, item_id, index)

    def add_skill(self, section_id: str, skill: str, category: str | None = None) -> bool:
        return self.apply("add_skill", mutations.add_skill, section_id, skill, category)

    def remove_skill(self, section_id: str, skill: str, category: str | None = None) -> bool:
        return self.apply("remove_skill", mutations.remove_skill, section_id, skill, category)

    @property
    def style(self) -> Style:
        return self._document.style


__all__ = ["EditorSession", "new_document"]
