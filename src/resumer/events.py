"""Event bus used to decouple the editor session from autosave and export.

The session publishes :class:`DocumentChanged` after every applied mutation;
the autosave controller and any UI status indicator subscribe to it without
the session knowing about either of them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import (
    Callable,
    Generic,
    TypeVar,
    TYPE_CHECKING,
)
from weakref import WeakMethod, ref

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from typing import DefaultDict

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all events published on an :class:`EventBus`."""

    pass


# Published on every keystroke-level edit; skip per-publish debug logging.
_QUIET_EVENT_TYPES: set[type] = set()


# =============================================================================
# Document events
# =============================================================================


@dataclass(slots=True)
class DocumentChanged(Event):
    """Emitted after a mutation changed the live document.

    Attributes:
        session_id: The editor session owning the document.
        operation: Name of the mutation that produced the change.
        revision: Monotonic change counter of the session.
    """

    session_id: str
    operation: str
    revision: int


@dataclass(slots=True)
class HistoryChanged(Event):
    """Emitted when undo/redo availability may have changed."""

    session_id: str
    can_undo: bool
    can_redo: bool


# =============================================================================
# Persistence events
# =============================================================================


@dataclass(slots=True)
class SaveStateChanged(Event):
    """Emitted on every autosave state machine transition.

    Attributes:
        state: The new state value (``idle``, ``pending_save``, ``saving``,
            ``save_error``).
        build_id: The persisted build the session is bound to, if any.
        dirty: Whether local edits are not yet persisted.
    """

    state: str
    build_id: str | None
    dirty: bool


@dataclass(slots=True)
class BuildCreated(Event):
    """Emitted when the first save of a new document created a build record."""

    build_id: str


@dataclass(slots=True)
class DocumentSaved(Event):
    """Emitted after the persistence collaborator accepted a save."""

    build_id: str
    saved_at: datetime


@dataclass(slots=True)
class SaveFailed(Event):
    """Emitted when a save failed; the session keeps running."""

    build_id: str | None
    message: str


# =============================================================================
# Export events
# =============================================================================


@dataclass(slots=True)
class ExportCompleted(Event):
    """Emitted after the export consumer returned a PDF."""

    size_bytes: int


@dataclass(slots=True)
class ExportFailed(Event):
    """Emitted once per failed export attempt."""

    message: str


_QUIET_EVENT_TYPES.add(DocumentChanged)


class EventBus(Generic[E]):
    """A typed publish-subscribe event bus.

    Handlers that are bound methods are held through weak references so a
    subscriber going away does not keep receiving events. Plain functions and
    lambdas are held strongly.

    Not thread-safe: publish and subscribe from the event loop thread.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Register ``handler`` for events of exactly ``event_type``."""
        handler_ref = _HandlerRef.create(handler)
        self._handlers[event_type].append(handler_ref)
        logger.debug(
            "Subscribed handler %s to event type %s",
            _handler_name(handler),
            event_type.__name__,
        )

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return

        for i, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(i)
                logger.debug(
                    "Unsubscribed handler %s from event type %s",
                    _handler_name(handler),
                    event_type.__name__,
                )
                return

    def publish(self, event: E) -> None:
        """Invoke every handler for ``event`` in registration order.

        A handler that raises is logged and the remaining handlers still run.
        """
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        is_quiet = event_type in _QUIET_EVENT_TYPES

        if handlers is None:
            if not is_quiet:
                logger.debug("No handlers for event type %s", event_type.__name__)
            return

        if not is_quiet:
            logger.debug(
                "Publishing %s to %d handler(s)",
                event_type.__name__,
                len(handlers),
            )

        dead_indices: list[int] = []

        for i, handler_ref in enumerate(list(handlers)):
            handler = handler_ref.resolve()
            if handler is None:
                dead_indices.append(i)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s raised exception for event %s",
                    _handler_name(handler),
                    event_type.__name__,
                )

        for i in reversed(dead_indices):
            if i < len(handlers) and handlers[i].resolve() is None:
                handlers.pop(i)

    def clear(self) -> None:
        """Remove all registered handlers."""
        self._handlers.clear()
        logger.debug("Cleared all event handlers")

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    """Weak reference for bound methods, strong reference otherwise."""

    __slots__ = ("_ref", "_is_weak")

    def __init__(self, handler_ref: WeakMethod | ref | Handler, is_weak: bool) -> None:
        self._ref = handler_ref
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref  # type: ignore[return-value]
        return self._ref()  # type: ignore[operator]

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        if resolved is None:
            return False
        return resolved == handler


def _handler_name(handler: Handler) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        cls_name = type(handler.__self__).__name__
        return f"{cls_name}.{handler.__func__.__name__}"
    if hasattr(handler, "__name__"):
        return handler.__name__
    return repr(handler)


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "DocumentChanged",
    "HistoryChanged",
    "SaveStateChanged",
    "BuildCreated",
    "DocumentSaved",
    "SaveFailed",
    "ExportCompleted",
    "ExportFailed",
]
