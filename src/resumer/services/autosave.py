"""Debounced autosave of an editor session.

The controller is a small state machine::

    IDLE -> PENDING_SAVE -> SAVING -> IDLE
                                   \\-> SAVE_ERROR

Every change (re)arms a single debounce timer. When it fires, the full
document is serialized and handed to the persistence collaborator. At most
one save is in flight: a change that arrives during a save only marks the
controller dirty, and once the save resolves a new debounce is armed. Saves
therefore reach the server in the order the edits were made.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from ..editor.session import EditorSession
from ..events import BuildCreated, DocumentChanged, DocumentSaved, SaveFailed, SaveStateChanged
from ..utils.logging import build_logger
from .persistence import PersistenceClient
from .unsaved_cache import UnsavedCacheStore

DEFAULT_AUTOSAVE_DELAY = 2.0


class AutosaveState(str, Enum):
    IDLE = "idle"
    PENDING_SAVE = "pending_save"
    SAVING = "saving"
    SAVE_ERROR = "save_error"


class AutosaveController:
    """Persist a session's document after edits settle."""

    def __init__(
        self,
        session: EditorSession,
        client: PersistenceClient,
        *,
        delay: float = DEFAULT_AUTOSAVE_DELAY,
        build_id: str | None = None,
        cache: UnsavedCacheStore | None = None,
    ) -> None:
        self._session = session
        self._client = client
        self._delay = max(0.0, float(delay))
        self._build_id = build_id
        self._cache = cache
        self._state = AutosaveState.IDLE
        self._dirty = False
        self._sequence = 0
        self._timer: asyncio.TimerHandle | None = None
        self._save_task: asyncio.Task[bool] | None = None
        self._closed = False
        self.last_saved_at: datetime | None = None
        self.last_error: Exception | None = None
        self._log = build_logger(__name__, lambda: self._build_id)
        session.event_bus.subscribe(DocumentChanged, self._on_document_changed)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> AutosaveState:
        return self._state

    @property
    def build_id(self) -> str | None:
        return self._build_id

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    @property
    def saving(self) -> bool:
        return self._save_task is not None and not self._save_task.done()

    def _set_state(self, state: AutosaveState) -> None:
        if state == self._state:
            return
        self._log.debug("Autosave %s -> %s", self._state.value, state.value)
        self._state = state
        self._session.event_bus.publish(SaveStateChanged(state.value, self._build_id, self._dirty))

    # ------------------------------------------------------------------
    # Change tracking
    # ------------------------------------------------------------------
    def _on_document_changed(self, event: DocumentChanged) -> None:
        if event.session_id == self._session.session_id:
            self.notify_change()

    def notify_change(self) -> None:
        """Mark the document dirty and restart the debounce window."""

        self._dirty = True
        self._sequence += 1
        if self._closed:
            return
        if self.saving:
            # Re-evaluated when the in-flight save resolves.
            return
        self._arm_timer()

    def _arm_timer(self) -> None:
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._log.debug("No running event loop; change stays pending until an explicit save")
            self._set_state(AutosaveState.PENDING_SAVE)
            return
        self._timer = loop.call_later(self._delay, self._on_timer)
        self._set_state(AutosaveState.PENDING_SAVE)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if self.saving:
            return
        self._save_task = asyncio.get_running_loop().create_task(self._save_once())

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------
    async def _save_once(self) -> bool:
        sequence = self._sequence
        original_build_id = self._build_id
        payload: Mapping[str, Any] = {}
        self._set_state(AutosaveState.SAVING)
        try:
            payload = self._session.to_payload()
            if self._build_id is None:
                build_id = await self._client.create(payload)
                self._build_id = build_id
                saved_at = datetime.now(timezone.utc)
                self._log.info("Created build record")
                self._session.event_bus.publish(BuildCreated(build_id))
            else:
                saved_at = await self._client.update(self._build_id, payload)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._on_save_failed(exc, payload)
            if self._sequence != sequence and not self._closed:
                # An edit arrived while the failed save was in flight.
                self._arm_timer()
            return False

        self.last_saved_at = saved_at
        self.last_error = None
        if self._sequence == sequence:
            self._dirty = False
        self._clear_backup(original_build_id)
        self._set_state(AutosaveState.IDLE)
        self._session.event_bus.publish(DocumentSaved(self._build_id, saved_at))
        self._log.debug("Saved document revision %d", self._session.revision)
        if self._dirty and not self._closed:
            self._arm_timer()
        return True

    def _on_save_failed(self, exc: Exception, payload: Mapping[str, Any]) -> None:
        self.last_error = exc
        self._log.warning("Autosave failed: %s", exc)
        if self._cache is not None and payload:
            try:
                self._cache.write_backup(self._build_id, payload, error=str(exc))
            except OSError as cache_exc:
                self._log.warning("Unable to write local backup: %s", cache_exc)
        self._set_state(AutosaveState.SAVE_ERROR)
        self._session.event_bus.publish(SaveFailed(self._build_id, str(exc)))

    def _clear_backup(self, build_id: str | None) -> None:
        if self._cache is None:
            return
        try:
            self._cache.clear_backup(build_id)
        except OSError as exc:
            self._log.warning("Unable to clear local backup: %s", exc)

    async def _wait_for_in_flight(self) -> None:
        task = self._save_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def save_immediately(self) -> bool:
        """Save now, bypassing the debounce.

        Waits for an in-flight save first. Returns ``True`` when the persisted
        record reflects the current document.
        """

        await self._wait_for_in_flight()
        self._cancel_timer()
        if not self._dirty:
            if self._state == AutosaveState.PENDING_SAVE:
                self._set_state(AutosaveState.IDLE)
            return True
        self._save_task = asyncio.get_running_loop().create_task(self._save_once())
        ok = await self._save_task
        # A successful save re-arms the timer when edits arrived meanwhile.
        return ok and not self._dirty

    async def retry(self) -> bool:
        """Retry after a failed save; a no-op when nothing is pending."""

        return await self.save_immediately()

    async def reset(self, build_id: str | None = None) -> bool:
        """Flush pending edits, then bind the controller to ``build_id``."""

        flushed = await self.save_immediately() if self._dirty else True
        self._cancel_timer()
        self._build_id = build_id
        self._dirty = False
        self.last_error = None
        self.last_saved_at = None
        self._set_state(AutosaveState.IDLE)
        return flushed

    async def aclose(self) -> bool:
        """Cancel the timer and flush a final save if the document is dirty."""

        flushed = True
        if self._dirty:
            flushed = await self.save_immediately()
        else:
            await self._wait_for_in_flight()
        self._closed = True
        self._cancel_timer()
        self._session.event_bus.unsubscribe(DocumentChanged, self._on_document_changed)
        return flushed


__all__ = ["AutosaveController", "AutosaveState", "DEFAULT_AUTOSAVE_DELAY"]
