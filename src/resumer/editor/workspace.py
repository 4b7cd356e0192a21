"""Workspace tying one editor session to autosave, persistence and export."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from ..events import BuildCreated, EventBus
from ..export.pipeline import ExportConsumer, ExportPipeline
from ..services.autosave import AutosaveController
from ..services.persistence import BuildSummary, HttpPersistenceClient, PersistenceClient
from ..services.settings import Settings, SettingsStore
from ..services.unsaved_cache import UnsavedBackup, UnsavedCacheStore
from ..templates import TemplateRegistry, builtin_registry
from .document_model import Document
from .session import EditorSession
from .session import new_document as blank_document

__all__ = ["ResumeWorkspace"]

LOGGER = logging.getLogger(__name__)


class ResumeWorkspace:
    """Owns the active resume and the collaborators acting on it.

    Switching documents (opening a build, starting a new one, closing) always
    flushes pending edits of the current document first.
    """

    def __init__(
        self,
        client: PersistenceClient,
        *,
        registry: TemplateRegistry | None = None,
        event_bus: EventBus | None = None,
        settings: Settings | None = None,
        settings_store: SettingsStore | None = None,
        cache: UnsavedCacheStore | None = None,
        export_consumer: ExportConsumer | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.registry = registry or builtin_registry()
        self.event_bus = event_bus or EventBus()
        self.client = client
        self._settings_store = settings_store
        self._cache = cache
        self.session = EditorSession(
            registry=self.registry,
            event_bus=self.event_bus,
            history_limit=self.settings.history_limit,
            default_template=self.settings.default_template,
        )
        self.autosave = AutosaveController(
            self.session,
            client,
            delay=self.settings.autosave_delay,
            cache=cache,
        )
        self.exporter = ExportPipeline(self.registry, export_consumer, event_bus=self.event_bus)
        self.event_bus.subscribe(BuildCreated, self._on_build_created)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        settings_store: SettingsStore | None = None,
        cache: UnsavedCacheStore | None = None,
        **kwargs: Any,
    ) -> "ResumeWorkspace":
        """Build a workspace talking to the REST API configured in ``settings``."""

        client = HttpPersistenceClient(
            settings.api_base_url,
            token=settings.api_token or None,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            retry_min_seconds=settings.retry_min_seconds,
            retry_max_seconds=settings.retry_max_seconds,
        )
        return cls(client, settings=settings, settings_store=settings_store, cache=cache, **kwargs)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def document(self) -> Document:
        return self.session.document

    @property
    def build_id(self) -> str | None:
        return self.autosave.build_id

    async def list_builds(self) -> List[BuildSummary]:
        return await self.client.list()

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------
    async def open_build(self, build_id: str) -> Document:
        """Load a saved build, flushing the current document first."""

        payload = await self.client.get(build_id)
        await self.autosave.reset(build_id)
        document = self.session.load_document(payload)
        self._remember(build_id)
        LOGGER.info("Opened build %s (%d sections)", build_id, len(document.sections))
        return document

    async def new_document(self, template: str | None = None) -> Document:
        """Start an unsaved document; the first save creates its build."""

        await self.autosave.reset(None)
        if template is None:
            return self.session.load_document(None)
        return self.session.load_document(blank_document(self.registry, template=template))

    async def delete_build(self, build_id: str) -> None:
        if build_id == self.build_id:
            await self.autosave.reset(None)
            self.session.load_document(None)
        await self.client.delete(build_id)
        if self._cache is not None:
            self._cache.clear_backup(build_id)
        if build_id in self.settings.recent_builds:
            recent = [existing for existing in self.settings.recent_builds if existing != build_id]
            self.settings.recent_builds = recent
            if self.settings.last_build_id == build_id:
                self.settings.last_build_id = recent[0] if recent else None
            self._persist_settings()

    async def save(self) -> bool:
        return await self.autosave.save_immediately()

    async def close(self) -> bool:
        """Flush pending edits and release the persistence client."""

        flushed = await self.autosave.aclose()
        self.event_bus.unsubscribe(BuildCreated, self._on_build_created)
        aclose = getattr(self.client, "aclose", None)
        if aclose is not None:
            await aclose()
        if not flushed:
            LOGGER.warning("Workspace closed with unsaved changes")
        return flushed

    # ------------------------------------------------------------------
    # Unsaved backups
    # ------------------------------------------------------------------
    def pending_backup(self) -> Optional[UnsavedBackup]:
        if self._cache is None:
            return None
        return self._cache.get_backup(self.build_id)

    def restore_backup(self) -> bool:
        """Replace the document with its local backup and mark it dirty."""

        backup = self.pending_backup()
        if backup is None:
            return False
        self.session.load_document(backup.payload)
        self.autosave.notify_change()
        return True

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    async def export_pdf(self, path: Path | str | None = None) -> bytes:
        data = await self.exporter.export(self.session.document)
        if path is not None:
            target = Path(path).expanduser()
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            LOGGER.info("Wrote %s", target)
        return data

    # ------------------------------------------------------------------
    # Settings bookkeeping
    # ------------------------------------------------------------------
    def _on_build_created(self, event: BuildCreated) -> None:
        self._remember(event.build_id)

    def _remember(self, build_id: str) -> None:
        self.settings = self.settings.remember_build(build_id)
        self._persist_settings()

    def _persist_settings(self) -> None:
        if self._settings_store is None:
            return
        try:
            self._settings_store.save(self.settings)
        except OSError as exc:
            LOGGER.warning("Unable to persist settings: %s", exc)
