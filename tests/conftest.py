"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from resumer.editor.session import EditorSession
from resumer.events import Event, EventBus
from resumer.services.settings import SecretVault, SettingsStore
from resumer.services.unsaved_cache import UnsavedCacheStore
from resumer.templates import TemplateRegistry, builtin_registry


@pytest.fixture
def registry() -> TemplateRegistry:
    return builtin_registry()


@pytest.fixture
def event_bus() -> EventBus[Event]:
    return EventBus()


@pytest.fixture
def session(registry: TemplateRegistry, event_bus: EventBus[Event]) -> EditorSession:
    return EditorSession(registry=registry, event_bus=event_bus, session_id="session-1")


@pytest.fixture
def settings_store(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json", vault=SecretVault(key_path=tmp_path / "settings.key"))


@pytest.fixture
def unsaved_cache(tmp_path: Path) -> UnsavedCacheStore:
    return UnsavedCacheStore(tmp_path / "unsaved_cache.json")
