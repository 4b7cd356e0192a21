"""Local backup of payloads whose save to the server failed."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from .settings import _SETTINGS_DIR

__all__ = ["UNSAVED_KEY", "UnsavedBackup", "UnsavedCache", "UnsavedCacheStore"]

LOGGER = logging.getLogger(__name__)
_CACHE_FILENAME = "unsaved_cache.json"
_CACHE_VERSION = 1

# Backup key for documents that have no build record yet.
UNSAVED_KEY = "__unsaved__"


def _default_cache_path() -> Path:
    return _SETTINGS_DIR / _CACHE_FILENAME


@dataclass(slots=True)
class UnsavedBackup:
    payload: dict[str, Any]
    error: str = ""
    saved_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass(slots=True)
class UnsavedCache:
    """Backups keyed by build id, kept separate from user settings."""

    backups: dict[str, UnsavedBackup] = field(default_factory=dict)


class UnsavedCacheStore:
    """Persistence adapter for :class:`UnsavedCache`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _default_cache_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> UnsavedCache:
        payload = self._read_payload()
        return UnsavedCache(backups=_coerce_backups(payload.get("backups")))

    def save(self, cache: UnsavedCache | None) -> Path:
        if cache is None:
            return self._path
        payload = {
            "version": _CACHE_VERSION,
            "backups": {
                key: {"payload": backup.payload, "error": backup.error, "saved_at": backup.saved_at}
                for key, backup in cache.backups.items()
            },
        }
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        return self._path

    def write_backup(self, build_id: str | None, payload: Mapping[str, Any], error: str = "") -> Path:
        cache = self.load()
        key = build_id or UNSAVED_KEY
        cache.backups[key] = UnsavedBackup(payload=dict(payload), error=error)
        LOGGER.info("Stored local backup for %s after failed save", key)
        return self.save(cache)

    def get_backup(self, build_id: str | None) -> UnsavedBackup | None:
        return self.load().backups.get(build_id or UNSAVED_KEY)

    def clear_backup(self, build_id: str | None) -> bool:
        """Drop the backup for ``build_id``; returns whether one existed."""

        cache = self.load()
        removed = cache.backups.pop(build_id or UNSAVED_KEY, None)
        if removed is None:
            return False
        self.save(cache)
        return True

    def _read_payload(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            data = json.loads(text)
            if isinstance(data, Mapping):
                return dict(data)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Unsaved cache %s is not valid JSON: %s", self._path, exc)
        return {}


def _coerce_backups(value: Any) -> dict[str, UnsavedBackup]:
    if not isinstance(value, Mapping):
        return {}
    result: dict[str, UnsavedBackup] = {}
    for key, entry in value.items():
        if not isinstance(key, str) or not isinstance(entry, Mapping):
            continue
        payload = entry.get("payload")
        if not isinstance(payload, Mapping):
            continue
        result[key] = UnsavedBackup(
            payload=dict(payload),
            error=str(entry.get("error") or ""),
            saved_at=str(entry.get("saved_at") or ""),
        )
    return result
