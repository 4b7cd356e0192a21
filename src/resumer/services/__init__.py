"""Service layer helpers (autosave, persistence, settings, etc.)."""

from .persistence import BuildSummary, HttpPersistenceClient, InMemoryPersistence, PersistenceClient

__all__ = [
    "BuildSummary",
    "HttpPersistenceClient",
    "InMemoryPersistence",
    "PersistenceClient",
]
