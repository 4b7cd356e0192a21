"""Editor package containing the document model, mutations, and sessions."""

from importlib import import_module
from typing import Any

from . import document_model, style

__all__ = ["document_model", "style"]

_LAZY_MODULES = ("mutations", "normalization", "serialization", "history", "session", "workspace")


def __getattr__(name: str) -> Any:
	if name in _LAZY_MODULES:
		module = import_module(f"{__name__}.{name}")
		globals()[name] = module
		return module
	raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
