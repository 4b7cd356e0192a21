"""Error taxonomy for the resume editing engine.

Nothing raised from this hierarchy is fatal to an editing session. Validation
and not-found problems are resolved locally by the mutation layer, persistence
failures leave the local document intact pending retry, and export failures
are reported once without touching the document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


class ErrorCode:
    """Machine-readable identifiers carried by :class:`ResumerError`."""

    INVALID_STYLE_VALUE = "invalid_style_value"
    SECTION_NOT_FOUND = "section_not_found"
    ITEM_NOT_FOUND = "item_not_found"
    BUILD_NOT_FOUND = "build_not_found"
    PERSISTENCE_FAILED = "persistence_failed"
    EXPORT_FAILED = "export_failed"


@dataclass
class ResumerError(Exception):
    """Base exception for the engine.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    # Whether the failure is expected to go away on retry.
    recoverable: ClassVar[bool] = True

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class ValidationError(ResumerError):
    """Raised while coercing an out-of-range or malformed style value.

    Style input is clamped rather than rejected, so this error never escapes
    :func:`resumer.editor.style.clamp_style_updates`.
    """

    error_code: str = field(default=ErrorCode.INVALID_STYLE_VALUE)
    message: str = field(default="Style value is invalid")
    details: dict[str, Any] = field(default_factory=dict)

    field_name: str | None = field(default=None)
    value: Any = field(default=None)


@dataclass
class NotFoundError(ResumerError):
    """Raised when an id does not resolve to a section, item, or build."""

    error_code: str = field(default=ErrorCode.SECTION_NOT_FOUND)
    message: str = field(default="The referenced id was not found")
    details: dict[str, Any] = field(default_factory=dict)

    identifier: str | None = field(default=None)


@dataclass
class PersistenceError(ResumerError):
    """Network or server failure while talking to the persistence collaborator."""

    error_code: str = field(default=ErrorCode.PERSISTENCE_FAILED)
    message: str = field(default="Failed to save resume")
    details: dict[str, Any] = field(default_factory=dict)

    status_code: int | None = field(default=None)


@dataclass
class ExportError(ResumerError):
    """Raised when the export pipeline cannot produce a PDF."""

    error_code: str = field(default=ErrorCode.EXPORT_FAILED)
    message: str = field(default="Failed to generate PDF")
    details: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "ErrorCode",
    "ResumerError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "ExportError",
]
