"""
Error taxonomy for the settings persistence layer.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(str, Enum):
    IO = "io"
    PARSE = "parse"
    ATOMIC_MOVE_UNSUPPORTED = "atomic_move_unsupported"
    SERIALIZATION = "serialization"


class SettingsError(Exception):
    """Base class for settings persistence failures."""

    kind: ErrorKind = ErrorKind.IO

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class SettingsIOError(SettingsError):
    """Filesystem access failed (permissions, disk full, missing directories)."""

    kind = ErrorKind.IO


class SettingsParseError(SettingsError):
    """The persisted document could not be parsed."""

    kind = ErrorKind.PARSE


class AtomicMoveUnsupported(SettingsError):
    """The filesystem refused an atomic rename."""

    kind = ErrorKind.ATOMIC_MOVE_UNSUPPORTED


class SerializationError(SettingsError):
    """A value cannot be represented in the settings document."""

    kind = ErrorKind.SERIALIZATION
