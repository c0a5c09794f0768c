# music_catalog/domain/errors.py

"""Exception taxonomy for catalog operations and persistence."""

from __future__ import annotations

from pathlib import Path


class CatalogError(Exception):
    """Base exception for all catalog errors."""


class ValidationError(CatalogError, ValueError):
    """Raised when entity data is invalid or references a missing entity."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class DuplicateError(CatalogError):
    """Raised when an entity conflicts with one already in the catalog."""


class PersistenceError(CatalogError):
    """Base exception for failures reading or writing a data file."""

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(f"{message} ({path})")
        self.path = Path(path)


class DeserializationError(PersistenceError):
    """Raised when a data file holds malformed or unexpected content."""


class StorageIOError(PersistenceError):
    """Raised when the file system refuses a read or write."""


class StoragePermissionError(PersistenceError):
    """Raised when access to a data file is denied."""
