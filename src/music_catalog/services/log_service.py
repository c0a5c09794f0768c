# music_catalog/services/log_service.py

"""Persistent activity log of catalog operations.

Keeps the newest entries in memory, rewrites them to
`<data>/logs/application_log.json` after every call and mirrors each entry to
the standard `logging` module.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from music_catalog.domain.models import LogEntry, LogLevel
from music_catalog.io.catalog_json import log_entry_from_raw, log_entry_to_raw
from music_catalog.io.json_files import JsonFileService

logger = logging.getLogger(__name__)

LOG_FILE_NAME = "application_log.json"
LOG_SUBDIRECTORY = "logs"
MAX_LOG_ENTRIES = 1000

_PY_LEVELS = {
    LogLevel.INFORMATION: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}

LogListener = Callable[[LogEntry], None]


class LogService:
    """Capped, file-backed log of LogEntry records."""

    def __init__(
        self,
        json_files: JsonFileService,
        *,
        max_entries: int = MAX_LOG_ENTRIES,
    ) -> None:
        if max_entries < 1:
            msg = "max_entries must be positive."
            raise ValueError(msg)

        self._json_files = json_files
        self._max_entries = max_entries
        self._entries: list[LogEntry] = []
        self._next_id = 1
        self._listeners: list[LogListener] = []

    def initialize(self) -> None:
        """Load earlier entries from disk and record the startup."""
        existing = self._json_files.load(
            LOG_FILE_NAME, log_entry_from_raw, subdirectory=LOG_SUBDIRECTORY
        )
        if existing:
            self._entries.extend(existing[-self._max_entries :])
            self._next_id = max(entry.id for entry in existing) + 1

        self.log(
            LogLevel.INFORMATION,
            "System",
            "Startup",
            "Application",
            "Log service initialized",
        )

    def subscribe(self, listener: LogListener) -> None:
        """Register a callback invoked with every new entry."""
        self._listeners.append(listener)

    def log_information(
        self,
        source: str,
        action: str,
        entity_type: str,
        message: str,
        entity_id: int | None = None,
        additional_data: str | None = None,
    ) -> LogEntry:
        return self.log(
            LogLevel.INFORMATION,
            source,
            action,
            entity_type,
            message,
            entity_id,
            additional_data,
        )

    def log_warning(
        self,
        source: str,
        action: str,
        entity_type: str,
        message: str,
        entity_id: int | None = None,
        additional_data: str | None = None,
    ) -> LogEntry:
        return self.log(
            LogLevel.WARNING,
            source,
            action,
            entity_type,
            message,
            entity_id,
            additional_data,
        )

    def log_error(
        self,
        source: str,
        action: str,
        entity_type: str,
        message: str,
        exception: BaseException | None = None,
        entity_id: int | None = None,
    ) -> LogEntry:
        additional_data = None
        if exception is not None:
            additional_data = (
                f"Exception: {type(exception).__name__}, Message: {exception}"
            )
        return self.log(
            LogLevel.ERROR,
            source,
            action,
            entity_type,
            message,
            entity_id,
            additional_data,
        )

    def log_critical(
        self,
        source: str,
        action: str,
        entity_type: str,
        message: str,
        entity_id: int | None = None,
        additional_data: str | None = None,
    ) -> LogEntry:
        return self.log(
            LogLevel.CRITICAL,
            source,
            action,
            entity_type,
            message,
            entity_id,
            additional_data,
        )

    def log_crud(
        self,
        source: str,
        action: str,
        entity_type: str,
        entity_id: int | None = None,
        additional_data: str | None = None,
    ) -> LogEntry:
        """Record a create/update/delete with a generated message."""
        message = f"{action} operation on {entity_type}"
        if entity_id is not None:
            message += f" ID {entity_id}"
        return self.log(
            LogLevel.INFORMATION,
            source,
            action,
            entity_type,
            message,
            entity_id,
            additional_data,
        )

    def log(
        self,
        level: LogLevel,
        source: str,
        action: str,
        entity_type: str,
        message: str,
        entity_id: int | None = None,
        additional_data: str | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            id=self._next_id,
            level=level,
            source=source,
            action=action,
            entity_type=entity_type,
            message=message,
            entity_id=entity_id,
            additional_data=additional_data,
        )
        self._next_id += 1

        self._entries.append(entry)
        if len(self._entries) > self._max_entries:
            del self._entries[: len(self._entries) - self._max_entries]

        self._save()

        logger.log(_PY_LEVELS[level], "%s.%s: %s", source, action, message)
        for listener in self._listeners:
            listener(entry)
        return entry

    def get_all_logs(self) -> list[LogEntry]:
        """Return all retained entries, newest first."""
        return sorted(
            self._entries,
            key=lambda entry: (entry.timestamp, entry.id),
            reverse=True,
        )

    def shutdown(self) -> None:
        self.log(
            LogLevel.INFORMATION,
            "System",
            "Shutdown",
            "Application",
            "Application is shutting down",
        )

    def _save(self) -> None:
        self._json_files.save(
            LOG_FILE_NAME,
            self._entries,
            log_entry_to_raw,
            subdirectory=LOG_SUBDIRECTORY,
        )
