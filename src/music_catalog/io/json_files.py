# music_catalog/io/json_files.py

"""Load and save collections of entities as indented JSON array files."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

from music_catalog.domain.errors import (
    DeserializationError,
    StorageIOError,
    StoragePermissionError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"


class JsonFileService:
    """Reads and writes `<data_dir>/[subdirectory/]<name>.json` files.

    A missing or blank file loads as an empty list. Saves go through a
    temporary sibling file that is moved over the target with os.replace().
    """

    def __init__(self, data_dir: Path | str) -> None:
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def file_path(self, name: str, subdirectory: str | None = None) -> Path:
        """Resolve the path of a named data file."""
        _validate_name(name)
        if not name.lower().endswith(JSON_SUFFIX):
            name += JSON_SUFFIX

        directory = self._data_dir
        if subdirectory:
            directory = directory / subdirectory
        return directory / name

    def load(
        self,
        name: str,
        from_raw: Callable[[dict[str, Any]], T] | None = None,
        subdirectory: str | None = None,
    ) -> list[T]:
        """Load a JSON array file, converting each element with `from_raw`.

        Raises:
            DeserializationError: The content is not a valid JSON array or an
                element cannot be converted.
            StoragePermissionError: The file cannot be read due to permissions.
            StorageIOError: Any other OS-level read failure.
        """
        path = self.file_path(name, subdirectory)

        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("File not found: %s. Returning empty list.", path)
            return []
        except PermissionError as exc:
            raise StoragePermissionError(f"Permission denied reading: {exc}", path) from exc
        except OSError as exc:
            raise StorageIOError(f"Failed to read data file: {exc}", path) from exc

        if not content.strip():
            logger.info("File is empty: %s. Returning empty list.", path)
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("JSON deserialization error in %s: %s", path, exc)
            raise DeserializationError(f"Invalid JSON format: {exc}", path) from exc

        if not isinstance(data, list):
            msg = f"Expected a JSON array, got {type(data).__name__}"
            raise DeserializationError(msg, path)

        if from_raw is None:
            items: list[Any] = data
        else:
            try:
                items = [from_raw(obj) for obj in data]
            except (KeyError, ValueError, TypeError, AttributeError) as exc:
                logger.error("Invalid entity data in %s: %s", path, exc)
                raise DeserializationError(f"Invalid entity data: {exc!r}", path) from exc

        logger.info("Loaded %s items from %s.", len(items), path)
        return items

    def save(
        self,
        name: str,
        items: Iterable[T] | None,
        to_raw: Callable[[T], dict[str, Any]] | None = None,
        subdirectory: str | None = None,
    ) -> bool:
        """Write `items` as an indented JSON array.

        Raises:
            ValueError: `items` is None.
            StoragePermissionError: The target cannot be written due to
                permissions.
            StorageIOError: Any other OS-level write failure.
        """
        if items is None:
            msg = "items must not be None."
            raise ValueError(msg)

        path = self.file_path(name, subdirectory)
        objects = [to_raw(item) for item in items] if to_raw else list(items)
        content = json.dumps(objects, ensure_ascii=False, indent=2)
        temp_path = path.with_name(path.name + TEMP_SUFFIX)

        try:
            if not path.parent.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created directory: %s", path.parent)

            temp_path.write_text(content + "\n", encoding="utf-8")
            os.replace(temp_path, path)
        except PermissionError as exc:
            _discard(temp_path)
            raise StoragePermissionError(f"Permission denied writing: {exc}", path) from exc
        except OSError as exc:
            _discard(temp_path)
            raise StorageIOError(f"Failed to write data file: {exc}", path) from exc

        logger.info("Saved %s items to %s.", len(objects), path)
        return True

    def file_exists(self, name: str, subdirectory: str | None = None) -> bool:
        return self.file_path(name, subdirectory).is_file()

    def delete_file(self, name: str, subdirectory: str | None = None) -> bool:
        """Delete a data file. Returns False instead of raising on failure."""
        path = self.file_path(name, subdirectory)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Could not delete %s: %s", path, exc)
            return False
        return True


def _validate_name(name: str) -> None:
    if not name or not name.strip():
        msg = "File name cannot be empty."
        raise ValueError(msg)


def _discard(temp_path: Path) -> None:
    try:
        temp_path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", temp_path, exc)
