"""Shared fixtures for catalog tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from music_catalog.domain.models import Album, Artist, Track
from music_catalog.io.json_files import JsonFileService
from music_catalog.services.library import LibraryService
from music_catalog.services.log_service import LogService
from music_catalog.store.data_store import DataStore


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def json_files(data_dir: Path) -> JsonFileService:
    return JsonFileService(data_dir)


@pytest.fixture
def log_service(json_files: JsonFileService) -> LogService:
    return LogService(json_files)


@pytest.fixture
def library(json_files: JsonFileService, log_service: LogService) -> LibraryService:
    return LibraryService(
        DataStore[Artist](),
        DataStore[Album](),
        DataStore[Track](),
        json_files,
        log_service,
    )
