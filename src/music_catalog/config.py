# music_catalog/config.py

"""Shared configuration and environment setup."""

from __future__ import annotations

from os import getenv
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=True)

DATA_DIR_NAME = "data"
_FALSY = {"0", "false", "no", "off"}


def get_project_root() -> Path:
    """Return the project root directory.

    Prefers MUSIC_CATALOG_PROJECT_ROOT env var. Falls back to current working
    directory.
    """
    if root := getenv("MUSIC_CATALOG_PROJECT_ROOT"):
        return Path(root).resolve()
    return Path.cwd()


def get_data_dir() -> Path:
    """Return the directory holding the JSON datasets."""
    if data_dir := getenv("MUSIC_CATALOG_DATA_DIR"):
        return Path(data_dir).resolve()
    return get_project_root() / DATA_DIR_NAME


def sample_data_enabled() -> bool:
    """Whether an empty catalog should be seeded with sample data."""
    value = getenv("MUSIC_CATALOG_SAMPLE_DATA", "true")
    return value.strip().lower() not in _FALSY
