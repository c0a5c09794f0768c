# music_catalog/bootstrap.py

"""Service composition, first-run sample data and graceful shutdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from music_catalog.domain.errors import CatalogError
from music_catalog.domain.models import Album, Artist, Genre, Track
from music_catalog.io.json_files import JsonFileService
from music_catalog.services.library import LibraryService
from music_catalog.services.log_service import LogService
from music_catalog.store.data_store import DataStore

logger = logging.getLogger(__name__)

SOURCE = "ApplicationInitializer"

SAMPLE_ARTISTS = [
    Artist(name="Kent", country="Sweden", genre=Genre.ROCK),
    Artist(name="Håkan Hellström", country="Sweden", genre=Genre.POP),
    Artist(name="Veronica Maggio", country="Sweden", genre=Genre.POP),
    Artist(name="ABBA", country="Sweden", genre=Genre.POP),
    Artist(name="Meshuggah", country="Sweden", genre=Genre.METAL),
]

# (artist name, title, year, genre, rating)
SAMPLE_ALBUMS = [
    ("Kent", "Vapen & ammunition", 2002, Genre.ROCK, 5),
    ("Kent", "Du & jag döden", 2005, Genre.ROCK, 0),
    ("Håkan Hellström", "Känn ingen sorg för mig Göteborg", 2000, Genre.POP, 0),
    ("Veronica Maggio", "Och vinnaren är...", 2008, Genre.POP, 0),
    ("ABBA", "Arrival", 1976, Genre.POP, 4),
    ("Meshuggah", "Destroy Erase Improve", 1995, Genre.METAL, 0),
]


@dataclass(slots=True)
class InitializationResult:
    """Services produced by initialize_application(), or the failure."""

    library: LibraryService | None = None
    log_service: LogService | None = None
    success: bool = False
    error_message: str | None = None
    exception: BaseException | None = None


def build_library(data_dir: Path | str) -> tuple[LibraryService, LogService]:
    """Wire up stores, file service, log service and library service."""
    json_files = JsonFileService(data_dir)
    log_service = LogService(json_files)
    library = LibraryService(
        DataStore[Artist](),
        DataStore[Album](),
        DataStore[Track](),
        json_files,
        log_service,
    )
    return library, log_service


def initialize_application(
    data_dir: Path | str,
    *,
    seed_sample_data: bool = True,
) -> InitializationResult:
    """Build all services and load the catalog.

    Catalog and persistence errors are reported in the result instead of
    being raised.
    """
    library, log_service = build_library(data_dir)
    result = InitializationResult(library=library, log_service=log_service)

    try:
        log_service.initialize()
        log_service.log_information(
            SOURCE, "Startup", "Application", "Starting application initialization"
        )
        load_or_create_data(library, log_service, seed_sample_data=seed_sample_data)
    except CatalogError as exc:
        logger.error("Failed to initialize application: %s", exc)
        result.error_message = str(exc)
        result.exception = exc
        return result

    log_service.log_information(
        SOURCE, "Startup", "Application", "Application initialized successfully"
    )
    result.success = True
    return result


def load_or_create_data(
    library: LibraryService,
    log_service: LogService,
    *,
    seed_sample_data: bool = True,
) -> None:
    """Load existing data, seeding sample data when the catalog is empty."""
    library.initialize()

    artists = library.get_all_artists()
    albums = library.get_all_albums()
    if artists or albums:
        log_service.log_information(
            SOURCE,
            "Initialize",
            "Data",
            f"Loaded {len(artists)} artists and {len(albums)} albums from storage",
        )
        return

    if not seed_sample_data:
        log_service.log_information(
            SOURCE, "Initialize", "Data", "No data found, starting empty catalog"
        )
        return

    log_service.log_information(
        SOURCE, "Initialize", "Data", "No data found, creating sample data"
    )
    create_sample_data(library, log_service)


def create_sample_data(library: LibraryService, log_service: LogService) -> None:
    ids: dict[str, int] = {}
    for artist in SAMPLE_ARTISTS:
        ids[artist.name] = library.add_artist(artist).id

    for artist_name, title, year, genre, rating in SAMPLE_ALBUMS:
        album = Album(
            title=title,
            artist_id=ids[artist_name],
            release_year=year,
            genre=genre,
        )
        album.update_rating(rating)
        library.add_album(album)

    log_service.log_information(
        SOURCE,
        "SampleData",
        "Data",
        f"Created {len(SAMPLE_ARTISTS)} sample artists and "
        f"{len(SAMPLE_ALBUMS)} sample albums",
    )


def shutdown_application(result: InitializationResult) -> None:
    """Persist all data and close the activity log.

    Raises:
        PersistenceError: Saving failed; the error has been logged.
    """
    if result.library is not None:
        result.library.save_all_data()

    if result.log_service is not None:
        result.log_service.log_information(
            SOURCE, "Shutdown", "Application", "Application shutting down"
        )
        result.log_service.shutdown()
