# music_catalog/services/library.py

"""Cross-entity orchestration for artists, albums and tracks.

This is the only place that knows how the entity kinds relate: albums point
at artists, tracks point at albums. It enforces those references, rejects
duplicates, cascades deletes and handles loading/saving the datasets.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from music_catalog.analysis.statistics import (
    DEFAULT_TOP_N,
    AlbumRecommendation,
    LibraryStatistics,
    compute_statistics,
    recommend_album,
    top_rated_albums,
)
from music_catalog.domain.errors import (
    DeserializationError,
    DuplicateError,
    ValidationError,
)
from music_catalog.domain.models import Album, AlbumWithArtist, Artist, Genre, Track
from music_catalog.io.catalog_json import (
    album_from_raw,
    album_to_raw,
    artist_from_raw,
    artist_to_raw,
    track_from_raw,
    track_to_raw,
)
from music_catalog.io.json_files import JsonFileService
from music_catalog.services.log_service import LogService
from music_catalog.store.data_store import DataStore

logger = logging.getLogger(__name__)

ARTISTS_FILE = "artists"
ALBUMS_FILE = "albums"
TRACKS_FILE = "songs"
EXPORTS_SUBDIRECTORY = "exports"
BACKUPS_SUBDIRECTORY = "backups"

SOURCE = "LibraryService"

E = TypeVar("E", Artist, Album, Track)


class LibraryService:
    """Owns the three entity stores and every rule spanning them."""

    def __init__(
        self,
        artist_store: DataStore[Artist],
        album_store: DataStore[Album],
        track_store: DataStore[Track],
        json_files: JsonFileService,
        log_service: LogService | None = None,
    ) -> None:
        self._artists = artist_store
        self._albums = album_store
        self._tracks = track_store
        self._json_files = json_files
        self._log = log_service

    @property
    def activity_log(self) -> LogService | None:
        return self._log

    # ------------------------------------------------------------------
    # Loading and saving
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Replace in-memory state with the contents of the data files."""
        self._info("Initialize", "System", "Starting service initialization")
        try:
            artists = self._read_dataset(ARTISTS_FILE, artist_from_raw)
            albums = self._read_dataset(ALBUMS_FILE, album_from_raw)
            tracks = self._read_dataset(TRACKS_FILE, track_from_raw)
        except Exception as exc:
            self._error("Initialize", "System", "Failed to initialize service", exc)
            raise

        # Every file parsed and checked; only now touch the live stores.
        self._artists.clear()
        self._artists.restore(artists)
        self._albums.clear()
        self._albums.restore(albums)
        self._tracks.clear()
        self._tracks.restore(tracks)

        self._info(
            "Initialize",
            "System",
            f"Service initialized with {self._artists.count} artists, "
            f"{self._albums.count} albums, {self._tracks.count} songs",
        )

    def save_all_data(self) -> None:
        """Write all three datasets to their data files."""
        self._info("SaveData", "System", "Starting data save operation")
        try:
            self._save_datasets()
        except Exception as exc:
            self._error("SaveData", "System", "Failed to save data", exc)
            raise
        self._info("SaveData", "System", "All data saved successfully")

    async def initialize_async(self) -> None:
        await asyncio.to_thread(self.initialize)

    async def save_all_data_async(self) -> None:
        await asyncio.to_thread(self.save_all_data)

    def create_backup(self, label: str | None = None) -> str:
        """Copy all datasets to `backups/<label>/`. Returns the subdirectory."""
        label = label or datetime.now().strftime("%Y%m%d_%H%M%S")
        if label.strip() in ("", ".", "..") or any(sep in label for sep in "/\\"):
            msg = f"Invalid backup label: {label!r}"
            raise ValidationError(msg)
        subdirectory = f"{BACKUPS_SUBDIRECTORY}/{label}"
        self._save_datasets(subdirectory)
        self._info("Backup", "System", f"Created backup in {subdirectory}")
        return subdirectory

    def _read_dataset(
        self,
        name: str,
        from_raw: Callable[[dict[str, Any]], E],
    ) -> list[E]:
        """Load one data file and check its IDs in a scratch store."""
        items = self._json_files.load(name, from_raw)
        try:
            DataStore[Any]().restore(items)
        except ValueError as exc:
            path = self._json_files.file_path(name)
            raise DeserializationError(str(exc), path) from exc
        return items

    def _save_datasets(self, subdirectory: str | None = None) -> None:
        self._json_files.save(
            ARTISTS_FILE, self._artists.get_all(), artist_to_raw, subdirectory
        )
        self._json_files.save(
            ALBUMS_FILE, self._albums.get_all(), album_to_raw, subdirectory
        )
        self._json_files.save(
            TRACKS_FILE, self._tracks.get_all(), track_to_raw, subdirectory
        )

    # ------------------------------------------------------------------
    # Artists
    # ------------------------------------------------------------------

    def add_artist(self, artist: Artist) -> Artist:
        """Validate and store a new artist.

        Raises:
            ValidationError: The artist data is invalid.
            DuplicateError: An artist with the same name (ignoring case)
                already exists.
        """
        _require(artist, "Artist")
        self._validate(artist.validation_errors(), "AddArtist", "Artist")

        existing = self._find_artist_by_name(artist.name)
        if existing is not None:
            self._warning(
                "AddArtist",
                "Artist",
                f"Attempted to add duplicate artist: {artist.name}",
                existing.id,
            )
            msg = f"Artist '{artist.name}' already exists"
            raise DuplicateError(msg)

        added = self._artists.add(artist)
        self._crud("Create", "Artist", added.id, f"Added artist: {added.name}")
        return added

    def update_artist(self, artist: Artist) -> bool:
        """Replace an existing artist. Returns False if the ID is unknown."""
        _require(artist, "Artist")
        self._validate(artist.validation_errors(), "UpdateArtist", "Artist")

        if self._artists.get_by_id(artist.id) is None:
            self._warning(
                "UpdateArtist", "Artist", f"Artist with ID {artist.id} not found"
            )
            return False

        existing = self._find_artist_by_name(artist.name)
        if existing is not None and existing.id != artist.id:
            msg = f"Artist '{artist.name}' already exists"
            raise DuplicateError(msg)

        updated = self._artists.update(artist)
        if updated:
            self._crud("Update", "Artist", artist.id, f"Updated artist: {artist.name}")
        return updated

    def delete_artist(self, artist_id: int) -> bool:
        """Delete an artist together with its albums and their tracks."""
        artist = self._artists.get_by_id(artist_id)
        if artist is None:
            self._warning(
                "DeleteArtist", "Artist", f"Artist with ID {artist_id} not found"
            )
            return False

        album_ids = [a.id for a in self._albums.find(lambda a: a.artist_id == artist_id)]
        track_ids = [
            t.id for t in self._tracks.find(lambda t: t.album_id in album_ids)
        ]
        self._apply_cascade(track_ids, album_ids, lambda: self._artists.delete(artist_id))

        self._crud(
            "Delete",
            "Artist",
            artist_id,
            f"Deleted artist '{artist.name}' and {len(album_ids)} associated albums",
        )
        return True

    def get_artist(self, artist_id: int) -> Artist | None:
        return self._artists.get_by_id(artist_id)

    def get_all_artists(self) -> list[Artist]:
        return self._artists.get_all()

    def search_artists(self, term: str | None) -> list[Artist]:
        """Case-insensitive match on name or country. Blank term returns all."""
        if not term or not term.strip():
            return self.get_all_artists()

        needle = term.strip().casefold()
        return self._artists.find(
            lambda a: needle in a.name.casefold() or needle in a.country.casefold()
        )

    def get_artists_by_genre(self) -> dict[Genre, list[Artist]]:
        grouped: dict[Genre, list[Artist]] = {}
        for genre in Genre:
            members = sorted(
                self._artists.find(lambda a: a.genre == genre),
                key=lambda a: a.name.casefold(),
            )
            if members:
                grouped[genre] = members
        return grouped

    # ------------------------------------------------------------------
    # Albums
    # ------------------------------------------------------------------

    def add_album(self, album: Album) -> Album:
        """Validate and store a new album for an existing artist.

        Raises:
            ValidationError: The album data is invalid or the artist does
                not exist.
            DuplicateError: The artist already has an album with this title.
        """
        _require(album, "Album")
        self._validate(album.validation_errors(), "AddAlbum", "Album")
        self._require_artist(album.artist_id, "AddAlbum")

        duplicate = self._albums.find(
            lambda a: a.artist_id == album.artist_id
            and a.title.casefold() == album.title.casefold()
        )
        if duplicate:
            self._warning(
                "AddAlbum",
                "Album",
                f"Duplicate album '{album.title}' for artist ID {album.artist_id}",
            )
            msg = f"Album '{album.title}' already exists for this artist"
            raise DuplicateError(msg)

        added = self._albums.add(album)
        self._crud(
            "Create",
            "Album",
            added.id,
            f"Added album: {added.title} for artist ID {added.artist_id}",
        )
        return added

    def update_album(self, album: Album) -> bool:
        """Replace an existing album. Returns False if the ID is unknown."""
        _require(album, "Album")
        self._validate(album.validation_errors(), "UpdateAlbum", "Album")

        if self._albums.get_by_id(album.id) is None:
            self._warning("UpdateAlbum", "Album", f"Album with ID {album.id} not found")
            return False
        self._require_artist(album.artist_id, "UpdateAlbum")

        duplicate = self._albums.find(
            lambda a: a.id != album.id
            and a.artist_id == album.artist_id
            and a.title.casefold() == album.title.casefold()
        )
        if duplicate:
            self._warning(
                "UpdateAlbum",
                "Album",
                f"Duplicate album '{album.title}' for artist ID {album.artist_id}",
                album.id,
            )
            msg = f"Album '{album.title}' already exists for this artist"
            raise DuplicateError(msg)

        updated = self._albums.update(album)
        if updated:
            self._crud("Update", "Album", album.id, f"Updated album: {album.title}")
        return updated

    def rate_album(self, album_id: int, rating: int) -> bool:
        """Set an album's rating. Out-of-range ratings leave it unchanged."""
        album = self._albums.get_by_id(album_id)
        if album is None:
            return False

        previous = album.rating
        album.update_rating(rating)
        if album.rating == previous:
            return True
        return self.update_album(album)

    def delete_album(self, album_id: int) -> bool:
        """Delete an album and its tracks."""
        album = self._albums.get_by_id(album_id)
        if album is None:
            self._warning("DeleteAlbum", "Album", f"Album with ID {album_id} not found")
            return False

        track_ids = [t.id for t in self._tracks.find(lambda t: t.album_id == album_id)]
        self._apply_cascade(track_ids, [], lambda: self._albums.delete(album_id))

        self._crud(
            "Delete",
            "Album",
            album_id,
            f"Deleted album '{album.title}' and {len(track_ids)} tracks",
        )
        return True

    def get_album(self, album_id: int) -> Album | None:
        return self._albums.get_by_id(album_id)

    def get_all_albums(self) -> list[Album]:
        return self._albums.get_all()

    def search_albums(
        self,
        term: str | None = None,
        artist_id: int | None = None,
        year: int | None = None,
        genre: Genre | None = None,
    ) -> list[Album]:
        """Filter albums; every supplied criterion must match. Sorted by title."""
        filters: list[Callable[[Album], bool]] = []

        if term and term.strip():
            needle = term.strip().casefold()
            filters.append(lambda a: needle in a.title.casefold())
        if artist_id is not None and artist_id > 0:
            filters.append(lambda a: a.artist_id == artist_id)
        if year is not None:
            filters.append(lambda a: a.release_year == year)
        if genre is not None:
            filters.append(lambda a: a.genre == genre)

        albums = self._albums.find(lambda a: all(f(a) for f in filters))
        return sorted(albums, key=lambda a: a.title.casefold())

    def get_albums_with_artists(self) -> list[AlbumWithArtist]:
        """Join every album with its artist, by artist name then year."""
        artists = {artist.id: artist for artist in self._artists.get_all()}
        rows = [
            AlbumWithArtist(album=album, artist=artists[album.artist_id])
            for album in self._albums.get_all()
            if album.artist_id in artists
        ]
        return sorted(
            rows,
            key=lambda row: (row.artist.name.casefold(), row.album.release_year),
        )

    def get_albums_by_artist(self, artist_id: int) -> list[AlbumWithArtist]:
        artist = self._artists.get_by_id(artist_id)
        if artist is None:
            return []

        albums = self._albums.find(lambda a: a.artist_id == artist_id)
        albums.sort(key=lambda a: (a.release_year, a.title.casefold()))
        return [AlbumWithArtist(album=album, artist=artist) for album in albums]

    # ------------------------------------------------------------------
    # Tracks
    # ------------------------------------------------------------------

    def add_track(self, track: Track) -> Track:
        """Store a new track on an existing album.

        Raises:
            ValidationError: Blank title, missing album ID, or the album does
                not exist.
        """
        _require(track, "Track")
        self._validate(track.validation_errors(), "AddTrack", "Song")
        self._require_album(track.album_id, "AddTrack")

        added = self._tracks.add(track)
        self._crud(
            "Create",
            "Song",
            added.id,
            f"Added song: {added.title} to album ID {added.album_id}",
        )
        return added

    def update_track(self, track: Track) -> bool:
        """Replace an existing track. Returns False if the ID is unknown."""
        _require(track, "Track")
        self._validate(track.validation_errors(), "UpdateTrack", "Song")

        if self._tracks.get_by_id(track.id) is None:
            self._warning("UpdateTrack", "Song", f"Song with ID {track.id} not found")
            return False
        self._require_album(track.album_id, "UpdateTrack")

        updated = self._tracks.update(track)
        if updated:
            self._crud("Update", "Song", track.id, f"Updated song: {track.title}")
        return updated

    def delete_track(self, track_id: int) -> bool:
        deleted = self._tracks.delete(track_id)
        if deleted:
            self._crud("Delete", "Song", track_id)
        else:
            self._warning("DeleteTrack", "Song", f"Song with ID {track_id} not found")
        return deleted

    def get_track(self, track_id: int) -> Track | None:
        return self._tracks.get_by_id(track_id)

    def get_all_tracks(self) -> list[Track]:
        return self._tracks.get_all()

    def get_tracks_by_album(self, album_id: int) -> list[Track]:
        tracks = self._tracks.find(lambda t: t.album_id == album_id)
        return sorted(tracks, key=lambda t: (t.track_number, t.title.casefold()))

    def search_tracks(self, term: str | None) -> list[Track]:
        return self._tracks.search(lambda t: t.title, term)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_statistics(self, top_n: int = DEFAULT_TOP_N) -> LibraryStatistics:
        return compute_statistics(
            self._artists.get_all(),
            self._albums.get_all(),
            self._tracks.get_all(),
            top_n=top_n,
        )

    def get_album_recommendation(self) -> AlbumRecommendation:
        return recommend_album(self._artists.get_all(), self._albums.get_all())

    def export_statistics(
        self,
        name: str = "statistics",
        subdirectory: str = EXPORTS_SUBDIRECTORY,
    ) -> str:
        """Write a statistics report to `<data>/<subdirectory>/<name>.json`.

        Unlike the on-screen preview, the report holds every rated album.
        Returns the path of the written file.
        """
        stats = self.get_statistics()
        recommendation = self.get_album_recommendation()
        report = _statistics_report(
            stats,
            top_rated_albums(self._albums.get_all()),
            recommendation,
        )

        self._json_files.save(name, [report], subdirectory=subdirectory)
        path = self._json_files.file_path(name, subdirectory)
        self._crud("Export", "Statistics", 0, f"Exported library statistics to {path}")
        return str(path)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find_artist_by_name(self, name: str) -> Artist | None:
        wanted = name.strip().casefold()
        matches = self._artists.find(lambda a: a.name.casefold() == wanted)
        return matches[0] if matches else None

    def _require_artist(self, artist_id: int, action: str) -> None:
        if self._artists.get_by_id(artist_id) is None:
            msg = f"Artist with ID {artist_id} does not exist"
            self._warning(action, "Album", msg)
            raise ValidationError(msg)

    def _require_album(self, album_id: int, action: str) -> None:
        if self._albums.get_by_id(album_id) is None:
            msg = f"Album with ID {album_id} does not exist"
            self._warning(action, "Song", msg)
            raise ValidationError(msg)

    def _validate(self, errors: list[str], action: str, entity_type: str) -> None:
        if errors:
            self._warning(action, entity_type, "; ".join(errors))
            msg = f"{entity_type} data is invalid: {'; '.join(errors)}"
            raise ValidationError(msg, errors)

    def _apply_cascade(
        self,
        track_ids: list[int],
        album_ids: list[int],
        delete_parent: Callable[[], bool],
    ) -> None:
        # All targets are checked before anything is removed, so a cascade
        # either runs completely or not at all.
        missing = [i for i in track_ids if self._tracks.get_by_id(i) is None]
        missing += [i for i in album_ids if self._albums.get_by_id(i) is None]
        if missing:
            msg = f"Cascade targets disappeared before delete: {missing}"
            raise RuntimeError(msg)

        for track_id in track_ids:
            self._tracks.delete(track_id)
        for album_id in album_ids:
            self._albums.delete(album_id)
        delete_parent()

    def _info(self, action: str, entity_type: str, message: str) -> None:
        if self._log is not None:
            self._log.log_information(SOURCE, action, entity_type, message)
        else:
            logger.info("%s: %s", action, message)

    def _warning(
        self,
        action: str,
        entity_type: str,
        message: str,
        entity_id: int | None = None,
    ) -> None:
        if self._log is not None:
            self._log.log_warning(SOURCE, action, entity_type, message, entity_id)
        else:
            logger.warning("%s: %s", action, message)

    def _error(
        self,
        action: str,
        entity_type: str,
        message: str,
        exc: BaseException,
    ) -> None:
        if self._log is not None:
            self._log.log_error(SOURCE, action, entity_type, message, exc)
        else:
            logger.error("%s: %s (%s)", action, message, exc)

    def _crud(
        self,
        action: str,
        entity_type: str,
        entity_id: int,
        details: str | None = None,
    ) -> None:
        if self._log is not None:
            self._log.log_crud(SOURCE, action, entity_type, entity_id, details)
        else:
            logger.info("%s %s %s: %s", action, entity_type, entity_id, details)


def _require(entity: object, kind: str) -> None:
    if entity is None:
        msg = f"{kind} must not be None."
        raise ValidationError(msg)


def _statistics_report(
    stats: LibraryStatistics,
    rated_albums: list[Album],
    recommendation: AlbumRecommendation,
) -> dict[str, Any]:
    report: dict[str, Any] = {
        "generated_at": datetime.now().isoformat(),
        "total_artists": stats.total_artists,
        "total_albums": stats.total_albums,
        "total_tracks": stats.total_tracks,
        "average_album_rating": stats.average_album_rating,
        "tracks_per_album": stats.tracks_per_album,
        "albums_per_genre": {
            genre.value: count for genre, count in stats.albums_per_genre.items()
        },
        "total_play_time": stats.total_play_time,
        "average_track_length": stats.average_track_length,
        "top_rated_albums": [album_to_raw(album) for album in rated_albums],
        "recommendation": {"reason": recommendation.reason},
    }
    if stats.most_common_genre is not None:
        report["most_common_genre"] = stats.most_common_genre.value
    if recommendation.album is not None:
        report["recommendation"]["album"] = album_to_raw(recommendation.album)
        report["recommendation"]["artist_name"] = recommendation.artist_name
    return report
