"""Tests for entity <-> raw dict conversion."""

from __future__ import annotations

from datetime import datetime

from music_catalog.domain.models import Album, Artist, Genre, LogEntry, LogLevel, Track
from music_catalog.io.catalog_json import (
    album_from_raw,
    album_to_raw,
    artist_from_raw,
    artist_to_raw,
    log_entry_from_raw,
    log_entry_to_raw,
    track_from_raw,
)


def test_artist_to_raw_encodes_genre_by_name() -> None:
    artist = Artist(name="Kent", country="Sweden", genre=Genre.ROCK, id=1)
    assert artist_to_raw(artist) == {
        "id": 1,
        "name": "Kent",
        "country": "Sweden",
        "genre": "Rock",
    }


def test_from_raw_matches_keys_case_insensitively() -> None:
    album = album_from_raw(
        {
            "Id": 4,
            "Title": "Arrival",
            "ArtistId": 2,
            "ReleaseYear": 1976,
            "Genre": "pop",
            "Rating": 4,
            "Label": "Polar",
        }
    )
    assert album == Album(
        id=4,
        title="Arrival",
        artist_id=2,
        release_year=1976,
        genre=Genre.POP,
        rating=4,
    )


def test_from_raw_uses_defaults_for_missing_fields() -> None:
    artist = artist_from_raw({"name": "Robyn"})
    assert artist.id == 0
    assert artist.country == ""
    assert artist.genre is Genre.OTHER

    track = track_from_raw({"title": "Dancing On My Own"})
    assert track.album_id == 0
    assert track.duration == 0
    assert track.track_number == 1


def test_album_to_raw_omits_empty_tracks() -> None:
    album = Album(title="Isola", artist_id=1, release_year=1997, id=1)
    assert "tracks" not in album_to_raw(album)

    album.tracks.append(Track(title="Om du var här", album_id=1, duration=260))
    raw = album_to_raw(album)
    assert raw["tracks"][0]["title"] == "Om du var här"
    assert album_from_raw(raw) == album


def test_log_entry_omits_absent_optional_fields() -> None:
    entry = LogEntry(
        id=1,
        level=LogLevel.WARNING,
        source="LibraryService",
        action="AddArtist",
        entity_type="Artist",
        message="duplicate",
        timestamp=datetime(2024, 5, 1, 12, 30),
    )
    raw = log_entry_to_raw(entry)
    assert "entity_id" not in raw
    assert "additional_data" not in raw
    assert raw["level"] == "Warning"
    assert raw["timestamp"] == "2024-05-01T12:30:00"
    assert log_entry_from_raw(raw) == entry
