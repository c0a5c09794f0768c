# music_catalog/io/catalog_json.py

"""Conversion between catalog entities and JSON-serialisable dicts.

Writers emit snake_case keys and leave out None values. Readers match keys
ignoring case and underscores ("ArtistId" == "artist_id"), ignore unknown
keys and fall back to defaults for missing ones.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from music_catalog.domain.models import (
    Album,
    AlbumWithArtist,
    Artist,
    Genre,
    LogEntry,
    LogLevel,
    Track,
)


def _normalise_keys(raw: dict[str, Any]) -> dict[str, Any]:
    return {key.replace("_", "").lower(): value for key, value in raw.items()}


def _drop_none(raw: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in raw.items() if value is not None}


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def artist_from_raw(raw: dict[str, Any]) -> Artist:
    """Convert a raw JSON dict into an Artist instance."""
    data = _normalise_keys(raw)
    return Artist(
        id=int(data.get("id") or 0),
        name=data["name"],
        country=data.get("country") or "",
        genre=Genre.parse(data.get("genre") or Genre.OTHER),
    )


def artist_to_raw(artist: Artist) -> dict[str, Any]:
    """Convert an Artist instance into a JSON-serialisable dict."""
    return {
        "id": artist.id,
        "name": artist.name,
        "country": artist.country,
        "genre": artist.genre.value,
    }


def track_from_raw(raw: dict[str, Any]) -> Track:
    data = _normalise_keys(raw)
    return Track(
        id=int(data.get("id") or 0),
        title=data["title"],
        album_id=int(data.get("albumid") or 0),
        duration=int(data.get("duration") or 0),
        track_number=int(data.get("tracknumber") or 1),
    )


def track_to_raw(track: Track) -> dict[str, Any]:
    return {
        "id": track.id,
        "title": track.title,
        "album_id": track.album_id,
        "duration": track.duration,
        "track_number": track.track_number,
    }


def album_from_raw(raw: dict[str, Any]) -> Album:
    """Convert a raw JSON dict into an Album instance."""
    data = _normalise_keys(raw)
    return Album(
        id=int(data.get("id") or 0),
        title=data["title"],
        artist_id=int(data.get("artistid") or 0),
        release_year=int(data.get("releaseyear") or 0),
        genre=Genre.parse(data.get("genre") or Genre.OTHER),
        rating=int(data.get("rating") or 0),
        tracks=[track_from_raw(t) for t in data.get("tracks") or []],
    )


def album_to_raw(album: Album) -> dict[str, Any]:
    """Convert an Album instance into a JSON-serialisable dict."""
    raw: dict[str, Any] = {
        "id": album.id,
        "title": album.title,
        "artist_id": album.artist_id,
        "release_year": album.release_year,
        "genre": album.genre.value,
        "rating": album.rating,
    }
    if album.tracks:
        raw["tracks"] = [track_to_raw(t) for t in album.tracks]
    return raw


def album_with_artist_to_raw(row: AlbumWithArtist) -> dict[str, Any]:
    raw = album_to_raw(row.album)
    raw["artist_name"] = row.artist.name
    return raw


def log_entry_from_raw(raw: dict[str, Any]) -> LogEntry:
    data = _normalise_keys(raw)
    timestamp = data.get("timestamp")
    return LogEntry(
        id=int(data.get("id") or 0),
        timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(),
        level=LogLevel.parse(data.get("level") or LogLevel.INFORMATION),
        source=data.get("source") or "",
        action=data.get("action") or "",
        entity_type=data.get("entitytype") or "",
        entity_id=_optional_int(data.get("entityid")),
        message=data.get("message") or "",
        additional_data=data.get("additionaldata"),
    )


def log_entry_to_raw(entry: LogEntry) -> dict[str, Any]:
    return _drop_none(
        {
            "id": entry.id,
            "timestamp": entry.timestamp.isoformat(),
            "level": entry.level.value,
            "source": entry.source,
            "action": entry.action,
            "entity_type": entry.entity_type,
            "entity_id": entry.entity_id,
            "message": entry.message,
            "additional_data": entry.additional_data,
        }
    )
