# music_catalog/analysis/statistics.py

"""Read-only aggregates over the catalog: counts, genres, ratings, play time."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from music_catalog.domain.models import Album, Artist, Genre, Track

DEFAULT_TOP_N = 5
NO_RECOMMENDATION = "No recommendation available"


@dataclass(slots=True)
class LibraryStatistics:
    """Snapshot of derived catalog metrics."""

    total_artists: int
    total_albums: int
    total_tracks: int
    average_album_rating: float
    tracks_per_album: float
    albums_per_genre: dict[Genre, int] = field(default_factory=dict)
    most_common_genre: Genre | None = None
    top_rated_albums: list[Album] = field(default_factory=list)
    total_play_time: int = 0
    average_track_length: float = 0.0


@dataclass(slots=True)
class AlbumRecommendation:
    """Outcome of the recommendation heuristic."""

    album: Album | None = None
    artist_name: str | None = None
    reason: str = NO_RECOMMENDATION

    @property
    def has_recommendation(self) -> bool:
        return self.album is not None


def average_album_rating(albums: Iterable[Album]) -> float:
    """Mean rating over rated albums (rating > 0), or 0.0 if none is rated."""
    ratings = [album.rating for album in albums if album.rating > 0]
    if not ratings:
        return 0.0
    return round(sum(ratings) / len(ratings), 2)


def get_genre_counts(albums: Iterable[Album]) -> Counter[Genre]:
    """Count albums per genre, keyed in first-encountered order."""
    return Counter(album.genre for album in albums)


def most_common_genre(albums: Iterable[Album]) -> tuple[Genre, int] | None:
    """Return (genre, count) of the most frequent genre, or None.

    Ties go to the genre encountered first; callers should not depend on it.
    """
    counts = get_genre_counts(albums)
    if not counts:
        return None
    return counts.most_common(1)[0]


def top_rated_albums(
    albums: Iterable[Album],
    limit: int | None = None,
) -> list[Album]:
    """Rated albums sorted by rating (desc), then title (asc).

    `limit=None` returns the full list.
    """
    rated = sorted(
        (album for album in albums if album.rating > 0),
        key=lambda album: (-album.rating, album.title.casefold()),
    )
    if limit is None:
        return rated
    return rated[:limit]


def total_play_time(tracks: Iterable[Track]) -> int:
    return sum(track.duration for track in tracks)


def average_track_length(tracks: Sequence[Track]) -> float:
    if not tracks:
        return 0.0
    return total_play_time(tracks) / len(tracks)


def compute_statistics(
    artists: Sequence[Artist],
    albums: Sequence[Album],
    tracks: Sequence[Track],
    top_n: int = DEFAULT_TOP_N,
) -> LibraryStatistics:
    """Build a LibraryStatistics snapshot from the given collections."""
    genre_counts = get_genre_counts(albums)
    common = most_common_genre(albums)
    tracks_per_album = round(len(tracks) / len(albums), 2) if albums else 0.0

    return LibraryStatistics(
        total_artists=len(artists),
        total_albums=len(albums),
        total_tracks=len(tracks),
        average_album_rating=average_album_rating(albums),
        tracks_per_album=tracks_per_album,
        albums_per_genre=dict(genre_counts),
        most_common_genre=common[0] if common else None,
        top_rated_albums=top_rated_albums(albums, limit=top_n),
        total_play_time=total_play_time(tracks),
        average_track_length=average_track_length(tracks),
    )


def recommend_album(
    artists: Sequence[Artist],
    albums: Sequence[Album],
) -> AlbumRecommendation:
    """Suggest an album based on the genre the user rates most.

    Unrated albums of the favourite genre come first (newest release wins).
    If there are none, the best-rated album of that genre is suggested for a
    replay.
    """
    rated = [album for album in albums if album.rating > 0]
    favourite = most_common_genre(rated)
    if favourite is None:
        return AlbumRecommendation()

    genre, rated_count = favourite
    artist_names = {artist.id: artist.name for artist in artists}

    candidates = [a for a in albums if a.rating == 0 and a.genre == genre]
    if candidates:
        album = sorted(
            candidates,
            key=lambda a: (-a.release_year, a.title.casefold()),
        )[0]
        reason = (
            f"You have rated {rated_count} {genre} album(s) and haven't "
            f"rated this {genre} album yet."
        )
    else:
        album = top_rated_albums(a for a in rated if a.genre == genre)[0]
        reason = f"Your top-rated {genre} album. Worth another listen."

    return AlbumRecommendation(
        album=album,
        artist_name=artist_names.get(album.artist_id, "Unknown"),
        reason=reason,
    )


def format_duration(seconds: int | float) -> str:
    """Render seconds as H:MM:SS, or M:SS below one hour."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
