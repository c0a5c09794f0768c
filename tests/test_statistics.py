"""Tests for catalog statistics and the recommendation heuristic."""

from __future__ import annotations

import pytest

from music_catalog.analysis.statistics import (
    NO_RECOMMENDATION,
    average_album_rating,
    average_track_length,
    compute_statistics,
    format_duration,
    get_genre_counts,
    most_common_genre,
    recommend_album,
    top_rated_albums,
    total_play_time,
)
from music_catalog.domain.models import Album, Artist, Genre, Track


def _album(
    album_id: int,
    title: str,
    genre: Genre,
    rating: int = 0,
    year: int = 2000,
    artist_id: int = 1,
) -> Album:
    return Album(
        id=album_id,
        title=title,
        artist_id=artist_id,
        release_year=year,
        genre=genre,
        rating=rating,
    )


@pytest.fixture
def albums() -> list[Album]:
    return [
        _album(1, "Nevermind", Genre.ROCK, 5),
        _album(2, "Thriller", Genre.POP, 5),
        _album(3, "Kind of Blue", Genre.JAZZ, 3),
        _album(4, "Arrival", Genre.POP, 0),
        _album(5, "Paranoid", Genre.ROCK, 4),
    ]


def test_average_rating_ignores_unrated(albums: list[Album]) -> None:
    assert average_album_rating(albums) == 4.25


def test_average_rating_is_zero_without_ratings() -> None:
    assert average_album_rating([_album(1, "A", Genre.POP)]) == 0.0
    assert average_album_rating([]) == 0.0


def test_genre_histogram(albums: list[Album]) -> None:
    assert get_genre_counts(albums) == {Genre.ROCK: 2, Genre.POP: 2, Genre.JAZZ: 1}


def test_most_common_genre_accepts_either_tied_genre(albums: list[Album]) -> None:
    result = most_common_genre(albums)
    assert result is not None
    genre, count = result
    assert genre in (Genre.ROCK, Genre.POP)
    assert count == 2


def test_most_common_genre_of_empty_collection() -> None:
    assert most_common_genre([]) is None


def test_top_rated_orders_by_rating_then_title(albums: list[Album]) -> None:
    assert [a.title for a in top_rated_albums(albums)] == [
        "Nevermind",
        "Thriller",
        "Paranoid",
        "Kind of Blue",
    ]
    assert [a.title for a in top_rated_albums(albums, limit=2)] == [
        "Nevermind",
        "Thriller",
    ]


def test_play_time_and_average_length() -> None:
    tracks = [
        Track(title="A", album_id=1, duration=200),
        Track(title="B", album_id=1, duration=100),
    ]
    assert total_play_time(tracks) == 300
    assert average_track_length(tracks) == 150
    assert total_play_time([]) == 0
    assert average_track_length([]) == 0


def test_compute_statistics(albums: list[Album]) -> None:
    artists = [Artist(name="Various", country="US", id=1)]
    tracks = [
        Track(title="Smells Like Teen Spirit", album_id=1, duration=301),
        Track(title="In Bloom", album_id=1, duration=254, track_number=2),
    ]

    stats = compute_statistics(artists, albums, tracks, top_n=3)

    assert stats.total_artists == 1
    assert stats.total_albums == 5
    assert stats.total_tracks == 2
    assert stats.average_album_rating == 4.25
    assert stats.tracks_per_album == 0.4
    assert stats.albums_per_genre[Genre.JAZZ] == 1
    assert stats.most_common_genre in (Genre.ROCK, Genre.POP)
    assert len(stats.top_rated_albums) == 3
    assert stats.total_play_time == 555
    assert stats.average_track_length == 277.5


def test_compute_statistics_on_empty_library() -> None:
    stats = compute_statistics([], [], [])
    assert stats.total_albums == 0
    assert stats.tracks_per_album == 0.0
    assert stats.most_common_genre is None
    assert stats.top_rated_albums == []


def test_no_recommendation_without_ratings() -> None:
    recommendation = recommend_album([], [_album(1, "A", Genre.POP)])
    assert recommendation.has_recommendation is False
    assert recommendation.reason == NO_RECOMMENDATION


def test_recommends_newest_unrated_album_of_favourite_genre() -> None:
    artists = [Artist(name="Kent", country="Sweden", id=1)]
    albums = [
        _album(1, "Isola", Genre.ROCK, 5, year=1997),
        _album(2, "Hagnesta Hill", Genre.ROCK, 4, year=1999),
        _album(3, "Vapen & ammunition", Genre.ROCK, 0, year=2002),
        _album(4, "Du & jag döden", Genre.ROCK, 0, year=2005),
        _album(5, "Arrival", Genre.POP, 0, year=1976),
    ]

    recommendation = recommend_album(artists, albums)

    assert recommendation.has_recommendation
    assert recommendation.album is not None
    assert recommendation.album.title == "Du & jag döden"
    assert recommendation.artist_name == "Kent"
    assert "Rock" in recommendation.reason


def test_recommends_best_rated_album_when_genre_fully_rated() -> None:
    albums = [
        _album(1, "Blue Train", Genre.JAZZ, 4),
        _album(2, "Kind of Blue", Genre.JAZZ, 5),
        _album(3, "Thriller", Genre.POP, 0),
    ]

    recommendation = recommend_album([], albums)

    assert recommendation.album is not None
    assert recommendation.album.title == "Kind of Blue"
    assert recommendation.artist_name == "Unknown"


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0:00"), (65, "1:05"), (3600, "1:00:00"), (3725, "1:02:05"), (277.5, "4:37")],
)
def test_format_duration(seconds: float, expected: str) -> None:
    assert format_duration(seconds) == expected
