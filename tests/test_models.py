"""Smoke tests for core data models."""

from __future__ import annotations

from datetime import date

import pytest

from music_catalog.domain.models import Album, Artist, Genre, Track


def test_artist_creation_trims_text() -> None:
    artist = Artist(name="  Kent ", country=" Sweden", genre=Genre.ROCK)
    assert artist.name == "Kent"
    assert artist.country == "Sweden"
    assert artist.id == 0
    assert artist.is_valid()


def test_artist_requires_name_and_country() -> None:
    artist = Artist(name="   ", country="")
    assert artist.validation_errors() == [
        "Artist name cannot be empty.",
        "Artist country cannot be empty.",
    ]


def test_genre_parse_ignores_case() -> None:
    assert Genre.parse("rock") is Genre.ROCK
    assert Genre.parse("HipHop") is Genre.HIPHOP
    assert Genre.parse("RNB") is Genre.RNB
    assert Genre.parse(Genre.JAZZ) is Genre.JAZZ
    assert str(Genre.ELECTRONIC) == "Electronic"


def test_genre_parse_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown genre"):
        Genre.parse("polka")


def test_artist_accepts_genre_name() -> None:
    artist = Artist(name="Meshuggah", country="Sweden", genre="metal")
    assert artist.genre is Genre.METAL


def test_track_clamps_duration_and_number() -> None:
    track = Track(title=" Intro ", album_id=1, duration=-20, track_number=0)
    assert track.title == "Intro"
    assert track.duration == 0
    assert track.track_number == 1


def test_track_str_formats_duration() -> None:
    track = Track(title="Song A", album_id=1, duration=222, track_number=3)
    assert str(track) == "3. Song A (3:42)"


def test_album_update_rating_ignores_out_of_range() -> None:
    album = Album(title="Arrival", artist_id=1, release_year=1976)
    album.update_rating(3)
    assert album.rating == 3

    album.update_rating(9)
    assert album.rating == 3

    album.update_rating(0)
    assert album.rating == 3


def test_album_release_year_bounds() -> None:
    next_year = date.today().year + 1

    assert Album(title="A", artist_id=1, release_year=1900).is_valid()
    assert Album(title="A", artist_id=1, release_year=next_year).is_valid()
    assert not Album(title="A", artist_id=1, release_year=1899).is_valid()
    assert not Album(title="A", artist_id=1, release_year=next_year + 1).is_valid()


def test_album_requires_title_and_artist() -> None:
    album = Album(title=" ", artist_id=0, release_year=2000)
    errors = album.validation_errors()
    assert "Album title cannot be empty." in errors
    assert "Album must reference a valid artist ID." in errors


def test_album_rejects_rating_outside_range() -> None:
    album = Album(title="A", artist_id=1, release_year=2000, rating=7)
    assert not album.is_valid()


def test_album_total_duration_sums_tracks() -> None:
    album = Album(
        title="Kid A",
        artist_id=1,
        release_year=2000,
        tracks=[
            Track(title="Everything in Its Right Place", duration=251),
            Track(title="Kid A", duration=284, track_number=2),
        ],
    )
    assert album.total_duration() == 535
    assert Album(title="Empty", artist_id=1, release_year=2000).total_duration() == 0
