# music_catalog/domain/models.py

"""Core domain models for the music catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

MIN_RELEASE_YEAR = 1900
MIN_RATING = 1
MAX_RATING = 5


class Genre(str, Enum):
    """Album and artist genres. Persisted by name."""

    ROCK = "Rock"
    POP = "Pop"
    JAZZ = "Jazz"
    CLASSICAL = "Classical"
    HIPHOP = "HipHop"
    ELECTRONIC = "Electronic"
    COUNTRY = "Country"
    RNB = "RnB"
    METAL = "Metal"
    INDIE = "Indie"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str | Genre) -> Genre:
        """Look up a genre by its name, ignoring case."""
        if isinstance(value, Genre):
            return value
        wanted = str(value).strip().lower()
        for genre in cls:
            if wanted in (genre.value.lower(), genre.name.lower()):
                return genre
        msg = f"Unknown genre: {value!r}"
        raise ValueError(msg)

    def __str__(self) -> str:
        return self.value


def max_release_year() -> int:
    """Latest accepted release year (announced albums are allowed)."""
    return date.today().year + 1


@dataclass(slots=True)
class Artist:
    """A performing artist or band."""

    name: str
    country: str = ""
    genre: Genre = Genre.OTHER
    id: int = 0

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip()
        self.country = (self.country or "").strip()
        self.genre = Genre.parse(self.genre)

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        if not self.name:
            errors.append("Artist name cannot be empty.")
        if not self.country:
            errors.append("Artist country cannot be empty.")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def __str__(self) -> str:
        return f"{self.name} ({self.country}) - {self.genre}"


@dataclass(slots=True)
class Track:
    """A single track on an album.

    Duration is stored in seconds so it can be summed directly.
    """

    title: str
    album_id: int = 0
    duration: int = 0
    track_number: int = 1
    id: int = 0

    def __post_init__(self) -> None:
        self.title = (self.title or "").strip()
        self.duration = max(0, int(self.duration))
        self.track_number = max(1, int(self.track_number))

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        if not self.title:
            errors.append("Track title cannot be empty.")
        if self.album_id <= 0:
            errors.append("Track must reference a valid album ID.")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def __str__(self) -> str:
        minutes, seconds = divmod(self.duration, 60)
        return f"{self.track_number}. {self.title} ({minutes}:{seconds:02d})"


@dataclass(slots=True)
class Album:
    """A music album.

    The album refers to its artist by ID only. Rating 0 means "not rated";
    use update_rating() to change it so out-of-range values are ignored.
    """

    title: str
    artist_id: int = 0
    release_year: int = 0
    genre: Genre = Genre.OTHER
    rating: int = 0
    tracks: list[Track] = field(default_factory=list)
    id: int = 0

    def __post_init__(self) -> None:
        self.title = (self.title or "").strip()
        self.genre = Genre.parse(self.genre)

    def update_rating(self, rating: int) -> None:
        """Set the rating if it lies within 1-5, otherwise do nothing."""
        if rating < MIN_RATING or rating > MAX_RATING:
            return
        self.rating = rating

    def total_duration(self) -> int:
        """Sum of the durations (seconds) of the album's own tracks."""
        return sum(track.duration for track in self.tracks)

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        if not self.title:
            errors.append("Album title cannot be empty.")
        if self.artist_id <= 0:
            errors.append("Album must reference a valid artist ID.")
        latest = max_release_year()
        if not MIN_RELEASE_YEAR <= self.release_year <= latest:
            errors.append(
                f"Release year must be between {MIN_RELEASE_YEAR} and {latest}."
            )
        if self.rating != 0 and not MIN_RATING <= self.rating <= MAX_RATING:
            errors.append("Rating must be 0 (unset) or between 1 and 5.")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def __str__(self) -> str:
        rating_text = f"{self.rating}/5" if self.rating > 0 else "not rated"
        return f"{self.title} ({self.release_year}) - {self.genre} - {rating_text}"


@dataclass(slots=True)
class AlbumWithArtist:
    """An album joined with its resolved artist."""

    album: Album
    artist: Artist

    def __str__(self) -> str:
        return f"{self.album.title} by {self.artist.name} ({self.album.release_year})"


class LogLevel(str, Enum):
    """Severity of an activity log entry."""

    INFORMATION = "Information"
    WARNING = "Warning"
    ERROR = "Error"
    CRITICAL = "Critical"

    @classmethod
    def parse(cls, value: str | LogLevel) -> LogLevel:
        if isinstance(value, LogLevel):
            return value
        wanted = str(value).strip().lower()
        for level in cls:
            if wanted in (level.value.lower(), level.name.lower()):
                return level
        msg = f"Unknown log level: {value!r}"
        raise ValueError(msg)

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class LogEntry:
    """One record in the application's activity log."""

    level: LogLevel
    source: str
    action: str
    entity_type: str
    message: str
    entity_id: int | None = None
    additional_data: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    id: int = 0

    def __str__(self) -> str:
        stamp = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        return f"{stamp} [{self.level}] {self.source}.{self.action}: {self.message}"
