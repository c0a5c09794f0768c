# music_catalog/cli.py

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from music_catalog.analysis.statistics import format_duration
from music_catalog.bootstrap import (
    InitializationResult,
    initialize_application,
    shutdown_application,
)
from music_catalog.config import get_data_dir, sample_data_enabled
from music_catalog.domain.errors import (
    DuplicateError,
    PersistenceError,
    ValidationError,
)
from music_catalog.domain.models import Album, Artist, Genre, Track
from music_catalog.services.library import LibraryService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USER_ERROR = 1
EXIT_PERSISTENCE_ERROR = 2

Handler = Callable[[LibraryService, argparse.Namespace], int]


def main(argv: list[str] | None = None) -> int:
    """Entry point for the music-catalog CLI."""
    args = _build_arg_parser().parse_args(argv)

    _configure_logging(verbose=args.verbose)

    data_dir = Path(args.data_dir) if args.data_dir else get_data_dir()
    seed = sample_data_enabled() and not args.no_sample_data

    result = initialize_application(data_dir, seed_sample_data=seed)
    if not result.success or result.library is None:
        _print_fatal(result.exception, "initialization")
        return EXIT_PERSISTENCE_ERROR

    handler: Handler = args.handler
    try:
        exit_code = handler(result.library, args)
    except (ValidationError, DuplicateError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = EXIT_USER_ERROR
    except PersistenceError as exc:
        _print_fatal(exc, args.command)
        exit_code = EXIT_PERSISTENCE_ERROR
    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Saving and exiting.")
        exit_code = EXIT_USER_ERROR

    return _shutdown(result, exit_code)


def _shutdown(result: InitializationResult, exit_code: int) -> int:
    try:
        shutdown_application(result)
    except PersistenceError as exc:
        _print_fatal(exc, "shutdown")
        return EXIT_PERSISTENCE_ERROR
    return exit_code


def _print_fatal(exc: BaseException | None, context: str) -> None:
    print(f"FATAL ERROR during {context}", file=sys.stderr)
    if exc is None:
        return
    print(f"  Error type: {type(exc).__name__}", file=sys.stderr)
    print(f"  Message:    {exc}", file=sys.stderr)
    if exc.__cause__ is not None:
        print(f"  Cause:      {exc.__cause__}", file=sys.stderr)
    path = getattr(exc, "path", None)
    if path is not None:
        print(f"  File:       {path}", file=sys.stderr)
    print(
        "Check that the data files are readable and that you have write "
        "permission for the data directory.",
        file=sys.stderr,
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="music-catalog",
        description="Manage a personal catalog of artists, albums and tracks.",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory holding the JSON data files (default: ./data).",
    )
    parser.add_argument(
        "--no-sample-data",
        action="store_true",
        help="Do not seed an empty catalog with sample artists and albums.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Sub-command to run.",
    )
    _add_artist_commands(subparsers)
    _add_album_commands(subparsers)
    _add_track_commands(subparsers)

    stats_parser = subparsers.add_parser("stats", help="Show library statistics.")
    stats_parser.add_argument(
        "--top",
        type=int,
        default=5,
        help="Number of top-rated albums to show (default: %(default)s).",
    )
    stats_parser.add_argument(
        "--export",
        metavar="NAME",
        nargs="?",
        const="statistics",
        default=None,
        help="Also write the report to data/exports/NAME.json.",
    )
    stats_parser.set_defaults(handler=_cmd_stats)

    backup_parser = subparsers.add_parser(
        "backup", help="Copy all datasets to data/backups/<label>/."
    )
    backup_parser.add_argument("--label", default=None, help="Backup folder name.")
    backup_parser.set_defaults(handler=_cmd_backup)

    logs_parser = subparsers.add_parser("logs", help="Show recent activity log.")
    logs_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of entries to show (default: %(default)s).",
    )
    logs_parser.set_defaults(handler=_cmd_logs)

    return parser


def _add_artist_commands(subparsers: argparse._SubParsersAction) -> None:
    artists = subparsers.add_parser("artists", help="Manage artists.")
    actions = artists.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list", help="List or search artists.")
    list_parser.add_argument("--search", default=None, help="Name or country.")
    list_parser.set_defaults(handler=_cmd_artists_list)

    add_parser = actions.add_parser("add", help="Add an artist.")
    add_parser.add_argument("--name", required=True)
    add_parser.add_argument("--country", required=True)
    add_parser.add_argument("--genre", type=_genre_arg, default=Genre.OTHER)
    add_parser.set_defaults(handler=_cmd_artists_add)

    update_parser = actions.add_parser("update", help="Edit an artist.")
    update_parser.add_argument("id", type=int)
    update_parser.add_argument("--name")
    update_parser.add_argument("--country")
    update_parser.add_argument("--genre", type=_genre_arg)
    update_parser.set_defaults(handler=_cmd_artists_update)

    delete_parser = actions.add_parser(
        "delete", help="Delete an artist with all albums and tracks."
    )
    delete_parser.add_argument("id", type=int)
    delete_parser.set_defaults(handler=_cmd_artists_delete)


def _add_album_commands(subparsers: argparse._SubParsersAction) -> None:
    albums = subparsers.add_parser("albums", help="Manage albums.")
    actions = albums.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list", help="List or search albums.")
    list_parser.add_argument("--search", default=None, help="Title substring.")
    list_parser.add_argument("--artist-id", type=int, default=None)
    list_parser.add_argument("--year", type=int, default=None)
    list_parser.add_argument("--genre", type=_genre_arg, default=None)
    list_parser.set_defaults(handler=_cmd_albums_list)

    add_parser = actions.add_parser("add", help="Add an album.")
    add_parser.add_argument("--title", required=True)
    add_parser.add_argument("--artist-id", type=int, required=True)
    add_parser.add_argument("--year", type=int, required=True)
    add_parser.add_argument("--genre", type=_genre_arg, default=Genre.OTHER)
    add_parser.add_argument("--rating", type=int, default=0)
    add_parser.set_defaults(handler=_cmd_albums_add)

    update_parser = actions.add_parser("update", help="Edit an album.")
    update_parser.add_argument("id", type=int)
    update_parser.add_argument("--title")
    update_parser.add_argument("--artist-id", type=int)
    update_parser.add_argument("--year", type=int)
    update_parser.add_argument("--genre", type=_genre_arg)
    update_parser.set_defaults(handler=_cmd_albums_update)

    rate_parser = actions.add_parser("rate", help="Rate an album from 1 to 5.")
    rate_parser.add_argument("id", type=int)
    rate_parser.add_argument("rating", type=int)
    rate_parser.set_defaults(handler=_cmd_albums_rate)

    delete_parser = actions.add_parser(
        "delete", help="Delete an album and its tracks."
    )
    delete_parser.add_argument("id", type=int)
    delete_parser.set_defaults(handler=_cmd_albums_delete)


def _add_track_commands(subparsers: argparse._SubParsersAction) -> None:
    tracks = subparsers.add_parser("tracks", help="Manage tracks.")
    actions = tracks.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list", help="List or search tracks.")
    list_parser.add_argument("--album-id", type=int, default=None)
    list_parser.add_argument("--search", default=None, help="Title substring.")
    list_parser.set_defaults(handler=_cmd_tracks_list)

    add_parser = actions.add_parser("add", help="Add a track to an album.")
    add_parser.add_argument("--title", required=True)
    add_parser.add_argument("--album-id", type=int, required=True)
    add_parser.add_argument(
        "--duration",
        type=_duration_arg,
        default=0,
        help="Seconds or M:SS.",
    )
    add_parser.add_argument("--number", type=int, default=1)
    add_parser.set_defaults(handler=_cmd_tracks_add)

    update_parser = actions.add_parser("update", help="Edit a track.")
    update_parser.add_argument("id", type=int)
    update_parser.add_argument("--title")
    update_parser.add_argument("--album-id", type=int)
    update_parser.add_argument("--duration", type=_duration_arg)
    update_parser.add_argument("--number", type=int)
    update_parser.set_defaults(handler=_cmd_tracks_update)

    delete_parser = actions.add_parser("delete", help="Delete a track.")
    delete_parser.add_argument("id", type=int)
    delete_parser.set_defaults(handler=_cmd_tracks_delete)


def _configure_logging(*, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _genre_arg(value: str) -> Genre:
    try:
        return Genre.parse(value)
    except ValueError:
        choices = ", ".join(g.value for g in Genre)
        msg = f"invalid genre {value!r} (choose from {choices})"
        raise argparse.ArgumentTypeError(msg) from None


def _duration_arg(value: str) -> int:
    try:
        if ":" in value:
            minutes, seconds = value.split(":", 1)
            return int(minutes) * 60 + int(seconds)
        return int(value)
    except ValueError:
        msg = f"invalid duration {value!r} (use seconds or M:SS)"
        raise argparse.ArgumentTypeError(msg) from None


def _changes(args: argparse.Namespace, mapping: dict[str, str]) -> dict[str, object]:
    """Collect the options the user actually passed, renamed to model fields."""
    return {
        field: getattr(args, option)
        for option, field in mapping.items()
        if getattr(args, option) is not None
    }


# ---------------------------------------------------------------------------
# Artists
# ---------------------------------------------------------------------------


def _cmd_artists_list(library: LibraryService, args: argparse.Namespace) -> int:
    artists = library.search_artists(args.search)
    if not artists:
        print("No artists found.")
        return EXIT_OK

    for artist in sorted(artists, key=lambda a: a.name.casefold()):
        print(f"{artist.id:>4}  {artist}")
    return EXIT_OK


def _cmd_artists_add(library: LibraryService, args: argparse.Namespace) -> int:
    artist = library.add_artist(
        Artist(name=args.name, country=args.country, genre=args.genre)
    )
    print(f"Added artist #{artist.id}: {artist}")
    return EXIT_OK


def _cmd_artists_update(library: LibraryService, args: argparse.Namespace) -> int:
    artist = library.get_artist(args.id)
    if artist is None:
        print(f"Artist {args.id} not found.", file=sys.stderr)
        return EXIT_USER_ERROR

    changes = _changes(args, {"name": "name", "country": "country", "genre": "genre"})
    updated = dataclasses.replace(artist, **changes)
    library.update_artist(updated)
    print(f"Updated artist #{updated.id}: {updated}")
    return EXIT_OK


def _cmd_artists_delete(library: LibraryService, args: argparse.Namespace) -> int:
    if not library.delete_artist(args.id):
        print(f"Artist {args.id} not found.", file=sys.stderr)
        return EXIT_USER_ERROR
    print(f"Deleted artist {args.id} with its albums and tracks.")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Albums
# ---------------------------------------------------------------------------


def _cmd_albums_list(library: LibraryService, args: argparse.Namespace) -> int:
    albums = library.search_albums(
        args.search,
        artist_id=args.artist_id,
        year=args.year,
        genre=args.genre,
    )
    if not albums:
        print("No albums found.")
        return EXIT_OK

    names = {artist.id: artist.name for artist in library.get_all_artists()}
    for album in albums:
        artist_name = names.get(album.artist_id, "Unknown")
        print(f"{album.id:>4}  {album} - {artist_name}")
    return EXIT_OK


def _cmd_albums_add(library: LibraryService, args: argparse.Namespace) -> int:
    album = Album(
        title=args.title,
        artist_id=args.artist_id,
        release_year=args.year,
        genre=args.genre,
    )
    album.update_rating(args.rating)
    added = library.add_album(album)
    print(f"Added album #{added.id}: {added}")
    return EXIT_OK


def _cmd_albums_update(library: LibraryService, args: argparse.Namespace) -> int:
    album = library.get_album(args.id)
    if album is None:
        print(f"Album {args.id} not found.", file=sys.stderr)
        return EXIT_USER_ERROR

    changes = _changes(
        args,
        {
            "title": "title",
            "artist_id": "artist_id",
            "year": "release_year",
            "genre": "genre",
        },
    )
    updated = dataclasses.replace(album, **changes)
    library.update_album(updated)
    print(f"Updated album #{updated.id}: {updated}")
    return EXIT_OK


def _cmd_albums_rate(library: LibraryService, args: argparse.Namespace) -> int:
    if not 1 <= args.rating <= 5:
        print("Rating must be between 1 and 5.", file=sys.stderr)
        return EXIT_USER_ERROR
    if not library.rate_album(args.id, args.rating):
        print(f"Album {args.id} not found.", file=sys.stderr)
        return EXIT_USER_ERROR
    print(f"Rated album {args.id}: {args.rating}/5")
    return EXIT_OK


def _cmd_albums_delete(library: LibraryService, args: argparse.Namespace) -> int:
    if not library.delete_album(args.id):
        print(f"Album {args.id} not found.", file=sys.stderr)
        return EXIT_USER_ERROR
    print(f"Deleted album {args.id} with its tracks.")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------


def _cmd_tracks_list(library: LibraryService, args: argparse.Namespace) -> int:
    if args.album_id is not None:
        tracks = library.get_tracks_by_album(args.album_id)
    else:
        tracks = library.search_tracks(args.search)

    if not tracks:
        print("No tracks found.")
        return EXIT_OK

    for track in tracks:
        print(f"{track.id:>4}  {track}  [album {track.album_id}]")
    return EXIT_OK


def _cmd_tracks_add(library: LibraryService, args: argparse.Namespace) -> int:
    track = library.add_track(
        Track(
            title=args.title,
            album_id=args.album_id,
            duration=args.duration,
            track_number=args.number,
        )
    )
    print(f"Added track #{track.id}: {track}")
    return EXIT_OK


def _cmd_tracks_update(library: LibraryService, args: argparse.Namespace) -> int:
    track = library.get_track(args.id)
    if track is None:
        print(f"Track {args.id} not found.", file=sys.stderr)
        return EXIT_USER_ERROR

    changes = _changes(
        args,
        {
            "title": "title",
            "album_id": "album_id",
            "duration": "duration",
            "number": "track_number",
        },
    )
    updated = dataclasses.replace(track, **changes)
    library.update_track(updated)
    print(f"Updated track #{updated.id}: {updated}")
    return EXIT_OK


def _cmd_tracks_delete(library: LibraryService, args: argparse.Namespace) -> int:
    if not library.delete_track(args.id):
        print(f"Track {args.id} not found.", file=sys.stderr)
        return EXIT_USER_ERROR
    print(f"Deleted track {args.id}.")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Statistics, backups, logs
# ---------------------------------------------------------------------------


def _cmd_stats(library: LibraryService, args: argparse.Namespace) -> int:
    stats = library.get_statistics(top_n=args.top)
    names = {artist.id: artist.name for artist in library.get_all_artists()}

    print("Overview")
    print(f"  Artists:          {stats.total_artists}")
    print(f"  Albums:           {stats.total_albums}")
    print(f"  Songs:            {stats.total_tracks}")
    print(f"  Average rating:   {stats.average_album_rating}/5")
    print(f"  Songs per album:  {stats.tracks_per_album}")

    print("\nAlbums per genre")
    if not stats.albums_per_genre:
        print("  No genre data available.")
    genres = sorted(stats.albums_per_genre.items(), key=lambda x: (-x[1], x[0].value))
    for genre, count in genres:
        print(f"  {genre.value:<12} {count:>3}")
    if stats.most_common_genre is not None:
        print(f"  Favourite genre: {stats.most_common_genre}")

    print("\nTop rated albums")
    if not stats.top_rated_albums:
        print("  No rated albums available.")
    for rank, album in enumerate(stats.top_rated_albums, start=1):
        artist_name = names.get(album.artist_id, "Unknown")
        print(f"  {rank}. {album.title} - {artist_name} ({album.rating}/5)")

    print("\nPlay time")
    print(f"  Total:            {format_duration(stats.total_play_time)}")
    print(f"  Average song:     {format_duration(stats.average_track_length)}")

    recommendation = library.get_album_recommendation()
    print("\nRecommendation")
    if recommendation.album is None:
        print(f"  {recommendation.reason}.")
    else:
        album = recommendation.album
        print(f"  {album.title} by {recommendation.artist_name} ({album.release_year})")
        print(f"  {recommendation.reason}")

    if args.export:
        path = library.export_statistics(args.export)
        print(f"\nStatistics exported to {path}")
    return EXIT_OK


def _cmd_backup(library: LibraryService, args: argparse.Namespace) -> int:
    subdirectory = library.create_backup(args.label)
    print(f"Backup written to {subdirectory}")
    return EXIT_OK


def _cmd_logs(library: LibraryService, args: argparse.Namespace) -> int:
    log_service = library.activity_log
    entries = log_service.get_all_logs() if log_service is not None else []
    if not entries:
        print("No log entries.")
        return EXIT_OK

    for entry in entries[: args.limit]:
        print(entry)
    return EXIT_OK


if __name__ == "__main__":
    # python -m music_catalog.cli artists list
    # python -m music_catalog.cli --data-dir /tmp/catalog stats --export
    sys.exit(main())
