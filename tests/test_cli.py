"""End-to-end tests for the music-catalog command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from music_catalog.cli import main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "MUSIC_CATALOG_DATA_DIR",
        "MUSIC_CATALOG_PROJECT_ROOT",
        "MUSIC_CATALOG_SAMPLE_DATA",
    ):
        monkeypatch.delenv(name, raising=False)


def _run(data_dir: Path, *args: str, sample: bool = False) -> int:
    argv = ["--data-dir", str(data_dir)]
    if not sample:
        argv.append("--no-sample-data")
    return main([*argv, *args])


def test_add_and_list_artists(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(data_dir, "artists", "add", "--name", "Kent", "--country", "Sweden", "--genre", "rock") == 0
    assert _run(data_dir, "artists", "list") == 0

    out = capsys.readouterr().out
    assert "Added artist #1: Kent (Sweden) - Rock" in out
    assert "   1  Kent (Sweden) - Rock" in out


def test_duplicate_artist_exits_with_error(
    data_dir: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _run(data_dir, "artists", "add", "--name", "Kent", "--country", "Sweden")
    assert _run(data_dir, "artists", "add", "--name", "KENT", "--country", "Sweden") == 1
    assert "already exists" in capsys.readouterr().err


def test_album_track_workflow(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(data_dir, "artists", "add", "--name", "Kent", "--country", "Sweden")
    assert _run(data_dir, "albums", "add", "--title", "Isola", "--artist-id", "1", "--year", "1997", "--genre", "Rock") == 0
    assert _run(data_dir, "albums", "rate", "1", "4") == 0
    assert _run(data_dir, "tracks", "add", "--title", "Saker man ser", "--album-id", "1", "--duration", "4:05", "--number", "2") == 0
    assert _run(data_dir, "tracks", "list", "--album-id", "1") == 0

    out = capsys.readouterr().out
    assert "Rated album 1: 4/5" in out
    assert "2. Saker man ser (4:05)" in out

    albums = json.loads((data_dir / "albums.json").read_text(encoding="utf-8"))
    assert albums[0]["rating"] == 4
    songs = json.loads((data_dir / "songs.json").read_text(encoding="utf-8"))
    assert songs[0]["duration"] == 245


def test_update_commands_change_only_given_fields(data_dir: Path) -> None:
    _run(data_dir, "artists", "add", "--name", "Kent", "--country", "Sweden")
    _run(data_dir, "albums", "add", "--title", "Isola", "--artist-id", "1", "--year", "1997")

    assert _run(data_dir, "artists", "update", "1", "--genre", "Rock") == 0
    assert _run(data_dir, "albums", "update", "1", "--year", "1998") == 0

    artists = json.loads((data_dir / "artists.json").read_text(encoding="utf-8"))
    assert artists[0] == {"id": 1, "name": "Kent", "country": "Sweden", "genre": "Rock"}
    albums = json.loads((data_dir / "albums.json").read_text(encoding="utf-8"))
    assert albums[0]["release_year"] == 1998
    assert albums[0]["title"] == "Isola"


def test_delete_artist_cascades(data_dir: Path) -> None:
    _run(data_dir, "artists", "add", "--name", "Kent", "--country", "Sweden")
    _run(data_dir, "albums", "add", "--title", "Isola", "--artist-id", "1", "--year", "1997")
    _run(data_dir, "tracks", "add", "--title", "Intro", "--album-id", "1")

    assert _run(data_dir, "artists", "delete", "1") == 0
    assert _run(data_dir, "artists", "delete", "1") == 1

    for name in ("artists", "albums", "songs"):
        assert json.loads((data_dir / f"{name}.json").read_text(encoding="utf-8")) == []


def test_rating_out_of_range_is_refused(data_dir: Path) -> None:
    _run(data_dir, "artists", "add", "--name", "Kent", "--country", "Sweden")
    _run(data_dir, "albums", "add", "--title", "Isola", "--artist-id", "1", "--year", "1997")
    assert _run(data_dir, "albums", "rate", "1", "9") == 1


def test_stats_on_sample_data_with_export(
    data_dir: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert _run(data_dir, "stats", "--export", sample=True) == 0

    out = capsys.readouterr().out
    assert "Overview" in out
    assert "Vapen & ammunition - Kent (5/5)" in out
    assert "Recommendation" in out
    assert (data_dir / "exports" / "statistics.json").exists()


def test_backup_and_logs(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(data_dir, "backup", "--label", "first", sample=True) == 0
    assert (data_dir / "backups" / "first" / "artists.json").exists()

    assert _run(data_dir, "logs", "--limit", "3") == 0
    out = capsys.readouterr().out
    assert "Backup written to backups/first" in out
    assert "[Information]" in out


def test_backup_label_cannot_escape_data_dir(
    data_dir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(data_dir, "backup", "--label", "../../outside", sample=True) == 1
    assert "Invalid backup label" in capsys.readouterr().err
    assert not (data_dir.parent / "outside").exists()


def test_unknown_genre_is_an_argument_error(data_dir: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(data_dir, "artists", "add", "--name", "X", "--country", "Y", "--genre", "polka")
    assert excinfo.value.code == 2


def test_malformed_data_exits_with_persistence_error(
    data_dir: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    data_dir.mkdir(parents=True)
    (data_dir / "artists.json").write_text("[{", encoding="utf-8")

    assert _run(data_dir, "artists", "list") == 2
    err = capsys.readouterr().err
    assert "FATAL ERROR during initialization" in err
    assert "artists.json" in err
