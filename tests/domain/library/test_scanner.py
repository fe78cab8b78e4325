"""Tests for tag parsing and library scanning."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from random_album.core import database
from random_album.core.config import Config, MusicConfig
from random_album.domain.library.metadata import get_tag_value, parse_position
from random_album.domain.library.models import LibraryTrack
from random_album.domain.library.scanner import find_music_files, scan_library


class TestParsePosition:
    @pytest.mark.parametrize(
        "raw,expected",
        [("3", 3), ("03/12", 3), ("(3, 12)", 3), ("", None), (None, None), ("A", None)],
    )
    def test_parse(self, raw, expected):
        assert parse_position(raw) == expected


class TestGetTagValue:
    def test_first_matching_tag_wins(self):
        tags = {"ALBUM": ["Blue Train"], "album": ["ignored"]}
        assert get_tag_value(tags, ["TALB", "ALBUM", "album"]) == "Blue Train"

    def test_missing_tags(self):
        assert get_tag_value({}, ["TALB", "ALBUM"]) is None

    def test_value_error_is_skipped(self):
        class VorbisLike(dict):
            def get(self, key, default=None):
                if key == "TALB":
                    raise ValueError(key)
                return super().get(key, default)

        assert get_tag_value(VorbisLike(ALBUM=["Kind of Blue"]), ["TALB", "ALBUM"]) == "Kind of Blue"


@pytest.fixture
def library_dir(tmp_path: Path) -> Path:
    root = tmp_path / "music"
    (root / "a").mkdir(parents=True)
    for name in ("a/01.mp3", "a/02.flac", "a/notes.txt", "top.ogg"):
        (root / name).write_bytes(b"")
    return root


@pytest.fixture
def config(library_dir: Path) -> Config:
    return Config(music=MusicConfig(library_paths=[str(library_dir)], supported_formats=[".mp3", ".flac", ".ogg"]))


def _fake_tags(local_path: str) -> LibraryTrack:
    return LibraryTrack(
        local_path=local_path,
        title=Path(local_path).stem,
        artist="Artist",
        album="Album",
        genre="Jazz",
        track_number=1,
        file_mtime=os.stat(local_path).st_mtime,
    )


class TestScanner:
    def test_find_music_files(self, config, library_dir):
        files = find_music_files(config)
        assert [p.relative_to(library_dir).as_posix() for p in files] == [
            "a/01.mp3",
            "a/02.flac",
            "top.ogg",
        ]

    def test_non_recursive(self, config, library_dir):
        config.music.scan_recursive = False
        assert [p.name for p in find_music_files(config)] == ["top.ogg"]

    def test_missing_library_path(self, tmp_path):
        config = Config(music=MusicConfig(library_paths=[str(tmp_path / "nope")]))
        assert find_music_files(config) == []

    @patch("random_album.domain.library.scanner.extract_track_tags", side_effect=_fake_tags)
    def test_scan_adds_then_skips_unchanged(self, mock_extract, temp_db, config):
        first = scan_library(config)
        assert (first.found, first.added, first.skipped) == (3, 3, 0)

        second = scan_library(config)
        assert (second.added, second.updated, second.skipped) == (0, 0, 3)
        assert mock_extract.call_count == 3
        assert database.get_library_stats() == {"albums": 1, "tracks": 3, "genres": 1}

    @patch("random_album.domain.library.scanner.extract_track_tags", side_effect=_fake_tags)
    def test_scan_prunes_missing_files(self, mock_extract, temp_db, config, library_dir):
        scan_library(config)
        (library_dir / "top.ogg").unlink()

        result = scan_library(config)

        assert result.removed == 1
        assert database.get_library_stats()["tracks"] == 2

    @patch("random_album.domain.library.scanner.extract_track_tags")
    def test_tracks_without_album_are_not_stored(self, mock_extract, temp_db, config):
        mock_extract.side_effect = lambda path: LibraryTrack(local_path=path, title="x")

        result = scan_library(config)

        assert result.added == 0
        assert database.get_library_stats()["tracks"] == 0
