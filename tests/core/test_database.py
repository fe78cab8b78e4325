"""Tests for collection schema helpers."""

import sqlite3

from random_album.core import database
from random_album.domain.library.models import LibraryTrack


def _track(path, album="Album", album_artist=None, artist="Artist"):
    return LibraryTrack(local_path=path, title="t", artist=artist, album=album, album_artist=album_artist)


class TestInitDatabase:
    def test_schema_version(self, temp_db):
        with database.get_db_connection() as conn:
            row = conn.execute("SELECT version FROM schema_version").fetchone()
        assert row["version"] == database.SCHEMA_VERSION

    def test_init_is_idempotent(self, temp_db):
        database.init_database()
        with database.get_db_connection() as conn:
            assert conn.execute("SELECT COUNT(*) AS n FROM schema_version").fetchone()["n"] == 1

    def test_migrates_v1_tracks(self, tmp_path, monkeypatch):
        db_path = tmp_path / "old.db"
        conn = sqlite3.connect(db_path)
        conn.executescript(
            """
            CREATE TABLE schema_version (version INTEGER PRIMARY KEY);
            INSERT INTO schema_version VALUES (1);
            CREATE TABLE tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                local_path TEXT UNIQUE NOT NULL,
                title TEXT,
                album_id INTEGER NOT NULL,
                artist_id INTEGER,
                genre_id INTEGER,
                disc_number INTEGER,
                track_number INTEGER,
                file_mtime REAL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        conn.close()
        monkeypatch.setattr(database, "get_database_path", lambda: db_path)

        database.init_database()

        with database.get_db_connection() as conn:
            columns = {row["name"] for row in conn.execute("PRAGMA table_info(tracks)")}
        assert {"play_count", "last_played"} <= columns


class TestUpsert:
    def test_albums_keyed_by_album_artist(self, temp_db):
        added, updated = database.batch_upsert_tracks(
            [
                _track("/m/a.mp3", album_artist="A"),
                _track("/m/b.mp3", album_artist="B"),
                _track("/m/c.mp3", album_artist="A"),
            ]
        )

        assert (added, updated) == (3, 0)
        assert database.get_library_stats()["albums"] == 2

    def test_update_keeps_play_statistics(self, temp_db):
        database.batch_upsert_tracks([_track("/m/a.mp3")])
        database.record_play("/m/a.mp3", played_at=1234)

        assert database.batch_upsert_tracks([_track("/m/a.mp3", album="Renamed")]) == (0, 1)

        with database.get_db_connection() as conn:
            row = conn.execute("SELECT play_count, last_played FROM tracks").fetchone()
        assert (row["play_count"], row["last_played"]) == (1, 1234)

    def test_album_tag_removed_deletes_row(self, temp_db):
        database.batch_upsert_tracks([_track("/m/a.mp3"), _track("/m/b.mp3", album="Other")])

        assert database.batch_upsert_tracks([_track("/m/b.mp3", album=None)]) == (0, 0)

        assert database.get_known_mtimes().keys() == {"/m/a.mp3"}
        assert database.get_library_stats()["albums"] == 1

    def test_record_play_unknown_path(self, temp_db):
        assert database.record_play("/nowhere.mp3") is False

    def test_known_mtimes(self, temp_db):
        database.batch_upsert_tracks([_track("/m/a.mp3")._replace(file_mtime=42.0)])
        assert database.get_known_mtimes() == {"/m/a.mp3": 42.0}
