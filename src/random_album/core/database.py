"""
SQLite database operations for Random Album

The collection schema keeps albums, artists and genres in their own tables so
album and genre identifiers are stable integers. An album row is keyed by
(name, album_artist); files without an album-artist tag that share an album
name land on the same album row even when their track artists differ.
"""

import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

from loguru import logger

from .config import get_data_dir

# Database schema version for migrations
SCHEMA_VERSION = 2


def get_database_path() -> Path:
    """Get the path to the SQLite database file."""
    return get_data_dir() / "random_album.db"


@contextmanager
def get_db_connection():
    """Get a database connection with proper cleanup."""
    db_path = get_database_path()
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row  # Enable dict-like access
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    try:
        yield conn
    finally:
        conn.close()


def migrate_database(conn, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 2:
        # v1 -> v2: play statistics for the play-history filters
        for column, ddl in (
            ("play_count", "INTEGER NOT NULL DEFAULT 0"),
            ("last_played", "INTEGER"),
        ):
            try:
                conn.execute(f"ALTER TABLE tracks ADD COLUMN {column} {ddl}")
            except sqlite3.OperationalError as e:
                if "duplicate column name" not in str(e).lower():
                    raise

        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_tracks_last_played ON tracks (last_played)"
        )
        conn.commit()


def init_database() -> None:
    """Initialize the database with required tables."""
    db_path = get_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection() as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS genres (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS artists (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS albums (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                album_artist TEXT NOT NULL DEFAULT '',
                UNIQUE (name, album_artist)
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                local_path TEXT UNIQUE NOT NULL,
                title TEXT,
                album_id INTEGER NOT NULL,
                artist_id INTEGER,
                genre_id INTEGER,
                disc_number INTEGER,
                track_number INTEGER,
                play_count INTEGER NOT NULL DEFAULT 0,
                last_played INTEGER, -- unix seconds, NULL = never played
                file_mtime REAL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (album_id) REFERENCES albums (id) ON DELETE CASCADE,
                FOREIGN KEY (artist_id) REFERENCES artists (id) ON DELETE SET NULL,
                FOREIGN KEY (genre_id) REFERENCES genres (id) ON DELETE SET NULL
            )
        """)

        # Key/value store for the random album settings and recency window
        conn.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("CREATE INDEX IF NOT EXISTS idx_tracks_album ON tracks (album_id)")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_tracks_genre ON tracks (genre_id)")
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_tracks_artist ON tracks (artist_id)"
        )

        cursor = conn.execute("SELECT MAX(version) as version FROM schema_version")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] else 0
        cursor.close()

        if current_version < SCHEMA_VERSION:
            migrate_database(conn, current_version)

        conn.execute("DELETE FROM schema_version")
        conn.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )

        conn.commit()


def _get_or_create_named(conn, table: str, name: Optional[str]) -> Optional[int]:
    """Get or create a row in a (id, name) lookup table."""
    if not name:
        return None
    row = conn.execute(f"SELECT id FROM {table} WHERE name = ?", (name,)).fetchone()
    if row:
        return row["id"]
    cursor = conn.execute(f"INSERT INTO {table} (name) VALUES (?)", (name,))
    return cursor.lastrowid


def get_or_create_album(conn, name: str, album_artist: Optional[str] = None) -> int:
    """Get or create an album row keyed by (name, album_artist)."""
    album_artist = album_artist or ""
    row = conn.execute(
        "SELECT id FROM albums WHERE name = ? AND album_artist = ?",
        (name, album_artist),
    ).fetchone()
    if row:
        return row["id"]
    cursor = conn.execute(
        "INSERT INTO albums (name, album_artist) VALUES (?, ?)", (name, album_artist)
    )
    return cursor.lastrowid


def batch_upsert_tracks(tracks: Iterable[Any]) -> Tuple[int, int]:
    """Insert or update scanned tracks in a single transaction.

    Tracks without an album tag cannot belong to an album: they are not
    stored, and a row left from an earlier scan of the same file is removed.
    Albums left without tracks are dropped.
    Play statistics of existing rows are left untouched.

    Args:
        tracks: Objects with local_path, title, artist, album, album_artist,
            genre, disc_number, track_number and file_mtime attributes

    Returns:
        (added, updated) counts
    """
    added = 0
    updated = 0

    with get_db_connection() as conn:
        for track in tracks:
            if not track.album:
                logger.debug(f"Skipping track without album tag: {track.local_path}")
                conn.execute("DELETE FROM tracks WHERE local_path = ?", (track.local_path,))
                continue

            album_id = get_or_create_album(conn, track.album, track.album_artist)
            artist_id = _get_or_create_named(conn, "artists", track.artist)
            genre_id = _get_or_create_named(conn, "genres", track.genre)

            row = conn.execute(
                "SELECT id FROM tracks WHERE local_path = ?", (track.local_path,)
            ).fetchone()

            if row:
                conn.execute(
                    """
                    UPDATE tracks SET
                        title = ?, album_id = ?, artist_id = ?, genre_id = ?,
                        disc_number = ?, track_number = ?, file_mtime = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (
                        track.title,
                        album_id,
                        artist_id,
                        genre_id,
                        track.disc_number,
                        track.track_number,
                        track.file_mtime,
                        row["id"],
                    ),
                )
                updated += 1
            else:
                conn.execute(
                    """
                    INSERT INTO tracks (local_path, title, album_id, artist_id, genre_id,
                                        disc_number, track_number, file_mtime)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        track.local_path,
                        track.title,
                        album_id,
                        artist_id,
                        genre_id,
                        track.disc_number,
                        track.track_number,
                        track.file_mtime,
                    ),
                )
                added += 1

        conn.execute(
            "DELETE FROM albums WHERE id NOT IN (SELECT DISTINCT album_id FROM tracks)"
        )
        conn.commit()

    logger.info(f"Upserted tracks: {added} added, {updated} updated")
    return added, updated


def get_known_mtimes() -> dict[str, float]:
    """Map local_path -> stored file mtime for change detection."""
    with get_db_connection() as conn:
        cursor = conn.execute("SELECT local_path, file_mtime FROM tracks")
        return {row["local_path"]: row["file_mtime"] for row in cursor.fetchall()}


def prune_tracks(keep_paths: set[str]) -> int:
    """Delete tracks whose path is not in keep_paths, then drop empty albums.

    Returns:
        Number of tracks removed
    """
    with get_db_connection() as conn:
        cursor = conn.execute("SELECT id, local_path FROM tracks")
        stale = [row["id"] for row in cursor.fetchall() if row["local_path"] not in keep_paths]
        conn.executemany("DELETE FROM tracks WHERE id = ?", [(i,) for i in stale])
        conn.execute(
            "DELETE FROM albums WHERE id NOT IN (SELECT DISTINCT album_id FROM tracks)"
        )
        conn.commit()

    if stale:
        logger.info(f"Pruned {len(stale)} tracks no longer on disk")
    return len(stale)


def record_play(local_path: str, played_at: Optional[int] = None) -> bool:
    """Bump play statistics for a track that finished playing.

    Args:
        local_path: Path of the finished track
        played_at: Unix timestamp (defaults to now)

    Returns:
        True if a track was updated, False if the path is unknown
    """
    played_at = played_at if played_at is not None else int(time.time())
    with get_db_connection() as conn:
        cursor = conn.execute(
            """
            UPDATE tracks
            SET play_count = play_count + 1, last_played = ?
            WHERE local_path = ?
            """,
            (played_at, local_path),
        )
        conn.commit()
        return cursor.rowcount > 0


def get_library_stats() -> dict[str, int]:
    """Count albums, tracks and genres in the collection."""
    with get_db_connection() as conn:
        row = conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM albums) AS albums,
                (SELECT COUNT(*) FROM tracks) AS tracks,
                (SELECT COUNT(*) FROM genres) AS genres
            """
        ).fetchone()
        return dict(row)
