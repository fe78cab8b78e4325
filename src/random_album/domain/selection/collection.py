"""
Collection query interface and its SQLite implementation.

The selector never builds SQL. It hands structured values (path filter,
genre ids, PlayHistoryPredicate) to the collection, and this module turns
them into parameterized WHERE clauses.
"""

from typing import AbstractSet, List, Optional, Protocol, Tuple

from loguru import logger

from random_album.core.database import get_db_connection

from .models import AlbumId, PlayHistoryPredicate, SubFilter

ArtistId = int
TrackRow = Tuple[str, Optional[int], Optional[int]]  # (url, disc, track)


class CollectionQuery(Protocol):
    """Queries the selector runs against the media collection.

    Randomness and filtering happen at the data source; implementations
    return None from query_random_album when nothing matches.
    """

    def query_random_album(
        self,
        path_filter: str,
        genre_ids: AbstractSet[int],
        extra_predicate: Optional[PlayHistoryPredicate],
    ) -> Optional[AlbumId]: ...

    def query_album_artists(self, album_id: AlbumId) -> set[ArtistId]:
        """Artists an album row must be split between (empty or one: no split)."""
        ...

    def query_tracks(
        self, album_id: AlbumId, artist_id: Optional[ArtistId], path_filter: str
    ) -> List[TrackRow]: ...

    def query_genres(self) -> List[Tuple[int, str]]: ...


def _like_pattern(substring: str) -> str:
    """Wrap a substring for LIKE, escaping wildcards."""
    escaped = (
        substring.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return f"%{escaped}%"


def build_play_history_clause(
    predicate: PlayHistoryPredicate,
) -> Tuple[str, List[object]]:
    """Build the OR-ed play-history clause.

    Returns:
        Tuple of (clause, parameters); the clause is parenthesized

    Example:
        {NEVER_PLAYED, ZERO_PLAY_COUNT} ->
        ("(t.last_played IS NULL OR t.play_count = 0)", [])
    """
    parts: List[str] = []
    params: List[object] = []

    # Fixed order keeps the generated SQL stable for the same filter set
    if SubFilter.NEVER_PLAYED in predicate.sub_filters:
        parts.append("t.last_played IS NULL")
    if SubFilter.ZERO_PLAY_COUNT in predicate.sub_filters:
        parts.append("t.play_count = 0")
    if SubFilter.NOT_PLAYED_LAST_YEAR in predicate.sub_filters:
        parts.append("t.last_played < ?")
        params.append(predicate.last_year_cutoff)

    return "(" + " OR ".join(parts) + ")", params


def build_album_filter(
    path_filter: str,
    genre_ids: AbstractSet[int],
    extra_predicate: Optional[PlayHistoryPredicate],
) -> Tuple[str, List[object]]:
    """Build the WHERE clause selecting candidate tracks.

    An album is a candidate when any of its tracks passes the clause.

    Returns:
        Tuple of (where_clause, parameters); "1" when unrestricted
    """
    clauses: List[str] = []
    params: List[object] = []

    if path_filter:
        clauses.append("t.local_path LIKE ? ESCAPE '\\'")
        params.append(_like_pattern(path_filter))

    if genre_ids:
        ordered = sorted(genre_ids)
        clauses.append(f"t.genre_id IN ({', '.join('?' for _ in ordered)})")
        params.extend(ordered)

    if extra_predicate is not None and extra_predicate.sub_filters:
        clause, clause_params = build_play_history_clause(extra_predicate)
        clauses.append(clause)
        params.extend(clause_params)

    if not clauses:
        return "1", params
    return " AND ".join(clauses), params


class SqliteCollection:
    """CollectionQuery over the local SQLite collection."""

    def query_random_album(
        self,
        path_filter: str,
        genre_ids: AbstractSet[int],
        extra_predicate: Optional[PlayHistoryPredicate],
    ) -> Optional[AlbumId]:
        where_clause, params = build_album_filter(
            path_filter, genre_ids, extra_predicate
        )
        query = f"""
            SELECT album_id FROM (
                SELECT DISTINCT t.album_id AS album_id
                FROM tracks t
                WHERE {where_clause}
            )
            ORDER BY RANDOM()
            LIMIT 1
        """
        with get_db_connection() as conn:
            row = conn.execute(query, params).fetchone()

        if row is None:
            logger.debug(f"No album matches: {where_clause} {params}")
            return None
        return row["album_id"]

    def query_album_artists(self, album_id: AlbumId) -> set[ArtistId]:
        # An album-artist tag already separates same-named albums; only
        # untagged albums can mix unrelated artists under one row
        with get_db_connection() as conn:
            cursor = conn.execute(
                """
                SELECT DISTINCT t.artist_id FROM tracks t
                JOIN albums a ON a.id = t.album_id
                WHERE t.album_id = ? AND a.album_artist = '' AND t.artist_id IS NOT NULL
                """,
                (album_id,),
            )
            return {row["artist_id"] for row in cursor.fetchall()}

    def query_tracks(
        self, album_id: AlbumId, artist_id: Optional[ArtistId], path_filter: str
    ) -> List[TrackRow]:
        clauses = ["album_id = ?"]
        params: List[object] = [album_id]

        if artist_id is not None:
            clauses.append("artist_id = ?")
            params.append(artist_id)
        if path_filter:
            clauses.append("local_path LIKE ? ESCAPE '\\'")
            params.append(_like_pattern(path_filter))

        with get_db_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT local_path, disc_number, track_number
                FROM tracks
                WHERE {' AND '.join(clauses)}
                ORDER BY COALESCE(disc_number, 0), COALESCE(track_number, 0), local_path
                """,
                params,
            )
            return [
                (row["local_path"], row["disc_number"], row["track_number"])
                for row in cursor.fetchall()
            ]

    def query_genres(self) -> List[Tuple[int, str]]:
        with get_db_connection() as conn:
            cursor = conn.execute("SELECT id, name FROM genres ORDER BY name")
            return [(row["id"], row["name"]) for row in cursor.fetchall()]
