"""
Random album selection.

Picks an album through the collection (which owns the randomness), rejects
albums chosen recently, and expands the winner into ordered track locators.
"""

import random
from datetime import datetime
from typing import Callable, List, Optional

from loguru import logger

from .collection import CollectionQuery
from .exceptions import NoCandidateFound
from .models import AlbumId, FilterCriteria, RecencyWindow, SelectionAttempt, TrackLocator

# Total queries per selection, including the first
MAX_SELECTION_ATTEMPTS = 10


def check_attempt(album_id: AlbumId, window: RecencyWindow) -> SelectionAttempt:
    """Accept an album unless it is in the recency window."""
    return SelectionAttempt(album_id=album_id, accepted=album_id not in window)


def select_album(
    collection: CollectionQuery,
    criteria: FilterCriteria,
    window: RecencyWindow,
    persist_window: Optional[Callable[[RecencyWindow], None]] = None,
    max_attempts: int = MAX_SELECTION_ATTEMPTS,
    now: Optional[datetime] = None,
) -> AlbumId:
    """Choose a random album that passes the filters and was not played recently.

    If every attempt lands on a recently played album, the last queried album
    is returned anyway: playback keeps going even when the window covers the
    whole candidate set. That album is pushed into the window like any other.

    Args:
        collection: Collection to query
        criteria: Current filter snapshot
        window: Recency window (mutated on success)
        persist_window: Called with the window after it changes
        max_attempts: Query budget, including the first query
        now: Reference time for the play-history predicate

    Returns:
        The chosen album id

    Raises:
        NoCandidateFound: If the collection returns no album at all
    """
    predicate = criteria.play_history_predicate(now)
    attempt: Optional[SelectionAttempt] = None

    for attempt_number in range(1, max_attempts + 1):
        album_id = collection.query_random_album(
            criteria.path_filter, criteria.genre_ids, predicate
        )
        if album_id is None:
            raise NoCandidateFound()

        attempt = check_attempt(album_id, window)
        if attempt.accepted:
            logger.debug(f"Album {album_id} accepted on attempt {attempt_number}")
            break
        logger.debug(f"Album {album_id} played recently, retrying ({attempt_number}/{max_attempts})")
    else:
        logger.warning(
            f"All {max_attempts} attempts hit the recency window; "
            f"using album {attempt.album_id} anyway"
        )

    window.push(attempt.album_id)
    if persist_window is not None:
        persist_window(window)
    return attempt.album_id


def expand_album(
    collection: CollectionQuery,
    album_id: AlbumId,
    path_filter: str = "",
    rng: Optional[random.Random] = None,
) -> List[TrackLocator]:
    """Resolve an album into its tracks, ordered by disc then track number.

    An album id shared by several artists (same album name, different
    artists) is narrowed to one artist picked at random, so tracks of
    unrelated albums are never mixed. If that artist has no track under
    the path filter, the whole album is used instead.

    Args:
        collection: Collection to query
        album_id: Album to expand
        path_filter: Substring the track location must contain
        rng: Random source for the artist pick

    Returns:
        Ordered track locators (may be empty)
    """
    artists = collection.query_album_artists(album_id)

    artist_id = None
    if len(artists) > 1:
        artist_id = (rng or random).choice(sorted(artists))
        logger.info(
            f"Album {album_id} is credited to {len(artists)} artists; using artist {artist_id}"
        )

    rows = collection.query_tracks(album_id, artist_id, path_filter)
    if not rows and artist_id is not None:
        logger.info(f"Artist {artist_id} has no tracks under the path filter; using the whole album")
        rows = collection.query_tracks(album_id, None, path_filter)
    tracks = sorted(TrackLocator.from_row(url, disc, track) for url, disc, track in rows)
    logger.info(f"New random album {album_id}, {len(tracks)} tracks")
    return tracks
