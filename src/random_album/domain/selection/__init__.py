"""Selection domain - choosing random albums.

This domain handles:
- Filter criteria and play-history predicates
- The recency window of recently chosen albums
- Querying the collection for a random album
- Expanding an album into ordered tracks
"""

from .collection import (
    CollectionQuery,
    SqliteCollection,
    build_album_filter,
    build_play_history_clause,
)
from .exceptions import NoCandidateFound, RandomAlbumError
from .models import (
    RECENCY_WINDOW_SIZE,
    AlbumId,
    FilterCriteria,
    PlayHistoryPredicate,
    RecencyWindow,
    SelectionAttempt,
    SubFilter,
    TrackLocator,
    parse_album_id,
)
from .selector import MAX_SELECTION_ATTEMPTS, check_attempt, expand_album, select_album

__all__ = [
    # Collection
    "CollectionQuery",
    "SqliteCollection",
    "build_album_filter",
    "build_play_history_clause",
    # Exceptions
    "NoCandidateFound",
    "RandomAlbumError",
    # Models
    "RECENCY_WINDOW_SIZE",
    "AlbumId",
    "FilterCriteria",
    "PlayHistoryPredicate",
    "RecencyWindow",
    "SelectionAttempt",
    "SubFilter",
    "TrackLocator",
    "parse_album_id",
    # Selector
    "MAX_SELECTION_ATTEMPTS",
    "check_attempt",
    "expand_album",
    "select_album",
]
