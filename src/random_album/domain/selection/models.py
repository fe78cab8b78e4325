"""
Selection domain models.

Contains the filter criteria, the recency window and the track locators the
selector hands to the playback queue.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Iterator, NamedTuple, Optional, Union

AlbumId = Union[int, str]

# Number of recently chosen albums excluded from selection
RECENCY_WINDOW_SIZE = 10


def parse_album_id(token: str) -> AlbumId:
    """Turn a persisted token back into an AlbumId (digits become ints)."""
    token = token.strip()
    if token.lstrip("-").isdigit():
        return int(token)
    return token


class TrackLocator(NamedTuple):
    """A playable track of an album.

    Field order makes tuple comparison sort by disc, then track number.
    """

    disc_number: int
    track_number: int
    url: str

    @classmethod
    def from_row(
        cls, url: str, disc_number: Optional[int], track_number: Optional[int]
    ) -> "TrackLocator":
        """Build from a collection row; missing numbers sort as 0."""
        return cls(disc_number or 0, track_number or 0, url)


class SubFilter(str, Enum):
    """Play-history sub-filters, OR-ed together when any is enabled."""

    NEVER_PLAYED = "never_played"
    NOT_PLAYED_LAST_YEAR = "not_played_last_year"
    ZERO_PLAY_COUNT = "zero_play_count"


@dataclass(frozen=True)
class PlayHistoryPredicate:
    """Structured play-history constraint handed to the collection.

    Attributes:
        sub_filters: Enabled sub-filters (never empty)
        reference_time: "Now" for the not-played-in-a-year cutoff
    """

    sub_filters: frozenset[SubFilter]
    reference_time: datetime

    @property
    def last_year_cutoff(self) -> int:
        """Unix timestamp one year (365 days) before the reference time."""
        return int((self.reference_time - timedelta(days=365)).timestamp())


@dataclass(frozen=True)
class FilterCriteria:
    """Immutable snapshot of the album filters.

    Attributes:
        path_filter: Substring the track location must contain ('' = any)
        genre_ids: Allowed genre ids (empty = all genres)
        sub_filters: Enabled play-history sub-filters (empty = bypassed)
    """

    path_filter: str = ""
    genre_ids: frozenset[int] = field(default_factory=frozenset)
    sub_filters: frozenset[SubFilter] = field(default_factory=frozenset)

    def play_history_predicate(
        self, now: Optional[datetime] = None
    ) -> Optional[PlayHistoryPredicate]:
        """Build the extra predicate, or None when no sub-filter is enabled."""
        if not self.sub_filters:
            return None
        return PlayHistoryPredicate(
            sub_filters=self.sub_filters,
            reference_time=now or datetime.now(),
        )


class RecencyWindow:
    """Fixed-capacity FIFO of recently chosen albums.

    Pushing onto a full window evicts the oldest entry. The window allows
    duplicates; only the selector's fallback path ever pushes one.
    """

    def __init__(
        self, album_ids: Iterable[AlbumId] = (), capacity: int = RECENCY_WINDOW_SIZE
    ):
        self.capacity = capacity
        self._entries: list[AlbumId] = []
        for album_id in album_ids:
            self.push(album_id)

    def push(self, album_id: AlbumId) -> Optional[AlbumId]:
        """Append an album id, returning the evicted id if any."""
        evicted = None
        if len(self._entries) >= self.capacity:
            evicted = self._entries.pop(0)
        self._entries.append(album_id)
        return evicted

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, album_id: object) -> bool:
        return any(entry == album_id for entry in self._entries)

    def __iter__(self) -> Iterator[AlbumId]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RecencyWindow({self._entries!r}, capacity={self.capacity})"

    def to_config(self) -> str:
        """Comma-joined, oldest first."""
        return ",".join(str(entry) for entry in self._entries)

    @classmethod
    def from_config(
        cls, value: str, capacity: int = RECENCY_WINDOW_SIZE
    ) -> "RecencyWindow":
        """Parse a comma-joined window; extra leading entries are evicted."""
        tokens = [token for token in value.split(",") if token.strip()]
        return cls((parse_album_id(token) for token in tokens), capacity=capacity)


@dataclass(frozen=True)
class SelectionAttempt:
    """One query result checked against the recency window."""

    album_id: AlbumId
    accepted: bool
