"""
Playback queue interface.

The sequencer only mutates the host's queue through these calls.
"""

from typing import Protocol

from loguru import logger

from random_album.domain.selection.exceptions import RandomAlbumError
from random_album.domain.selection.models import TrackLocator


class UnsupportedHostFeature(RandomAlbumError):
    """Raised when the host player cannot report a feature (e.g. stop-after-current)."""

    pass


class PlaybackQueue(Protocol):
    """Queue mutation and inspection calls offered by the host player."""

    def clear(self) -> None: ...

    def append(self, locator: TrackLocator) -> None: ...

    def play_at(self, index: int) -> None: ...

    def active_index(self) -> int:
        """Index of the active track, or -1 when none is active."""
        ...

    def total_count(self) -> int: ...

    def get_stop_after_current(self) -> bool:
        """May raise UnsupportedHostFeature."""
        ...

    def set_stop_after_current(self, enabled: bool) -> None: ...


def read_stop_after_current(queue: PlaybackQueue) -> bool:
    """Read the stop-after-current flag, treating an unsupported host as False."""
    try:
        return bool(queue.get_stop_after_current())
    except UnsupportedHostFeature as e:
        logger.debug(f"stop-after-current unavailable, assuming off: {e}")
        return False
