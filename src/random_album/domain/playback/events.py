"""
Playback events consumed by the sequencer.

The host player emits these in no guaranteed order.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class TrackBoundaryEvent:
    """The active track index changed (-1 = nothing active)."""

    track_index: int


@dataclass(frozen=True)
class TrackEndEvent:
    """A track finished playing naturally.

    track_index is the queue position of the finished track when the host
    reports it; None makes the sequencer read the active index instead.
    """

    track_index: Optional[int] = None


@dataclass(frozen=True)
class PlaybackPositionEvent:
    """Periodic progress report for the active track."""

    remaining_ms: int


PlaybackEvent = Union[TrackBoundaryEvent, TrackEndEvent, PlaybackPositionEvent]
