"""Playback domain - queue exhaustion handling and MPV integration.

This domain handles:
- Playback events and the queue interface
- Debounced boundary checks on a single-threaded scheduler
- The sequencer that reloads the queue with random albums
- MPV integration via JSON IPC
"""

from .events import PlaybackEvent, PlaybackPositionEvent, TrackBoundaryEvent, TrackEndEvent
from .queue import PlaybackQueue, UnsupportedHostFeature, read_stop_after_current
from .scheduling import DeferredCallScheduler
from .sequencer import LoadedAlbum, PlaybackSequencer, SequencerState, is_last_track
from .player import (
    MpvConnectionError,
    MpvEventConnection,
    MpvEventTranslator,
    MpvQueue,
    PlayerState,
    check_mpv_available,
    get_socket_path,
    is_mpv_running,
    pump_events,
    start_mpv,
    stop_mpv,
)

__all__ = [
    # Events
    "PlaybackEvent",
    "PlaybackPositionEvent",
    "TrackBoundaryEvent",
    "TrackEndEvent",
    # Queue
    "PlaybackQueue",
    "UnsupportedHostFeature",
    "read_stop_after_current",
    # Sequencing
    "DeferredCallScheduler",
    "LoadedAlbum",
    "PlaybackSequencer",
    "SequencerState",
    "is_last_track",
    # Player
    "MpvConnectionError",
    "MpvEventConnection",
    "MpvEventTranslator",
    "MpvQueue",
    "PlayerState",
    "check_mpv_available",
    "get_socket_path",
    "is_mpv_running",
    "pump_events",
    "start_mpv",
    "stop_mpv",
]
