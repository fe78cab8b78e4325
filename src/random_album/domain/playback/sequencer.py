"""
Playback sequencer: reloads the queue with a random album once it runs out.

Boundary signals from players are unreliable: a track change and a track end
may both fire for the same boundary, in either order, and the queue may not
have settled when they do. The sequencer therefore never acts on an event
directly. It arms a single deferred check, and the check re-reads the queue
when it fires.

States:
    IDLE: nothing pending
    ARMED_FOR_BOUNDARY_CHECK: a deferred check is scheduled
    STOP_REQUESTED: the player will stop after the current track; the
        next reload replaces the queue without starting playback
"""

import random
from enum import Enum
from typing import Callable, List, NamedTuple, Optional

from loguru import logger

from random_album.context import RandomAlbumContext
from random_album.domain.selection.collection import CollectionQuery
from random_album.domain.selection.exceptions import NoCandidateFound
from random_album.domain.selection.models import AlbumId, FilterCriteria, TrackLocator
from random_album.domain.selection.selector import expand_album, select_album

from .events import PlaybackEvent, PlaybackPositionEvent, TrackBoundaryEvent, TrackEndEvent
from .queue import PlaybackQueue, read_stop_after_current
from .scheduling import DeferredCallScheduler

DEFAULT_DEBOUNCE_MS = 100
DEFAULT_STOP_CHECK_WINDOW_MS = 10000


class SequencerState(Enum):
    IDLE = "idle"
    ARMED_FOR_BOUNDARY_CHECK = "armed_for_boundary_check"
    STOP_REQUESTED = "stop_requested"


class LoadedAlbum(NamedTuple):
    """Result of loading one random album into the queue."""

    album_id: AlbumId
    tracks: List[TrackLocator]


def is_last_track(active_index: int, total_count: int) -> bool:
    """True when nothing is active or the active track is the last one."""
    return active_index == -1 or active_index == total_count - 1


class PlaybackSequencer:
    """Drives album selection from playback events and manual actions.

    All methods must be called from the thread that runs the scheduler.

    Args:
        context: Filters, enabled flag and recency window
        collection: Collection the selector queries
        queue: Host playback queue
        scheduler: Deferred call scheduler for the debounce
        debounce_ms: Delay between an event and the boundary check
        stop_check_window_ms: Remaining time below which stop-after-current is sampled
        on_error: Called when an automatic reload finds no album
        rng: Random source for multi-artist albums
    """

    def __init__(
        self,
        context: RandomAlbumContext,
        collection: CollectionQuery,
        queue: PlaybackQueue,
        scheduler: DeferredCallScheduler,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        stop_check_window_ms: int = DEFAULT_STOP_CHECK_WINDOW_MS,
        on_error: Optional[Callable[[NoCandidateFound], None]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.context = context
        self.collection = collection
        self.queue = queue
        self.scheduler = scheduler
        self.debounce_ms = debounce_ms
        self.stop_check_window_ms = stop_check_window_ms
        self.on_error = on_error
        self.rng = rng

        self.last_error: Optional[NoCandidateFound] = None
        self._armed = False
        self._stop_after_current = False

    @property
    def state(self) -> SequencerState:
        if self._armed:
            return SequencerState.ARMED_FOR_BOUNDARY_CHECK
        if self._stop_after_current:
            return SequencerState.STOP_REQUESTED
        return SequencerState.IDLE

    # Event handling

    def handle(self, event: PlaybackEvent) -> None:
        """Dispatch a playback event to its handler."""
        if isinstance(event, TrackBoundaryEvent):
            self.on_track_boundary(event.track_index)
        elif isinstance(event, TrackEndEvent):
            self.on_track_end(event.track_index)
        elif isinstance(event, PlaybackPositionEvent):
            self.on_playback_position(event.remaining_ms)
        else:
            raise TypeError(f"Unknown playback event: {event!r}")

    def on_track_boundary(self, track_index: int) -> None:
        # The player stops on its own after this track; its end event arms the check
        if self._stop_after_current:
            logger.debug(f"Boundary to {track_index} ignored: stop after current requested")
            return
        self._maybe_arm(track_index, "track boundary")

    def on_track_end(self, track_index: Optional[int] = None) -> None:
        # The host may already have advanced; prefer the finished track's own index
        if track_index is None:
            track_index = self.queue.active_index()
        self._maybe_arm(track_index, "track end")

    def on_playback_position(self, remaining_ms: int) -> None:
        """Cache stop-after-current while the track is about to end."""
        if remaining_ms > self.stop_check_window_ms:
            return
        stop_after = read_stop_after_current(self.queue)
        if stop_after != self._stop_after_current:
            logger.debug(f"Stop after current is {'on' if stop_after else 'off'} ({remaining_ms} ms left)")
        self._stop_after_current = stop_after

    def _maybe_arm(self, active_index: int, reason: str) -> None:
        if not self.context.enabled:
            return
        if self._armed:
            logger.debug(f"Boundary check already pending, ignoring {reason}")
            return
        if not is_last_track(active_index, self.queue.total_count()):
            return

        self._armed = True
        logger.debug(f"Arming boundary check ({reason}, index={active_index})")
        self.scheduler.call_later(self.debounce_ms / 1000.0, self._boundary_check)

    def _boundary_check(self) -> None:
        self._armed = False

        if not self.context.enabled:
            logger.debug("Boundary check skipped: random album disabled")
            return

        active_index = self.queue.active_index()
        total_count = self.queue.total_count()
        if not is_last_track(active_index, total_count):
            logger.debug(
                f"Boundary check: queue moved on (index={active_index}, total={total_count})"
            )
            return

        stop_after = self._stop_after_current
        self._stop_after_current = False

        try:
            if stop_after:
                logger.info("Queue finished with stop after current set; loading album without playing")
                self.queue.set_stop_after_current(False)
                self._replace(start=False)
            else:
                logger.info("Queue finished; playing a new random album")
                self._replace(start=True)
        except NoCandidateFound as e:
            # The queue was already cleared: playback stays stopped
            self.last_error = e
            logger.error(f"Automatic reload failed, playback stopped: {e}")
            if self.on_error is not None:
                self.on_error(e)
        else:
            self.last_error = None

    # Selection

    def _select_tracks(self, criteria: FilterCriteria) -> LoadedAlbum:
        album_id = select_album(
            self.collection,
            criteria,
            self.context.window,
            persist_window=self.context.save_window,
        )
        tracks = expand_album(self.collection, album_id, criteria.path_filter, rng=self.rng)
        if not tracks:
            raise NoCandidateFound(f"Album {album_id} has no tracks matching the path filter")
        return LoadedAlbum(album_id, tracks)

    def _replace(self, start: bool) -> LoadedAlbum:
        criteria = self.context.criteria
        self.queue.clear()
        loaded = self._select_tracks(criteria)
        for track in loaded.tracks:
            logger.debug(f"Loading track {track.url}")
            self.queue.append(track)
        if start and loaded.tracks:
            self.queue.play_at(0)
        return loaded

    # Manual actions (bypass the state machine, errors propagate)

    def load_random(self) -> LoadedAlbum:
        """Replace the queue with a random album without starting playback."""
        return self._replace(start=False)

    def play_random(self) -> LoadedAlbum:
        """Replace the queue with a random album and start playing it."""
        return self._replace(start=True)

    def enqueue_random(self) -> LoadedAlbum:
        """Append a random album to the queue without clearing it."""
        loaded = self._select_tracks(self.context.criteria)
        for track in loaded.tracks:
            self.queue.append(track)
        return loaded

    # Entry points for the settings/menu collaborator

    def on_settings_applied(self, criteria: FilterCriteria, enabled: bool) -> None:
        self.context.apply_settings(criteria, enabled)

    def manual_replace(self) -> LoadedAlbum:
        return self.play_random()

    def manual_enqueue(self) -> LoadedAlbum:
        return self.enqueue_random()
