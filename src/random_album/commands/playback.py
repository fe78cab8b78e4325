"""
Playback command handlers for Random Album CLI.

Handles: run, play, enqueue
"""

import os
from typing import Optional

from random_album.context import RandomAlbumContext
from random_album.core import database
from random_album.core.config import Config
from random_album.core.output import log
from random_album.core.settings import SqliteSettingsStore
from random_album.domain import playback
from random_album.domain.playback import (
    DeferredCallScheduler,
    LoadedAlbum,
    PlaybackEvent,
    PlaybackSequencer,
    TrackEndEvent,
)
from random_album.domain.selection import NoCandidateFound, SqliteCollection


def build_sequencer(
    config: Config,
    socket_path: str,
    context: Optional[RandomAlbumContext] = None,
    scheduler: Optional[DeferredCallScheduler] = None,
) -> PlaybackSequencer:
    """Wire the sequencer to the SQLite collection and the mpv queue."""
    context = context or RandomAlbumContext.load(SqliteSettingsStore())
    return PlaybackSequencer(
        context=context,
        collection=SqliteCollection(),
        queue=playback.MpvQueue(socket_path),
        scheduler=scheduler or DeferredCallScheduler(),
        debounce_ms=config.random_album.debounce_ms,
        stop_check_window_ms=config.random_album.stop_check_window_ms,
        on_error=lambda e: log(f"❌ Random album stopped: {e}", level="error"),
    )


def report_loaded(loaded: LoadedAlbum, verb: str) -> None:
    log(f"♪ {verb} album {loaded.album_id} ({len(loaded.tracks)} tracks)", level="info")
    for track in loaded.tracks:
        log(f"   {track.disc_number}-{track.track_number:02d} {os.path.basename(track.url)}", level="debug")


def _running_socket(config: Config) -> Optional[str]:
    socket_path = playback.get_socket_path(config)
    if not os.path.exists(socket_path):
        log(f"❌ No running player at {socket_path}. Start one with 'random-album run'.", level="error")
        return None
    return socket_path


def handle_run_command(config: Config) -> int:
    """Start mpv, play a random album and keep reloading until interrupted."""
    if not playback.check_mpv_available():
        log("Error: MPV is not installed or not available in PATH.", level="error")
        return 1

    player_state = playback.start_mpv(config)
    if player_state is None:
        log("❌ Failed to start music player", level="error")
        return 1

    context = RandomAlbumContext.load(SqliteSettingsStore())
    sequencer = build_sequencer(config, player_state.socket_path, context=context)

    def dispatch(event: PlaybackEvent) -> None:
        # Pick up settings written by one-shot commands before the queue runs out
        if isinstance(event, TrackEndEvent):
            context.refresh()
        sequencer.handle(event)

    def track_finished(local_path: str) -> None:
        if not database.record_play(local_path):
            log(f"Finished track not in collection: {local_path}", level="debug")

    try:
        try:
            report_loaded(sequencer.play_random(), "Playing")
        except NoCandidateFound as e:
            log(f"❌ {e}", level="error")
            return 1

        if not context.enabled:
            log("Random album is disabled; the queue will not be refilled", level="warning")

        with playback.MpvEventConnection(player_state.socket_path) as connection:
            playback.pump_events(
                connection,
                playback.MpvEventTranslator(),
                dispatch,
                sequencer.scheduler,
                should_continue=lambda: playback.is_mpv_running(player_state),
                on_track_finished=track_finished,
            )
    except KeyboardInterrupt:
        log("Stopping playback", level="info")
    except playback.MpvConnectionError as e:
        log(f"Player connection closed: {e}", level="warning")
    finally:
        playback.stop_mpv(player_state)

    return 0


def handle_play_command(config: Config) -> int:
    """Replace the running player's queue with a random album and play it."""
    socket_path = _running_socket(config)
    if socket_path is None:
        return 1

    try:
        loaded = build_sequencer(config, socket_path).manual_replace()
    except NoCandidateFound as e:
        log(f"❌ {e}", level="error")
        return 1

    report_loaded(loaded, "Playing")
    return 0


def handle_enqueue_command(config: Config) -> int:
    """Append a random album to the running player's queue."""
    socket_path = _running_socket(config)
    if socket_path is None:
        return 1

    try:
        loaded = build_sequencer(config, socket_path).manual_enqueue()
    except NoCandidateFound as e:
        log(f"❌ {e}", level="error")
        return 1

    report_loaded(loaded, "Queued")
    return 0
