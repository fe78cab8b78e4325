"""
MPV player integration with JSON IPC for Random Album

mpv's playlist is the playback queue. mpv runs with --idle=yes and
--keep-open=no so that finishing the last entry emits an ``end-file`` event
and drops ``playlist-pos`` to -1; those two signals become the sequencer's
boundary events.
"""

import json
import os
import socket
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Iterator, List, NamedTuple, Optional

from loguru import logger

from random_album.core.config import Config
from random_album.domain.selection.exceptions import RandomAlbumError
from random_album.domain.selection.models import TrackLocator

from .events import PlaybackEvent, PlaybackPositionEvent, TrackBoundaryEvent, TrackEndEvent
from .queue import UnsupportedHostFeature
from .scheduling import DeferredCallScheduler

# Observed property ids
OBSERVE_PLAYLIST_POS = 1
OBSERVE_TIME_REMAINING = 2
OBSERVE_PATH = 3

# Upper bound on how long the event loop blocks waiting for mpv
MAX_POLL_INTERVAL = 0.25
MIN_POLL_INTERVAL = 0.001


class MpvConnectionError(RandomAlbumError):
    """Raised when mpv does not accept a queue command."""

    pass


class PlayerState(NamedTuple):
    """Immutable player state."""

    socket_path: Optional[str] = None
    process: Optional[subprocess.Popen] = None


def get_default_socket_path() -> str:
    return str(Path(tempfile.gettempdir()) / "random-album-mpv.sock")


def get_socket_path(config: Config) -> str:
    return config.player.mpv_socket_path or get_default_socket_path()


def check_mpv_available() -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            ["mpv", "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def start_mpv(config: Config) -> Optional[PlayerState]:
    """Start MPV with JSON IPC and return initial state."""
    socket_path = get_socket_path(config)

    logger.info(f"Starting MPV player with socket: {socket_path}")

    try:
        if os.path.exists(socket_path):
            logger.debug(f"Removing existing socket: {socket_path}")
            os.unlink(socket_path)

        cmd = [
            "mpv",
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={socket_path}",
            f"--volume={config.player.volume}",
            "--keep-open=no",
            "--load-scripts=no",
        ]

        process = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )

        timeout = 5.0
        start_time = time.time()
        while not os.path.exists(socket_path):
            if time.time() - start_time > timeout:
                logger.error(f"MPV socket creation timeout after {timeout}s")
                process.kill()
                return None
            time.sleep(0.1)

        if send_mpv_command(socket_path, {"command": ["get_property", "idle-active"]}):
            logger.info("MPV started successfully")
            return PlayerState(socket_path=socket_path, process=process)

        logger.error("MPV socket connection test failed")
        process.kill()
        return None

    except (subprocess.SubprocessError, OSError) as e:
        logger.error(f"Failed to start MPV: {e}")
        return None


def stop_mpv(state: PlayerState) -> None:
    """Stop MPV process and cleanup."""
    if state.process:
        try:
            state.process.kill()
            state.process.wait(timeout=2.0)
        except (OSError, subprocess.TimeoutExpired):
            pass  # Process already terminated or couldn't be killed

    if state.socket_path and os.path.exists(state.socket_path):
        try:
            os.unlink(state.socket_path)
        except OSError:
            pass


def is_mpv_running(state: PlayerState) -> bool:
    """Check if MPV process is still running."""
    if not state.process or state.process.poll() is not None:
        return False
    return bool(state.socket_path and os.path.exists(state.socket_path))


def _request(socket_path: Optional[str], command: dict[str, Any]) -> Optional[dict]:
    """Send one JSON IPC command on a fresh connection and return the reply."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.settimeout(2.0)
        sock.connect(socket_path)
        sock.sendall((json.dumps(command) + "\n").encode("utf-8"))

        # Event lines can arrive before the reply; the reply carries "error"
        buffer = b""
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                return None
            buffer += chunk
            *lines, buffer = buffer.split(b"\n")
            for line in lines:
                try:
                    message = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if "error" in message:
                    return message

    except OSError:
        return None
    finally:
        sock.close()


def send_mpv_command(socket_path: Optional[str], command: dict[str, Any]) -> bool:
    """Send JSON IPC command to MPV."""
    reply = _request(socket_path, command)
    return reply is not None and reply.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    reply = _request(socket_path, {"command": ["get_property", property_name]})
    if reply and reply.get("error") == "success":
        return reply.get("data")
    return None


class MpvQueue:
    """PlaybackQueue backed by mpv's playlist.

    mpv has no stop-after-current mode, so reading that flag raises
    UnsupportedHostFeature and the sequencer treats it as off.
    """

    def __init__(self, socket_path: str):
        self.socket_path = socket_path

    def _command(self, *args: Any) -> None:
        if not send_mpv_command(self.socket_path, {"command": list(args)}):
            raise MpvConnectionError(f"mpv rejected command {list(args)!r} on {self.socket_path}")

    def clear(self) -> None:
        # "stop" also empties the playlist
        self._command("stop")

    def append(self, locator: TrackLocator) -> None:
        self._command("loadfile", locator.url, "append")

    def play_at(self, index: int) -> None:
        self._command("set_property", "playlist-pos", index)
        self._command("set_property", "pause", False)

    def active_index(self) -> int:
        position = get_mpv_property(self.socket_path, "playlist-pos")
        return int(position) if position is not None else -1

    def total_count(self) -> int:
        count = get_mpv_property(self.socket_path, "playlist-count")
        return int(count) if count is not None else 0

    def get_stop_after_current(self) -> bool:
        raise UnsupportedHostFeature("mpv has no stop-after-current mode")

    def set_stop_after_current(self, enabled: bool) -> None:
        if enabled:
            raise UnsupportedHostFeature("mpv has no stop-after-current mode")


class MpvEventTranslator:
    """Turns mpv IPC messages into playback events.

    Only the drop of ``playlist-pos`` to -1 right after a natural end of
    file becomes a TrackBoundaryEvent: mpv reports every new index as the
    track starts, and a boundary into the last entry must not trigger a
    reload while it plays. Drops caused by ``stop`` (another client
    replacing the queue) are ignored.

    A TrackEndEvent carries the position of the entry that finished. mpv
    has usually moved to the next entry by the time a client could ask
    for ``playlist-pos``, so the live index would point past it.
    """

    def __init__(self):
        self.current_path: Optional[str] = None
        self._last_position: Optional[int] = None
        self._playing_position: Optional[int] = None
        self._ended_naturally = False

    def translate(self, message: dict[str, Any]) -> List[PlaybackEvent]:
        event_name = message.get("event")
        if event_name == "end-file":
            self._ended_naturally = message.get("reason") == "eof"
            if self._ended_naturally:
                return [TrackEndEvent(track_index=self._playing_position)]
            return []

        if event_name != "property-change":
            return []

        name = message.get("name")
        data = message.get("data")

        if name == "path":
            self.current_path = data
            return []

        if name == "time-remaining":
            if data is None:
                return []
            return [PlaybackPositionEvent(remaining_ms=int(float(data) * 1000))]

        if name == "playlist-pos":
            position = -1 if data is None else int(data)
            previous, self._last_position = self._last_position, position
            if position != -1:
                self._playing_position = position
            if position == -1 and previous not in (None, -1) and self._ended_naturally:
                return [TrackBoundaryEvent(track_index=-1)]
            return []

        return []


class MpvEventConnection:
    """Persistent IPC connection that receives mpv events."""

    def __init__(self, socket_path: str):
        self.socket_path = socket_path
        self._sock: Optional[socket.socket] = None
        self._buffer = b""

    def __enter__(self) -> "MpvEventConnection":
        self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._sock.connect(self.socket_path)
        for observe_id, name in (
            (OBSERVE_PLAYLIST_POS, "playlist-pos"),
            (OBSERVE_TIME_REMAINING, "time-remaining"),
            (OBSERVE_PATH, "path"),
        ):
            payload = {"command": ["observe_property", observe_id, name]}
            self._sock.sendall((json.dumps(payload) + "\n").encode("utf-8"))
        return self

    def __exit__(self, *exc_info) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def read_messages(self, timeout: float) -> Iterator[dict[str, Any]]:
        """Yield messages that arrive within timeout seconds.

        Raises:
            MpvConnectionError: If mpv closed the connection
        """
        if self._sock is None:
            raise MpvConnectionError("connection not open")
        self._sock.settimeout(timeout)
        try:
            chunk = self._sock.recv(65536)
        except socket.timeout:
            return
        if not chunk:
            raise MpvConnectionError("mpv closed the IPC connection")

        self._buffer += chunk
        *lines, self._buffer = self._buffer.split(b"\n")
        for line in lines:
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                logger.warning(f"Ignoring malformed mpv message: {line[:200]!r}")


def pump_events(
    connection: MpvEventConnection,
    translator: MpvEventTranslator,
    handle_event: Callable[[PlaybackEvent], None],
    scheduler: DeferredCallScheduler,
    should_continue: Callable[[], bool] = lambda: True,
    on_track_finished: Optional[Callable[[str], None]] = None,
) -> None:
    """Single-threaded loop: dispatch mpv events, then run due deferred calls.

    Args:
        connection: Open event connection
        translator: mpv message translator
        handle_event: Receives each playback event (usually PlaybackSequencer.handle)
        scheduler: Scheduler whose due calls run between reads
        should_continue: Loop runs while this returns True
        on_track_finished: Called with the path of each naturally finished track
    """
    while should_continue():
        wait = scheduler.seconds_until_next()
        timeout = MAX_POLL_INTERVAL if wait is None else min(wait, MAX_POLL_INTERVAL)
        timeout = max(timeout, MIN_POLL_INTERVAL)  # 0 would make the socket non-blocking

        for message in connection.read_messages(timeout):
            finished_path = translator.current_path
            for event in translator.translate(message):
                if (
                    isinstance(event, TrackEndEvent)
                    and finished_path
                    and on_track_finished is not None
                ):
                    on_track_finished(finished_path)
                handle_event(event)

        scheduler.run_due()
