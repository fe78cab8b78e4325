"""Shared fixtures: temporary database and in-memory collaborators."""

from itertools import chain, repeat
from pathlib import Path
from unittest.mock import patch

import pytest

from random_album.core import database
from random_album.domain.playback.queue import UnsupportedHostFeature
from random_album.domain.selection.models import TrackLocator


@pytest.fixture
def temp_db(tmp_path: Path):
    """Point the database at a fresh file and create the schema."""
    db_path = tmp_path / "random_album.db"
    with patch("random_album.core.database.get_database_path", return_value=db_path):
        database.init_database()
        yield db_path


class MemorySettingsStore:
    def __init__(self, values: dict[str, str] | None = None):
        self.values = dict(values or {})
        self.writes: list[tuple[str, str]] = []

    def read_config(self, key: str, default: str) -> str:
        return self.values.get(key, default)

    def write_config(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes.append((key, value))


class FakeCollection:
    """Collection whose random pick follows a script.

    Args:
        picks: Album ids returned by successive query_random_album calls; the
            last one repeats. An empty list means nothing matches.
        albums: album_id -> list of (url, disc, track, artist_id)
    """

    def __init__(self, picks=(), albums=None):
        self._picks = iter(chain(picks, repeat(picks[-1]))) if picks else iter(())
        self.albums = albums or {}
        self.queries: list[tuple] = []
        self.track_queries: list[tuple] = []

    def query_random_album(self, path_filter, genre_ids, extra_predicate):
        self.queries.append((path_filter, genre_ids, extra_predicate))
        return next(self._picks, None)

    def query_album_artists(self, album_id):
        return {row[3] for row in self.albums.get(album_id, []) if row[3] is not None}

    def query_tracks(self, album_id, artist_id, path_filter):
        self.track_queries.append((album_id, artist_id, path_filter))
        return [
            (url, disc, track)
            for url, disc, track, artist in self.albums.get(album_id, [])
            if (artist_id is None or artist == artist_id) and path_filter in url
        ]

    def query_genres(self):
        return []


class FakeQueue:
    """In-memory playback queue recording every mutation."""

    def __init__(self, urls=(), active_index=-1, stop_after_current=False, supports_stop=True):
        self.urls = list(urls)
        self.active = active_index
        self.stop_after_current = stop_after_current
        self.supports_stop = supports_stop
        self.calls: list[tuple] = []
        self.playing = False

    def clear(self) -> None:
        self.calls.append(("clear",))
        self.urls = []
        self.active = -1
        self.playing = False

    def append(self, locator: TrackLocator) -> None:
        self.calls.append(("append", locator.url))
        self.urls.append(locator.url)

    def play_at(self, index: int) -> None:
        self.calls.append(("play_at", index))
        self.active = index
        self.playing = True

    def active_index(self) -> int:
        return self.active

    def total_count(self) -> int:
        return len(self.urls)

    def get_stop_after_current(self) -> bool:
        if not self.supports_stop:
            raise UnsupportedHostFeature("no stop-after-current")
        return self.stop_after_current

    def set_stop_after_current(self, enabled: bool) -> None:
        self.calls.append(("set_stop_after_current", enabled))
        self.stop_after_current = enabled


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings_store() -> MemorySettingsStore:
    return MemorySettingsStore()


@pytest.fixture
def make_collection():
    return FakeCollection


@pytest.fixture
def make_queue():
    return FakeQueue


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_settings():
    return MemorySettingsStore
