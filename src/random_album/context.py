"""Random album context for explicit state passing.

The context bundles the live filter criteria, the enabled flag and the recency
window with the settings store they persist to. Selector and sequencer get it
injected instead of reading module globals, so tests can build one around an
in-memory store.
"""

from dataclasses import dataclass, field

from loguru import logger

from random_album.core.settings import (
    SettingsStore,
    decode_bool,
    decode_list,
    encode_bool,
    encode_list,
)
from random_album.domain.selection.models import FilterCriteria, RecencyWindow, SubFilter

# Settings keys
KEY_ENABLED = "enabled"
KEY_PATH_FILTER = "path_filter"
KEY_GENRES = "genres_filter"
KEY_RECENCY_WINDOW = "last_played"

SUB_FILTER_KEYS = {
    SubFilter.NEVER_PLAYED: "filter_never_played",
    SubFilter.NOT_PLAYED_LAST_YEAR: "filter_not_played_last_year",
    SubFilter.ZERO_PLAY_COUNT: "filter_zero_play_count",
}


def _parse_genre_ids(value: str) -> frozenset[int]:
    genre_ids = set()
    for token in decode_list(value):
        try:
            genre_ids.add(int(token))
        except ValueError:
            logger.warning(f"Ignoring invalid genre id in settings: {token!r}")
    return frozenset(genre_ids)


@dataclass
class RandomAlbumContext:
    """Mutable state shared by the selector and the sequencer.

    Every mutation goes through a method that writes it to the settings
    store, so the persisted state always matches memory.

    Attributes:
        settings: Persistence for all values below
        enabled: Whether exhausting the queue loads a new album
        criteria: Current filter snapshot, replaced wholesale on change
        window: Recently chosen albums
    """

    settings: SettingsStore
    enabled: bool = True
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    window: RecencyWindow = field(default_factory=RecencyWindow)

    @classmethod
    def load(cls, settings: SettingsStore) -> "RandomAlbumContext":
        """Build a context from persisted settings.

        Args:
            settings: Settings store to read from (and later write to)

        Returns:
            New RandomAlbumContext
        """
        sub_filters = frozenset(
            sub_filter
            for sub_filter, key in SUB_FILTER_KEYS.items()
            if decode_bool(settings.read_config(key, "false"))
        )
        criteria = FilterCriteria(
            path_filter=settings.read_config(KEY_PATH_FILTER, ""),
            genre_ids=_parse_genre_ids(settings.read_config(KEY_GENRES, "")),
            sub_filters=sub_filters,
        )
        window = RecencyWindow.from_config(settings.read_config(KEY_RECENCY_WINDOW, ""))
        enabled = decode_bool(settings.read_config(KEY_ENABLED, "true"))

        logger.debug(
            f"Loaded context: enabled={enabled}, criteria={criteria}, window={list(window)}"
        )
        return cls(settings=settings, enabled=enabled, criteria=criteria, window=window)

    def refresh(self) -> None:
        """Re-read every value from the settings store.

        Another process (a one-shot ``play`` or ``settings`` command) may
        have written newer values since this context was loaded.
        """
        fresh = self.load(self.settings)
        self.enabled = fresh.enabled
        self.criteria = fresh.criteria
        self.window = fresh.window

    def apply_settings(self, criteria: FilterCriteria, enabled: bool) -> None:
        """Replace filters and the enabled flag, persisting both.

        The next selection sees the new criteria.
        """
        self.criteria = criteria
        self.enabled = enabled

        self.settings.write_config(KEY_ENABLED, encode_bool(enabled))
        self.settings.write_config(KEY_PATH_FILTER, criteria.path_filter)
        self.settings.write_config(KEY_GENRES, encode_list(sorted(criteria.genre_ids)))
        for sub_filter, key in SUB_FILTER_KEYS.items():
            self.settings.write_config(key, encode_bool(sub_filter in criteria.sub_filters))

        logger.info(f"Settings applied: enabled={enabled}, criteria={criteria}")

    def save_window(self, window: RecencyWindow | None = None) -> None:
        """Persist the recency window (oldest first)."""
        if window is not None:
            self.window = window
        self.settings.write_config(KEY_RECENCY_WINDOW, self.window.to_config())

    def clear_window(self) -> None:
        self.window.clear()
        self.save_window()
