"""
Settings command handlers for Random Album CLI.

Handles: settings, config, genres, history
"""

from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional

from random_album.context import RandomAlbumContext
from random_album.core.config import Config, get_config_path, save_config
from random_album.core.console import print_table
from random_album.core.output import log
from random_album.core.settings import SettingsStore, SqliteSettingsStore
from random_album.domain.selection import FilterCriteria, SqliteCollection, SubFilter


def build_criteria(
    current: FilterCriteria,
    path_filter: Optional[str] = None,
    genre_ids: Optional[Iterable[int]] = None,
    clear_genres: bool = False,
    sub_filter_changes: Optional[dict[SubFilter, bool]] = None,
) -> FilterCriteria:
    """Derive a new criteria snapshot; None/empty arguments keep current values."""
    genres = set() if clear_genres else set(current.genre_ids)
    if genre_ids:
        genres.update(genre_ids)

    sub_filters = set(current.sub_filters)
    for sub_filter, enabled in (sub_filter_changes or {}).items():
        if enabled:
            sub_filters.add(sub_filter)
        else:
            sub_filters.discard(sub_filter)

    return FilterCriteria(
        path_filter=current.path_filter if path_filter is None else path_filter,
        genre_ids=frozenset(genres),
        sub_filters=frozenset(sub_filters),
    )


def show_settings(context: RandomAlbumContext) -> None:
    criteria = context.criteria
    rows = [
        ("enabled", "yes" if context.enabled else "no"),
        ("path filter", criteria.path_filter or "(any)"),
        ("genres", ", ".join(str(g) for g in sorted(criteria.genre_ids)) or "(all)"),
    ]
    for sub_filter in SubFilter:
        rows.append((sub_filter.value.replace("_", " "), "on" if sub_filter in criteria.sub_filters else "off"))
    print_table("Random album settings", ["Setting", "Value"], rows)


def handle_settings_command(
    enabled: Optional[bool] = None,
    path_filter: Optional[str] = None,
    genre_ids: Optional[list[int]] = None,
    clear_genres: bool = False,
    sub_filter_changes: Optional[dict[SubFilter, bool]] = None,
    store: Optional[SettingsStore] = None,
) -> int:
    """Show settings, or apply changes and then show them."""
    context = RandomAlbumContext.load(store or SqliteSettingsStore())

    changed = (
        enabled is not None
        or path_filter is not None
        or bool(genre_ids)
        or clear_genres
        or bool(sub_filter_changes)
    )
    if changed:
        criteria = build_criteria(
            context.criteria, path_filter, genre_ids, clear_genres, sub_filter_changes
        )
        context.apply_settings(criteria, context.enabled if enabled is None else enabled)
        log("✓ Settings saved", level="info")

    show_settings(context)
    return 0


def handle_config_command(
    config: Config,
    config_path: Optional[Path] = None,
    debounce_ms: Optional[int] = None,
    stop_check_window_ms: Optional[int] = None,
) -> int:
    """Show the sequencer timings, or change them and write config.toml."""
    timings = config.random_album
    if debounce_ms is not None or stop_check_window_ms is not None:
        timings = replace(
            timings,
            debounce_ms=timings.debounce_ms if debounce_ms is None else debounce_ms,
            stop_check_window_ms=(
                timings.stop_check_window_ms if stop_check_window_ms is None else stop_check_window_ms
            ),
        )
        try:
            timings.validate()
        except ValueError as e:
            log(f"❌ Invalid timing: {e}", level="error")
            return 1

        config.random_album = timings
        config_path = config_path or get_config_path()
        if not save_config(config, config_path):
            log(f"❌ Could not write {config_path}", level="error")
            return 1
        log(f"✓ Timings saved to {config_path}", level="info")

    print_table(
        "Sequencer timings",
        ["Setting", "Value"],
        [
            ("debounce", f"{timings.debounce_ms} ms"),
            ("stop check window", f"{timings.stop_check_window_ms} ms"),
        ],
    )
    return 0


def handle_genres_command() -> int:
    """List genre ids and names."""
    genres = SqliteCollection().query_genres()
    if not genres:
        log("No genres found. Run 'random-album scan' first.", level="warning")
        return 0
    print_table("Genres", ["Id", "Name"], genres)
    return 0


def handle_history_command(clear: bool = False, store: Optional[SettingsStore] = None) -> int:
    """Show (or clear) the recently chosen albums, oldest first."""
    context = RandomAlbumContext.load(store or SqliteSettingsStore())
    if clear:
        context.clear_window()
        log("✓ Recently played albums cleared", level="info")
        return 0

    print_table(
        "Recently played albums",
        ["#", "Album"],
        ((position, album_id) for position, album_id in enumerate(context.window, start=1)),
    )
    return 0
