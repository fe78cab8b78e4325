"""
Music library scanning.

Walks the configured library paths, reads tags from new or changed files
and syncs the collection tables. Unchanged files are skipped by mtime.
"""

import os
from pathlib import Path
from typing import Callable, NamedTuple, Optional

from loguru import logger

from random_album.core import database
from random_album.core.config import Config

from .metadata import extract_track_tags
from .models import LibraryTrack


class ScanResult(NamedTuple):
    """Counts from one library scan."""

    found: int
    added: int
    updated: int
    skipped: int
    removed: int


def find_music_files(config: Config) -> list[Path]:
    """List music files under every configured library path."""
    files: list[Path] = []
    for library_path in config.music.library_paths:
        path = Path(library_path).expanduser()
        if not path.exists():
            logger.warning(f"Library path does not exist: {path}")
            continue

        # Only glob music file extensions
        for ext in config.music.supported_formats:
            pattern = f"*{ext}"
            matches = path.rglob(pattern) if config.music.scan_recursive else path.glob(pattern)
            files.extend(p for p in matches if p.is_file())

    return sorted(set(files))


def scan_library(
    config: Config,
    prune: bool = True,
    progress_callback: Optional[Callable[[str, LibraryTrack], None]] = None,
) -> ScanResult:
    """Scan the library and sync the collection tables.

    Args:
        config: Configuration object
        prune: Remove tracks whose files are gone
        progress_callback: Called with (local_path, track) for each file read

    Returns:
        ScanResult with per-category counts
    """
    known_files = database.get_known_mtimes()
    logger.info(f"Database has {len(known_files)} known files")

    files = find_music_files(config)
    changed: list[LibraryTrack] = []
    skipped = 0

    for file_path in files:
        local_path = str(file_path)

        stored_mtime = known_files.get(local_path)
        if stored_mtime:
            try:
                if os.stat(local_path).st_mtime <= stored_mtime:
                    skipped += 1
                    continue
            except OSError as e:
                logger.warning(f"Cannot stat {local_path}: {e}")
                continue

        track = extract_track_tags(local_path)
        changed.append(track)
        if progress_callback:
            progress_callback(local_path, track)

    added, updated = database.batch_upsert_tracks(changed)
    removed = database.prune_tracks({str(p) for p in files}) if prune else 0

    logger.info(
        f"Scan stats - found: {len(files)}, added: {added}, updated: {updated}, "
        f"skipped: {skipped}, removed: {removed}"
    )
    return ScanResult(len(files), added, updated, skipped, removed)
