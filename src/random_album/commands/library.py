"""
Library command handlers for Random Album CLI.

Handles: scan
"""

from random_album.core import database
from random_album.core.config import Config
from random_album.core.output import log
from random_album.domain import library


def handle_scan_command(config: Config, prune: bool = True) -> int:
    """Scan the library paths and update the collection."""
    log("Scanning music library...", level="info")
    for library_path in config.music.library_paths:
        log(f"Scanning: {library_path}", level="info")

    result = library.scan_library(config, prune=prune)
    stats = database.get_library_stats()

    log("\nScan complete:", level="info")
    log(f"  Found: {result.found} music files", level="info")
    log(f"  Added: {result.added}, updated: {result.updated}, unchanged: {result.skipped}", level="info")
    if prune:
        log(f"  Removed: {result.removed} missing files", level="info")
    log(
        f"  Collection: {stats['albums']} albums, {stats['tracks']} tracks, {stats['genres']} genres",
        level="info",
    )
    return 0
