"""Library domain - scanning audio files into the album collection."""

from .metadata import extract_track_tags, get_tag_value, parse_position
from .models import LibraryTrack
from .scanner import ScanResult, find_music_files, scan_library

__all__ = [
    "LibraryTrack",
    "ScanResult",
    "extract_track_tags",
    "find_music_files",
    "get_tag_value",
    "parse_position",
    "scan_library",
]
