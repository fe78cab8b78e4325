"""
Tag extraction with mutagen.

Handles ID3 (MP3), MP4 and Vorbis-comment (FLAC/Ogg/Opus) tag names.
"""

import os
import re
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError

from .models import LibraryTrack

TITLE_TAGS = ["TIT2", "\xa9nam", "TITLE", "title"]
ARTIST_TAGS = ["TPE1", "\xa9ART", "ARTIST", "artist"]
ALBUM_TAGS = ["TALB", "\xa9alb", "ALBUM", "album"]
ALBUM_ARTIST_TAGS = ["TPE2", "aART", "ALBUMARTIST", "albumartist"]
GENRE_TAGS = ["TCON", "\xa9gen", "GENRE", "genre"]
DISC_TAGS = ["TPOS", "disk", "DISCNUMBER", "discnumber"]
TRACK_TAGS = ["TRCK", "trkn", "TRACKNUMBER", "tracknumber"]

_LEADING_NUMBER = re.compile(r"\d+")


def get_tag_value(audio_file: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
            if value:
                if isinstance(value, list) and value:
                    return str(value[0])
                return str(value)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
    return None


def parse_position(raw: Optional[str]) -> Optional[int]:
    """Parse a disc/track position such as '3', '03/12' or MP4's '(3, 12)'."""
    if not raw:
        return None
    match = _LEADING_NUMBER.search(raw)
    return int(match.group()) if match else None


def extract_track_tags(local_path: str) -> LibraryTrack:
    """Read album-related tags from an audio file.

    Unreadable files come back with only their path and mtime set.
    """
    try:
        file_mtime = os.stat(local_path).st_mtime
    except OSError:
        file_mtime = None

    try:
        audio_file = MutagenFile(local_path)
    except (MutagenError, OSError) as e:
        logger.warning(f"Could not read metadata from {local_path}: {e}")
        audio_file = None

    if audio_file is None:
        return LibraryTrack(local_path=local_path, title=Path(local_path).stem, file_mtime=file_mtime)

    return LibraryTrack(
        local_path=local_path,
        title=get_tag_value(audio_file, TITLE_TAGS) or Path(local_path).stem,
        artist=get_tag_value(audio_file, ARTIST_TAGS),
        album=get_tag_value(audio_file, ALBUM_TAGS),
        album_artist=get_tag_value(audio_file, ALBUM_ARTIST_TAGS),
        genre=get_tag_value(audio_file, GENRE_TAGS),
        disc_number=parse_position(get_tag_value(audio_file, DISC_TAGS)),
        track_number=parse_position(get_tag_value(audio_file, TRACK_TAGS)),
        file_mtime=file_mtime,
    )
