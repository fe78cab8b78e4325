"""
Music library domain models.
"""

from typing import NamedTuple, Optional


class LibraryTrack(NamedTuple):
    """A scanned audio file with the tags the collection needs.

    Files without an album tag are scanned but never stored: they cannot
    belong to an album.
    """

    local_path: str
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    album_artist: Optional[str] = None  # Groups same-named albums per artist
    genre: Optional[str] = None
    disc_number: Optional[int] = None
    track_number: Optional[int] = None
    file_mtime: Optional[float] = None
