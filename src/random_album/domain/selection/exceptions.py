"""Selection exceptions for error handling."""


class RandomAlbumError(Exception):
    """Base exception for random album operations."""

    pass


class NoCandidateFound(RandomAlbumError):
    """Raised when no album in the collection matches the filters."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "No album matches the current filters (collection empty or filters too strict)"
        )
