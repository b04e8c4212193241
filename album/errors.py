"""
Error taxonomy for the photo album server.

Each error carries the HTTP status the web layer answers with.
"""


class AlbumError(Exception):
    """Base class for errors that map onto a client-visible status."""
    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPath(AlbumError):
    """Raised when a name escapes the image root or does not exist."""
    status = 404


class NotFound(AlbumError):
    """Raised when a resolved path is not a regular file (or vanished)."""
    status = 404


class BadRequest(AlbumError):
    """Raised for missing or malformed request parameters."""
    status = 400


class UnsupportedMediaType(AlbumError):
    """Raised when an upload is not an image."""
    status = 400


class CacheIOError(AlbumError):
    """Raised when the derived-image cache cannot be read or written."""
    status = 500
