"""
AlbumConfig - Runtime configuration for the photo album server.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class AlbumConfig:
    """
    Configuration built once at startup and passed to every component.

    Attributes:
        image_root: Directory holding the original images
        cache_dir: Directory for derived images (defaults to <root>/.cache/thumbs)
        host: Interface the HTTP server binds to
        port: Port the HTTP server listens on
        max_upload_mb: Upload size ceiling in megabytes
        default_thumb_width: Width used for thumbUrl links and bare /thumb requests
        placeholder_workers: Threads rendering placeholders for one listing
        log_level: Logging level name
        log_file: Optional log file (stderr when unset)
    """
    image_root: str
    cache_dir: Optional[str] = None
    host: str = '0.0.0.0'
    port: int = 3000
    max_upload_mb: int = 10
    default_thumb_width: int = 400
    placeholder_workers: int = 4
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    def __post_init__(self):
        if self.image_root:
            self.image_root = os.path.realpath(self.image_root)
        if not self.cache_dir and self.image_root:
            self.cache_dir = os.path.join(self.image_root, '.cache', 'thumbs')

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> 'AlbumConfig':
        """Build a configuration from environment variables."""
        return cls(
            image_root=os.getenv('PHOTO_LIBRARY_LOCATION', ''),
            cache_dir=os.getenv('THUMB_CACHE_DIR') or None,
            host=os.getenv('HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', '3000')),
            max_upload_mb=int(os.getenv('MAX_UPLOAD_MB', '10')),
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
            log_file=os.getenv('LOG_FILE') or None,
        )

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []
        if not self.image_root:
            errors.append("PHOTO_LIBRARY_LOCATION is not set")
        elif not os.path.isdir(self.image_root):
            errors.append(f"Image root is not a directory: {self.image_root}")
        if not 0 < self.port < 65536:
            errors.append(f"Invalid port: {self.port}")
        if self.max_upload_mb < 1:
            errors.append(f"MAX_UPLOAD_MB must be at least 1, got {self.max_upload_mb}")
        return errors

    def ensure_dirs(self) -> None:
        """Create the cache directory if it does not exist yet."""
        os.makedirs(self.cache_dir, exist_ok=True)
