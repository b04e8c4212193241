"""
DiskCacheStore - Write-once key to bytes store for derived images.
"""

import logging
import os
import re
import tempfile
from mimetypes import guess_type
from typing import Iterator, Optional

from .errors import CacheIOError
from .models import EntryStat


class DiskCacheStore:
    """
    Stores derived images as ``<key><extension>`` files in one directory.

    Writes go to a temporary file in the same directory which is then
    renamed over the final name, so readers only ever see complete files.
    """

    KEY_PATTERN = re.compile(r'^[0-9a-f]{40}$')

    def __init__(
        self,
        cache_dir: str,
        extension: str = '.jpg',
        logger: Optional[logging.Logger] = None
    ):
        self.cache_dir = cache_dir
        self.extension = extension
        self.logger = logger or logging.getLogger(__name__)
        os.makedirs(self.cache_dir, exist_ok=True)

    @property
    def content_type(self) -> str:
        mimetype, _ = guess_type(f"entry{self.extension}")
        return mimetype or 'image/jpeg'

    def path_for(self, key: str) -> str:
        if not self.KEY_PATTERN.match(key):
            raise ValueError(f"Malformed cache key: {key!r}")
        return os.path.join(self.cache_dir, f"{key}{self.extension}")

    def exists(self, key: str) -> bool:
        return os.path.isfile(self.path_for(key))

    def read(self, key: str) -> Optional[bytes]:
        """Return the stored bytes, or None on a miss."""
        try:
            with open(self.path_for(key), 'rb') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheIOError(f"Failed to read cache entry {key}: {e}") from e

    def write(self, key: str, data: bytes) -> None:
        """Atomically store data under key."""
        final_path = self.path_for(key)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{key}.", suffix='.tmp')
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, final_path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise CacheIOError(f"Failed to write cache entry {key}: {e}") from e
        self.logger.debug(f"Cached {key} ({len(data)} bytes)")

    def stat_entry(self, key: str) -> EntryStat:
        try:
            st = os.stat(self.path_for(key))
        except OSError as e:
            raise CacheIOError(f"Failed to stat cache entry {key}: {e}") from e
        return EntryStat(size=st.st_size, mtime_ms=st.st_mtime_ns / 1e6)

    def keys(self) -> Iterator[str]:
        """Yield the keys of all complete entries."""
        for filename in os.listdir(self.cache_dir):
            key, ext = os.path.splitext(filename)
            if ext == self.extension and self.KEY_PATTERN.match(key):
                yield key

    def remove(self, key: str) -> None:
        """Delete an entry. Only the maintenance sweep calls this."""
        try:
            os.remove(self.path_for(key))
        except FileNotFoundError:
            pass
