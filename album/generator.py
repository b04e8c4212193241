"""
DerivedImageGenerator - Serves thumbnails and placeholders from the disk cache,
rendering them on a miss.
"""

import base64
import logging
from typing import Optional, Tuple

from .cache_store import DiskCacheStore
from .errors import CacheIOError, NotFound
from .fingerprint import fingerprint, stat_source
from .inflight import InFlightRegistry
from .models import DerivedImage, SourceFile
from .transform import ImageTransformer, TransformSpec
from .validator import compute_validator


class DerivedImageGenerator:
    """
    Check cache, render on miss, persist, return.

    The source mtime is part of every key, so a modified source always
    misses and the old entry is simply never read again.
    """

    def __init__(
        self,
        image_root: str,
        store: DiskCacheStore,
        transformer: Optional[ImageTransformer] = None,
        registry: Optional[InFlightRegistry] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize generator.

        Args:
            image_root: Directory holding the source images
            store: Cache store for rendered output
            transformer: Image transformer (defaults to Pillow)
            registry: In-flight registry shared by all request threads
            logger: Optional logger instance
        """
        self.image_root = image_root
        self.store = store
        self.transformer = transformer or ImageTransformer()
        self.registry = registry or InFlightRegistry()
        self.logger = logger or logging.getLogger(__name__)

    def get_thumbnail(self, name: str, width: int) -> DerivedImage:
        key, etag = self.thumbnail_entry(name, width)
        return DerivedImage(data=self.read_entry(key), content_type=self.store.content_type, etag=etag)

    def thumbnail_entry(self, name: str, width: int) -> Tuple[str, str]:
        """
        Make sure the thumbnail is cached and return its key and validator.

        The entry is only stat'ed, never read, so a conditional request can
        be answered without loading the image.
        """
        spec = TransformSpec.thumbnail(width)
        source = stat_source(self.image_root, name)
        key = self.cache_key(source, spec)
        if not self.store.exists(key):
            self.registry.run(key, lambda: self._generate(key, source, spec))
        entry = self.store.stat_entry(key)
        return key, compute_validator(entry.size, entry.mtime_ms)

    def read_entry(self, key: str) -> bytes:
        data = self.store.read(key)
        if data is None:
            raise CacheIOError(f"Cache entry {key} disappeared before it could be read")
        return data

    def get_placeholder(self, name: str) -> str:
        """Return the blurred placeholder as a data URI."""
        _, data = self._derive(name, TransformSpec.placeholder())
        return f"data:image/jpeg;base64,{base64.b64encode(data).decode('ascii')}"

    def cache_key(self, source: SourceFile, spec: TransformSpec) -> str:
        return fingerprint(source.name, spec.key_params(), source.mtime_ms)

    def _derive(self, name: str, spec: TransformSpec) -> Tuple[str, bytes]:
        source = stat_source(self.image_root, name)
        key = self.cache_key(source, spec)

        data = self.store.read(key)
        if data is not None:
            self.logger.debug(f"Serving cached {spec.kind} for {name}")
            return key, data

        return key, self.registry.run(key, lambda: self._generate(key, source, spec))

    def _generate(self, key: str, source: SourceFile, spec: TransformSpec) -> bytes:
        # A previous leader may have finished between our miss and registration.
        data = self.store.read(key)
        if data is not None:
            return data

        self.logger.info(f"Generating {spec.kind} for {source.name} (width {spec.width})")
        try:
            data = self.transformer.render(source.path, spec)
        except FileNotFoundError:
            raise NotFound(f"File not found: {source.name}")
        self.store.write(key, data)
        return data
