"""
Photo album server with a derived-image cache.

Lists a directory of images, renders thumbnails and blurred placeholders on
demand, caches them on local disk keyed by source modification time, and
serves everything with ETag validators.
"""

__version__ = "1.0.0"

from .config import AlbumConfig
from .errors import AlbumError, InvalidPath, NotFound, BadRequest, UnsupportedMediaType, CacheIOError
from .fingerprint import fingerprint, resolve_source_path, stat_source
from .cache_store import DiskCacheStore
from .validator import CachePolicy, compute_validator, is_fresh
from .transform import ImageTransformer, TransformSpec
from .inflight import InFlightRegistry
from .generator import DerivedImageGenerator
from .lister import DirectoryLister
from .uploads import UploadStore
from .warmer import CacheWarmer, WarmStats
from .sweeper import CacheSweeper, SweepStats
from .web import make_app

__all__ = [
    "AlbumConfig",
    "AlbumError",
    "InvalidPath",
    "NotFound",
    "BadRequest",
    "UnsupportedMediaType",
    "CacheIOError",
    "fingerprint",
    "resolve_source_path",
    "stat_source",
    "DiskCacheStore",
    "CachePolicy",
    "compute_validator",
    "is_fresh",
    "ImageTransformer",
    "TransformSpec",
    "InFlightRegistry",
    "DerivedImageGenerator",
    "DirectoryLister",
    "UploadStore",
    "CacheWarmer",
    "WarmStats",
    "CacheSweeper",
    "SweepStats",
    "make_app",
]
