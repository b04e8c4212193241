"""
Value objects shared by the lister, the cache and the web layer.
"""

import math
import os
from dataclasses import dataclass, field, asdict
from typing import List, NamedTuple, Optional


@dataclass(frozen=True)
class SourceFile:
    """
    A regular file in the image root, as seen by one stat call.

    Attributes:
        name: Single path segment relative to the image root
        path: Absolute path of the file
        mtime_ms: Modification time in milliseconds
        size: Size in bytes
    """
    name: str
    path: str
    mtime_ms: float
    size: int

    @classmethod
    def from_stat(cls, name: str, path: str, st: os.stat_result) -> 'SourceFile':
        return cls(name=name, path=path, mtime_ms=st.st_mtime_ns / 1e6, size=st.st_size)


class EntryStat(NamedTuple):
    """Size and modification time of a stored cache entry."""
    size: int
    mtime_ms: float


class DerivedImage(NamedTuple):
    """A thumbnail ready to be served."""
    data: bytes
    content_type: str
    etag: str


@dataclass
class PageItem:
    """One entry of a listing page."""
    name: str
    placeholder: Optional[str]
    thumbUrl: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ListingPage:
    """
    Ordered slice of the image root.

    Attributes:
        page: 1-based page number
        limit: Page size
        total: Number of listable files
        names: Names on this page, in display order
    """
    page: int
    limit: int
    total: int
    names: List[str] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


@dataclass
class Page:
    """Listing response body."""
    page: int
    limit: int
    total: int
    totalPages: int
    items: List[PageItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'page': self.page,
            'limit': self.limit,
            'total': self.total,
            'totalPages': self.totalPages,
            'items': [item.to_dict() for item in self.items],
        }
