"""
HTTP cache validators and cache-control policy.
"""

import hashlib
from typing import Dict, Optional


class CachePolicy:
    """max-age values, in seconds, for the two kinds of resources."""
    DERIVED_MAX_AGE = 60 * 60 * 24 * 30
    ORIGINAL_MAX_AGE = 60 * 60 * 24 * 7


def compute_validator(size: int, mtime_ms: float) -> str:
    """Strong ETag derived from size and modification time."""
    raw = f"{size}-{mtime_ms!r}"
    return '"%s"' % hashlib.sha1(raw.encode()).hexdigest()


def is_fresh(request_validator: Optional[str], current_validator: str) -> bool:
    """Exact match only; no weak comparison and no list parsing."""
    if not request_validator:
        return False
    return request_validator == current_validator


def cache_headers(
    content_type: str,
    etag: str,
    max_age: int,
    content_length: Optional[int] = None
) -> Dict[str, str]:
    """Headers for a full (200) response."""
    headers = {
        'Content-Type': content_type,
        'ETag': etag,
        'Cache-Control': f"public, max-age={max_age}",
    }
    if content_length is not None:
        headers['Content-Length'] = str(content_length)
    return headers
