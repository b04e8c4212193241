"""
Cache keys and source path resolution.

A cache key is 40 hex characters: 20 from a SHA-1 digest over the source
name and modification time, then 20 from a SHA-1 digest over the transform
parameters. A source file that changes gets a new key, so stale entries are
never looked up again, and every entry of one source state shares a prefix.
"""

import hashlib
import json
import os
import stat
from typing import Sequence

from .errors import InvalidPath, NotFound
from .models import SourceFile

PART_LENGTH = 20


def _digest(value) -> str:
    canonical = json.dumps(value, separators=(',', ':'), ensure_ascii=False)
    return hashlib.sha1(canonical.encode('utf-8')).hexdigest()[:PART_LENGTH]


def source_fingerprint(name: str, mtime_ms: float) -> str:
    """Key prefix shared by every derived image of one source file state."""
    return _digest([name, mtime_ms])


def source_prefix(key: str) -> str:
    return key[:PART_LENGTH]


def fingerprint(name: str, params: Sequence, mtime_ms: float) -> str:
    """
    Derive the cache key for a transform of a source file.

    Args:
        name: Logical name of the source file
        params: Transform parameters (e.g. ('thumbnail', 400))
        mtime_ms: Source modification time in milliseconds

    Returns:
        40 character hex string
    """
    return source_fingerprint(name, mtime_ms) + _digest(list(params))


def _is_single_segment(name: str) -> bool:
    if not name or name in ('.', '..') or '\x00' in name:
        return False
    if os.sep in name or (os.altsep and os.altsep in name) or os.path.isabs(name):
        return False
    return True


def resolve_source_path(root: str, name: str) -> str:
    """
    Resolve a logical name to an absolute path inside the image root.

    Raises:
        InvalidPath: the name is not a plain file name, resolves outside
            the root (including through symlinks) or does not exist
    """
    if not _is_single_segment(name):
        raise InvalidPath(f"Invalid path: {name!r}")

    root_real = os.path.realpath(root)
    candidate = os.path.realpath(os.path.join(root_real, name))
    if candidate == root_real or os.path.commonpath([root_real, candidate]) != root_real:
        raise InvalidPath(f"Invalid path: {name!r}")
    if not os.path.exists(candidate):
        raise InvalidPath(f"Invalid path: {name!r}")
    return candidate


def stat_source(root: str, name: str) -> SourceFile:
    """
    Resolve and stat a source file.

    Raises:
        InvalidPath: see resolve_source_path
        NotFound: the target is not a regular file or disappeared
    """
    path = resolve_source_path(root, name)
    try:
        st = os.stat(path)
    except FileNotFoundError:
        raise NotFound(f"File not found: {name}")
    except OSError as e:
        raise NotFound(f"File not found: {name} ({e.strerror})")
    if not stat.S_ISREG(st.st_mode):
        raise NotFound(f"File not found: {name}")
    return SourceFile.from_stat(name, path, st)
