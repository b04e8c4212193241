"""
DirectoryLister - Enumerates, sorts and paginates the image root.
"""

import logging
import os
import re
import stat
import unicodedata
from typing import List, Optional

from .models import ListingPage, SourceFile

SORT_NAME = 'name'
SORT_MTIME = 'mtime'
ORDER_ASC = 'asc'
ORDER_DESC = 'desc'

_DIGITS = re.compile(r'(\d+)')


def natural_key(name: str) -> list:
    """
    Sort key comparing digit runs numerically, ignoring case and accents.

    re.split with a capturing group puts text at even and digits at odd
    indexes, so keys of different names always compare like with like.
    """
    folded = unicodedata.normalize('NFKD', name)
    folded = ''.join(c for c in folded if not unicodedata.combining(c)).casefold()
    return [int(part) if i % 2 else part for i, part in enumerate(_DIGITS.split(folded))]


class DirectoryLister:
    """
    Lists the regular files directly inside the image root.

    Hidden entries (the cache directory, in-progress uploads) are skipped,
    as are entries that cannot be stat'ed.
    """

    def __init__(self, image_root: str, logger: Optional[logging.Logger] = None):
        self.image_root = image_root
        self.logger = logger or logging.getLogger(__name__)

    def list_files(self, sort_by: str = SORT_NAME, order: str = ORDER_ASC) -> List[SourceFile]:
        files = []
        for name in os.listdir(self.image_root):
            if name.startswith('.'):
                continue
            path = os.path.join(self.image_root, name)
            try:
                st = os.stat(path)
            except OSError as e:
                self.logger.debug(f"Skipping unreadable entry {name}: {e}")
                continue
            if stat.S_ISREG(st.st_mode):
                files.append(SourceFile.from_stat(name, path, st))

        if sort_by == SORT_MTIME:
            key = lambda f: f.mtime_ms
        else:
            key = lambda f: natural_key(f.name)
        # sorted() is stable for reverse=True as well, so ties keep listdir order.
        return sorted(files, key=key, reverse=(order == ORDER_DESC))

    def list_page(
        self,
        sort_by: str = SORT_NAME,
        order: str = ORDER_DESC,
        page: int = 1,
        limit: int = 20
    ) -> ListingPage:
        if page < 1 or limit < 1:
            raise ValueError(f"page and limit must be >= 1, got page={page} limit={limit}")
        files = self.list_files(sort_by, order)
        offset = (page - 1) * limit
        names = [f.name for f in files[offset:offset + limit]]
        return ListingPage(page=page, limit=limit, total=len(files), names=names)
