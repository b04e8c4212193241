"""
CacheSweeper - Removes cache entries no current source file maps to.

Entries are orphaned whenever a source file changes or is deleted, since
the old key is never computed again. The request path never deletes
anything; this sweep is an explicit maintenance step.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Set

from .cache_store import DiskCacheStore
from .fingerprint import source_fingerprint, source_prefix
from .lister import DirectoryLister


@dataclass
class SweepStats:
    scanned: int = 0
    removed: int = 0
    kept: int = 0


class CacheSweeper:

    def __init__(
        self,
        lister: DirectoryLister,
        store: DiskCacheStore,
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        self.lister = lister
        self.store = store
        self.dry_run = dry_run
        self.logger = logger or logging.getLogger(__name__)

    def live_prefixes(self) -> Set[str]:
        """Key prefix of every current source file, one per file."""
        return {
            source_fingerprint(source.name, source.mtime_ms)
            for source in self.lister.list_files()
        }

    def sweep(self) -> SweepStats:
        live = self.live_prefixes()
        stats = SweepStats()
        # Entries written after live_prefixes() ran may be removed; they are re-rendered on demand.
        for key in list(self.store.keys()):
            stats.scanned += 1
            if source_prefix(key) in live:
                stats.kept += 1
                continue
            stats.removed += 1
            if self.dry_run:
                self.logger.info(f"[DRY RUN] Would remove orphaned entry {key}")
            else:
                self.store.remove(key)
                self.logger.debug(f"Removed orphaned entry {key}")

        self.logger.info(f"Sweep complete: {stats.removed} removed, {stats.kept} kept of {stats.scanned}")
        return stats
