"""
CacheWarmer - Pre-renders placeholders and thumbnails for the whole image root.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from .generator import DerivedImageGenerator
from .lister import DirectoryLister


@dataclass
class WarmStats:
    """
    Statistics for a warm run.

    Attributes:
        total_to_process: Files selected for warming
        processed: Files whose placeholder and thumbnail are now cached
        errors: Files that failed to render
        start_time: Start timestamp
        error_details: List of error messages
    """
    total_to_process: int = 0
    processed: int = 0
    errors: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)

    @property
    def elapsed_seconds(self) -> float:
        return time.time() - self.start_time

    @property
    def rate_per_minute(self) -> float:
        if self.elapsed_seconds > 0:
            return self.processed / self.elapsed_seconds * 60
        return 0.0


class CacheWarmer:
    """
    Walks the image root and fills the derived-image cache ahead of requests.
    """

    def __init__(
        self,
        lister: DirectoryLister,
        generator: DerivedImageGenerator,
        width: int = 400,
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        self.lister = lister
        self.generator = generator
        self.width = width
        self.dry_run = dry_run
        self.logger = logger or logging.getLogger(__name__)
        self.stats = WarmStats()
        self._stop_requested = False

    def stop(self) -> None:
        """Request the warmer to stop after the current file."""
        self._stop_requested = True

    def warm(self, limit: Optional[int] = None) -> WarmStats:
        files = self.lister.list_files()
        if limit:
            files = files[:limit]
        self.stats = WarmStats(total_to_process=len(files))

        mode_str = " [DRY RUN]" if self.dry_run else ""
        self.logger.info(f"Warming {len(files)} files at width {self.width}{mode_str}")

        for source in files:
            if self._stop_requested:
                self.logger.info("Stop requested, halting warm-up")
                break
            self._process(source.name)

        self.logger.info(
            f"Warm-up complete: {self.stats.processed} cached, {self.stats.errors} errors "
            f"({self.stats.elapsed_seconds:.1f}s)"
        )
        return self.stats

    def _process(self, name: str) -> bool:
        if self.dry_run:
            self.logger.info(f"[DRY RUN] Would render: {name}")
            self.stats.processed += 1
            return True

        try:
            self.generator.get_placeholder(name)
            self.generator.get_thumbnail(name, self.width)
        except Exception as e:
            error_msg = f"Error rendering {name}: {e}"
            self.logger.error(error_msg)
            self.stats.errors += 1
            self.stats.error_details.append(error_msg)
            return False

        self.stats.processed += 1
        self.logger.debug(f"Cached: {name} [{self.stats.processed}/{self.stats.total_to_process}]")
        return True
