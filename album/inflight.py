"""
InFlightRegistry - Deduplicates concurrent work for the same key.
"""

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, Optional, TypeVar

T = TypeVar('T')


class InFlightRegistry:
    """
    Runs at most one ``fn`` per key at a time within this process.

    The first caller for a key runs the work; callers arriving while it is
    running block on the same Future and get its result or exception.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._lock = threading.Lock()
        self._pending: Dict[str, Future] = {}
        self.logger = logger or logging.getLogger(__name__)

    def run(self, key: str, fn: Callable[[], T]) -> T:
        with self._lock:
            future = self._pending.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._pending[key] = future

        if not leader:
            self.logger.debug(f"Waiting on in-flight generation for {key}")
            return future.result()

        try:
            result = fn()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                del self._pending[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
