"""Latest-request-wins sequencing for hosts that run the pipeline off their main thread.

Each submission gets a monotonically increasing id. When a result arrives
the host asks ``is_current`` and drops it if a newer request has been
issued since. Nothing is retried.
"""

import itertools
import logging
import threading
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestSequencer:
    def __init__(self):
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    @property
    def latest(self) -> int:
        return self._latest

    def next_request(self) -> int:
        """Issue a new request id; older ids become stale."""
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest

    def accept(self, request_id: int, result: T) -> Optional[T]:
        """Return ``result`` if ``request_id`` is still current, else None."""
        if self.is_current(request_id):
            return result
        logger.debug("Discarding stale result for request %d (latest is %d)", request_id, self._latest)
        return None

    def run(self, fn: Callable[[], T]) -> Optional[T]:
        """Issue an id, call ``fn`` and keep its result only if no newer request arrived meanwhile."""
        request_id = self.next_request()
        return self.accept(request_id, fn())
