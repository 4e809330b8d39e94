"""Single ordered timeline for the engine.

Worker threads (HTTP calls, the event stream reader) never touch the
registry. They post callables here and one consumer runs them in order,
so registry mutation, delta dispatch and command issuance never overlap.
"""

import heapq
import itertools
import logging
import threading
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._heap: list[tuple[float, int, Callable, tuple[Any, ...]]] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._stopped = False

    def post(self, fn: Callable, *args, delay: float = 0.0) -> None:
        """Queue fn(*args) to run on the timeline, after `delay` seconds."""
        with self._cond:
            heapq.heappush(self._heap, (self._clock() + delay, next(self._seq), fn, args))
            self._cond.notify()

    def pending(self) -> int:
        with self._cond:
            return len(self._heap)

    def next_due(self) -> float | None:
        """Seconds until the next queued item is due, None when idle."""
        with self._cond:
            if not self._heap:
                return None
            return max(0.0, self._heap[0][0] - self._clock())

    def _pop_due(self):
        with self._cond:
            if self._heap and self._heap[0][0] <= self._clock():
                return heapq.heappop(self._heap)
            return None

    def run_pending(self) -> int:
        """Run everything that is due now, including work posted meanwhile."""
        count = 0
        while True:
            item = self._pop_due()
            if item is None:
                return count
            _, _, fn, args = item
            self._invoke(fn, args)
            count += 1

    def _invoke(self, fn: Callable, args: tuple):
        try:
            fn(*args)
        except Exception:
            logger.exception("Unhandled error in %s", getattr(fn, "__qualname__", fn))

    def run_forever(self) -> None:
        logger.debug("Dispatcher running")
        while True:
            with self._cond:
                while not self._stopped:
                    if not self._heap:
                        self._cond.wait()
                        continue
                    wait = self._heap[0][0] - self._clock()
                    if wait <= 0:
                        break
                    self._cond.wait(wait)
                if self._stopped:
                    logger.debug("Dispatcher stopped")
                    return
            self.run_pending()

    def stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify_all()
