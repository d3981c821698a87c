"""Cancellable delayed callbacks.

The game never sleeps; every "show this for a moment, then ..." step is a
callback handed to a scheduler. :class:`ManualScheduler` runs them against a
clock that only moves when told to, which is what headless play and the tests
use. The Qt event-loop implementation lives in ``polysum.ui.scheduler``.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Protocol, Tuple


class TaskHandle(Protocol):
    def cancel(self) -> None:
        ...

    @property
    def active(self) -> bool:
        ...


class Scheduler(Protocol):
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> TaskHandle:
        ...


class ManualTask:
    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False

    def run(self) -> None:
        if not self._active:
            return
        self._active = False
        self._callback()


class ManualScheduler:
    """Scheduler driven by :meth:`advance`; callbacks fire in due-time order."""

    def __init__(self) -> None:
        self._now_ms = 0
        self._seq = itertools.count()
        self._queue: List[Tuple[int, int, ManualTask]] = []

    @property
    def now_ms(self) -> int:
        return self._now_ms

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self._now_ms + max(0, int(delay_ms)), callback)
        heapq.heappush(self._queue, (task.due_ms, next(self._seq), task))
        return task

    def pending(self) -> int:
        return sum(1 for _, _, task in self._queue if task.active)

    def advance(self, delay_ms: int) -> None:
        """Move the clock forward, running every callback that falls due on the way.

        Callbacks scheduled by a callback also run if they are due before the
        target time.
        """
        target = self._now_ms + max(0, int(delay_ms))
        while self._queue and self._queue[0][0] <= target:
            due_ms, _, task = heapq.heappop(self._queue)
            self._now_ms = due_ms
            task.run()
        self._now_ms = target

    def run_all(self) -> None:
        while self._queue:
            due_ms, _, task = heapq.heappop(self._queue)
            self._now_ms = max(self._now_ms, due_ms)
            task.run()
