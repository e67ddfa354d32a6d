from __future__ import annotations

import heapq
import itertools
import logging
import threading
from typing import Callable, Optional, Protocol


logger = logging.getLogger(__name__)


class TaskHandle(Protocol):
    def cancel(self) -> None: ...


class ThreadingScheduler:
    def call_later(self, delay: float, fn: Callable[[], None]) -> TaskHandle:
        timer = threading.Timer(delay, fn)
        timer.daemon = True
        timer.start()
        return timer


class _ManualTask:
    def __init__(self, due: float, fn: Callable[[], None]):
        self.due = due
        self.fn = fn
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock; tasks run only when advance() passes their due time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualTask]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, fn: Callable[[], None]) -> TaskHandle:
        task = _ManualTask(self.now + max(0.0, delay), fn)
        heapq.heappush(self._queue, (task.due, next(self._seq), task))
        return task

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, seconds: float) -> int:
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self.now = due
            if task.cancelled:
                continue
            task.fn()
            ran += 1
        self.now = target
        return ran


class Debouncer:
    """
    Cancel-and-replace: each submit() drops the pending task and schedules
    the new one after the quiet period.
    """

    def __init__(self, scheduler, delay: float):
        self.scheduler = scheduler
        self.delay = delay
        self._handle: Optional[TaskHandle] = None
        self._token: Optional[object] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._token is not None

    def submit(self, fn: Callable[[], None]) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
                logger.debug("pending task cancelled and replaced")
            token = object()
            self._token = token

            def _run() -> None:
                with self._lock:
                    if self._token is not token:
                        return
                    self._token = None
                    self._handle = None
                fn()

            self._handle = self.scheduler.call_later(self.delay, _run)

    def cancel(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._handle = None
            self._token = None
