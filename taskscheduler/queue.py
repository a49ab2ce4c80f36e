"""A thread-safe priority queue of tasks."""

from __future__ import annotations

import heapq
import itertools
import threading
from datetime import datetime

from . import metrics
from .models import Task


class PriorityQueue:
    """Hands out tasks by priority, then by creation time, then by arrival."""

    def __init__(self) -> None:
        self._heap: list[tuple[int, datetime, int, Task]] = []
        self._arrival = itertools.count()
        self._cond = threading.Condition()

    def __len__(self) -> int:
        with self._cond:
            return len(self._heap)

    def push_task(self, task: Task) -> None:
        with self._cond:
            heapq.heappush(
                self._heap,
                (int(task.priority), task.created_at, next(self._arrival), task),
            )
            metrics.TASKS_IN_QUEUE.inc()
            self._cond.notify()

    def pop_task(self, timeout: float | None = None) -> Task | None:
        """Remove and return the next task, waiting for one; None if ``timeout`` runs out."""
        with self._cond:
            if not self._cond.wait_for(lambda: self._heap, timeout):
                return None
            *_, task = heapq.heappop(self._heap)
            metrics.TASKS_IN_QUEUE.dec()
            return task