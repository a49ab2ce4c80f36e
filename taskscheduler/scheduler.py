"""Coordinates the task queue, the in-memory cache and the database."""

from __future__ import annotations

import logging
import threading
from typing import Any

from .models import Task, TaskPriority, new_task
from .queue import PriorityQueue
from .repository import TaskRepository

logger = logging.getLogger(__name__)


class TaskScheduler:
    """Accepts tasks, persists them, caches them and puts them on the queue."""

    def __init__(self, queue: PriorityQueue, repo: TaskRepository):
        self._queue = queue
        self._repo = repo
        self._cache: dict[str, Task] = {}
        self._lock = threading.Lock()

    def _remember(self, task: Task) -> None:
        with self._lock:
            self._cache[task.id] = task

    def submit_task(self, priority: TaskPriority | int, payload: Any) -> Task:
        """Create a pending task, store it and enqueue it.

        A failure to store the task is logged; the task is still queued.
        """
        task = new_task(priority, payload)
        try:
            self._repo.create(task)
        except Exception as exc:
            logger.warning("[Scheduler] DB insert failed: %s", exc)

        self._remember(task)
        self._queue.push_task(task)
        logger.info(
            "[Scheduler] Submitted task %s with %s priority", task.id, task.priority
        )
        return task

    def get_task(self, task_id: str) -> Task | None:
        """Return the task from the cache, falling back to the database; None if unknown."""
        with self._lock:
            cached = self._cache.get(task_id)
        if cached is not None:
            return cached

        try:
            task = self._repo.get_by_id(task_id)
        except Exception as exc:
            logger.warning("[Scheduler] DB lookup failed: %s", exc)
            return None
        if task is None:
            return None

        self._remember(task)
        return task

    def recover_unfinished_tasks(self) -> int:
        """Reload pending and running tasks from the database into the queue.

        Returns the number of tasks recovered.
        """
        try:
            tasks = self._repo.get_unfinished_tasks()
        except Exception as exc:
            logger.warning("[Scheduler] Failed recovery query: %s", exc)
            return 0

        for task in tasks:
            self._remember(task)
            self._queue.push_task(task)

        logger.info("[Scheduler] Recovered %d unfinished tasks", len(tasks))
        return len(tasks)

    def get_all_tasks(self) -> list[Task]:
        """Return every cached task plus stored tasks not in the cache."""
        with self._lock:
            cached = dict(self._cache)

        try:
            stored = self._repo.get_all()
        except Exception as exc:
            logger.warning("[Scheduler] Failed to get tasks from DB: %s", exc)
            stored = []

        return [*cached.values(), *(t for t in stored if t.id not in cached)]