"""A pool of threads that take tasks from the queue and run them."""

from __future__ import annotations

import logging
import threading
import time

from . import metrics
from .models import Task, TaskStatus
from .queue import PriorityQueue
from .repository import TaskRepository

logger = logging.getLogger(__name__)


class WorkerPool:
    """Runs ``worker_num`` workers that process queued tasks and record their status."""

    def __init__(
        self,
        queue: PriorityQueue,
        repo: TaskRepository,
        worker_num: int = 4,
        work_duration: float = 2.0,
        poll_interval: float = 0.1,
    ):
        self.worker_num = worker_num
        self.work_duration = work_duration
        self.poll_interval = poll_interval
        self._queue = queue
        self._repo = repo
        self._stopped = threading.Event()
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        self._stopped.clear()
        self._threads = [
            threading.Thread(target=self._work, args=(i,), name=f"worker-{i}", daemon=True)
            for i in range(self.worker_num)
        ]
        for thread in self._threads:
            thread.start()
        logger.info("[WorkerPool] Started %d workers", self.worker_num)

    def stop(self) -> None:
        """Signal every worker to finish and wait for them."""
        logger.info("[WorkerPool] Stopping...")
        self._stopped.set()
        for thread in self._threads:
            thread.join()
        self._threads = []
        logger.info("[WorkerPool] All workers stopped.")

    def _work(self, worker_id: int) -> None:
        while not self._stopped.is_set():
            task = self._queue.pop_task(timeout=self.poll_interval)
            if task is not None:
                self.process_task(worker_id, task)
        logger.info("[Worker %d] Shutting down", worker_id)

    def _record_status(self, worker_id: int, task: Task) -> None:
        try:
            self._repo.update_status(task.id, task.status)
        except Exception as exc:
            logger.warning("[Worker %d] Failed DB update: %s", worker_id, exc)

    def process_task(self, worker_id: int, task: Task) -> None:
        """Mark a task running, do its work, then mark it completed."""
        logger.info(
            "[Worker %d] Processing task %s (Priority: %s)", worker_id, task.id, task.priority
        )
        started = time.perf_counter()

        task.status = TaskStatus.RUNNING.value
        self._record_status(worker_id, task)

        time.sleep(self.work_duration)

        task.status = TaskStatus.COMPLETED.value
        self._record_status(worker_id, task)

        duration = time.perf_counter() - started
        metrics.TASK_DURATION.observe(str(task.priority), duration)
        metrics.TASKS_PROCESSED.inc(task.status)
        logger.info("[Worker %d] Completed task %s in %.2fs", worker_id, task.id, duration)