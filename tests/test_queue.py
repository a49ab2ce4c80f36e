import threading
import time

from taskscheduler import metrics
from taskscheduler.models import TaskPriority, new_task
from taskscheduler.queue import PriorityQueue


def test_priority_queue_ordering():
    q = PriorityQueue()
    task1 = new_task(TaskPriority.LOW, '{"data":1}')
    task2 = new_task(TaskPriority.HIGH, '{"data":2}')
    task3 = new_task(TaskPriority.MEDIUM, '{"data":3}')
    q.push_task(task1)
    q.push_task(task2)
    q.push_task(task3)

    assert len(q) == 3
    assert q.pop_task().priority is TaskPriority.HIGH
    assert q.pop_task().priority is TaskPriority.MEDIUM
    assert q.pop_task().priority is TaskPriority.LOW


def test_same_priority_is_fifo():
    q = PriorityQueue()
    tasks = [new_task(TaskPriority.MEDIUM, i) for i in range(5)]
    for task in tasks:
        q.push_task(task)
    assert [q.pop_task().payload for _ in tasks] == [t.payload for t in tasks]


def test_pop_empty_times_out():
    q = PriorityQueue()
    started = time.monotonic()
    assert q.pop_task(timeout=0.05) is None
    assert time.monotonic() - started >= 0.04


def test_pop_waits_for_push():
    q = PriorityQueue()
    task = new_task(TaskPriority.LOW, "late")
    timer = threading.Timer(0.05, q.push_task, args=(task,))
    timer.start()
    try:
        assert q.pop_task(timeout=5) is task
    finally:
        timer.cancel()
    assert len(q) == 0


def test_queue_gauge_tracks_length():
    q = PriorityQueue()
    before = metrics.TASKS_IN_QUEUE.value
    high = new_task(TaskPriority.HIGH, None)
    low = new_task(TaskPriority.LOW, None)
    q.push_task(high)
    q.push_task(low)
    assert len(q) == 2
    assert metrics.TASKS_IN_QUEUE.value == before + 2
    assert q.pop_task() is high
    assert q.pop_task() is low
    assert len(q) == 0
    assert metrics.TASKS_IN_QUEUE.value == before