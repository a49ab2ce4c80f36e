"""Persistence of tasks in the database."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine, Row

from .database import tasks_table
from .models import Task, TaskPriority, TaskStatus

_UNFINISHED = (TaskStatus.PENDING.value, TaskStatus.RUNNING.value)


def _to_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _to_task(row: Row) -> Task:
    return Task(
        id=row.id,
        priority=TaskPriority(row.priority),
        payload=row.payload,
        created_at=_to_utc(row.created_at),
        status=row.status,
    )


class TaskRepository:
    """Stores and loads tasks through a SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def create(self, task: Task) -> None:
        """Insert a new task; raises on a duplicate id or a database error."""
        with self._engine.begin() as conn:
            conn.execute(
                insert(tasks_table).values(
                    id=task.id,
                    priority=int(task.priority),
                    payload=task.payload,
                    created_at=_to_utc(task.created_at),
                    status=str(task.status),
                )
            )

    def update_status(self, task_id: str, status: str) -> bool:
        """Set a task's status; returns whether a task with that id existed."""
        with self._engine.begin() as conn:
            result = conn.execute(
                update(tasks_table)
                .where(tasks_table.c.id == task_id)
                .values(status=str(status))
            )
        return result.rowcount > 0

    def get_by_id(self, task_id: str) -> Task | None:
        """Return the task with this id, or None if there is none."""
        with self._engine.connect() as conn:
            row = conn.execute(
                select(tasks_table).where(tasks_table.c.id == task_id)
            ).first()
        return None if row is None else _to_task(row)

    def get_unfinished_tasks(self) -> list[Task]:
        """Return tasks that are still pending or running, oldest first."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(tasks_table)
                .where(tasks_table.c.status.in_(_UNFINISHED))
                .order_by(tasks_table.c.created_at)
            ).all()
        return [_to_task(row) for row in rows]

    def get_all(self) -> list[Task]:
        """Return every stored task, oldest first."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(tasks_table).order_by(tasks_table.c.created_at)
            ).all()
        return [_to_task(row) for row in rows]