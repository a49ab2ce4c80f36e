"""Task records, priorities and statuses."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any


class TaskPriority(IntEnum):
    """Priority of a task; a lower value is served first."""

    HIGH = 0
    MEDIUM = 1
    LOW = 2

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_name(cls, name: str) -> "TaskPriority":
        """Return the priority called ``name`` ("high", "medium" or "low")."""
        for member in cls:
            if str(member) == name:
                return member
        raise ValueError("invalid priority (must be high, medium, or low)")


class TaskStatus(str, Enum):
    """Lifecycle states of a task."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Task:
    """A unit of work with a priority and an arbitrary JSON payload."""

    id: str
    priority: TaskPriority
    payload: Any
    created_at: datetime
    status: str = TaskStatus.PENDING.value

    def to_dict(self) -> dict[str, Any]:
        """Return the task as a JSON-ready mapping."""
        return {
            "id": self.id,
            "priority": int(self.priority),
            "payload": self.payload,
            "created_at": _format_time(self.created_at),
            "status": str(self.status),
        }


def new_task(priority: TaskPriority | int, payload: Any) -> Task:
    """Create a pending task with a fresh identifier and the current UTC time."""
    return Task(
        id=str(uuid.uuid4()),
        priority=TaskPriority(priority),
        payload=payload,
        created_at=datetime.now(timezone.utc),
        status=TaskStatus.PENDING.value,
    )