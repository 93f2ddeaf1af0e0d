"""
Chronos — Data Models.

A task is either one-off or recurring, and its completion state says which:
`OneOff` carries a single flag, `Recurring` carries the set of calendar days
it was done on. The wire format (durable store and backup files) always
writes both `completed` and `completionHistory`; only the one selected by
`taskType` is read back.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

CATEGORIES: tuple[str, ...] = ("Work", "Business", "Gaming", "Study", "Workout")


class TaskType(str, Enum):
    NORMAL = "normal"
    DAILY = "daily"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class OneOff:
    """Completion state of a normal task: done at most once."""

    completed: bool = False


@dataclass(frozen=True)
class Recurring:
    """Completion state of a daily task: one mark per calendar day."""

    history: frozenset[str] = frozenset()   # YYYY-MM-DD strings


Completion = OneOff | Recurring


def new_task_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Task:
    """One tracked activity.

    Tasks are immutable values; the tracker replaces a task in the set
    instead of editing it.
    """

    id: str
    title: str
    scheduled_time: str                   # ISO-8601, e.g. 2024-01-05T10:00:00.000Z
    completion: Completion = field(default_factory=OneOff)
    priority: Priority = Priority.MEDIUM
    category: str = CATEGORIES[0]
    description: str = ""

    @property
    def task_type(self) -> TaskType:
        if isinstance(self.completion, Recurring):
            return TaskType.DAILY
        return TaskType.NORMAL

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape shared by the store and backups."""
        completed = False
        history: list[str] = []
        if isinstance(self.completion, Recurring):
            history = sorted(self.completion.history)
        else:
            completed = self.completion.completed

        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "scheduledTime": self.scheduled_time,
            "completed": completed,
            "taskType": self.task_type.value,
            "priority": self.priority.value,
            "category": self.category,
            "completionHistory": history,
        }
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Build a task from its wire shape.

        Lenient: missing fields take creation defaults, an unknown priority
        becomes medium and any task type other than "daily" is treated as
        normal. Records are never rejected here.
        """
        task_id = str(data.get("id") or "")
        if not task_id:
            task_id = new_task_id()
            logger.warning("Task without id in stored data; assigned %s", task_id)

        if data.get("taskType") == TaskType.DAILY.value:
            raw_history = data.get("completionHistory") or []
            if not isinstance(raw_history, list):
                logger.warning("Task %s has non-list completionHistory; ignoring it", task_id)
                raw_history = []
            completion: Completion = Recurring(
                history=frozenset(str(d) for d in raw_history)
            )
        else:
            completion = OneOff(completed=bool(data.get("completed", False)))

        try:
            priority = Priority(data.get("priority", Priority.MEDIUM.value))
        except ValueError:
            logger.warning(
                "Task %s has unknown priority %r; using medium", task_id, data.get("priority"),
            )
            priority = Priority.MEDIUM

        return cls(
            id=task_id,
            title=str(data.get("title") or ""),
            scheduled_time=str(data.get("scheduledTime") or ""),
            completion=completion,
            priority=priority,
            category=str(data.get("category") or CATEGORIES[0]),
            description=str(data.get("description") or ""),
        )


# ---------------------------------------------------------------------------
# Wire envelopes: the JSON documents written to the store and to backups
# ---------------------------------------------------------------------------


class AppData(BaseModel):
    """Durable store record.

    JSON example:
    {
        "tasks": [...],
        "userName": "User",
        "version": "2.1.0"
    }
    """
    tasks: list[dict[str, Any]]
    userName: str = "User"
    version: str = ""


class BackupDocument(BaseModel):
    """Portable backup document.

    JSON example:
    {
        "tasks": [...],
        "exportedAt": "2024-01-05T10:00:00.000Z"
    }
    """
    tasks: list[dict[str, Any]]
    exportedAt: Any = None
