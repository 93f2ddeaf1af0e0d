"""
Chronos — Completion Tracker.

Create, toggle and delete tasks. Every operation takes the current task
list and returns the resulting one; tasks that an operation does not
target are carried over as the same objects.

No I/O: persistence is the session's job.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime

from pydantic import BaseModel, field_validator

from chronos.core.clock import DEFAULT_TZ, now_utc, parse_timestamp, to_iso_z, today_in
from chronos.data.models import (
    CATEGORIES,
    OneOff,
    Priority,
    Recurring,
    Task,
    TaskType,
    new_task_id,
)

logger = logging.getLogger(__name__)


class TaskDraft(BaseModel):
    """Registration input for a new task.

    Only title and scheduled_time are required; everything else takes the
    form defaults.
    """
    title: str
    scheduled_time: str | datetime
    task_type: TaskType = TaskType.NORMAL
    priority: Priority = Priority.MEDIUM
    category: str = CATEGORIES[0]
    description: str = ""

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        for name in CATEGORIES:
            if name.lower() == v.strip().lower():
                return name
        raise ValueError(f"Unknown category {v!r}. Expected one of: {', '.join(CATEGORIES)}")


def find(tasks: list[Task], task_id: str) -> Task | None:
    """Return the task with `task_id`, or None."""
    for task in tasks:
        if task.id == task_id:
            return task
    return None


def build_task(draft: TaskDraft, tz_name: str = DEFAULT_TZ) -> Task | None:
    """Turn a draft into a new task, or None if the draft is not acceptable."""
    title = draft.title.strip()
    if not title:
        logger.info("Task rejected: empty title")
        return None

    scheduled = parse_timestamp(draft.scheduled_time, tz_name)
    if scheduled is None:
        logger.info("Task '%s' rejected: unparseable time %r", title, draft.scheduled_time)
        return None

    if draft.category not in CATEGORIES:
        logger.info("Task '%s' rejected: unknown category %r", title, draft.category)
        return None

    completion = Recurring() if draft.task_type == TaskType.DAILY else OneOff()
    return Task(
        id=new_task_id(),
        title=title,
        scheduled_time=to_iso_z(scheduled),
        completion=completion,
        priority=draft.priority,
        category=draft.category,
        description=draft.description.strip(),
    )


def create(tasks: list[Task], draft: TaskDraft, tz_name: str = DEFAULT_TZ) -> list[Task]:
    """Append a task built from `draft`.

    An invalid draft is a validation rejection, not an error: the same list
    is returned and nothing is inserted.
    """
    task = build_task(draft, tz_name)
    if task is None:
        return tasks
    logger.info("Task added: %s '%s' (%s)", task.id, task.title, task.task_type.value)
    return [*tasks, task]


def toggle(
    tasks: list[Task],
    task_id: str,
    today: date | None = None,
    tz_name: str = DEFAULT_TZ,
) -> list[Task]:
    """Flip completion of one task.

    Normal tasks invert their flag. Daily tasks add or remove today's mark
    and leave every other day alone. Unknown ids return the list unchanged.
    """
    if find(tasks, task_id) is None:
        logger.debug("Toggle ignored: no task %s", task_id)
        return tasks

    if today is None:
        today = today_in(tz_name, now_utc())
    day = today.isoformat()

    result: list[Task] = []
    for task in tasks:
        if task.id != task_id:
            result.append(task)
            continue

        if isinstance(task.completion, Recurring):
            history = task.completion.history
            history = history - {day} if day in history else history | {day}
            updated = replace(task, completion=Recurring(history=history))
            logger.info(
                "Daily task %s %s for %s", task.id,
                "marked" if day in history else "unmarked", day,
            )
        else:
            done = not task.completion.completed
            updated = replace(task, completion=OneOff(completed=done))
            logger.info("Task %s marked %s", task.id, "done" if done else "not done")
        result.append(updated)
    return result


def delete(tasks: list[Task], task_id: str) -> list[Task]:
    """Remove the task with `task_id`; absent ids are a no-op."""
    remaining = [t for t in tasks if t.id != task_id]
    if len(remaining) == len(tasks):
        logger.debug("Delete ignored: no task %s", task_id)
        return tasks
    logger.info("Task %s deleted", task_id)
    return remaining
