"""
Chronos — Analytics Engine.

Derived views over the task list: efficiency, per-category stats,
consistency score and the day-by-day activity matrix.

Everything here is a pure function of its arguments and is recomputed on
every read; the clock is read at most once per call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from chronos.core.clock import DEFAULT_TZ, local_date, now_utc, parse_timestamp, today_in
from chronos.data.models import CATEGORIES, Recurring, Task, TaskType

logger = logging.getLogger(__name__)

MATRIX_DAYS = 168          # 24 weeks, today inclusive
MAX_INTENSITY = 4


@dataclass(frozen=True)
class CategoryStats:
    name: str
    completed: int
    total: int
    rate: float            # 0..100


@dataclass(frozen=True)
class ActivityDay:
    date: str              # YYYY-MM-DD
    count: int
    intensity: int         # 0..4


@dataclass(frozen=True)
class Dashboard:
    """Everything the stats view shows, computed in one pass."""

    efficiency_rate: float
    overall_efficiency: float
    consistency_score: int
    active_routines: int    # daily tasks
    done_today: int
    total: int
    categories: list[CategoryStats]


def is_done(task: Task, on: date | None = None) -> bool:
    """Whether a task counts as done.

    With `on=None` this is the lifetime predicate: a daily task is done once
    it has any completion at all. With a date, a daily task is done only if
    that day is marked. Normal tasks ignore the date.
    """
    if isinstance(task.completion, Recurring):
        if on is None:
            return bool(task.completion.history)
        return on.isoformat() in task.completion.history
    return task.completion.completed


def efficiency_rate(tasks: list[Task]) -> float:
    """Percentage of tasks ever completed; 0 for an empty list."""
    if not tasks:
        return 0.0
    done = sum(1 for t in tasks if is_done(t))
    return done / len(tasks) * 100


def sort_timeline(tasks: list[Task]) -> list[Task]:
    """Daily tasks first, then normal ones, each ascending by scheduled time.

    The sort is stable. Tasks whose time cannot be parsed go after the
    parseable ones of their kind.
    """
    def _key(task: Task) -> tuple[int, int, float]:
        kind = 0 if task.task_type == TaskType.DAILY else 1
        dt = parse_timestamp(task.scheduled_time)
        if dt is None:
            return (kind, 1, 0.0)
        return (kind, 0, dt.timestamp())

    return sorted(tasks, key=_key)


def category_stats(tasks: list[Task]) -> list[CategoryStats]:
    """One entry per fixed category, in category order."""
    result: list[CategoryStats] = []
    for name in CATEGORIES:
        in_cat = [t for t in tasks if t.category == name]
        completed = sum(1 for t in in_cat if is_done(t))
        total = len(in_cat)
        rate = completed / total * 100 if total else 0.0
        result.append(CategoryStats(name=name, completed=completed, total=total, rate=rate))
    return result


def overall_efficiency(tasks: list[Task]) -> float:
    """Unweighted mean of the per-category rates.

    Not the same number as `efficiency_rate`: an empty category pulls the
    mean down with a 0 and every category weighs the same regardless of
    how many tasks it holds.
    """
    stats = category_stats(tasks)
    return sum(s.rate for s in stats) / len(stats)


def consistency_score(tasks: list[Task]) -> int:
    """Lifetime completions of the most-completed daily task; 0 if none."""
    counts = [
        len(t.completion.history) for t in tasks if isinstance(t.completion, Recurring)
    ]
    return max(counts, default=0)


def intensity(count: int) -> int:
    return min(max(count, 0), MAX_INTENSITY)


def activity_matrix(
    tasks: list[Task],
    today: date | None = None,
    days: int = MATRIX_DAYS,
    tz_name: str = DEFAULT_TZ,
) -> list[ActivityDay]:
    """Completion counts for the trailing `days` days, oldest first.

    A day counts one for each daily task marked on it and one for each
    completed normal task scheduled on it.
    """
    if today is None:
        today = today_in(tz_name, now_utc())

    per_day: dict[str, int] = {}
    for task in tasks:
        if isinstance(task.completion, Recurring):
            for day in task.completion.history:
                per_day[day] = per_day.get(day, 0) + 1
        elif task.completion.completed:
            scheduled = local_date(task.scheduled_time, tz_name)
            if scheduled is None:
                logger.debug("Task %s has unparseable time; skipped in matrix", task.id)
                continue
            key = scheduled.isoformat()
            per_day[key] = per_day.get(key, 0) + 1

    result: list[ActivityDay] = []
    for offset in range(days - 1, -1, -1):
        key = (today - timedelta(days=offset)).isoformat()
        count = per_day.get(key, 0)
        result.append(ActivityDay(date=key, count=count, intensity=intensity(count)))
    return result


def dashboard(
    tasks: list[Task],
    today: date | None = None,
    tz_name: str = DEFAULT_TZ,
) -> Dashboard:
    """Bundle the stats view for one read of the task list."""
    if today is None:
        today = today_in(tz_name, now_utc())
    return Dashboard(
        efficiency_rate=efficiency_rate(tasks),
        overall_efficiency=overall_efficiency(tasks),
        consistency_score=consistency_score(tasks),
        active_routines=sum(1 for t in tasks if t.task_type == TaskType.DAILY),
        done_today=sum(1 for t in tasks if is_done(t, on=today)),
        total=len(tasks),
        categories=category_stats(tasks),
    )
