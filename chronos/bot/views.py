"""Text views for the bot: timeline, stats and activity matrix.

Pure formatting plus the /add argument parser. Nothing here talks to
Telegram; user text is escaped for the legacy Markdown parse mode.
"""

from __future__ import annotations

from datetime import date

from telegram.helpers import escape_markdown

from chronos.core.analytics import ActivityDay, Dashboard, is_done
from chronos.core.clock import DEFAULT_TZ, parse_timestamp, zone
from chronos.core.tracker import TaskDraft
from chronos.data.models import CATEGORIES, Priority, Task, TaskType

_PRIORITY_MARK = {
    Priority.HIGH: "🔴",
    Priority.MEDIUM: "🟠",
    Priority.LOW: "🔵",
}

# Less → more, indexed by intensity 0..4
_INTENSITY_GLYPHS = ("·", "░", "▒", "▓", "█")

_TYPE_ALIASES = {t.value: t for t in TaskType}
_PRIORITY_ALIASES = {p.value: p for p in Priority}
_CATEGORY_ALIASES = {c.lower(): c for c in CATEGORIES}


def md(text: str) -> str:
    """Escape user-supplied text for parse_mode="Markdown"."""
    return escape_markdown(text, version=1)


def format_when(task: Task, tz_name: str = DEFAULT_TZ) -> str:
    """'YYYY-MM-DD HH:MM' in tz_name, or the raw value if unparseable."""
    dt = parse_timestamp(task.scheduled_time, tz_name)
    if dt is None:
        return task.scheduled_time or "(no time)"
    local = dt.astimezone(zone(tz_name))
    if task.task_type == TaskType.DAILY:
        return f"daily at {local:%H:%M}"
    return f"{local:%Y-%m-%d %H:%M}"


def format_task_line(task: Task, today: date, tz_name: str = DEFAULT_TZ) -> str:
    """One timeline row; daily tasks show whether today is marked."""
    check = "✅" if is_done(task, on=today) else "⬜"
    mark = _PRIORITY_MARK.get(task.priority, "")
    when = md(format_when(task, tz_name))
    return f"{check} {mark} *{md(task.title)}* — {when} · {md(task.category)}"


def format_timeline(tasks: list[Task], today: date, tz_name: str = DEFAULT_TZ) -> str:
    if not tasks:
        return (
            "Chronos is idle.\n"
            "Register your first activity with /add."
        )
    lines = ["*Timeline:*\n"]
    lines.extend(format_task_line(t, today, tz_name) for t in tasks)
    return "\n".join(lines)


def format_dashboard(stats: Dashboard) -> str:
    lines = [
        "*Precision Stats*\n",
        f"Total efficiency: {stats.efficiency_rate:.0f}%",
        f"Overall efficiency (by category): {stats.overall_efficiency:.0f}%",
        f"Active routines: {stats.active_routines}",
        f"Consistency score: {stats.consistency_score}",
        f"Done today: {stats.done_today}/{stats.total}",
        "",
        "*By category:*",
    ]
    for cat in stats.categories:
        lines.append(f"• {cat.name}: {cat.completed}/{cat.total} ({cat.rate:.0f}%)")
    return "\n".join(lines)


def format_activity(days: list[ActivityDay]) -> str:
    """Render the matrix as week columns, one text row per weekday slot."""
    if not days:
        return "No activity data."
    rows = ["" for _ in range(7)]
    for idx, day in enumerate(days):
        rows[idx % 7] += _INTENSITY_GLYPHS[day.intensity]
    total = sum(d.count for d in days)
    legend = "Less " + "".join(_INTENSITY_GLYPHS) + " More"
    return "\n".join([
        f"*Activity* — {total} completions",
        "```",
        *rows,
        "```",
        f"{days[0].date} → {days[-1].date}",
        legend,
    ])


def parse_add_args(text: str) -> TaskDraft | None:
    """Parse `/add` arguments: title | when | [type] | [priority] | [category].

    Returns None when the title or time slot is missing or an option is not
    recognised. Time validity is checked later by the tracker.
    """
    parts = [p.strip() for p in text.split("|")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None

    fields: dict = {"title": parts[0], "scheduled_time": parts[1]}
    for option in parts[2:]:
        key = option.lower()
        if not key:
            continue
        if key in _TYPE_ALIASES:
            fields["task_type"] = _TYPE_ALIASES[key]
        elif key in _PRIORITY_ALIASES:
            fields["priority"] = _PRIORITY_ALIASES[key]
        elif key in _CATEGORY_ALIASES:
            fields["category"] = _CATEGORY_ALIASES[key]
        else:
            return None
    return TaskDraft(**fields)
