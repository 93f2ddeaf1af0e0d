"""Tests for chronos.core.tracker — create, toggle and delete."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from chronos.core.tracker import TaskDraft, build_task, create, delete, find, toggle
from chronos.data.models import OneOff, Priority, Recurring, TaskType


TODAY = date(2024, 3, 10)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


class TestCreate:
    def test_defaults(self):
        tasks = create([], TaskDraft(title="Deep work", scheduled_time="2024-03-10T09:30"))
        assert len(tasks) == 1
        task = tasks[0]
        assert task.title == "Deep work"
        assert task.priority == Priority.MEDIUM
        assert task.category == "Work"
        assert task.task_type == TaskType.NORMAL
        assert task.completion == OneOff(completed=False)
        assert task.scheduled_time == "2024-03-10T09:30:00.000Z"

    def test_daily_starts_with_empty_history(self):
        tasks = create([], TaskDraft(
            title="Stretch", scheduled_time="2024-03-10T07:00", task_type=TaskType.DAILY,
        ))
        assert tasks[0].completion == Recurring()

    def test_fresh_unique_ids(self):
        draft = TaskDraft(title="A", scheduled_time="2024-03-10T07:00")
        tasks = create(create([], draft), draft)
        assert tasks[0].id != tasks[1].id

    def test_empty_title_rejected(self, make_task):
        existing = [make_task()]
        result = create(existing, TaskDraft(title="", scheduled_time="2024-03-10T07:00"))
        assert result is existing
        assert len(result) == 1

    def test_blank_title_rejected(self):
        assert create([], TaskDraft(title="   ", scheduled_time="2024-03-10T07:00")) == []

    def test_unparseable_time_rejected(self):
        assert create([], TaskDraft(title="Gym", scheduled_time="tomorrow-ish")) == []

    def test_empty_time_rejected(self):
        assert create([], TaskDraft(title="Gym", scheduled_time="")) == []

    def test_offset_time_normalized_to_utc(self):
        task = build_task(TaskDraft(title="Call", scheduled_time="2024-03-10T09:00:00+02:00"))
        assert task.scheduled_time == "2024-03-10T07:00:00.000Z"

    def test_naive_time_uses_timezone(self):
        task = build_task(
            TaskDraft(title="Call", scheduled_time="2024-01-10 09:00"), tz_name="Europe/Lisbon",
        )
        assert task.scheduled_time == "2024-01-10T09:00:00.000Z"

    def test_datetime_input(self):
        when = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
        task = build_task(TaskDraft(title="Lunch", scheduled_time=when))
        assert task.scheduled_time == "2024-03-10T12:00:00.000Z"

    def test_title_is_trimmed(self):
        task = build_task(TaskDraft(title="  Read  ", scheduled_time="2024-03-10T07:00"))
        assert task.title == "Read"

    def test_category_name_canonicalized(self):
        draft = TaskDraft(title="Read", scheduled_time="2024-03-10T07:00", category=" study ")
        assert draft.category == "Study"
        assert build_task(draft).category == "Study"

    def test_unknown_category_invalid(self):
        with pytest.raises(ValidationError, match="Unknown category"):
            TaskDraft(title="Mop", scheduled_time="2024-03-10T07:00", category="Chores")

    def test_unknown_category_rejected_by_create(self, make_task):
        tasks = [make_task()]
        draft = TaskDraft.model_construct(
            title="Mop", scheduled_time="2024-03-10T07:00", task_type=TaskType.NORMAL,
            priority=Priority.MEDIUM, category="Chores", description="",
        )
        assert create(tasks, draft) is tasks


# ---------------------------------------------------------------------------
# toggle
# ---------------------------------------------------------------------------


class TestToggleNormal:
    def test_inverts_completed(self, make_task):
        task = make_task(completed=False)
        result = toggle([task], task.id, today=TODAY)
        assert result[0].completion == OneOff(completed=True)

    def test_twice_restores_and_keeps_other_fields(self, make_task):
        task = make_task(completed=True, category="Gaming", priority=Priority.HIGH)
        result = toggle(toggle([task], task.id, today=TODAY), task.id, today=TODAY)
        assert result[0] == task

    def test_other_tasks_untouched(self, make_task):
        a, b, c = make_task(), make_task(), make_task(daily=True, history={"2024-01-01"})
        result = toggle([a, b, c], b.id, today=TODAY)
        assert result[0] is a
        assert result[2] is c
        assert result[1].completion.completed is True
        assert b.completion.completed is False  # original not mutated


class TestToggleDaily:
    def test_adds_today(self, make_task):
        task = make_task(daily=True, history={"2024-03-01"})
        result = toggle([task], task.id, today=TODAY)
        assert result[0].completion.history == {"2024-03-01", "2024-03-10"}

    def test_removes_today_only(self, make_task):
        task = make_task(daily=True, history={"2024-03-01", "2024-03-10"})
        result = toggle([task], task.id, today=TODAY)
        assert result[0].completion.history == {"2024-03-01"}

    def test_twice_same_day_restores_history(self, make_task):
        task = make_task(daily=True, history={"2024-02-28", "2024-03-09"})
        result = toggle(toggle([task], task.id, today=TODAY), task.id, today=TODAY)
        assert result[0].completion.history == task.completion.history

    def test_today_defaults_to_clock(self, make_task):
        task = make_task(daily=True)
        result = toggle([task], task.id)
        (day,) = result[0].completion.history
        assert len(day) == 10 and day[4] == "-"


class TestToggleUnknown:
    def test_unknown_id_returns_same_list(self, make_task):
        tasks = [make_task()]
        assert toggle(tasks, "nope", today=TODAY) is tasks

    def test_empty_list(self):
        assert toggle([], "nope", today=TODAY) == []


# ---------------------------------------------------------------------------
# delete / find
# ---------------------------------------------------------------------------


class TestDelete:
    def test_removes_task(self, make_task):
        a, b = make_task(), make_task()
        assert delete([a, b], a.id) == [b]

    def test_absent_id_is_noop(self, make_task):
        tasks = [make_task()]
        assert delete(tasks, "missing") is tasks


class TestFind:
    def test_found(self, make_task):
        a, b = make_task(), make_task()
        assert find([a, b], b.id) is b

    def test_missing(self, make_task):
        assert find([make_task()], "missing") is None
