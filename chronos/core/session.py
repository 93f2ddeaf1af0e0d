"""
Chronos — Task Session.

Owns the in-memory task list for one session. Each mutation goes through
the tracker, replaces `tasks` in one step and is written through to the
persistence gateway before returning.
"""

from __future__ import annotations

import logging

from chronos.core import analytics, tracker
from chronos.core.clock import DEFAULT_TZ
from chronos.core.persistence import PersistenceGateway
from chronos.core.tracker import TaskDraft
from chronos.data.models import Task

logger = logging.getLogger(__name__)


class TaskSession:
    """The task list plus the gateway that keeps it durable."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        tasks: list[Task] | None = None,
        tz_name: str = DEFAULT_TZ,
    ) -> None:
        self._gateway = gateway
        self.tasks: list[Task] = list(tasks or [])
        self.tz_name = tz_name

    @classmethod
    def open(cls, gateway: PersistenceGateway, tz_name: str = DEFAULT_TZ) -> TaskSession:
        """Start a session from whatever the gateway has stored."""
        return cls(gateway, gateway.load(), tz_name=tz_name)

    def _commit(self, tasks: list[Task]) -> None:
        self.tasks = tasks
        self._gateway.save(self.tasks)

    # ---------- Mutations ----------

    def add(self, draft: TaskDraft) -> Task | None:
        """Register a task. Returns it, or None if the draft was rejected."""
        updated = tracker.create(self.tasks, draft, tz_name=self.tz_name)
        if updated is self.tasks:
            return None
        self._commit(updated)
        return updated[-1]

    def toggle(self, task_id: str) -> Task | None:
        """Flip completion of one task. Returns the updated task, or None."""
        updated = tracker.toggle(self.tasks, task_id, tz_name=self.tz_name)
        if updated is self.tasks:
            return None
        self._commit(updated)
        return tracker.find(self.tasks, task_id)

    def delete(self, task_id: str) -> Task | None:
        """Remove one task. Returns the removed task, or None."""
        task = tracker.find(self.tasks, task_id)
        if task is None:
            return None
        self._commit(tracker.delete(self.tasks, task_id))
        return task

    def import_backup(self, document: str | bytes | dict) -> int:
        """Replace every task with the backup's.

        Raises BackupImportError and leaves the session untouched if the
        document is not a valid backup.
        """
        imported = self._gateway.import_snapshot(document)
        self._commit(imported)
        logger.info("Session replaced by backup: %d tasks", len(imported))
        return len(imported)

    # ---------- Reads ----------

    def export_backup(self) -> str:
        return self._gateway.export_snapshot(self.tasks)

    def timeline(self) -> list[Task]:
        return analytics.sort_timeline(self.tasks)

    def dashboard(self) -> analytics.Dashboard:
        return analytics.dashboard(self.tasks, tz_name=self.tz_name)

    def activity(self) -> list[analytics.ActivityDay]:
        return analytics.activity_matrix(self.tasks, tz_name=self.tz_name)
