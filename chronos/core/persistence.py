"""
Chronos — Persistence Gateway.

Keeps the durable store in step with the in-memory task list and moves
task lists in and out of portable backup documents.

Durable-store failures never reach the caller: `save` is best-effort and
`load` falls back to an empty list. Backup import is the one path that
reports failure, via BackupImportError.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from chronos.core.clock import now_utc, to_iso_z
from chronos.data.models import AppData, BackupDocument, Task
from chronos.ports.storage_port import StorageError, StoragePort

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "chronos_precision_backup_"

MSG_IMPORT_OK = "Activity records synced successfully!"
MSG_INVALID_FORMAT = "Invalid activity backup format."
MSG_UNREADABLE = "Failed to read backup file."


class BackupImportError(Exception):
    """Raised when a backup document cannot be imported.

    The message is meant to be shown to the user as-is.
    """


def backup_filename(now: datetime | None = None) -> str:
    """File name for an export, e.g. chronos_precision_backup_2024-01-05.json."""
    if now is None:
        now = now_utc()
    return f"{BACKUP_PREFIX}{to_iso_z(now)[:10]}.json"


def _tasks_from_records(records: list[dict[str, Any]]) -> list[Task]:
    return [Task.from_dict(r) for r in records]


class PersistenceGateway:
    """Serializes the task list to a StoragePort and to backup documents."""

    def __init__(
        self,
        storage: StoragePort,
        key: str | None = None,
        user_name: str | None = None,
        version: str | None = None,
    ) -> None:
        if key is None or user_name is None or version is None:
            from chronos.config import settings
            key = key or settings.STORAGE_KEY
            user_name = user_name or settings.USER_NAME
            version = version or settings.SCHEMA_VERSION

        self._storage = storage
        self._key = key
        self._user_name = user_name
        self._version = version

    # ---------- Durable store ----------

    def save(self, tasks: list[Task]) -> None:
        """Overwrite the stored envelope. Failures are logged, never raised."""
        envelope = AppData(
            tasks=[t.to_dict() for t in tasks],
            userName=self._user_name,
            version=self._version,
        )
        try:
            self._storage.set(self._key, envelope.model_dump_json())
        except (StorageError, TypeError, ValueError) as exc:
            logger.error("Failed to persist %d tasks: %s", len(tasks), exc)
            return
        logger.debug("Persisted %d tasks under %s", len(tasks), self._key)

    def load(self) -> list[Task]:
        """Read the stored task list; empty on first run or unreadable data."""
        try:
            raw = self._storage.get(self._key)
        except StorageError as exc:
            logger.error("Failed to load data: %s", exc)
            return []

        if raw is None:
            logger.info("No stored data under %s; starting empty", self._key)
            return []

        try:
            envelope = AppData.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Failed to load data: %s", exc)
            return []

        # TODO: decide between migrating and rejecting older schema versions
        if envelope.version != self._version:
            logger.warning(
                "Stored data has version %r, expected %r; loading as-is",
                envelope.version, self._version,
            )

        tasks = _tasks_from_records(envelope.tasks)
        logger.info("Loaded %d tasks for %s", len(tasks), envelope.userName)
        return tasks

    # ---------- Backups ----------

    def export_snapshot(self, tasks: list[Task], now: datetime | None = None) -> str:
        """Render the backup document as pretty-printed JSON."""
        if now is None:
            now = now_utc()
        document = BackupDocument(
            tasks=[t.to_dict() for t in tasks],
            exportedAt=to_iso_z(now),
        )
        return json.dumps(document.model_dump(), indent=2, ensure_ascii=False)

    def import_snapshot(self, document: str | bytes | dict[str, Any]) -> list[Task]:
        """Parse a backup document into the task list that replaces the current one.

        Raises BackupImportError if the document is not JSON or has no
        `tasks` array. Individual tasks are not validated.
        """
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                logger.warning("Backup import failed: unreadable JSON (%s)", exc)
                raise BackupImportError(MSG_UNREADABLE) from exc

        try:
            backup = BackupDocument.model_validate(document)
        except ValidationError as exc:
            logger.warning("Backup import failed: %s", exc)
            raise BackupImportError(MSG_INVALID_FORMAT) from exc

        tasks = _tasks_from_records(backup.tasks)
        logger.info("Backup imported: %d tasks (exported %s)", len(tasks), backup.exportedAt or "?")
        return tasks
