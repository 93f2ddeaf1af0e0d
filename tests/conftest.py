"""Shared test fixtures and configuration.

Sets up fake environment variables so chronos.config doesn't sys.exit(),
and provides common fixtures like a temp key-value store.
"""

import os

# Patch env vars BEFORE any chronos imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("LLM_API_KEY", "fake-llm-key-for-tests")
os.environ.setdefault("LLM_PROVIDER", "gemini")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("TIMEZONE", "UTC")

import pytest


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_chronos.db")


@pytest.fixture
def kv_db(tmp_db_path):
    """Return a KeyValueDB instance backed by a temp file."""
    from chronos.data.db import KeyValueDB
    return KeyValueDB(db_path=tmp_db_path)


@pytest.fixture
def gateway(kv_db):
    """Return a PersistenceGateway over the temp store."""
    from chronos.core.persistence import PersistenceGateway
    return PersistenceGateway(kv_db, key="chronos_v2_data", user_name="User", version="2.1.0")


@pytest.fixture
def make_task():
    """Factory for tasks with sensible defaults."""
    from chronos.data.models import OneOff, Priority, Recurring, Task

    counter = {"n": 0}

    def _make(
        title="Task",
        scheduled_time="2024-01-05T10:00:00.000Z",
        daily=False,
        completed=False,
        history=(),
        category="Work",
        priority=Priority.MEDIUM,
        task_id=None,
    ):
        counter["n"] += 1
        completion = Recurring(history=frozenset(history)) if daily else OneOff(completed=completed)
        return Task(
            id=task_id or f"task-{counter['n']}",
            title=title,
            scheduled_time=scheduled_time,
            completion=completion,
            priority=priority,
            category=category,
        )

    return _make
