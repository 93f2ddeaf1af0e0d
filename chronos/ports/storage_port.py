"""Storage port — abstract interface for the durable key-value store.

The persistence gateway depends on this protocol, never on a specific
backend.
"""

from __future__ import annotations

from typing import Protocol


class StorageError(Exception):
    """Raised when any storage backend operation fails."""


class StoragePort(Protocol):
    """Key-value store holding serialized documents."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> bool: ...
