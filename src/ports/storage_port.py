"""Storage port — abstract key-value interface for local persistence.

Core modules depend on this protocol, never on a specific backend.
Values are opaque strings (the core stores JSON). A missing key returns None.
"""

from __future__ import annotations

import sqlite3
from typing import Protocol

# Failures a store may raise for a single key; callers treat them as recoverable
STORAGE_ERRORS: tuple[type[Exception], ...] = (sqlite3.Error, OSError)


class KeyValueStore(Protocol):
    """Abstract key-value store used by the data manager."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...
