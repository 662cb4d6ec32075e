"""LifeTune error taxonomy.

Validation and not-found errors are raised inside the data manager and
converted to an OperationResult at its public boundary. Persistence errors
are reported alongside a result, never raised to callers.
"""

from __future__ import annotations


class LifeTuneError(Exception):
    """Base class for all LifeTune domain errors."""


class ValidationError(LifeTuneError):
    """User input outside an allowed domain. No state was mutated."""


class NotFoundError(LifeTuneError):
    """A referenced record (goal, profile) does not exist."""


class PersistenceError(LifeTuneError):
    """Serialization or storage failure. In-memory state stays authoritative."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key
