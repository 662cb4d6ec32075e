"""Credential port — abstract access to the advice API key.

The advice client depends on this protocol, never on where the key lives.
"""

from __future__ import annotations

from typing import Protocol


class CredentialProvider(Protocol):
    """Abstract credential storage."""

    def get(self) -> str | None: ...

    def set(self, value: str) -> bool: ...
