"""Credential adapters — implementations of CredentialProvider.

EnvCredentialProvider reads the key from settings (.env / environment).
StoredCredentialProvider keeps it in the local key-value store, so a key
entered at runtime survives restarts.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.config import settings
from src.ports.storage_port import STORAGE_ERRORS

if TYPE_CHECKING:
    from src.ports.credential_port import CredentialProvider
    from src.ports.storage_port import KeyValueStore

logger = logging.getLogger(__name__)

STORED_KEY = "advice_api_key"


class EnvCredentialProvider:
    """Environment-backed CredentialProvider. `set` only lasts for this process."""

    def __init__(self, initial: str | None = None) -> None:
        self._value = initial if initial is not None else settings.ADVICE_API_KEY

    def get(self) -> str | None:
        return self._value or None

    def set(self, value: str) -> bool:
        self._value = value.strip()
        logger.info("Advice API key overridden for this session")
        return True


class StoredCredentialProvider:
    """Key-value-store-backed CredentialProvider."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get(self) -> str | None:
        try:
            return self._store.get(STORED_KEY) or None
        except STORAGE_ERRORS as exc:
            logger.error("Failed to read stored advice key: %s", exc)
            return None

    def set(self, value: str) -> bool:
        try:
            if value.strip():
                self._store.set(STORED_KEY, value.strip())
            else:
                self._store.delete(STORED_KEY)
        except STORAGE_ERRORS as exc:
            logger.error("Failed to store advice key: %s", exc)
            return False
        logger.info("Advice API key stored")
        return True


def create_credential_provider(store: KeyValueStore | None = None) -> CredentialProvider:
    """Return the credential provider matching the CREDENTIAL_BACKEND setting."""
    backend = settings.CREDENTIAL_BACKEND.lower()

    if backend == "env":
        return EnvCredentialProvider()

    if backend == "store":
        if store is None:
            from src.data.db import KeyValueDB

            store = KeyValueDB()
        return StoredCredentialProvider(store)

    raise ValueError(f"Unknown CREDENTIAL_BACKEND: {backend!r}")
