"""Tests for src.adapters.credentials — CredentialProvider implementations."""

import sqlite3
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.credentials import (
    STORED_KEY,
    EnvCredentialProvider,
    StoredCredentialProvider,
    create_credential_provider,
)


class TestEnvCredentialProvider:
    def test_empty_key_is_none(self):
        assert EnvCredentialProvider(initial="").get() is None

    def test_initial_value(self):
        assert EnvCredentialProvider(initial="sk-test").get() == "sk-test"

    def test_reads_settings_by_default(self):
        with patch("src.adapters.credentials.settings") as mock_settings:
            mock_settings.ADVICE_API_KEY = "from-env"
            assert EnvCredentialProvider().get() == "from-env"

    def test_set_overrides_for_session(self):
        provider = EnvCredentialProvider(initial="")
        assert provider.set(" sk-new ") is True
        assert provider.get() == "sk-new"


class TestStoredCredentialProvider:
    def test_missing_key(self, kv_db):
        assert StoredCredentialProvider(kv_db).get() is None

    def test_set_and_get(self, kv_db):
        provider = StoredCredentialProvider(kv_db)
        assert provider.set("sk-stored") is True
        assert provider.get() == "sk-stored"
        assert kv_db.get(STORED_KEY) == "sk-stored"

    def test_survives_new_instance(self, kv_db):
        StoredCredentialProvider(kv_db).set("sk-stored")
        assert StoredCredentialProvider(kv_db).get() == "sk-stored"

    def test_blank_value_clears(self, kv_db):
        provider = StoredCredentialProvider(kv_db)
        provider.set("sk-stored")
        assert provider.set("  ") is True
        assert provider.get() is None

    def test_storage_failure_returns_false(self):
        store = MagicMock()
        store.set.side_effect = sqlite3.OperationalError("readonly database")
        assert StoredCredentialProvider(store).set("sk") is False

    def test_os_error_is_handled(self):
        store = MagicMock()
        store.get.side_effect = OSError("disk gone")
        store.set.side_effect = OSError("disk gone")
        provider = StoredCredentialProvider(store)
        assert provider.get() is None
        assert provider.set("sk") is False

    def test_read_failure_returns_none(self):
        store = MagicMock()
        store.get.side_effect = sqlite3.OperationalError("disk I/O error")
        assert StoredCredentialProvider(store).get() is None


class TestCreateCredentialProvider:
    def test_env_backend(self):
        with patch("src.adapters.credentials.settings") as mock_settings:
            mock_settings.CREDENTIAL_BACKEND = "env"
            mock_settings.ADVICE_API_KEY = ""
            assert isinstance(create_credential_provider(), EnvCredentialProvider)

    def test_store_backend(self, kv_db):
        with patch("src.adapters.credentials.settings") as mock_settings:
            mock_settings.CREDENTIAL_BACKEND = "Store"
            provider = create_credential_provider(kv_db)
        assert isinstance(provider, StoredCredentialProvider)

    def test_unknown_backend_raises(self):
        with patch("src.adapters.credentials.settings") as mock_settings:
            mock_settings.CREDENTIAL_BACKEND = "keychain"
            with pytest.raises(ValueError, match="Unknown CREDENTIAL_BACKEND"):
                create_credential_provider()
