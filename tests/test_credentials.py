"""
Tests for the credential vault
"""

import pytest

from infrastructure.storage.record_store import InMemoryRecordStore
from services.auth_service.credentials import CredentialVault
from services.auth_service.errors import ValidationFailed

KEY = "adcreativex_credentials"


class TestCredentialVault:
    """Test bcrypt password storage"""

    def setup_method(self):
        """Set up test environment"""
        self.store = InMemoryRecordStore()
        self.vault = CredentialVault(self.store, KEY, rounds=4)

    def test_password_is_hashed(self):
        """Test the stored value is a bcrypt hash, not the password"""
        self.vault.set_password("user-1", "hunter2")

        stored = self.store.load(KEY)["user-1"]
        assert stored != "hunter2"
        assert stored.startswith("$2")

    def test_verify(self):
        """Test correct and wrong passwords"""
        self.vault.set_password("user-1", "hunter2")

        assert self.vault.verify("user-1", "hunter2") is True
        assert self.vault.verify("user-1", "wrong") is False

    def test_verify_without_hash(self):
        """Test users without a stored hash report None"""
        assert self.vault.verify("legacy-user", "anything") is None

    def test_hashes_kept_per_user(self):
        """Test setting one password leaves others intact"""
        self.vault.set_password("user-1", "one")
        self.vault.set_password("user-2", "two")

        assert self.vault.verify("user-1", "one") is True
        assert self.vault.verify("user-2", "two") is True

    def test_malformed_entry_discarded(self):
        """Test a non-mapping entry is dropped"""
        self.store.save(KEY, ["not", "a", "mapping"])

        assert self.vault.verify("user-1", "pw") is None
        assert self.store.load(KEY) is None

    def test_unreadable_hash(self):
        """Test a corrupt hash never verifies"""
        self.store.save(KEY, {"user-1": "not-a-bcrypt-hash"})

        assert self.vault.verify("user-1", "pw") is False

    def test_overlong_password_refused(self):
        """Test passwords over 72 bytes are rejected instead of hashed"""
        with pytest.raises(ValidationFailed) as exc_info:
            self.vault.hash_password("p" * 100)

        assert exc_info.value.field == "password"
        assert self.store.load(KEY) is None

    def test_multibyte_password_limit(self):
        """Test the limit counts encoded bytes, not characters"""
        self.vault.set_password("user-1", "é" * 36)

        with pytest.raises(ValidationFailed):
            self.vault.hash_password("é" * 37)

    def test_overlong_password_never_verifies(self):
        """Test verifying an overlong password reports a mismatch"""
        self.vault.set_password("user-1", "hunter2")

        assert self.vault.verify("user-1", "p" * 100) is False
