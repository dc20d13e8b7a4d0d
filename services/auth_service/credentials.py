"""
Credential vault - bcrypt password hashes kept apart from the user directory.
"""

from typing import Dict, Optional

import bcrypt

from infrastructure.storage.record_store import RecordStore
from services.auth_service.errors import ValidationFailed
from utils.logging_config import get_logger

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def check_password(password: str) -> bytes:
    """
    Encode a password for bcrypt

    Raises:
        ValidationFailed: If the encoded password is longer than bcrypt accepts
    """
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationFailed(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes", field="password"
        )
    return encoded


class CredentialVault:
    """
    Stores one bcrypt hash per user id under a single store entry.

    Records created before hashes were kept (or by clients that never set one)
    have no entry; verify() reports None for those so the caller can decide.
    """

    def __init__(self, store: RecordStore, key: str, rounds: int = 12):
        """
        Args:
            store: Backing record store
            key: Store entry holding the id -> hash mapping
            rounds: bcrypt cost factor
        """
        self.store = store
        self.key = key
        self.rounds = rounds
        self.logger = get_logger(__name__)

    def _load(self) -> Dict[str, str]:
        hashes = self.store.load(self.key)
        if hashes is None:
            return {}
        if not isinstance(hashes, dict) or not all(isinstance(v, str) for v in hashes.values()):
            self.logger.warning("Discarding malformed credential entry")
            self.store.clear(self.key)
            return {}
        return hashes

    def hash_password(self, password: str) -> str:
        """
        Hash password using bcrypt

        Raises:
            ValidationFailed: If the password is too long to hash
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(check_password(password), salt).decode('utf-8')

    def store_hash(self, user_id: str, hashed: str):
        """Store an already computed hash for a user"""
        hashes = self._load()
        hashes[user_id] = hashed
        self.store.save(self.key, hashes)
        self.logger.debug(f"Credential stored for user {user_id}")

    def set_password(self, user_id: str, password: str):
        """Hash and store a password for a user"""
        self.store_hash(user_id, self.hash_password(password))

    def verify(self, user_id: str, password: str) -> Optional[bool]:
        """
        Check a password against the stored hash

        Returns:
            True/False when a hash exists, None when the user has none
        """
        hashed = self._load().get(user_id)
        if hashed is None:
            return None
        try:
            return bcrypt.checkpw(check_password(password), hashed.encode('utf-8'))
        except ValidationFailed:
            return False
        except ValueError:
            self.logger.warning(f"Unreadable credential hash for user {user_id}")
            return False
