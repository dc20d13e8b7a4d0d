"""
Durable record store - key/value persistence of named JSON blobs.
Stands in for the browser storage the web front end keeps its user directory in.
"""

import json
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from config.app_config import StorageConfig
from utils.logging_config import get_logger


class RecordStore(ABC):
    """
    Get/set/remove of named JSON blobs.

    Every write commits before returning. There is no isolation between
    writers: two processes sharing the same backing file overwrite each
    other, last writer wins.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    @abstractmethod
    def _read_raw(self, key: str) -> Optional[str]:
        """Return the serialized value for key, or None"""

    @abstractmethod
    def _write_raw(self, key: str, raw: str):
        """Store the serialized value for key"""

    @abstractmethod
    def _delete_raw(self, key: str):
        """Remove key; absent keys are ignored"""

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys"""

    def load(self, key: str) -> Optional[Any]:
        """
        Load and deserialize a stored value

        Args:
            key: Entry name

        Returns:
            The decoded value, or None when the entry is absent or corrupt.
            Corrupt entries are removed.
        """
        raw = self._read_raw(key)
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            self.logger.warning(f"Discarding malformed entry '{key}': {e}")
            self.clear(key)
            return None

    def save(self, key: str, value: Any):
        """
        Serialize and store a value

        Args:
            key: Entry name
            value: JSON-serializable value
        """
        self._write_raw(key, json.dumps(value, ensure_ascii=False))
        self.logger.debug(f"Saved entry '{key}'")

    def clear(self, key: str):
        """
        Remove an entry

        Args:
            key: Entry name
        """
        self._delete_raw(key)
        self.logger.debug(f"Cleared entry '{key}'")


class InMemoryRecordStore(RecordStore):
    """Process-local store; values are kept serialized like the durable backend"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__()
        self._entries: Dict[str, str] = dict(initial or {})

    def _read_raw(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def _write_raw(self, key: str, raw: str):
        self._entries[key] = raw

    def _delete_raw(self, key: str):
        self._entries.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._entries)

    def put_raw(self, key: str, raw: str):
        """Store an already-serialized value verbatim (used to simulate foreign writers)"""
        self._entries[key] = raw


class SQLiteRecordStore(RecordStore):
    """
    SQLite-backed store.
    Opens a connection per operation so several processes can share the file.
    """

    def __init__(self, db_path: str):
        """
        Initialize the store

        Args:
            db_path: Path to the SQLite database file
        """
        super().__init__()
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create the records table if needed"""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

        self.logger.info(f"Record store initialized at {self.db_path}")

    def _read_raw(self, key: str) -> Optional[str]:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM records WHERE key = ?", (key,))
            row = cursor.fetchone()
        finally:
            conn.close()

        return row[0] if row else None

    def _write_raw(self, key: str, raw: str):
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT OR REPLACE INTO records (key, value, updated_at)
                VALUES (?, ?, ?)
            """, (key, raw, datetime.now().isoformat()))
            conn.commit()
        finally:
            conn.close()

    def _delete_raw(self, key: str):
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM records WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def keys(self) -> List[str]:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT key FROM records ORDER BY key")
            rows = cursor.fetchall()
        finally:
            conn.close()

        return [row[0] for row in rows]


def create_record_store(storage_config: StorageConfig) -> RecordStore:
    """
    Build the record store selected by configuration

    Args:
        storage_config: Storage section of the application config

    Returns:
        RecordStore instance
    """
    if storage_config.backend == "memory":
        return InMemoryRecordStore()
    if storage_config.backend == "sqlite":
        return SQLiteRecordStore(storage_config.db_path)
    raise ValueError(f"Unknown storage backend: {storage_config.backend}")
