"""
Storage infrastructure - durable key/value records backing the identity core.
"""

from .record_store import (
    RecordStore,
    InMemoryRecordStore,
    SQLiteRecordStore,
    create_record_store
)

__all__ = [
    'RecordStore',
    'InMemoryRecordStore',
    'SQLiteRecordStore',
    'create_record_store'
]
