"""
Shared fixtures for the session and identity tests
"""

import pytest

from config.environments.testing import get_testing_config
from infrastructure.storage.record_store import InMemoryRecordStore
from services.auth_service.session_manager import SessionManager


@pytest.fixture
def config():
    """Configuration with no simulated latency and cheap bcrypt rounds"""
    return get_testing_config()


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def manager(store, config):
    return SessionManager(store, config)
