"""
Auth service - session lifecycle, user directory and credentials.
"""

from .errors import (
    AuthError,
    DuplicateEmail,
    InvalidCredentials,
    MalformedPersistedState,
    MissingInput,
    NotFound,
    NotLoggedIn,
    ValidationFailed
)
from .models import AuthResult, Notification, SessionSnapshot, SessionState, UserRecord, UserRole
from .session_manager import SessionManager, build_session_manager

__all__ = [
    'AuthError',
    'DuplicateEmail',
    'InvalidCredentials',
    'MalformedPersistedState',
    'MissingInput',
    'NotFound',
    'NotLoggedIn',
    'ValidationFailed',
    'AuthResult',
    'Notification',
    'SessionSnapshot',
    'SessionState',
    'UserRecord',
    'UserRole',
    'SessionManager',
    'build_session_manager'
]
