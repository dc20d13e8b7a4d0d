"""
Session manager - owns the current-user slot and mediates every identity operation.

One SessionManager instance is the single owner of a runtime's session. It is
constructed explicitly and handed to the pages that need it; nothing reaches
it through module globals. Operations are coroutines so a networked identity
service can replace the record store without changing callers.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

from config.app_config import AppConfig, get_config
from infrastructure.storage.record_store import RecordStore, create_record_store
from services.auth_service import identity_service
from services.auth_service.credentials import CredentialVault
from services.auth_service.errors import (
    AuthError,
    InvalidCredentials,
    MalformedPersistedState,
    MissingInput,
    NotFound,
    NotLoggedIn,
)
from services.auth_service.models import (
    AuthResult,
    Notification,
    SessionSnapshot,
    SessionState,
    UserRecord,
)
from services.auth_service.profile_validation import parse_role
from utils.logging_config import (
    get_error_tracker,
    get_logger,
    log_auth_event,
    log_execution_time,
    mask_email,
)

SessionListener = Callable[[SessionSnapshot], None]
NotificationListener = Callable[[Notification], None]


class SessionManager:
    """
    Main session service.
    Hydrates the session at startup, runs login/register/logout/update and
    publishes every change to subscribers.

    Every mutating operation writes the directory and session pointer through
    to the record store before it returns.
    """

    def __init__(self, store: RecordStore, config: Optional[AppConfig] = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        """
        Initialize the session manager

        Args:
            store: Record store holding the directory and session pointer
            config: Application configuration (defaults to the global config)
            sleep: Coroutine used for simulated backend latency
        """
        self.store = store
        self.config = config or get_config()
        self.logger = get_logger(__name__)
        self.error_tracker = get_error_tracker()
        self._sleep = sleep

        storage = self.config.storage
        self.directory_key = storage.directory_key
        self.session_key = storage.session_key
        self.vault = None
        if self.config.auth.verify_passwords:
            self.vault = CredentialVault(store, storage.credentials_key, self.config.auth.bcrypt_rounds)

        self._current_user: Optional[UserRecord] = None
        self._state = SessionState.UNINITIALIZED
        self._loading = True
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop = None
        self._subscribers: List[SessionListener] = []
        self._notifiers: List[NotificationListener] = []

    # ------------------------------------------------------------------
    # Published state

    @property
    def current_user(self) -> Optional[UserRecord]:
        return self._current_user

    @property
    def loading(self) -> bool:
        """True until initialize() has finished; flips to False exactly once"""
        return self._loading

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(state=self._state, current_user=self._current_user, loading=self._loading)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener for session changes

        Args:
            listener: Called with a SessionSnapshot after every change

        Returns:
            Function that removes the listener
        """
        self._subscribers.append(listener)

        def unsubscribe():
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def add_notifier(self, listener: NotificationListener) -> Callable[[], None]:
        """
        Register a sink for user-facing notifications

        Returns:
            Function that removes the sink
        """
        self._notifiers.append(listener)

        def remove():
            if listener in self._notifiers:
                self._notifiers.remove(listener)

        return remove

    def _publish(self):
        snapshot = self.snapshot()
        for listener in list(self._subscribers):
            try:
                listener(snapshot)
            except Exception as e:
                self.error_tracker.track_error(e, context="session_subscriber")

    def _notify(self, title: str, description: str, variant: str = "default"):
        notification = Notification(title=title, description=description, variant=variant)
        for listener in list(self._notifiers):
            try:
                listener(notification)
            except Exception as e:
                self.error_tracker.track_error(e, context="session_notifier")

    def _set_user(self, user: Optional[UserRecord]):
        self._current_user = user
        self._state = SessionState.AUTHENTICATED if user else SessionState.ANONYMOUS
        self._publish()

    def _operation_lock(self) -> asyncio.Lock:
        """Per-manager mutex, recreated if the manager moves to another event loop"""
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    # ------------------------------------------------------------------
    # Store access

    def _load_directory(self) -> identity_service.Directory:
        raw = self.store.load(self.directory_key)
        try:
            return identity_service.parse_directory(raw)
        except MalformedPersistedState as e:
            self.logger.warning(f"Discarding user directory: {e}")
            self.store.clear(self.directory_key)
            return []

    def _save_directory(self, directory: identity_service.Directory):
        self.store.save(self.directory_key, identity_service.serialize_directory(directory))

    def _load_session_pointer(self) -> Optional[UserRecord]:
        raw = self.store.load(self.session_key)
        if raw is None:
            return None
        try:
            return UserRecord.from_dict(raw)
        except MalformedPersistedState as e:
            self.logger.warning(f"Discarding session pointer: {e}")
            self.store.clear(self.session_key)
            return None

    def _save_session_pointer(self, user: UserRecord):
        self.store.save(self.session_key, user.to_dict())

    def _persist(self, operation: str, user: UserRecord,
                 directory: Optional[identity_service.Directory] = None):
        """Write the directory (when given) and then the session pointer"""
        with log_execution_time(self.logger, f"{operation} write-through", user_id=user.id):
            if directory is not None:
                self._save_directory(directory)
            self._save_session_pointer(user)

    # ------------------------------------------------------------------
    # Operations

    async def initialize(self) -> SessionSnapshot:
        """
        Hydrate the session from the persisted pointer

        Runs once per manager; later calls return the current snapshot.
        Never raises: unreadable state leaves the session anonymous.

        Returns:
            SessionSnapshot after initialization
        """
        if self._state is not SessionState.UNINITIALIZED:
            return self.snapshot()

        self._state = SessionState.LOADING
        self._publish()

        user = None
        try:
            user = self._load_session_pointer()
        except Exception as e:
            self.error_tracker.track_error(e, context="session_initialize")
        finally:
            self._loading = False
            self._set_user(user)

        if user:
            self.logger.info(f"Session restored from storage for user: {user.id}")
        return self.snapshot()

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Authenticate against the directory and start a session

        Args:
            email: Account email
            password: Account password

        Returns:
            AuthResult with the logged-in record on success
        """
        async with self._operation_lock():
            await self._sleep(self.config.auth.login_latency_seconds)
            try:
                if not email or not password:
                    raise MissingInput("Please provide email and password")

                user = identity_service.find_by_email(self._load_directory(), email)
                if user is None:
                    raise InvalidCredentials()

                if self.vault is not None and self.vault.verify(user.id, password) is False:
                    raise InvalidCredentials()

                self._persist("login", user)
                self._set_user(user)

            except AuthError as e:
                return self._fail("login", "Login failed", e, email=mask_email(email))
            except Exception as e:
                return self._crash("login", "Login failed", e)

        log_auth_event(self.logger, "login", True, user_id=user.id)
        self._notify("Login successful", f"Welcome back, {user.display_name}!")
        return AuthResult.ok(user, "Login successful")

    async def register(self, email: str, password: str, role: Any,
                       profile: Optional[Dict[str, Any]] = None) -> AuthResult:
        """
        Create an account and log it in

        Args:
            email: Account email (unique, case-insensitive)
            password: Account password
            role: "brand" or "creator"
            profile: Optional profile fields (name, role-specific fields, bio)

        Returns:
            AuthResult with the new record on success
        """
        async with self._operation_lock():
            await self._sleep(self.config.auth.register_latency_seconds)
            try:
                if not email or not password or not role:
                    raise MissingInput()

                user_role = parse_role(role)
                user, directory = identity_service.create(
                    self._load_directory(), email, user_role, profile
                )

                # Hash before the first write so a rejected password leaves no record
                if self.vault is not None:
                    self.vault.store_hash(user.id, self.vault.hash_password(password))
                self._persist("register", user, directory)
                self._set_user(user)

            except AuthError as e:
                return self._fail("register", "Registration failed", e, email=mask_email(email))
            except Exception as e:
                return self._crash("register", "Registration failed", e)

        log_auth_event(self.logger, "register", True, user_id=user.id, role=user.role.value)
        self._notify("Registration successful", "Your account has been created successfully.")
        return AuthResult.ok(user, "Registration successful")

    async def logout(self) -> AuthResult:
        """
        End the session; always succeeds, including when nobody is logged in

        Returns:
            Successful AuthResult
        """
        async with self._operation_lock():
            previous = self._current_user
            try:
                self.store.clear(self.session_key)
            except Exception as e:
                # The in-memory session still ends
                self.error_tracker.track_error(e, context="logout")
            self._set_user(None)

        log_auth_event(self.logger, "logout", True, user_id=previous.id if previous else None)
        self._notify("Logged out", "You have been successfully logged out.")
        return AuthResult.ok(None, "Logged out")

    async def update_profile(self, patch: Dict[str, Any]) -> AuthResult:
        """
        Merge profile changes into the current user's record

        Args:
            patch: Field changes (persisted camelCase or snake_case names)

        Returns:
            AuthResult with the updated record on success
        """
        async with self._operation_lock():
            await self._sleep(self.config.auth.update_latency_seconds)
            try:
                if self._current_user is None:
                    raise NotLoggedIn()

                directory = self._load_directory()
                try:
                    user, directory = identity_service.update(directory, self._current_user.id, patch)
                except NotFound:
                    # Record removed by another process: write the session copy back
                    self.logger.warning(f"Restoring missing directory record {self._current_user.id}")
                    user, directory = identity_service.update(
                        [*directory, self._current_user], self._current_user.id, patch
                    )

                self._persist("update_profile", user, directory)
                self._set_user(user)

            except AuthError as e:
                return self._fail("update_profile", "Update failed", e)
            except Exception as e:
                return self._crash("update_profile", "Update failed", e)

        log_auth_event(self.logger, "update_profile", True, user_id=user.id)
        self._notify("Profile updated", "Your profile has been updated successfully.")
        return AuthResult.ok(user, "Profile updated")

    # ------------------------------------------------------------------
    # Failure handling

    def _fail(self, event: str, title: str, error: AuthError, **details) -> AuthResult:
        log_auth_event(self.logger, event, False, error_type=type(error).__name__, **details)
        self._notify(title, error.user_message, variant="destructive")
        return AuthResult.failed(error)

    def _crash(self, event: str, title: str, error: Exception) -> AuthResult:
        self.error_tracker.track_error(error, context=event)
        failure = AuthError("An error occurred. Please try again.")
        self._notify(title, failure.user_message, variant="destructive")
        return AuthResult.failed(failure)


def build_session_manager(config: Optional[AppConfig] = None) -> SessionManager:
    """
    Create a session manager over the configured record store

    Args:
        config: Application configuration (defaults to the global config)

    Returns:
        New, uninitialized SessionManager
    """
    config = config or get_config()
    return SessionManager(create_record_store(config.storage), config)
