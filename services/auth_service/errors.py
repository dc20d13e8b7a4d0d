"""
Error taxonomy for the session and identity core.
Each error carries a message suitable for direct display to the user.
"""


class AuthError(Exception):
    """Base class for session and identity failures"""

    default_message = "Unknown error occurred"

    def __init__(self, message: str = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class MissingInput(AuthError):
    """A required field was left empty"""
    default_message = "Please fill all required fields"


class InvalidCredentials(AuthError):
    """No account matches the email, or the password does not verify"""
    default_message = "Invalid credentials"


class DuplicateEmail(AuthError):
    """Another account already uses this email"""
    default_message = "Email already registered"


class NotFound(AuthError):
    """No directory record has the requested id"""
    default_message = "Account not found"


class NotLoggedIn(AuthError):
    """The operation needs an active session"""
    default_message = "Not logged in"


class ValidationFailed(AuthError):
    """Input is present but not acceptable (bad role, bad email, foreign profile field)"""
    default_message = "Some fields are invalid"

    def __init__(self, message: str = None, field: str = None):
        super().__init__(message)
        self.field = field


class MalformedPersistedState(AuthError):
    """
    A persisted entry could not be decoded into records.
    Recovered locally by discarding the entry, never surfaced to the user.
    """
    default_message = "Stored data is corrupt"
