"""
User, session and result data models for the authentication service.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional

from services.auth_service.errors import AuthError, MalformedPersistedState


class UserRole(str, Enum):
    """Account type chosen at registration"""
    BRAND = "brand"
    CREATOR = "creator"


# Attribute name -> persisted (camelCase) name
PERSISTED_FIELD_NAMES = {
    "id": "id",
    "email": "email",
    "role": "role",
    "name": "name",
    "company_name": "companyName",
    "industry": "industry",
    "website": "website",
    "specialty": "specialty",
    "portfolio_link": "portfolioLink",
    "bio": "bio",
}

ATTRIBUTE_NAMES = {persisted: attr for attr, persisted in PERSISTED_FIELD_NAMES.items()}

REQUIRED_FIELDS = ("id", "email", "role", "name")


@dataclass(frozen=True)
class UserRecord:
    """User directory entry"""
    id: str
    email: str
    role: UserRole
    name: str = ""
    company_name: Optional[str] = None
    industry: Optional[str] = None
    website: Optional[str] = None
    specialty: Optional[str] = None
    portfolio_link: Optional[str] = None
    bio: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name shown in greetings, falling back to the email"""
        return self.name or self.email

    def profile_fields(self) -> Dict[str, Any]:
        """Mutable profile attributes (everything except id and role)"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ("id", "role")
        }

    def merged(self, changes: Dict[str, Any]) -> 'UserRecord':
        """Return a copy with the given attributes overwritten"""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted camelCase shape, omitting empty optional fields"""
        data = {}
        for attr, persisted in PERSISTED_FIELD_NAMES.items():
            value = getattr(self, attr)
            if attr == "role":
                value = self.role.value
            if value is None and attr not in REQUIRED_FIELDS:
                continue
            data[persisted] = value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> 'UserRecord':
        """
        Build a record from its persisted shape

        Args:
            data: Decoded JSON object

        Returns:
            UserRecord

        Raises:
            MalformedPersistedState: If required fields are missing or mistyped
        """
        if not isinstance(data, dict):
            raise MalformedPersistedState(f"Expected an object, got {type(data).__name__}")

        for key in ("id", "email", "role"):
            if not isinstance(data.get(key), str) or not data.get(key):
                raise MalformedPersistedState(f"Missing or invalid '{key}'")

        try:
            role = UserRole(data["role"])
        except ValueError:
            raise MalformedPersistedState(f"Unknown role '{data['role']}'")

        kwargs = {"id": data["id"], "email": data["email"], "role": role}
        for persisted, value in data.items():
            attr = ATTRIBUTE_NAMES.get(persisted)
            if attr is None or attr in kwargs:
                # Unknown keys written by other clients are dropped
                continue
            if value is not None and not isinstance(value, str):
                raise MalformedPersistedState(f"Field '{persisted}' must be a string")
            kwargs[attr] = value

        if kwargs.get("name") is None:
            kwargs["name"] = ""

        return cls(**kwargs)


class SessionState(str, Enum):
    """Session lifecycle states"""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionSnapshot:
    """State published to subscribers after every change"""
    state: SessionState
    current_user: Optional[UserRecord]
    loading: bool


@dataclass(frozen=True)
class Notification:
    """User-facing toast raised after an operation"""
    title: str
    description: str
    variant: str = "default"  # default, destructive

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


@dataclass
class AuthResult:
    """Outcome of a Session Manager operation"""
    success: bool
    user: Optional[UserRecord] = None
    error: Optional[AuthError] = None
    message: str = ""

    @classmethod
    def ok(cls, user: Optional[UserRecord], message: str) -> 'AuthResult':
        return cls(success=True, user=user, message=message)

    @classmethod
    def failed(cls, error: AuthError) -> 'AuthResult':
        return cls(success=False, error=error, message=error.user_message)

    def __bool__(self) -> bool:
        return self.success
