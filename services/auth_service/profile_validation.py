"""
Role-conditional profile rules.

Brand and creator accounts carry different optional fields. The checks here are
keyed on the account's UserRole: a light field check used on every directory
write, and the full form schemas the profile page validates against.
"""

from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError

from services.auth_service.errors import ValidationFailed
from services.auth_service.models import ATTRIBUTE_NAMES, PERSISTED_FIELD_NAMES, UserRole


COMMON_FIELDS = frozenset({"email", "name", "bio"})

ROLE_PROFILE_FIELDS = {
    UserRole.BRAND: frozenset({"company_name", "industry", "website"}),
    UserRole.CREATOR: frozenset({"specialty", "portfolio_link"}),
}

IMMUTABLE_FIELDS = frozenset({"id", "role"})

# Identity fields are trimmed; profile text is stored as submitted
TRIMMED_FIELDS = frozenset({"email", "name"})


def parse_role(role: Any) -> UserRole:
    """
    Coerce a role tag into a UserRole

    Raises:
        ValidationFailed: If the tag is not a known role
    """
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(str(role).strip().lower())
    except ValueError:
        raise ValidationFailed(f"Unknown account type '{role}'", field="role")


def check_profile_fields(role: UserRole, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize a profile patch and check it applies to the role

    Keys may use persisted (camelCase) or attribute (snake_case) names.
    Immutable keys (id, role) are dropped.

    Args:
        role: Role of the account being written
        data: Field changes

    Returns:
        Dict of attribute name -> value

    Raises:
        ValidationFailed: On unknown fields, fields of the other role, or non-string values
    """
    allowed = COMMON_FIELDS | ROLE_PROFILE_FIELDS[role]
    changes = {}

    for key, value in data.items():
        attr = ATTRIBUTE_NAMES.get(key) or (key if key in PERSISTED_FIELD_NAMES else None)
        if attr is None:
            raise ValidationFailed(f"Unknown profile field '{key}'", field=key)

        if attr in IMMUTABLE_FIELDS:
            continue

        if attr not in allowed:
            raise ValidationFailed(
                f"'{PERSISTED_FIELD_NAMES[attr]}' does not apply to {role.value} accounts",
                field=PERSISTED_FIELD_NAMES[attr]
            )

        if value is None:
            if attr in ("email", "name"):
                raise ValidationFailed(f"'{attr}' cannot be removed", field=attr)
        elif not isinstance(value, str):
            raise ValidationFailed(
                f"'{PERSISTED_FIELD_NAMES[attr]}' must be text",
                field=PERSISTED_FIELD_NAMES[attr]
            )
        elif attr in TRIMMED_FIELDS:
            value = value.strip()

        changes[attr] = value

    return changes


def check_email(email: str) -> str:
    """Strip and sanity-check an email address"""
    email = email.strip()
    if "@" not in email:
        raise ValidationFailed("Please enter a valid email address", field="email")
    return email


class BrandProfileForm(BaseModel):
    """Profile page schema for brand accounts"""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    company_name: str = Field(alias="companyName", min_length=2)
    industry: str = Field(min_length=2)
    website: HttpUrl
    bio: Optional[str] = None


class CreatorProfileForm(BaseModel):
    """Profile page schema for creator accounts"""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=2)
    specialty: str = Field(min_length=2)
    portfolio_link: HttpUrl = Field(alias="portfolioLink")
    bio: Optional[str] = None


PROFILE_FORMS: Dict[UserRole, Type[BaseModel]] = {
    UserRole.BRAND: BrandProfileForm,
    UserRole.CREATOR: CreatorProfileForm,
}

FORM_MESSAGES = {
    "companyName": "Company name is required",
    "industry": "Industry is required",
    "website": "Please enter a valid URL",
    "name": "Name is required",
    "specialty": "Specialty is required",
    "portfolioLink": "Please enter a valid URL",
}


def validate_profile_form(role: UserRole, data: Dict[str, Any]) -> Dict[str, str]:
    """
    Validate a submitted profile form

    Args:
        role: Role of the account being edited
        data: Form values keyed by persisted field name

    Returns:
        Dict of persisted field name -> error message; empty when valid
    """
    form = PROFILE_FORMS[role]
    try:
        form.model_validate(data)
    except ValidationError as e:
        errors = {}
        for error in e.errors():
            key = str(error["loc"][0]) if error["loc"] else "form"
            key = PERSISTED_FIELD_NAMES.get(key, key)
            errors.setdefault(key, FORM_MESSAGES.get(key, error["msg"]))
        return errors
    return {}


def profile_form_to_patch(role: UserRole, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a valid form submission into a profile patch

    Raises:
        ValidationFailed: If the form does not validate
    """
    errors = validate_profile_form(role, data)
    if errors:
        field, message = next(iter(errors.items()))
        raise ValidationFailed(message, field=field)

    form = PROFILE_FORMS[role].model_validate(data)
    patch = form.model_dump(by_alias=True)
    for key, value in patch.items():
        if value is not None and not isinstance(value, str):
            # Keep the URL as typed; the parsed form normalizes it
            submitted = data.get(key, data.get(ATTRIBUTE_NAMES.get(key, key)))
            patch[key] = str(submitted).strip()
    # Bio is free text: store it as typed, or clear it when left blank
    bio = data.get("bio")
    patch["bio"] = bio if isinstance(bio, str) and bio.strip() else None
    return patch
