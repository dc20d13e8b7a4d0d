"""
Identity service - validates and mutates the user directory.

The functions here are pure: they take a directory (list of UserRecord) and
return new lists without touching storage. The Session Manager owns reading
and writing the directory blob.
"""

import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from services.auth_service.errors import DuplicateEmail, MalformedPersistedState, NotFound
from services.auth_service.models import UserRecord, UserRole
from services.auth_service.profile_validation import check_email, check_profile_fields
from utils.logging_config import get_logger, mask_email

logger = get_logger(__name__)

Directory = List[UserRecord]


def normalize_email(email: str) -> str:
    """Comparison key for email lookups (case-insensitive)"""
    return email.strip().casefold()


def parse_directory(raw: Any) -> Directory:
    """
    Decode the stored directory blob

    Args:
        raw: Value loaded from the record store (None when absent)

    Entries that cannot be decoded are skipped; they disappear from storage
    on the next directory write.

    Returns:
        List of UserRecord

    Raises:
        MalformedPersistedState: If the blob is not a list
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedPersistedState("User directory must be a list")

    directory = []
    for position, item in enumerate(raw):
        try:
            directory.append(UserRecord.from_dict(item))
        except MalformedPersistedState as e:
            logger.warning(f"Skipping malformed directory entry #{position}: {e}")
    return directory


def serialize_directory(directory: Iterable[UserRecord]) -> List[Dict[str, Any]]:
    """Encode a directory for storage"""
    return [record.to_dict() for record in directory]


def find_by_email(directory: Directory, email: str) -> Optional[UserRecord]:
    """
    Find the record registered under an email

    Args:
        directory: User directory
        email: Address to look up

    Returns:
        Matching UserRecord, or None
    """
    if not email:
        return None
    key = normalize_email(email)
    for record in directory:
        if normalize_email(record.email) == key:
            return record
    return None


def find_by_id(directory: Directory, user_id: str) -> Optional[UserRecord]:
    """Find a record by id"""
    for record in directory:
        if record.id == user_id:
            return record
    return None


def _new_user_id(directory: Directory) -> str:
    taken = {record.id for record in directory}
    user_id = uuid.uuid4().hex
    while user_id in taken:
        user_id = uuid.uuid4().hex
    return user_id


def create(directory: Directory, email: str, role: UserRole,
           profile: Optional[Dict[str, Any]] = None) -> Tuple[UserRecord, Directory]:
    """
    Add a new user to the directory

    Args:
        directory: Current user directory
        email: Email for the new account
        role: Account type
        profile: Optional profile fields (name, role-specific fields, bio)

    Returns:
        (new record, updated directory)

    Raises:
        DuplicateEmail: If another record already uses the email
        ValidationFailed: If the email or profile fields are invalid
    """
    email = check_email(email)
    changes = check_profile_fields(role, profile or {})
    # The email argument wins over any copy carried in the profile
    changes.pop("email", None)

    if find_by_email(directory, email) is not None:
        logger.warning(f"Registration rejected, email already exists: {mask_email(email)}")
        raise DuplicateEmail()

    record = UserRecord(
        id=_new_user_id(directory),
        email=email,
        role=role,
        **{"name": "", **changes}
    )

    logger.info(f"User record created: {record.id} ({role.value})")
    return record, [*directory, record]


def update(directory: Directory, user_id: str,
           patch: Dict[str, Any]) -> Tuple[UserRecord, Directory]:
    """
    Shallow-merge profile changes into a record

    Keys present in the patch overwrite, absent keys are preserved and a None
    value clears an optional field. id and role never change.

    Args:
        directory: Current user directory
        user_id: Id of the record to update
        patch: Field changes

    Returns:
        (updated record, updated directory)

    Raises:
        NotFound: If no record has the id
        DuplicateEmail: If the patch moves the email onto another account's address
        ValidationFailed: If the patch has unknown or role-foreign fields
    """
    existing = find_by_id(directory, user_id)
    if existing is None:
        raise NotFound()

    changes = check_profile_fields(existing.role, patch)

    if "email" in changes:
        changes["email"] = check_email(changes["email"])
        other = find_by_email(directory, changes["email"])
        if other is not None and other.id != user_id:
            logger.warning(f"Email change rejected for {user_id}: address in use")
            raise DuplicateEmail()

    updated = existing.merged(changes)
    new_directory = [updated if record.id == user_id else record for record in directory]

    logger.debug(f"User record updated: {user_id} fields={sorted(changes)}")
    return updated, new_directory
