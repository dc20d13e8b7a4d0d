"""
Tests for the identity service directory functions
"""

import pytest

from services.auth_service import identity_service
from services.auth_service.errors import (
    DuplicateEmail,
    MalformedPersistedState,
    NotFound,
    ValidationFailed
)
from services.auth_service.models import UserRecord, UserRole


def make_directory():
    """Directory with one brand and one creator"""
    _, directory = identity_service.create([], "a@b.com", UserRole.BRAND, {"name": "Acme"})
    _, directory = identity_service.create(directory, "maya@studio.io", UserRole.CREATOR, {"name": "Maya"})
    return directory


class TestFindByEmail:
    """Test email lookups"""

    def test_find_existing(self):
        """Test an exact match is found"""
        directory = make_directory()
        record = identity_service.find_by_email(directory, "a@b.com")

        assert record is not None
        assert record.name == "Acme"

    def test_find_is_case_insensitive(self):
        """Test lookups ignore case and surrounding whitespace"""
        directory = make_directory()
        record = identity_service.find_by_email(directory, "  A@B.COM ")

        assert record is not None
        assert record.email == "a@b.com"

    def test_find_missing(self):
        """Test unknown and empty emails return None"""
        directory = make_directory()

        assert identity_service.find_by_email(directory, "nobody@b.com") is None
        assert identity_service.find_by_email(directory, "") is None


class TestCreate:
    """Test record creation"""

    def test_create_assigns_id_and_appends(self):
        """Test a new record gets an id and the input list is untouched"""
        original = []
        record, directory = identity_service.create(
            original, "a@b.com", UserRole.BRAND, {"name": "Acme", "companyName": "Acme Inc"}
        )

        assert record.id
        assert record.role is UserRole.BRAND
        assert record.company_name == "Acme Inc"
        assert directory == [record]
        assert original == []

    def test_ids_are_unique(self):
        """Test every record gets its own id"""
        directory = make_directory()
        assert len({record.id for record in directory}) == len(directory)

    def test_duplicate_email(self):
        """Test the same email cannot be registered twice"""
        directory = make_directory()

        with pytest.raises(DuplicateEmail):
            identity_service.create(directory, "a@b.com", UserRole.CREATOR, {})

    def test_duplicate_email_different_case(self):
        """Test duplicates are detected regardless of case"""
        directory = make_directory()

        with pytest.raises(DuplicateEmail):
            identity_service.create(directory, "Maya@Studio.IO", UserRole.CREATOR, {})

    def test_profile_cannot_override_identity(self):
        """Test id, role and email inside the profile are ignored"""
        record, _ = identity_service.create(
            [], "a@b.com", UserRole.BRAND,
            {"id": "forged", "role": "creator", "email": "other@b.com", "name": "Acme"}
        )

        assert record.id != "forged"
        assert record.role is UserRole.BRAND
        assert record.email == "a@b.com"

    def test_foreign_role_field_rejected(self):
        """Test creator fields are refused on a brand account"""
        with pytest.raises(ValidationFailed):
            identity_service.create([], "a@b.com", UserRole.BRAND, {"specialty": "UGC"})

    def test_invalid_email_rejected(self):
        """Test an address without @ is refused"""
        with pytest.raises(ValidationFailed):
            identity_service.create([], "not-an-email", UserRole.BRAND, {})


class TestUpdate:
    """Test record updates"""

    def test_shallow_merge(self):
        """Test present keys overwrite and absent keys are preserved"""
        directory = make_directory()
        brand = directory[0]
        _, directory = identity_service.update(directory, brand.id, {"companyName": "Acme Inc"})

        updated, directory = identity_service.update(directory, brand.id, {"industry": "retail"})

        assert updated.industry == "retail"
        assert updated.company_name == "Acme Inc"
        assert updated.email == brand.email
        assert updated.name == "Acme"
        assert directory[0] == updated
        assert directory[1].email == "maya@studio.io"

    def test_none_clears_optional_field(self):
        """Test a None value removes an optional field"""
        directory = make_directory()
        creator = directory[1]
        _, directory = identity_service.update(directory, creator.id, {"bio": "Filmmaker"})

        updated, _ = identity_service.update(directory, creator.id, {"bio": None})

        assert updated.bio is None

    def test_unknown_id(self):
        """Test updating a missing record raises NotFound"""
        with pytest.raises(NotFound):
            identity_service.update(make_directory(), "missing", {"bio": "x"})

    def test_id_and_role_are_immutable(self):
        """Test id and role keys in a patch are ignored"""
        directory = make_directory()
        brand = directory[0]

        updated, _ = identity_service.update(directory, brand.id, {"id": "other", "role": "creator"})

        assert updated.id == brand.id
        assert updated.role is UserRole.BRAND

    def test_email_change_to_taken_address(self):
        """Test an email change onto another account's address is refused"""
        directory = make_directory()
        brand = directory[0]

        with pytest.raises(DuplicateEmail):
            identity_service.update(directory, brand.id, {"email": "MAYA@studio.io"})

    def test_email_change_same_account_case(self):
        """Test re-casing one's own email is allowed"""
        directory = make_directory()
        brand = directory[0]

        updated, _ = identity_service.update(directory, brand.id, {"email": "A@b.com"})

        assert updated.email == "A@b.com"

    def test_unknown_field(self):
        """Test unknown fields are refused"""
        directory = make_directory()

        with pytest.raises(ValidationFailed):
            identity_service.update(directory, directory[0].id, {"password": "pw"})


class TestDirectorySerialization:
    """Test directory encoding and decoding"""

    def test_round_trip_shape(self):
        """Test the persisted shape uses camelCase and omits empty fields"""
        record = UserRecord(id="1", email="a@b.com", role=UserRole.CREATOR, name="Maya",
                            portfolio_link="https://maya.studio")

        data = identity_service.serialize_directory([record])

        assert data == [{
            "id": "1",
            "email": "a@b.com",
            "role": "creator",
            "name": "Maya",
            "portfolioLink": "https://maya.studio"
        }]
        assert identity_service.parse_directory(data) == [record]

    def test_parse_absent(self):
        """Test an absent directory is empty"""
        assert identity_service.parse_directory(None) == []

    def test_parse_not_a_list(self):
        """Test a non-list blob is rejected"""
        with pytest.raises(MalformedPersistedState):
            identity_service.parse_directory({"id": "1"})

    def test_parse_skips_bad_entries(self):
        """Test undecodable entries are dropped and the rest kept"""
        raw = [
            {"id": "1", "email": "a@b.com", "role": "brand", "name": "Acme"},
            {"id": "2", "email": "x@y.com", "role": "admin"},
            "garbage",
            {"email": "no-id@b.com", "role": "creator"},
        ]

        directory = identity_service.parse_directory(raw)

        assert [record.id for record in directory] == ["1"]

    def test_parse_legacy_record_without_name(self):
        """Test records missing a name decode with an empty name"""
        directory = identity_service.parse_directory(
            [{"id": "1", "email": "a@b.com", "role": "brand", "industry": "retail"}]
        )

        assert directory[0].name == ""
        assert directory[0].industry == "retail"
