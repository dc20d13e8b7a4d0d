"""
Tests for role-conditional profile rules
"""

import pytest

from services.auth_service.errors import ValidationFailed
from services.auth_service.models import UserRole
from services.auth_service.profile_validation import (
    check_email,
    check_profile_fields,
    parse_role,
    profile_form_to_patch,
    validate_profile_form
)


class TestParseRole:
    """Test role coercion"""

    def test_known_roles(self):
        """Test role tags and enum members are accepted"""
        assert parse_role("brand") is UserRole.BRAND
        assert parse_role(" Creator ") is UserRole.CREATOR
        assert parse_role(UserRole.BRAND) is UserRole.BRAND

    def test_unknown_role(self):
        """Test unknown role tags are rejected"""
        with pytest.raises(ValidationFailed) as exc_info:
            parse_role("admin")
        assert exc_info.value.field == "role"


class TestCheckProfileFields:
    """Test the field check applied on directory writes"""

    def test_accepts_both_naming_styles(self):
        """Test camelCase and snake_case keys map to attribute names"""
        changes = check_profile_fields(UserRole.BRAND, {"companyName": "Acme", "industry": "retail"})
        assert changes == {"company_name": "Acme", "industry": "retail"}

        changes = check_profile_fields(UserRole.CREATOR, {"portfolio_link": "https://maya.studio"})
        assert changes == {"portfolio_link": "https://maya.studio"}

    def test_only_identity_fields_are_trimmed(self):
        """Test email and name are trimmed while profile text is kept as typed"""
        changes = check_profile_fields(UserRole.CREATOR, {"name": " Maya ", "bio": " x "})

        assert changes == {"name": "Maya", "bio": " x "}

    def test_drops_immutable_fields(self):
        """Test id and role never reach the record"""
        assert check_profile_fields(UserRole.BRAND, {"id": "x", "role": "creator"}) == {}

    def test_rejects_other_role_fields(self):
        """Test brand fields are refused on creator accounts"""
        with pytest.raises(ValidationFailed) as exc_info:
            check_profile_fields(UserRole.CREATOR, {"companyName": "Acme"})
        assert exc_info.value.field == "companyName"

    def test_rejects_unknown_fields(self):
        """Test fields outside the record are refused"""
        with pytest.raises(ValidationFailed):
            check_profile_fields(UserRole.BRAND, {"favouriteColour": "red"})

    def test_rejects_non_text(self):
        """Test non-string values are refused"""
        with pytest.raises(ValidationFailed):
            check_profile_fields(UserRole.BRAND, {"industry": 42})

    def test_required_fields_cannot_be_cleared(self):
        """Test email and name cannot be set to None"""
        with pytest.raises(ValidationFailed):
            check_profile_fields(UserRole.BRAND, {"name": None})

    def test_optional_field_can_be_cleared(self):
        """Test bio may be set to None"""
        assert check_profile_fields(UserRole.CREATOR, {"bio": None}) == {"bio": None}


class TestCheckEmail:
    """Test email sanity checks"""

    def test_strips_whitespace(self):
        assert check_email("  a@b.com ") == "a@b.com"

    def test_requires_at_sign(self):
        with pytest.raises(ValidationFailed):
            check_email("ab.com")


class TestProfileForms:
    """Test the profile page form schemas"""

    def test_valid_brand_form(self):
        """Test a complete brand form has no errors"""
        errors = validate_profile_form(UserRole.BRAND, {
            "companyName": "Acme",
            "industry": "retail",
            "website": "https://acme.com",
            "bio": ""
        })
        assert errors == {}

    def test_brand_form_errors(self):
        """Test brand form errors are keyed by persisted field name"""
        errors = validate_profile_form(UserRole.BRAND, {
            "companyName": "A",
            "industry": "",
            "website": "not a url"
        })

        assert errors == {
            "companyName": "Company name is required",
            "industry": "Industry is required",
            "website": "Please enter a valid URL"
        }

    def test_creator_form_errors(self):
        """Test creator form requires name, specialty and a portfolio URL"""
        errors = validate_profile_form(UserRole.CREATOR, {"name": " ", "specialty": "UGC"})

        assert errors == {
            "name": "Name is required",
            "portfolioLink": "Please enter a valid URL"
        }

    def test_form_to_patch(self):
        """Test a valid form becomes a persisted-name patch"""
        patch = profile_form_to_patch(UserRole.CREATOR, {
            "name": " Maya ",
            "specialty": "Short-form video",
            "portfolioLink": "https://maya.studio",
            "bio": ""
        })

        assert patch["name"] == "Maya"
        assert patch["specialty"] == "Short-form video"
        assert patch["portfolioLink"] == "https://maya.studio"
        assert patch["bio"] is None

    def test_form_to_patch_keeps_submitted_url(self):
        """Test a valid URL is stored exactly as typed"""
        patch = profile_form_to_patch(UserRole.BRAND, {
            "companyName": "Acme",
            "industry": "retail",
            "website": "https://acme.com",
            "bio": " Ads that convert "
        })

        assert patch["website"] == "https://acme.com"
        assert patch["bio"] == " Ads that convert "

    def test_form_to_patch_invalid(self):
        """Test an invalid form raises with the first failing field"""
        with pytest.raises(ValidationFailed) as exc_info:
            profile_form_to_patch(UserRole.BRAND, {"companyName": "Acme", "industry": "retail"})
        assert exc_info.value.field == "website"
