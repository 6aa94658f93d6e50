"""Tests for credential validation."""

import pytest

from api.validation import validate_credentials, validate_email, validate_password


class TestValidateEmail:
    @pytest.mark.parametrize("email", ["a@b.co", "first.last@example.com", "  padded@example.org  "])
    def test_accepts_well_formed(self, email):
        assert validate_email(email).valid

    @pytest.mark.parametrize("email", ["", "   ", None])
    def test_missing_email(self, email):
        result = validate_email(email)

        assert not result.valid
        assert result.error == "Email is required"
        assert result.kind == "InvalidFormat"

    @pytest.mark.parametrize("email", ["plain", "no-at.example.com", "a@b", "a b@example.com", "a@@b.com"])
    def test_malformed_email(self, email):
        result = validate_email(email)

        assert not result.valid
        assert result.error == "Invalid email format"
        assert result.kind == "InvalidFormat"


class TestValidatePassword:
    def test_six_characters_is_enough(self):
        assert validate_password("abcdef").valid

    def test_five_characters_is_too_short(self):
        result = validate_password("abcde")

        assert not result.valid
        assert result.error == "Password must be at least 6 characters"
        assert result.kind == "TooShort"

    def test_missing_password(self):
        result = validate_password("")

        assert not result.valid
        assert result.error == "Password is required"

    def test_no_upper_bound(self):
        assert validate_password("x" * 500).valid


class TestValidateCredentials:
    def test_email_checked_first(self):
        result = validate_credentials("bad", "123")

        assert result.error == "Invalid email format"

    def test_password_checked_after_email(self):
        result = validate_credentials("user@example.com", "123")

        assert result.error == "Password must be at least 6 characters"

    def test_valid(self):
        result = validate_credentials("user@example.com", "secret1")

        assert result.valid
        assert result.error is None
