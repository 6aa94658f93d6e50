"""Credential format checks run before any call reaches the identity store."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None
    kind: Literal["InvalidFormat", "TooShort"] | None = None


OK = ValidationResult(valid=True)


def validate_email(email: object) -> ValidationResult:
    """Check that ``email`` has the ``local@domain.tld`` shape."""
    if not email or not isinstance(email, str):
        return ValidationResult(False, "Email is required", "InvalidFormat")

    trimmed = email.strip()
    if not trimmed:
        return ValidationResult(False, "Email is required", "InvalidFormat")

    if not EMAIL_PATTERN.match(trimmed):
        return ValidationResult(False, "Invalid email format", "InvalidFormat")

    return OK


def validate_password(password: object) -> ValidationResult:
    """Check the minimum password length. No upper bound, no complexity rules."""
    if not password or not isinstance(password, str):
        return ValidationResult(False, "Password is required", "TooShort")

    if len(password) < MIN_PASSWORD_LENGTH:
        return ValidationResult(
            False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "TooShort"
        )

    return OK


def validate_credentials(email: object, password: object) -> ValidationResult:
    """Validate email then password, returning the first failure."""
    result = validate_email(email)
    if not result.valid:
        return result

    return validate_password(password)
