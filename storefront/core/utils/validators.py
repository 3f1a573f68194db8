"""
Input validators
================
Password, e-mail, username, review-comment and MFA-code rules shared by the
account and review flows. Every validator returns a ValidationResult whose
error_key resolves through the bilingual catalog in storefront.core.i18n.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from storefront.core.i18n import Language, translate

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
COMMENT_MIN_LENGTH = 3
COMMENT_MAX_LENGTH = 300

FORBIDDEN_CHARS = re.compile(r"[<>\"'`;={}()\[\]$\\]")
PASSWORD_FORBIDDEN_CHARS = re.compile(r"[<>\"'`;={}\[\]\\]")
PASSWORD_ALPHABET = re.compile(r"^[A-Za-z0-9@#\-_!$%^&*()+=]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_\-\u0600-\u06FF]+$")
COMMENT_PATTERN = re.compile(
    r"^[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF"
    r"a-zA-Z0-9\s.,!?؛،\-_()]*$"
)
MFA_CODE_PATTERN = re.compile(r"[0-9]{6}")
SPECIAL_CHARS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

STRENGTH_LABELS = (
    "strength_very_weak",
    "strength_very_weak",
    "strength_weak",
    "strength_fair",
    "strength_good",
    "strength_excellent",
)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error_key: Optional[str] = None
    params: dict = field(default_factory=dict)

    def message(self, language: Language) -> Optional[str]:
        if self.valid:
            return None
        return translate(self.error_key, language, **self.params)


OK = ValidationResult(valid=True)


def _fail(key: str, **params) -> ValidationResult:
    return ValidationResult(valid=False, error_key=key, params=params)


def has_forbidden_chars(value: str) -> bool:
    if not isinstance(value, str) or not value:
        return False
    return FORBIDDEN_CHARS.search(value) is not None


def sanitize_input(value: str) -> str:
    """Trims and collapses runs of whitespace"""
    if not isinstance(value, str):
        return ""
    return re.sub(r"\s{2,}", " ", value.strip())


# ═══════════════════════════════════════════════════════════
# PASSWORD
# ═══════════════════════════════════════════════════════════

def validate_password(password) -> ValidationResult:
    """
    Validates a new password.

    Args:
        password: Plain-text candidate

    Returns:
        ValidationResult with one of password_required, password_too_short,
        password_too_long, password_forbidden_chars, password_alphabet
    """
    if not isinstance(password, str) or not password:
        return _fail("password_required")

    if len(password) < PASSWORD_MIN_LENGTH:
        return _fail("password_too_short", min=PASSWORD_MIN_LENGTH)
    if len(password) > PASSWORD_MAX_LENGTH:
        return _fail("password_too_long", max=PASSWORD_MAX_LENGTH)

    if PASSWORD_FORBIDDEN_CHARS.search(password):
        return _fail("password_forbidden_chars")

    if not PASSWORD_ALPHABET.match(password):
        return _fail("password_alphabet")

    return OK


@dataclass(frozen=True)
class PasswordStrength:
    score: int
    checks: dict

    def label(self, language: Language) -> str:
        return translate(STRENGTH_LABELS[self.score], language)


def password_strength(password: str) -> PasswordStrength:
    """Scores a password 0-5: length, lowercase, uppercase, digit, special"""
    password = password or ""
    checks = {
        "length": len(password) >= PASSWORD_MIN_LENGTH,
        "lowercase": re.search(r"[a-z]", password) is not None,
        "uppercase": re.search(r"[A-Z]", password) is not None,
        "number": re.search(r"[0-9]", password) is not None,
        "special": SPECIAL_CHARS.search(password) is not None,
    }
    return PasswordStrength(score=sum(checks.values()), checks=checks)


# ═══════════════════════════════════════════════════════════
# E-MAIL / USERNAME
# ═══════════════════════════════════════════════════════════

def validate_email(email) -> ValidationResult:
    if not isinstance(email, str) or not email.strip():
        return _fail("email_required")

    if has_forbidden_chars(email):
        return _fail("email_forbidden_chars")

    if not EMAIL_PATTERN.match(email.strip().lower()):
        return _fail("email_invalid")

    return OK


def validate_username(username) -> ValidationResult:
    if not isinstance(username, str) or not username.strip():
        return _fail("username_required")
    trimmed = username.strip()

    if has_forbidden_chars(trimmed):
        return _fail("username_forbidden_chars")

    if not USERNAME_MIN_LENGTH <= len(trimmed) <= USERNAME_MAX_LENGTH:
        return _fail("username_length", min=USERNAME_MIN_LENGTH, max=USERNAME_MAX_LENGTH)

    if not USERNAME_PATTERN.match(trimmed):
        return _fail("username_format")

    return OK


# ═══════════════════════════════════════════════════════════
# REVIEWS / MFA
# ═══════════════════════════════════════════════════════════

def validate_review_comment(text) -> ValidationResult:
    """Arabic/English letters, digits, whitespace and basic punctuation only"""
    if not isinstance(text, str) or not text.strip():
        return _fail("comment_empty")

    if not COMMENT_PATTERN.match(text):
        return _fail("comment_invalid_chars")

    if len(text.strip()) < COMMENT_MIN_LENGTH:
        return _fail("comment_too_short", min=COMMENT_MIN_LENGTH)

    if len(text) > COMMENT_MAX_LENGTH:
        return _fail("comment_too_long", max=COMMENT_MAX_LENGTH)

    return OK


def validate_mfa_code(code) -> ValidationResult:
    if not isinstance(code, str) or not MFA_CODE_PATTERN.fullmatch(code.strip()):
        return _fail("mfa_code_invalid")
    return OK
