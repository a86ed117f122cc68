import re
import secrets
import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from .config import config

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


class Validator:
    @staticmethod
    def validate_password(password: str) -> ValidationResult:
        """
        Enforces:
        - Min 8 chars
        - 1 Uppercase, 1 Lowercase, 1 Number, 1 Special

        Every violated rule is reported, not just the first one.
        """
        errors = []

        if len(password) < config.PASSWORD_MIN_LENGTH:
            errors.append(f"Password must be at least {config.PASSWORD_MIN_LENGTH} characters long")
        if not re.search(r"[A-Z]", password):
            errors.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            errors.append("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", password):
            errors.append("Password must contain at least one number")
        if not re.search(f"[{re.escape(config.PASSWORD_SPECIAL_CHARS)}]", password):
            errors.append("Password must contain at least one special character")

        return ValidationResult(is_valid=not errors, errors=errors)

    @staticmethod
    def validate_email(email: str) -> bool:
        """Permissive shape check: local part, '@', dotted domain"""
        if not isinstance(email, str):
            return False
        return EMAIL_REGEX.match(email) is not None

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def generate_token(length_bytes: int = 32) -> str:
        """Generates cryptographically secure hex token"""
        return secrets.token_hex(length_bytes)

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 hash for storing refresh tokens safely in DB"""
        return hashlib.sha256(token.encode()).hexdigest()


def utcnow() -> datetime:
    # Naive UTC, the form every DateTime column is stored in
    return datetime.now(timezone.utc).replace(tzinfo=None)
