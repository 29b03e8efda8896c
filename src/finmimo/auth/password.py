"""
Password hashing and validation using argon2id.
"""

from __future__ import annotations

import argon2

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)

MAX_PASSWORD_LENGTH = 128


class PasswordStrengthError(ValueError):
    """Raised when a password does not meet the length rules."""


def hash_password(password: str) -> str:
    """Hash a password using argon2id. Returns the full encoded hash."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches the hash. Never raises on mismatch."""
    try:
        return _hasher.verify(password_hash, password)
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def validate_password_strength(password: str, min_length: int) -> None:
    """
    Raise PasswordStrengthError unless the password is non-blank and between
    ``min_length`` and 128 characters.
    """
    if not password or not password.strip():
        msg = "Password cannot be empty"
        raise PasswordStrengthError(msg)
    if len(password) < min_length:
        msg = f"Password must be at least {min_length} characters"
        raise PasswordStrengthError(msg)
    if len(password) > MAX_PASSWORD_LENGTH:
        msg = f"Password must not exceed {MAX_PASSWORD_LENGTH} characters"
        raise PasswordStrengthError(msg)
