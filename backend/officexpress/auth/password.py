"""Password hashing (bcrypt) and temporary password generation."""

import secrets
import string

import bcrypt

from officexpress.config import settings

_ALPHABET = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # Malformed hash in the DB
        return False


def generate_temporary_password(length: int | None = None) -> str:
    """Random password handed to a new employee; they must change it on first login."""
    size = length or settings.temporary_password_length
    return "".join(secrets.choice(_ALPHABET) for _ in range(size))
