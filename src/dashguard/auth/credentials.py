"""Credential values, password hashing and secure comparison."""

import hashlib
import secrets
from dataclasses import dataclass, field

from passlib.context import CryptContext

# New records are PBKDF2-SHA256; bcrypt records are still accepted
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Credentials:
    """Username and password presented by a single request."""

    username: str
    password: str = field(repr=False)


def generate_credentials() -> tuple[str, str]:
    """Generate random username and password.

    Returns:
        Tuple of (username, plaintext_password).
        Password is only available at generation time.
    """
    username = secrets.token_urlsafe(6)  # ~8 chars
    password = secrets.token_urlsafe(24)  # ~32 chars
    return username, password


def hash_password(password: str) -> str:
    """Hash a password into a self-describing record for configuration."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash record.

    Raises:
        ValueError: If the record is not a recognised hash format.
    """
    return pwd_context.verify(password, password_hash)


def constant_time_equals(provided: str, expected: str) -> bool:
    """Compare two secrets without leaking length or matching prefix.

    Both sides are digested first so the final comparison always scans
    the same number of bytes.
    """
    provided_digest = hashlib.sha256(provided.encode("utf-8")).digest()
    expected_digest = hashlib.sha256(expected.encode("utf-8")).digest()
    return secrets.compare_digest(provided_digest, expected_digest)
