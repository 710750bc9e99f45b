"""Password hashing utilities.

Uses bcrypt for salted password hashing. Each call to hash_password draws a
fresh salt, so two users with the same password get different hashes.
The work factor comes from COURSEBOOK_BCRYPT_ROUNDS (12 by default, ~250ms);
tests lower it to keep the suite fast.

bcrypt ignores everything past 72 bytes of input, and passwords may be up
to 100 characters of UTF-8. Both sides therefore feed bcrypt the base64 of
a SHA-256 digest of the password (44 bytes), so every character counts.
"""

import base64
import hashlib
from functools import cache

import bcrypt

from coursebook.config import settings


def _bcrypt_input(password: str) -> bytes:
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt. Returns the "$2b$..." string."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_bcrypt_input(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.

    bcrypt.checkpw compares digests in constant time. Malformed hashes
    verify as False instead of raising.
    """
    try:
        return bcrypt.checkpw(_bcrypt_input(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@cache
def _dummy_hash() -> str:
    """Hash of a throwaway password, computed once per process."""
    return hash_password("coursebook-timing-equalizer")


def burn_verification() -> None:
    """Spend the same time as a real verify when there is no user to check.

    Keeps unknown-email and wrong-password failures indistinguishable
    by response timing.
    """
    verify_password("not-the-password", _dummy_hash())
