"""Password hashing utility using Argon2.

Digests are Argon2id PHC strings. The salt and cost parameters live inside
the digest itself, so ``verify_password`` is a pure function of the
plaintext and the stored digest.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()

# Burned on login for unknown emails so both failure paths cost the same.
DUMMY_PASSWORD_HASH = _hasher.hash("reelauth-dummy-password")


def hash_password(password: str) -> str:
    """Hash a password using Argon2id.

    Args:
        password: The plaintext password to hash.

    Returns:
        The hashed password string.

    Example:
        >>> hashed = hash_password("secret1")
        >>> hashed.startswith("$argon2id$")
        True
    """
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a hash.

    Never raises: a mismatch, a malformed digest or an unsupported hash
    format all yield ``False``.

    Args:
        password: The plaintext password to verify.
        hashed: The hashed password to verify against.

    Returns:
        True if the password matches, False otherwise.
    """
    try:
        return _hasher.verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hashed: str) -> bool:
    """Check if a password hash was produced with outdated parameters.

    Args:
        hashed: The hashed password to check.

    Returns:
        True if the hash should be updated, False otherwise.
    """
    try:
        return _hasher.check_needs_rehash(hashed)
    except InvalidHashError:
        return True
