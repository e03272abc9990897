"""
Password hashing with bcrypt.

bcrypt salts every hash and `checkpw` compares in constant time.
"""

from functools import lru_cache

import bcrypt

BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes; newer releases reject longer input
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plaintext password with a fresh salt."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def check_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches ``password_hash``."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except ValueError:
        # Malformed stored hash
        return False


@lru_cache(maxsize=1)
def dummy_hash() -> str:
    """A throwaway hash to check against when the email is unknown."""
    return hash_password("tasktrack-dummy-password")
