"""
Authentication: bcrypt password hashing and the login check.
"""

from tasktrack.core.auth.passwords import check_password, hash_password
from tasktrack.core.auth.service import AuthService

__all__ = ["AuthService", "check_password", "hash_password"]
