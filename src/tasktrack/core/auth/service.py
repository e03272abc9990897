"""
Credential check for POST /api/login.

Unknown emails and wrong passwords produce the same error, and both paths
run one bcrypt comparison so response time does not reveal which emails
exist.
"""

import logging

from tasktrack.core.auth.passwords import check_password, dummy_hash
from tasktrack.core.exceptions import InvalidCredentialsError
from tasktrack.core.records.models import User
from tasktrack.core.records.store import RecordStore

logger = logging.getLogger(__name__)


class AuthService:
    """
    Verifies email/password pairs against stored bcrypt hashes.

    Example:
        auth = AuthService(RecordStore(conn))
        user = auth.verify("ada@example.com", "secret")
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def verify(self, email: str, password: str) -> User:
        """
        Check credentials.

        Returns:
            The matching user, without its password hash

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        found = self.store.get_credentials(email)
        if found is None:
            check_password(password, dummy_hash())
            logger.info("Login rejected: unknown email")
            raise InvalidCredentialsError()

        user, password_hash = found
        if not check_password(password, password_hash):
            logger.info("Login rejected for user %s", user.id)
            raise InvalidCredentialsError()

        return user
