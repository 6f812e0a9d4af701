"""
Memos Backend — Auth Service
=============================

What:  Checks the shared password behind the client's login gate.
How:   Constant-time comparison against settings.memos_password; on success a
       random hex token is handed back for the browser's session storage.

The token is not stored or checked by other routes: the API is meant for a
single user on a trusted network.
"""

import logging
import secrets

from memos.config import settings
from memos.exceptions import AuthenticationError
from memos.schemas.memo import AuthResponse

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


class AuthService:
    def verify(self, password: str) -> AuthResponse:
        """
        Raises:
            AuthenticationError: password does not match (→ 401)
        """
        expected = settings.memos_password
        if not expected or not secrets.compare_digest(
            password.encode("utf-8"), expected.encode("utf-8")
        ):
            logger.warning("Rejected login attempt")
            raise AuthenticationError()

        return AuthResponse(success=True, token=secrets.token_hex(TOKEN_BYTES))


auth_service = AuthService()
