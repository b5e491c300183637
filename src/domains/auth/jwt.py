# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access token verification using python-jose.

Users sign in through the hosted auth provider, which issues HS256 access
tokens signed with the project secret. This module verifies those tokens
and exposes the claims the API needs.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().auth)
    >>> claims = jwt_manager.decode_token(bearer_token)
    >>> claims.sub
    'user-123'
"""

import logging

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel

from src.core.config.settings import AuthSettings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Verified access token claims.

    Attributes:
        sub: Subject (user ID).
        email: User e-mail, when the provider includes it.
        role: Provider role ("authenticated" for signed-in users).
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        session_id: Provider session identifier, if present.
    """

    sub: str
    email: str | None = None
    role: str = "authenticated"
    exp: int
    iat: int | None = None
    session_id: str | None = None


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """Verifies access tokens issued by the hosted auth provider.

    Attributes:
        _settings: Auth configuration settings.
    """

    def __init__(self, settings: AuthSettings) -> None:
        self._settings = settings

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate an access token.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature, audience or claims are invalid.
        """
        options = {"verify_aud": self._settings.audience is not None}
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
                audience=self._settings.audience,
                options=options,
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}") from e

        if not payload.get("sub"):
            raise InvalidTokenError("Invalid token: missing subject")

        return TokenPayload(
            sub=payload["sub"],
            email=payload.get("email"),
            role=payload.get("role", "authenticated"),
            exp=payload["exp"],
            iat=payload.get("iat"),
            session_id=payload.get("session_id"),
        )

    def verify_token(self, token: str) -> bool:
        """Check whether a token is valid without raising."""
        try:
            self.decode_token(token)
            return True
        except (TokenExpiredError, InvalidTokenError):
            return False
