"""
JWT token management and caller identity.

The identity provider hands out bearer tokens; the service only needs the
user identifier carried in them and whether the caller holds the admin
capability.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from myroom.core.exceptions import AuthUnavailableError, ErrorCode, PermissionDeniedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The caller of an operation as seen by the service layer."""

    user_id: Optional[str] = None
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def require_user(self) -> str:
        """Return the user identifier or refuse the operation."""
        if not self.user_id:
            raise AuthUnavailableError()
        return self.user_id

    def require_admin(self) -> str:
        user = self.require_user()
        if not self.is_admin:
            raise PermissionDeniedError()
        return user


ANONYMOUS = Principal()


class JWTManager:
    """
    JWT token manager for authentication.

    Handles creation and validation of access tokens.
    """

    DEFAULT_ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        algorithm: str = DEFAULT_ALGORITHM,
        access_token_expire_minutes: int = 60,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    def create_access_token(
        self,
        user_id: str,
        is_admin: bool = False,
        additional_claims: Optional[Dict[str, Any]] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: User identifier
            is_admin: Whether the token carries the admin capability
            additional_claims: Additional claims to include
            expires_delta: Custom expiration time

        Returns:
            Encoded JWT token
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))

        payload = {
            "user_id": str(user_id),
            "admin": bool(is_admin),
            "token_type": "access",
            "iat": now,
            "exp": expire,
            "jti": secrets.token_hex(16),
        }
        if additional_claims:
            payload.update(additional_claims)

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.debug(f"Access token created for user {user_id}")
        return token

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode JWT token.

        Raises:
            AuthUnavailableError: If the token is expired or invalid
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            logger.warning("Token verification failed: token expired")
            raise AuthUnavailableError("Session expired", ErrorCode.TOKEN_INVALID) from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Token verification failed: {e}")
            raise AuthUnavailableError("Invalid authentication token", ErrorCode.TOKEN_INVALID) from e

    def principal_from_token(self, token: str) -> Principal:
        payload = self.verify_token(token)
        user = payload.get("user_id")
        if not user:
            raise AuthUnavailableError("Token carries no user identifier", ErrorCode.TOKEN_INVALID)
        return Principal(user_id=str(user), is_admin=bool(payload.get("admin", False)))


__all__ = ["Principal", "ANONYMOUS", "JWTManager"]
