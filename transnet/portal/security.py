"""
Password hashing and session tokens.

Passwords are hashed with passlib. Sessions are stateless JWTs signed with
the configured secret and carrying the user id in ``sub``.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from transnet.config.models import SecurityConfig

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def generate_invitation_code() -> str:
    """Random URL-safe invitation code."""
    return secrets.token_urlsafe(24)


class TokenService:
    """
    Issues and verifies session tokens.

    Example:
        >>> tokens = TokenService(config.security)
        >>> token = tokens.create_session_token(user.id)
        >>> tokens.verify_session_token(token)["sub"] == user.id
        True
    """

    def __init__(self, config: SecurityConfig):
        self.config = config

    @property
    def ttl(self) -> timedelta:
        return timedelta(days=self.config.token_ttl_days)

    def create_session_token(
        self, user_id: str, now: Optional[datetime] = None
    ) -> str:
        """Create a signed session token for a user."""
        issued = now or datetime.now(timezone.utc)
        claims = {
            "sub": user_id,
            "iat": int(issued.timestamp()),
            "exp": int((issued + self.ttl).timestamp()),
            "type": "session",
        }
        return jwt.encode(claims, self.config.jwt_secret, algorithm=self.config.jwt_algorithm)

    def verify_session_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a session token.

        Raises:
            ValueError: If the token is malformed, expired, or not a session token.
        """
        try:
            payload = jwt.decode(
                token, self.config.jwt_secret, algorithms=[self.config.jwt_algorithm]
            )
        except JWTError as e:
            raise ValueError("Invalid token") from e

        if payload.get("type") != "session" or not payload.get("sub"):
            raise ValueError("Invalid token type")
        return payload
