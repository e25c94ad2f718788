"""Session tokens issued by the external identity provider."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt import PyJWTError

from .config import settings
from .exceptions import AuthenticationError


@dataclass(frozen=True)
class AuthContext:
    """Authenticated session handed explicitly to admin handlers and services."""

    user_id: str
    role: str
    name: Optional[str] = None
    email: Optional[str] = None
    claims: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_admin(self) -> bool:
        return self.role.upper() == settings.admin_role.upper()


def decode_session_token(token: str) -> AuthContext:
    """
    Verify a session token issued by the identity provider.

    Raises:
        AuthenticationError: If the token is invalid, expired or has no subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.auth_secret,
            algorithms=["HS256"],
            options={"require": ["sub"]},
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Session token validation failed: {e}") from e

    return AuthContext(
        user_id=str(payload["sub"]),
        role=str(payload.get("role") or "USER"),
        name=payload.get("name"),
        email=payload.get("email"),
        claims=payload,
    )


def issue_session_token(
    user_id: str,
    role: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    expires_in: timedelta = timedelta(hours=8),
) -> str:
    """Sign a session token the way the identity provider does (seed scripts and tests)."""
    payload = {
        "sub": user_id,
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    if name:
        payload["name"] = name
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.auth_secret, algorithm="HS256")
