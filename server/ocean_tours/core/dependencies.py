"""FastAPI dependencies for sessions, authorization and the payment provider."""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header

from ..services.paypal_client import PayPalClient
from .config import settings
from .exceptions import AuthenticationError, AuthorizationError
from .security import AuthContext, decode_session_token

logger = logging.getLogger(__name__)


async def get_auth_context(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> Optional[AuthContext]:
    """
    Resolve the caller's session.

    Returns None when no Authorization header is present, mirroring an identity
    provider's ``getSession()`` answering null.

    Raises:
        AuthenticationError: If a header is present but malformed or invalid
    """
    if not authorization:
        return None

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    return decode_session_token(token)


async def require_admin(
    auth: Optional[AuthContext] = Depends(get_auth_context)
) -> AuthContext:
    """
    Admin-route guard.

    Raises:
        AuthenticationError: No session (401)
        AuthorizationError: Session without the admin role (403)
    """
    if auth is None:
        raise AuthenticationError()

    if not auth.is_admin:
        logger.warning(
            "Admin access denied",
            extra={"user_id": auth.user_id, "role": auth.role}
        )
        raise AuthorizationError(required_role=settings.admin_role)

    return auth


async def get_paypal_client() -> AsyncGenerator[PayPalClient, None]:
    """Provide a PayPal client for the duration of one request."""
    async with PayPalClient.from_settings(settings) as client:
        yield client


AdminAuth = Depends(require_admin)
