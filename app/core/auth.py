"""Session token authentication.

Sign-in itself happens against the hosted auth provider. This module only
checks that a request carries an access token the provider still accepts.

Token sources, in priority order:
- ``Authorization: Bearer <token>`` header
- the access-token cookie written by ``POST /v1/auth/session``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Request

from app.adapters.backend.base import AbstractBackendClient
from app.adapters.backend.factory import get_backend_client
from app.core.config import settings
from app.core.errors import AuthenticationAppError
from app.core.logging import fingerprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity of the caller as reported by the auth provider."""

    id: str
    email: str | None = None


def extract_access_token(authorization: str | None, cookie: str | None) -> str | None:
    """Pick the access token from the bearer header or the session cookie.

    Examples:
        >>> extract_access_token("Bearer abc", "def")
        'abc'
        >>> extract_access_token(None, "def")
        'def'
        >>> extract_access_token("Basic xyz", None) is None
        True
    """
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()

    if cookie and cookie.strip():
        return cookie.strip()
    return None


async def require_user(
    request: Request,
    backend: Annotated[AbstractBackendClient, Depends(get_backend_client)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthenticatedUser:
    """FastAPI dependency returning the authenticated caller.

    Usage:
        @router.get("/protected")
        async def protected(user: AuthenticatedUser = Depends(require_user)):
            ...

    Raises:
        AuthenticationAppError: No token, or the provider rejected it (401).
    """
    cookie = request.cookies.get(settings.app.access_token_cookie)
    token = extract_access_token(authorization, cookie)

    if not token:
        logger.warning("auth.missing_token", extra={"request_path": request.url.path})
        raise AuthenticationAppError(
            code="not_authenticated",
            message="Authentication required",
            details={"hint": "Send Authorization: Bearer <token> or sign in first"},
        )

    user = await backend.get_user(token)
    if not user or not user.get("id"):
        logger.warning(
            "auth.invalid_token",
            extra={"token_hash": fingerprint(token), "request_path": request.url.path},
        )
        raise AuthenticationAppError(
            code="invalid_session",
            message="Session is invalid or expired",
        )

    logger.debug("auth.success", extra={"user_id": user["id"]})
    return AuthenticatedUser(id=str(user["id"]), email=user.get("email"))
