"""Session cookie synchronization.

The browser signs in against the hosted auth provider directly and forwards
each auth state change here, so API calls made with cookies only stay
authenticated.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.adapters.backend.base import AbstractBackendClient
from app.adapters.backend.factory import get_backend_client
from app.core.config import settings
from app.core.errors import AuthenticationAppError, ValidationAppError
from app.schemas.auth import AuthEventRequest, AuthEventResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

TOKEN_EVENTS = frozenset({"SIGNED_IN", "TOKEN_REFRESHED"})
SIGNED_OUT = "SIGNED_OUT"

# Refresh tokens outlive access tokens; the provider decides real expiry.
_COOKIE_MAX_AGE_SECONDS = 60 * 60 * 24 * 7


def _set_cookie(response: Response, name: str, value: str) -> None:
    response.set_cookie(
        name,
        value,
        max_age=_COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.app.cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post("/auth/session", response_model=AuthEventResponse)
async def sync_session(
    body: AuthEventRequest,
    response: Response,
    backend: Annotated[AbstractBackendClient, Depends(get_backend_client)],
) -> AuthEventResponse:
    """Mirror an auth state change into http-only cookies.

    - ``SIGNED_IN`` / ``TOKEN_REFRESHED``: both tokens required; stored.
    - ``SIGNED_OUT``: cookies cleared.
    - anything else: acknowledged and ignored.

    The API itself only reads the access token cookie. The refresh token
    cookie is kept for the browser client, which renews the session and
    posts ``TOKEN_REFRESHED`` back here.

    Raises:
        ValidationAppError: Missing event or tokens (400).
        AuthenticationAppError: The provider rejects the access token (401).
    """
    if not body.event:
        raise ValidationAppError(code="missing_event", message="Missing event")

    access_cookie = settings.app.access_token_cookie
    refresh_cookie = settings.app.refresh_token_cookie

    if body.event in TOKEN_EVENTS:
        session = body.session
        if session is None or not session.access_token or not session.refresh_token:
            raise ValidationAppError(code="missing_tokens", message="Missing tokens")

        user = await backend.get_user(session.access_token)
        if not user:
            raise AuthenticationAppError(
                code="invalid_session",
                message="Session is invalid or expired",
            )

        _set_cookie(response, access_cookie, session.access_token)
        _set_cookie(response, refresh_cookie, session.refresh_token)
        logger.info("auth.session_set", extra={"auth_event": body.event, "user_id": user.get("id")})

    elif body.event == SIGNED_OUT:
        response.delete_cookie(access_cookie, path="/")
        response.delete_cookie(refresh_cookie, path="/")
        logger.info("auth.session_cleared", extra={"auth_event": body.event})

    else:
        logger.debug("auth.event_ignored", extra={"auth_event": body.event})

    return AuthEventResponse()
