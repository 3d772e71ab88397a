"""Pydantic schemas for session cookie synchronization."""

from pydantic import BaseModel


class AuthSession(BaseModel):
    access_token: str | None = None
    refresh_token: str | None = None


class AuthEventRequest(BaseModel):
    """Auth state change forwarded by the browser client.

    ``event`` is optional here so a missing value yields a domain 400
    instead of a schema error.
    """

    event: str | None = None
    session: AuthSession | None = None


class AuthEventResponse(BaseModel):
    success: bool = True
