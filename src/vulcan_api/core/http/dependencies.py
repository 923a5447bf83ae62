"""FastAPI dependencies that attach the acting user to a request."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from vulcan_api.core.auth import Actor, HeaderAuthenticator
from vulcan_api.db import get_db_read
from vulcan_api.settings import Settings, get_settings


def get_request_settings(request: Request) -> Settings:
    """Settings the app was created with, falling back to the process settings."""

    settings = getattr(request.app.state, "settings", None)
    return settings if isinstance(settings, Settings) else get_settings()


def get_current_actor(
    request: Request,
    session: Annotated[Session, Depends(get_db_read)],
    settings: Annotated[Settings, Depends(get_request_settings)],
) -> Actor:
    actor = getattr(request.state, "actor", None)
    if isinstance(actor, Actor):
        return actor
    authenticator = HeaderAuthenticator(session=session, header_name=settings.auth_user_header)
    actor = authenticator.authenticate(request)
    request.state.actor = actor
    return actor


__all__ = ["get_current_actor", "get_request_settings"]
