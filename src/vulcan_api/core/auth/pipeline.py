"""Resolve the acting user for a request.

Login itself (OAuth/SSO) happens upstream; the proxy in front of the API
forwards the authenticated user id in a trusted header which is mapped to an
:class:`~vulcan_api.core.auth.actor.Actor` here.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session
from starlette.requests import HTTPConnection

from vulcan_api.common.logging import log_context
from vulcan_db.models import User

from .actor import Actor
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


class HeaderAuthenticator:
    """Authenticate requests from the user id carried in a trusted header."""

    def __init__(self, *, session: Session, header_name: str) -> None:
        self._session = session
        self._header_name = header_name

    def authenticate(self, conn: HTTPConnection) -> Actor:
        raw = (conn.headers.get(self._header_name) or "").strip()
        if not raw:
            raise AuthenticationError("Authentication required")
        try:
            user_id = UUID(raw)
        except ValueError as exc:
            raise AuthenticationError("Malformed user identifier") from exc

        user = self._session.get(User, user_id)
        if user is None or not user.is_active:
            logger.warning(
                "auth.actor.rejected",
                extra=log_context(user_id=user_id, known=user is not None),
            )
            raise AuthenticationError("Unknown or inactive user")
        return Actor.from_user(user)


__all__ = ["HeaderAuthenticator"]
