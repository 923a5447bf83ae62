"""Service factories used by API routers.

Routers import their per-request service constructors and the acting-user
dependency from here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from vulcan_api.core.auth import Actor
from vulcan_api.core.http import get_current_actor, get_request_settings
from vulcan_api.db import get_db_read, get_db_write
from vulcan_api.settings import Settings

if TYPE_CHECKING:
    from vulcan_api.features.memberships.service import MembershipsService
    from vulcan_api.features.rules.service import RulesService

WriteSessionDep = Annotated[Session, Depends(get_db_write)]
ReadSessionDep = Annotated[Session, Depends(get_db_read)]
SettingsDep = Annotated[Settings, Depends(get_request_settings)]
ActorDep = Annotated[Actor, Depends(get_current_actor)]


def get_memberships_service(
    request: Request,
    session: WriteSessionDep,
    settings: SettingsDep,
) -> MembershipsService:
    from vulcan_api.features.memberships.service import MembershipsService

    notifier = getattr(request.app.state, "membership_notifier", None)
    return MembershipsService(session=session, settings=settings, notifier=notifier)


def get_memberships_service_read(
    request: Request,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> MembershipsService:
    from vulcan_api.features.memberships.service import MembershipsService

    notifier = getattr(request.app.state, "membership_notifier", None)
    return MembershipsService(session=session, settings=settings, notifier=notifier)


def get_rules_service(session: WriteSessionDep, settings: SettingsDep) -> RulesService:
    from vulcan_api.features.rules.service import RulesService

    return RulesService(session=session, settings=settings)


def get_rules_service_read(session: ReadSessionDep, settings: SettingsDep) -> RulesService:
    from vulcan_api.features.rules.service import RulesService

    return RulesService(session=session, settings=settings)


__all__ = [
    "ActorDep",
    "ReadSessionDep",
    "SettingsDep",
    "WriteSessionDep",
    "get_memberships_service",
    "get_memberships_service_read",
    "get_rules_service",
    "get_rules_service_read",
]
