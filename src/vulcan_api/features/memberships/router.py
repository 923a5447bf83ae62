from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query, status

from vulcan_api.api.deps import (
    ActorDep,
    get_memberships_service,
    get_memberships_service_read,
)
from vulcan_db.models import MembershipType

from .schemas import MembershipCreate, MembershipListOut, MembershipResult, MembershipUpdate
from .service import MembershipsService

router = APIRouter(prefix="/memberships", tags=["memberships"])

MembershipIdPath = Annotated[
    UUID,
    Path(description="Membership identifier", alias="membershipId"),
]
MembershipsServiceDep = Annotated[MembershipsService, Depends(get_memberships_service)]
MembershipsServiceReadDep = Annotated[MembershipsService, Depends(get_memberships_service_read)]


@router.get(
    "",
    response_model=MembershipListOut,
    summary="List the memberships granted on a project or component",
)
def list_memberships(
    actor: ActorDep,
    service: MembershipsServiceReadDep,
    membership_type: Annotated[MembershipType, Query()],
    membership_id: Annotated[UUID, Query()],
) -> MembershipListOut:
    return service.list_memberships(
        membership_type=membership_type,
        target_id=membership_id,
        actor=actor,
    )


@router.post(
    "",
    response_model=MembershipResult,
    status_code=status.HTTP_201_CREATED,
    summary="Grant a role on a project or component",
)
def create_membership(
    actor: ActorDep,
    service: MembershipsServiceDep,
    payload: Annotated[MembershipCreate, Body(...)],
) -> MembershipResult:
    return service.create_membership(payload=payload, actor=actor)


@router.put(
    "/{membershipId}",
    response_model=MembershipResult,
    summary="Change the role of a membership",
)
def update_membership(
    membership_id: MembershipIdPath,
    actor: ActorDep,
    service: MembershipsServiceDep,
    payload: Annotated[MembershipUpdate, Body(...)],
) -> MembershipResult:
    return service.update_membership(membership_id=membership_id, payload=payload, actor=actor)


@router.delete(
    "/{membershipId}",
    response_model=MembershipResult,
    summary="Remove a membership",
)
def delete_membership(
    membership_id: MembershipIdPath,
    actor: ActorDep,
    service: MembershipsServiceDep,
) -> MembershipResult:
    return service.delete_membership(membership_id=membership_id, actor=actor)


__all__ = ["router"]
