from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Response, status

from vulcan_api.api.deps import ActorDep, get_rules_service, get_rules_service_read

from .schemas import RuleCreate, RuleListOut, RuleOut, RuleUpdate
from .service import RulesService

router = APIRouter(tags=["rules"])

RuleIdPath = Annotated[
    UUID,
    Path(description="Rule identifier", alias="ruleId"),
]
ComponentIdPath = Annotated[
    UUID,
    Path(description="Component identifier", alias="componentId"),
]
RulesServiceDep = Annotated[RulesService, Depends(get_rules_service)]
RulesServiceReadDep = Annotated[RulesService, Depends(get_rules_service_read)]


@router.get(
    "/components/{componentId}/rules",
    response_model=RuleListOut,
    summary="List the rules of a component",
)
def list_rules(
    component_id: ComponentIdPath,
    actor: ActorDep,
    service: RulesServiceReadDep,
) -> RuleListOut:
    return service.list_rules(component_id=component_id, actor=actor)


@router.post(
    "/components/{componentId}/rules",
    response_model=RuleOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a rule to a component",
)
def create_rule(
    component_id: ComponentIdPath,
    actor: ActorDep,
    service: RulesServiceDep,
    payload: Annotated[RuleCreate, Body(...)],
) -> RuleOut:
    return service.create_rule(component_id=component_id, payload=payload, actor=actor)


@router.get("/rules/{ruleId}", response_model=RuleOut, summary="Retrieve a rule")
def read_rule(
    rule_id: RuleIdPath,
    actor: ActorDep,
    service: RulesServiceReadDep,
) -> RuleOut:
    return service.get_rule(rule_id=rule_id, actor=actor)


@router.put(
    "/rules/{ruleId}",
    response_model=RuleOut,
    summary="Update rule content (rejected while the rule is locked)",
)
def update_rule(
    rule_id: RuleIdPath,
    actor: ActorDep,
    service: RulesServiceDep,
    payload: Annotated[RuleUpdate, Body(...)],
) -> RuleOut:
    return service.update_rule(rule_id=rule_id, payload=payload, actor=actor)


@router.delete(
    "/rules/{ruleId}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a rule (rejected while the rule is locked)",
)
def delete_rule(
    rule_id: RuleIdPath,
    actor: ActorDep,
    service: RulesServiceDep,
) -> Response:
    service.delete_rule(rule_id=rule_id, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/rules/{ruleId}/unlock",
    response_model=RuleOut,
    summary="Unlock a rule",
)
def unlock_rule(
    rule_id: RuleIdPath,
    actor: ActorDep,
    service: RulesServiceDep,
) -> RuleOut:
    return service.unlock_rule(rule_id=rule_id, actor=actor)


__all__ = ["router"]
