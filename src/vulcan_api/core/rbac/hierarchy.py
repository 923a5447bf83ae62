"""Resource references and parent lookups for the Project -> Component -> Rule forest."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vulcan_api.core.errors import ResourceNotFoundError
from vulcan_db.models import Component, MembershipType, Project, ResourceKind, Rule


class ProjectNotFoundError(ResourceNotFoundError):
    kind = "Project"


class ComponentNotFoundError(ResourceNotFoundError):
    kind = "Component"


class RuleNotFoundError(ResourceNotFoundError):
    kind = "Rule"


_NOT_FOUND_ERRORS: dict[ResourceKind, type[ResourceNotFoundError]] = {
    ResourceKind.PROJECT: ProjectNotFoundError,
    ResourceKind.COMPONENT: ComponentNotFoundError,
    ResourceKind.RULE: RuleNotFoundError,
}

_MODELS: dict[ResourceKind, type[Project] | type[Component] | type[Rule]] = {
    ResourceKind.PROJECT: Project,
    ResourceKind.COMPONENT: Component,
    ResourceKind.RULE: Rule,
}


@dataclass(frozen=True, slots=True)
class ResourceRef:
    """Tagged reference to a project, component, or rule."""

    kind: ResourceKind
    id: UUID

    @classmethod
    def project(cls, project_id: UUID) -> ResourceRef:
        return cls(ResourceKind.PROJECT, project_id)

    @classmethod
    def component(cls, component_id: UUID) -> ResourceRef:
        return cls(ResourceKind.COMPONENT, component_id)

    @classmethod
    def rule(cls, rule_id: UUID) -> ResourceRef:
        return cls(ResourceKind.RULE, rule_id)

    @classmethod
    def for_membership(cls, membership_type: MembershipType, membership_id: UUID) -> ResourceRef:
        return cls(membership_type.resource_kind, membership_id)

    @property
    def membership_type(self) -> MembershipType | None:
        """Membership target type for this kind; ``None`` for rules."""

        if self.kind is ResourceKind.RULE:
            return None
        return MembershipType(self.kind.value)


class ResourceHierarchy:
    """Lookups over the containment edges between resources."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, ref: ResourceRef) -> Project | Component | Rule | None:
        return self._session.get(_MODELS[ref.kind], ref.id)

    def find(self, ref: ResourceRef) -> Project | Component | Rule:
        record = self.get(ref)
        if record is None:
            raise _NOT_FOUND_ERRORS[ref.kind](ref.id)
        return record

    def exists(self, ref: ResourceRef) -> bool:
        model = _MODELS[ref.kind]
        return self._session.scalar(select(model.id).where(model.id == ref.id)) is not None

    def parent_of(self, ref: ResourceRef) -> ResourceRef | None:
        """Return the containing resource, or ``None`` for projects and dangling refs."""

        if ref.kind is ResourceKind.RULE:
            component_id = self._session.scalar(
                select(Rule.component_id).where(Rule.id == ref.id)
            )
            return ResourceRef.component(component_id) if component_id is not None else None
        if ref.kind is ResourceKind.COMPONENT:
            project_id = self._session.scalar(
                select(Component.project_id).where(Component.id == ref.id)
            )
            return ResourceRef.project(project_id) if project_id is not None else None
        return None

    def grant_chain(self, ref: ResourceRef) -> list[ResourceRef]:
        """Membership-bearing resources from ``ref`` up to its owning project.

        Rules carry no grants of their own, so a rule contributes its component
        and project. References that no longer exist are left out, which makes
        any grant attached to them inert.
        """

        if ref.kind is ResourceKind.RULE:
            parent = self.parent_of(ref)
            return self.grant_chain(parent) if parent is not None else []
        if ref.kind is ResourceKind.COMPONENT:
            parent = self.parent_of(ref)
            if parent is None:
                return []
            return [ref, *self.grant_chain(parent)]
        return [ref] if self.exists(ref) else []


__all__ = [
    "ComponentNotFoundError",
    "ProjectNotFoundError",
    "ResourceHierarchy",
    "ResourceRef",
    "RuleNotFoundError",
]
