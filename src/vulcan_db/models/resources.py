"""Project -> Component -> Rule containment hierarchy."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vulcan_db import GUID, Base, TimestampMixin, UUIDPrimaryKeyMixin


class Project(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Top-level container of components."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)

    components: Mapped[list[Component]] = relationship(
        "Component",
        back_populates="project",
        cascade="all, delete-orphan",
    )


class Component(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A benchmark under authorship, owned by a project."""

    __tablename__ = "components"

    project_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[str | None] = mapped_column(String(64), nullable=True)
    release: Mapped[str | None] = mapped_column(String(64), nullable=True)

    project: Mapped[Project] = relationship("Project", back_populates="components")
    rules: Mapped[list[Rule]] = relationship(
        "Rule",
        back_populates="component",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("ix_components_project_id", "project_id"),)


class Rule(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Rules, also known as controls: the smallest enforceable unit of a benchmark."""

    __tablename__ = "rules"

    component_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("components.id", ondelete="CASCADE"),
        nullable=False,
    )
    rule_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str | None] = mapped_column(Text(), nullable=True)
    status: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="Not Yet Determined",
    )
    rule_severity: Mapped[str | None] = mapped_column(String(32), nullable=True)
    fixtext: Mapped[str | None] = mapped_column(Text(), nullable=True)
    check_content: Mapped[str | None] = mapped_column(Text(), nullable=True)
    vuln_discussion: Mapped[str | None] = mapped_column(Text(), nullable=True)
    locked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    component: Mapped[Component] = relationship("Component", back_populates="rules")

    __table_args__ = (Index("ix_rules_component_id", "component_id"),)


__all__ = ["Component", "Project", "Rule"]
