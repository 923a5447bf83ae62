"""Initial Vulcan schema: users, projects, components, rules, memberships."""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from alembic import op

from vulcan_db.types import GUID, UTCDateTime

# Revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision: Optional[str] = None
branch_labels: Optional[str] = None
depends_on: Optional[str] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("email", name="users_email_key"),
    )
    op.create_table(
        "projects",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "components",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column(
            "project_id",
            GUID(),
            sa.ForeignKey("projects.id", ondelete="CASCADE", name="components_project_id_fkey"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("version", sa.String(64), nullable=True),
        sa.Column("release", sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_components_project_id", "components", ["project_id"])
    op.create_table(
        "rules",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column(
            "component_id",
            GUID(),
            sa.ForeignKey("components.id", ondelete="CASCADE", name="rules_component_id_fkey"),
            nullable=False,
        ),
        sa.Column("rule_id", sa.String(64), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("status", sa.String(64), nullable=False),
        sa.Column("rule_severity", sa.String(32), nullable=True),
        sa.Column("fixtext", sa.Text(), nullable=True),
        sa.Column("check_content", sa.Text(), nullable=True),
        sa.Column("vuln_discussion", sa.Text(), nullable=True),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_rules_component_id", "rules", ["component_id"])
    op.create_table(
        "memberships",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column(
            "user_id",
            GUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="memberships_user_id_fkey"),
            nullable=False,
        ),
        sa.Column("membership_type", sa.String(20), nullable=False),
        sa.Column("membership_id", GUID(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id",
            "membership_type",
            "membership_id",
            name="uq_memberships_user_target",
        ),
    )
    op.create_index("ix_memberships_target", "memberships", ["membership_type", "membership_id"])
    op.create_index("ix_memberships_user_id", "memberships", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_memberships_user_id", table_name="memberships")
    op.drop_index("ix_memberships_target", table_name="memberships")
    op.drop_table("memberships")
    op.drop_index("ix_rules_component_id", table_name="rules")
    op.drop_table("rules")
    op.drop_index("ix_components_project_id", table_name="components")
    op.drop_table("components")
    op.drop_table("projects")
    op.drop_table("users")
