"""Create projects table for idea-to-blueprint generation

Revision ID: 20261017_01
Revises:
Create Date: 2026-10-17

"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op


# revision identifiers, used by Alembic.
revision = "20261017_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create projects table with the blueprint/status consistency check."""
    op.create_table(
        "projects",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=True),
        sa.Column(
            "description",
            sa.Text(),
            nullable=False,
            comment="The user's free-text project idea",
        ),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            server_default="pending",
            comment="pending | streaming | complete | error (legacy: generating)",
        ),
        sa.Column(
            "blueprint",
            postgresql.JSON(astext_type=sa.Text()),
            nullable=True,
            comment="Parsed blueprint JSON object",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(status = 'complete') = (blueprint IS NOT NULL)",
            name="ck_projects_blueprint_iff_complete",
        ),
    )

    op.create_index("ix_projects_id", "projects", ["id"])
    op.create_index("ix_projects_status", "projects", ["status"])


def downgrade() -> None:
    """Drop projects table."""
    op.drop_index("ix_projects_status", table_name="projects")
    op.drop_index("ix_projects_id", table_name="projects")
    op.drop_table("projects")
