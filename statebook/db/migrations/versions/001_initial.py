"""Initial schema - projects, elements, element states

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            index=True,
        ),
    ]


def upgrade() -> None:
    # Projects
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
    )

    # Elements
    op.create_table(
        "elements",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False, server_default="Untitled element"),
        sa.Column("figma_url", sa.String(2000), nullable=False),
        sa.Column("figma_file_key", sa.String(255), nullable=True),
        sa.Column("figma_node_id", sa.String(255), nullable=True),
        sa.Column("image_path", sa.String(2000), nullable=False),
        sa.Column("image_name", sa.String(500), nullable=False),
        sa.Column("image_type", sa.String(100), nullable=False),
        sa.Column("image_size", sa.Integer, nullable=False),
        sa.Column(
            "project_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        *_timestamps(),
    )

    # Element states
    op.create_table(
        "element_states",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "element_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("elements.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("type", sa.String(20), nullable=False, server_default="info"),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("condition", sa.Text, nullable=True),
        sa.Column("severity", sa.String(100), nullable=True),
        sa.Column("locale", sa.String(20), nullable=False, server_default="en"),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default=sa.text("0")),
        *_timestamps(),
    )
    op.create_index(
        "ix_element_states_element_sort", "element_states", ["element_id", "sort_order"]
    )


def downgrade() -> None:
    op.drop_index("ix_element_states_element_sort", table_name="element_states")
    op.drop_table("element_states")
    op.drop_table("elements")
    op.drop_table("projects")
