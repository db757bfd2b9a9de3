"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates:
- users
- documents (plain text, HTML, analysis mode and last analysis result)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("external_id", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("external_id", name="uq_users_external_id"),
    )

    # documents table
    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("html_content", sa.Text(), nullable=False),
        sa.Column("analysis_mode", sa.Text(), nullable=True),
        sa.Column("analysis_result", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "analysis_mode IS NULL OR analysis_mode IN ('language', 'policy', 'recruitment')",
            name="ck_documents_analysis_mode",
        ),
    )
    op.create_index("idx_documents_user_updated", "documents", ["user_id", "updated_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_documents_user_updated", table_name="documents")
    op.drop_table("documents")
    op.drop_table("users")
