"""add_idea_review_columns

Revision ID: b7c8d9e0f1a2
Revises: a1b2c3d4e5f6
Create Date: 2026-10-19 14:20:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b7c8d9e0f1a2"
down_revision: Union[str, Sequence[str], None] = "a1b2c3d4e5f6"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add committee review columns to idea; index request columns used by splintering checks."""
    op.add_column("idea", sa.Column("reviewed_by_id", sa.Integer(), nullable=True))
    op.add_column("idea", sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column("idea", sa.Column("review_notes", sa.Text(), nullable=True))
    op.create_foreign_key(
        "fk_idea_reviewed_by_id_app_user",
        "idea",
        "app_user",
        ["reviewed_by_id"],
        ["id"],
        ondelete="SET NULL",
    )
    op.create_index("ix_request_created_at", "request", ["created_at"])


def downgrade() -> None:
    """Drop idea review columns and the request created_at index."""
    op.drop_index("ix_request_created_at", table_name="request")
    op.drop_constraint("fk_idea_reviewed_by_id_app_user", "idea", type_="foreignkey")
    op.drop_column("idea", "review_notes")
    op.drop_column("idea", "reviewed_at")
    op.drop_column("idea", "reviewed_by_id")
