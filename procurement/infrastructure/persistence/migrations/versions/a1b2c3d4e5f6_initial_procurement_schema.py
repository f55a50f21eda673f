"""initial procurement schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

Departments, users and roles; requests with items, append-only status
history and combined requests; reference counters; ideas and votes;
audit log and notifications.
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REQUEST_STATUSES = (
    "DRAFT",
    "SUBMITTED",
    "DEPARTMENT_REVIEW",
    "DEPARTMENT_APPROVED",
    "DEPARTMENT_RETURNED",
    "HOD_REVIEW",
    "EXECUTIVE_REVIEW",
    "PROCUREMENT_REVIEW",
    "FINANCE_REVIEW",
    "BUDGET_MANAGER_REVIEW",
    "FINANCE_APPROVED",
    "FINANCE_RETURNED",
    "SENT_TO_VENDOR",
    "CLOSED",
    "REJECTED",
)
PRIORITIES = ("LOW", "MEDIUM", "HIGH", "URGENT")
ROLE_CODES = (
    "ADMIN",
    "REQUESTER",
    "DEPARTMENT_HEAD",
    "HEAD_OF_DIVISION",
    "EXECUTIVE_DIRECTOR",
    "PROCUREMENT_OFFICER",
    "PROCUREMENT_MANAGER",
    "FINANCE_OFFICER",
    "FINANCE_MANAGER",
    "BUDGET_MANAGER",
    "INNOVATION_COMMITTEE",
)
IDEA_STATUSES = ("PENDING_REVIEW", "APPROVED", "REJECTED")
VOTE_TYPES = ("UPVOTE", "DOWNVOTE")


def _in(column: str, values: Sequence[str]) -> str:
    return f"{column} IN (" + ", ".join(f"'{v}'" for v in values) + ")"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "department",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )

    op.create_table(
        "app_user",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["department_id"], ["department.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_app_user_department_id", "app_user", ["department_id"], unique=False)

    op.create_table(
        "user_role",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role_code", sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "role_code", name="uq_user_role"),
        sa.CheckConstraint(_in("role_code", ROLE_CODES), name="ck_user_role_code"),
    )
    op.create_index("ix_user_role_user_id", "user_role", ["user_id"], unique=False)

    op.create_table(
        "combined_request",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reference", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("config", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["created_by_id"], ["app_user.id"], ondelete="RESTRICT"),
        sa.UniqueConstraint("reference"),
    )
    op.create_index(
        "ix_combined_request_created_by_id", "combined_request", ["created_by_id"], unique=False
    )

    op.create_table(
        "request",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reference", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("requester_id", sa.Integer(), nullable=False),
        sa.Column("current_assignee_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("total_estimated", sa.Numeric(14, 2), server_default=sa.text("0"), nullable=False),
        sa.Column("currency", sa.String(length=3), server_default=sa.text("'JMD'"), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=False),
        sa.Column(
            "procurement_types",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_combined", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("combined_request_id", sa.Integer(), nullable=True),
        sa.Column("lot_number", sa.Integer(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["department_id"], ["department.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["requester_id"], ["app_user.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["current_assignee_id"], ["app_user.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["combined_request_id"], ["combined_request.id"], ondelete="SET NULL"
        ),
        sa.UniqueConstraint("reference"),
        sa.UniqueConstraint("combined_request_id", "lot_number", name="uq_request_lot_number"),
        sa.CheckConstraint(_in("status", REQUEST_STATUSES), name="ck_request_status"),
        sa.CheckConstraint(_in("priority", PRIORITIES), name="ck_request_priority"),
        sa.CheckConstraint("total_estimated >= 0", name="ck_request_total_non_negative"),
        sa.CheckConstraint("lot_number IS NULL OR lot_number > 0", name="ck_request_lot_positive"),
    )
    for column in ("department_id", "requester_id", "current_assignee_id", "status", "combined_request_id"):
        op.create_index(f"ix_request_{column}", "request", [column], unique=False)

    op.create_table(
        "request_item",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("request_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("unit_of_measure", sa.String(length=32), nullable=False),
        sa.Column("account_code", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["request_id"], ["request.id"], ondelete="CASCADE"),
        sa.CheckConstraint("quantity > 0", name="ck_request_item_quantity_positive"),
        sa.CheckConstraint("unit_price >= 0", name="ck_request_item_unit_price_non_negative"),
    )
    op.create_index("ix_request_item_request_id", "request_item", ["request_id"], unique=False)

    op.create_table(
        "request_status_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("request_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("changed_by_id", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["request_id"], ["request.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["changed_by_id"], ["app_user.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(
            _in("status", REQUEST_STATUSES), name="ck_request_status_history_status"
        ),
    )
    op.create_index(
        "ix_request_status_history_request_id",
        "request_status_history",
        ["request_id"],
        unique=False,
    )

    op.create_table(
        "reference_sequence",
        sa.Column("prefix", sa.String(length=8), nullable=False),
        sa.Column("period", sa.String(length=8), nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("prefix", "period"),
    )

    op.create_table(
        "idea",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("submitted_by_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("vote_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("upvote_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("downvote_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["submitted_by_id"], ["app_user.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(_in("status", IDEA_STATUSES), name="ck_idea_status"),
        sa.CheckConstraint(
            "upvote_count >= 0 AND downvote_count >= 0", name="ck_idea_counts_non_negative"
        ),
    )
    op.create_index("ix_idea_submitted_by_id", "idea", ["submitted_by_id"], unique=False)

    op.create_table(
        "idea_vote",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("idea_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("vote_type", sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["idea_id"], ["idea.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("idea_id", "user_id", name="uq_idea_vote_user"),
        sa.CheckConstraint(_in("vote_type", VOTE_TYPES), name="ck_idea_vote_type"),
    )
    op.create_index("ix_idea_vote_idea_id", "idea_vote", ["idea_id"], unique=False)
    op.create_index("ix_idea_vote_user_id", "idea_vote", ["user_id"], unique=False)

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("entity_type", sa.String(), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("request_id", sa.String(), nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["actor_id"], ["app_user.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_audit_log_actor_id", "audit_log", ["actor_id"], unique=False)
    op.create_index("ix_audit_log_entity_id", "audit_log", ["entity_id"], unique=False)

    op.create_table(
        "notification",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("is_read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_notification_user_id", "notification", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_notification_user_id", table_name="notification")
    op.drop_table("notification")
    op.drop_index("ix_audit_log_entity_id", table_name="audit_log")
    op.drop_index("ix_audit_log_actor_id", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_idea_vote_user_id", table_name="idea_vote")
    op.drop_index("ix_idea_vote_idea_id", table_name="idea_vote")
    op.drop_table("idea_vote")
    op.drop_index("ix_idea_submitted_by_id", table_name="idea")
    op.drop_table("idea")
    op.drop_table("reference_sequence")
    op.drop_index("ix_request_status_history_request_id", table_name="request_status_history")
    op.drop_table("request_status_history")
    op.drop_index("ix_request_item_request_id", table_name="request_item")
    op.drop_table("request_item")
    for column in ("department_id", "requester_id", "current_assignee_id", "status", "combined_request_id"):
        op.drop_index(f"ix_request_{column}", table_name="request")
    op.drop_table("request")
    op.drop_index("ix_combined_request_created_by_id", table_name="combined_request")
    op.drop_table("combined_request")
    op.drop_index("ix_user_role_user_id", table_name="user_role")
    op.drop_table("user_role")
    op.drop_index("ix_app_user_department_id", table_name="app_user")
    op.drop_table("app_user")
    op.drop_table("department")
