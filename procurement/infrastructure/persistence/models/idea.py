"""Idea and vote ORM models."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from procurement.domain.enums import IdeaStatus, VoteType
from procurement.infrastructure.persistence.database import Base
from procurement.infrastructure.persistence.models.mixins import IntIdMixin, TimestampMixin


class Idea(IntIdMixin, TimestampMixin, Base):
    """Innovation idea with denormalized vote counters. Table: idea."""

    __tablename__ = "idea"

    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=IdeaStatus.PENDING_REVIEW.value
    )
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"), default=0)
    upvote_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"), default=0)
    downvote_count: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0"), default=0
    )
    reviewed_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN (" + ", ".join(f"'{v}'" for v in IdeaStatus.values()) + ")",
            name="ck_idea_status",
        ),
        CheckConstraint("upvote_count >= 0 AND downvote_count >= 0", name="ck_idea_counts_non_negative"),
    )


class IdeaVote(IntIdMixin, TimestampMixin, Base):
    """One vote per (idea, user). Table: idea_vote."""

    __tablename__ = "idea_vote"

    idea_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("idea.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vote_type: Mapped[str] = mapped_column(String(16), nullable=False)

    __table_args__ = (
        UniqueConstraint("idea_id", "user_id", name="uq_idea_vote_user"),
        CheckConstraint(
            "vote_type IN (" + ", ".join(f"'{v}'" for v in VoteType.values()) + ")",
            name="ck_idea_vote_type",
        ),
    )
