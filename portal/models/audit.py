"""
Append-only audit records: signup attribution, system log, status history.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from portal.db import Base
from portal.models.base import TimestampMixin


class SignupSourceType(str, Enum):
    VOLUNTEER_FORM = "volunteer_form"
    INTERN_FORM = "intern_form"
    TEACHER_REQUEST = "teacher_request"
    ADMIN_CREATED = "admin_created"


class UserSignupSource(Base, TimestampMixin):
    """Records which flow caused an account to exist."""

    __tablename__ = "user_signup_sources"
    __table_args__ = (
        UniqueConstraint("user_id", "source_type", name="uq_signup_source_user_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    source_type: Mapped[str] = mapped_column(String(30), nullable=False)
    source_reference_id: Mapped[int | None] = mapped_column(nullable=True)
    source_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    first_signup_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<UserSignupSource user={self.user_id} source={self.source_type}>"


class SystemLog(Base, TimestampMixin):
    """Audit trail entry. Rows are only ever inserted."""

    __tablename__ = "system_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    actor_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self) -> str:
        return f"<SystemLog {self.id} {self.event_type}>"


class ApplicationStatusHistory(Base, TimestampMixin):
    """One row per application status transition."""

    __tablename__ = "application_status_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    application_type: Mapped[str] = mapped_column(String(20), default="volunteer", nullable=False)
    application_id: Mapped[int] = mapped_column(nullable=False, index=True)
    old_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ApplicationStatusHistory {self.application_id} {self.old_status}->{self.new_status}>"
