"""
Volunteer team application model.

A team applies with an embedded roster of members (``group_members``).
Roster entries are plain JSON until the approval workflow provisions an
account for each of them.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db import Base
from portal.models.base import TimestampMixin

MIN_TEAM_MEMBERS = 3


class ApplicationStatus(str, Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class TeamStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class OnboardingStep(str, Enum):
    """Onboarding stages an approved team moves through, in order."""

    ACTIVITY_SELECTED = "activity_selected"
    PRESENTATION_CREATED = "presentation_created"
    SUBMITTED_FOR_REVIEW = "submitted_for_review"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"

    @classmethod
    def first(cls) -> "OnboardingStep":
        return next(iter(cls))


class VolunteerTeam(Base, TimestampMixin):
    """A group's application to volunteer."""

    __tablename__ = "volunteer_teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    team_name: Mapped[str | None] = mapped_column(String(150), nullable=True)

    # Declared primary contact
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    primary_contact_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Ordered roster: [{"name", "email", "phone", "school"}, ...]
    group_members: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    # Lifecycle
    application_status: Mapped[str] = mapped_column(
        String(20), default=ApplicationStatus.SUBMITTED.value, nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), default=TeamStatus.PENDING.value, nullable=False)
    onboarding_step: Mapped[str | None] = mapped_column(String(30), nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    members = relationship("TeamMember", back_populates="team", lazy="noload")

    @property
    def display_name(self) -> str:
        return self.team_name or f"Team #{self.id}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "team_name": self.team_name,
            "email": self.email,
            "primary_contact_phone": self.primary_contact_phone,
            "group_members": self.group_members or [],
            "application_status": self.application_status,
            "status": self.status,
            "onboarding_step": self.onboarding_step,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "rejected_at": self.rejected_at.isoformat() if self.rejected_at else None,
        }

    def __repr__(self) -> str:
        return f"<VolunteerTeam {self.id} status={self.application_status}>"
