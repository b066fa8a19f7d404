"""
User model for authentication and identity.

One row per unique email across the whole portal. Accounts for approved
volunteer team members are created lazily by the approval workflow.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db import Base
from portal.models.base import TimestampMixin, utcnow


class UserRole(str, Enum):
    FOUNDER = "founder"
    INTERN = "intern"
    VOLUNTEER = "volunteer"
    TEACHER = "teacher"
    GUEST = "guest"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    SUSPENDED = "suspended"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class User(Base, TimestampMixin):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Profile fields
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    school: Mapped[str | None] = mapped_column(String(150), nullable=True)

    # Role-based access
    role: Mapped[str] = mapped_column(String(20), default=UserRole.GUEST.value, nullable=False)
    department: Mapped[str | None] = mapped_column(String(50), nullable=True)  # Intern department
    subrole: Mapped[str | None] = mapped_column(String(50), nullable=True)  # e.g. "lead"
    user_category: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Local auth
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_verified: Mapped[bool] = mapped_column(default=False, nullable=False)
    must_change_password: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Status
    status: Mapped[str] = mapped_column(String(20), default=AccountStatus.ACTIVE.value, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    sessions = relationship("UserSession", back_populates="user", lazy="noload", cascade="all, delete-orphan")
    team_links = relationship("TeamMember", back_populates="user", lazy="noload")

    def update_last_seen(self) -> None:
        """Update last seen timestamp."""
        self.last_seen_at = utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "department": self.department,
            "subrole": self.subrole,
            "must_change_password": self.must_change_password,
        }

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role}>"
