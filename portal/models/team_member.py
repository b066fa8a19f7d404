"""
Team membership link between an account and a volunteer team.
"""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db import Base
from portal.models.base import TimestampMixin


class TeamMember(Base, TimestampMixin):
    """Links a provisioned account to the team it applied with."""

    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint("volunteer_team_id", "user_id", name="uq_team_member_team_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    volunteer_team_id: Mapped[int] = mapped_column(
        ForeignKey("volunteer_teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshot of the roster entry
    member_name: Mapped[str] = mapped_column(String(100), nullable=False)
    member_email: Mapped[str] = mapped_column(String(255), nullable=False)
    member_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    member_school: Mapped[str | None] = mapped_column(String(150), nullable=True)

    is_primary_contact: Mapped[bool] = mapped_column(default=False, nullable=False)

    team = relationship("VolunteerTeam", back_populates="members")
    user = relationship("User", back_populates="team_links")

    def __repr__(self) -> str:
        return f"<TeamMember user={self.user_id} team={self.volunteer_team_id} primary={self.is_primary_contact}>"
