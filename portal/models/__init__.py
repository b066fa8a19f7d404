# Models package
from portal.db import Base
from portal.models.user import User, UserRole, AccountStatus, normalize_email
from portal.models.user_session import UserSession
from portal.models.volunteer_team import (
    VolunteerTeam,
    ApplicationStatus,
    TeamStatus,
    OnboardingStep,
    MIN_TEAM_MEMBERS,
)
from portal.models.team_member import TeamMember
from portal.models.audit import (
    UserSignupSource,
    SignupSourceType,
    SystemLog,
    ApplicationStatusHistory,
)
from portal.models.notification import Notification

__all__ = [
    "Base",
    "User",
    "UserRole",
    "AccountStatus",
    "normalize_email",
    "UserSession",
    "VolunteerTeam",
    "ApplicationStatus",
    "TeamStatus",
    "OnboardingStep",
    "MIN_TEAM_MEMBERS",
    "TeamMember",
    "UserSignupSource",
    "SignupSourceType",
    "SystemLog",
    "ApplicationStatusHistory",
    "Notification",
]
