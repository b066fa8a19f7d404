"""
Volunteer team router: public application form plus the admin
list / detail / approval endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status
from pydantic import AfterValidator, BaseModel, Field

from portal.deps import CurrentUser, DBSession
from portal.models.user import normalize_email
from portal.models.volunteer_team import MIN_TEAM_MEMBERS, ApplicationStatus
from portal.services.applications import get_application, list_applications, submit_application
from portal.services.identity import is_valid_email
from portal.services.team_approval import approve_team

router = APIRouter(prefix="/api/volunteers", tags=["volunteers"])


def _checked_email(value: str) -> str:
    value = normalize_email(value)
    if not is_valid_email(value):
        raise ValueError("Invalid email address")
    return value


ContactEmail = Annotated[str, Field(max_length=255), AfterValidator(_checked_email)]


class TeamMemberIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: ContactEmail
    phone: str | None = Field(default=None, max_length=30)
    school: str | None = Field(default=None, max_length=150)


class TeamApplicationIn(BaseModel):
    team_name: str | None = Field(default=None, max_length=150)
    email: ContactEmail
    primary_contact_phone: str | None = Field(default=None, max_length=30)
    group_members: list[TeamMemberIn] = Field(min_length=MIN_TEAM_MEMBERS)


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_team_application(payload: TeamApplicationIn, db: DBSession):
    """Public volunteer team signup."""
    team = await submit_application(
        db,
        team_name=payload.team_name,
        email=payload.email,
        primary_contact_phone=payload.primary_contact_phone,
        members=[m.model_dump() for m in payload.group_members],
    )
    return {"ok": True, "id": team.id, "application_status": team.application_status}


@router.get("")
async def list_team_applications(
    user: CurrentUser,
    db: DBSession,
    application_status: ApplicationStatus | None = None,
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=25, ge=1, le=100),
):
    """List team applications, newest first."""
    teams, total = await list_applications(
        db,
        user,
        application_status=application_status.value if application_status else None,
        limit=per_page,
        offset=(page - 1) * per_page,
    )
    return {
        "ok": True,
        "count": total,
        "page": page,
        "results": [t.to_dict() for t in teams],
    }


@router.get("/{team_id}")
async def get_team_application(team_id: int, user: CurrentUser, db: DBSession):
    team = await get_application(db, user, team_id)
    return {"ok": True, "application": team.to_dict()}


@router.post("/{team_id}/approve")
async def approve_team_application(team_id: int, user: CurrentUser, db: DBSession):
    """Approve a team and create accounts for its members.

    Responds with the created accounts and, when some members failed,
    an itemized ``errors`` list so an admin can fix just those.
    """
    summary = await approve_team(db, user, team_id)
    return summary.to_payload()
