"""
Application review actions other than approval.
"""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from portal.deps import CurrentUser, DBSession
from portal.services.applications import reject_application

router = APIRouter(prefix="/api/applications", tags=["applications"])


class RejectRequest(BaseModel):
    type: Literal["volunteer"] = "volunteer"
    reason: str = Field(default="", max_length=2000)


@router.post("/{application_id}/reject")
async def reject(
    application_id: int,
    payload: RejectRequest,
    user: CurrentUser,
    db: DBSession,
):
    """Reject a submitted application with a reason."""
    team = await reject_application(db, user, application_id, payload.reason)
    return {
        "ok": True,
        "message": "Application rejected",
        "application": team.to_dict(),
    }
