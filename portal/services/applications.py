"""
Volunteer team applications: submission, lookup and rejection.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.errors import AlreadyProcessed, Forbidden, InvalidInput, NotFound
from portal.models.audit import ApplicationStatusHistory, SystemLog
from portal.models.base import utcnow
from portal.models.notification import Notification
from portal.models.team_member import TeamMember
from portal.models.user import User, normalize_email
from portal.models.volunteer_team import ApplicationStatus, TeamStatus, VolunteerTeam
from portal.services.email import send_rejection_email
from portal.services.permissions import VOLUNTEERS_REJECT, VOLUNTEERS_VIEW, has_capability

logger = logging.getLogger(__name__)

RejectionNotifier = Callable[..., Awaitable[bool]]


async def submit_application(
    db: AsyncSession,
    team_name: str | None,
    email: str,
    primary_contact_phone: str | None,
    members: list[dict[str, Any]],
) -> VolunteerTeam:
    """Store a new team application in the submitted state."""
    team = VolunteerTeam(
        team_name=team_name,
        email=normalize_email(email),
        primary_contact_phone=primary_contact_phone,
        group_members=members,
        application_status=ApplicationStatus.SUBMITTED.value,
        status=TeamStatus.PENDING.value,
    )
    db.add(team)
    await db.flush()
    await db.refresh(team)
    logger.info(f"Team application {team.id} submitted with {len(members)} member(s)")
    return team


async def list_applications(
    db: AsyncSession,
    actor: User,
    application_status: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[VolunteerTeam], int]:
    """Page through applications, newest first. Returns (rows, total)."""
    if not has_capability(actor, VOLUNTEERS_VIEW):
        raise Forbidden()

    query = select(VolunteerTeam)
    count_query = select(func.count()).select_from(VolunteerTeam)
    if application_status:
        query = query.where(VolunteerTeam.application_status == application_status)
        count_query = count_query.where(VolunteerTeam.application_status == application_status)

    total = await db.scalar(count_query) or 0
    result = await db.execute(
        query.order_by(VolunteerTeam.submitted_at.desc(), VolunteerTeam.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def get_application(db: AsyncSession, actor: User, team_id: int) -> VolunteerTeam:
    if not has_capability(actor, VOLUNTEERS_VIEW):
        raise Forbidden()

    team = await db.get(VolunteerTeam, team_id)
    if team is None:
        raise NotFound("Volunteer team not found")
    return team


async def reject_application(
    db: AsyncSession,
    actor: User,
    team_id: int,
    reason: str,
    notifier: RejectionNotifier | None = None,
) -> VolunteerTeam:
    """Move a submitted application to the terminal rejected state.

    Linked members (left over from an interrupted approval) get an in-app
    notification; the declared contact gets a best-effort email.
    """
    if not has_capability(actor, VOLUNTEERS_REJECT):
        raise Forbidden()

    reason = (reason or "").strip()
    if not reason:
        raise InvalidInput("Rejection reason is required")

    team = await db.get(VolunteerTeam, team_id)
    if team is None:
        raise NotFound("Volunteer team not found")
    if team.application_status != ApplicationStatus.SUBMITTED.value:
        raise AlreadyProcessed(f"Volunteer team already {team.application_status}")

    old_status = team.application_status
    team.application_status = ApplicationStatus.REJECTED.value
    team.status = TeamStatus.INACTIVE.value
    team.rejected_at = utcnow()
    team.rejection_reason = reason

    db.add(ApplicationStatusHistory(
        application_type="volunteer",
        application_id=team.id,
        old_status=old_status,
        new_status=ApplicationStatus.REJECTED.value,
        changed_by_id=actor.id,
        notes=reason,
    ))
    db.add(SystemLog(
        event_type="volunteer_rejected",
        description=f"Rejected {team.display_name}",
        details={"volunteer_id": team.id, "team_name": team.team_name, "reason": reason},
        actor_id=actor.id,
    ))

    linked = await db.execute(
        select(TeamMember.user_id).where(TeamMember.volunteer_team_id == team.id)
    )
    for user_id in linked.scalars():
        db.add(Notification(
            user_id=user_id,
            notification_type="application_rejected",
            title="Application Rejected",
            message=f"Your volunteer application was rejected. Reason: {reason}",
            action_url="/dashboard/volunteer",
            related_id=team.id,
            related_type="volunteer",
        ))

    await db.commit()
    logger.info(f"Team {team.id} rejected by user {actor.id}")

    notifier = notifier or send_rejection_email
    try:
        delivered = await notifier(to_email=team.email, name=_contact_name(team), reason=reason)
        if not delivered:
            logger.warning(f"Rejection email to {team.email} was not delivered")
    except Exception as e:
        logger.warning(f"Rejection email to {team.email} failed: {e}")

    return team


def _contact_name(team: VolunteerTeam) -> str:
    for member in team.group_members or []:
        if isinstance(member, dict) and normalize_email(member.get("email") or "") == team.email:
            return member.get("name") or team.display_name
    return team.display_name
