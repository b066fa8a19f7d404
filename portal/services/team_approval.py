"""
Volunteer team approval workflow.

Approving a team runs four steps in order within one request:

1. validate_approval_request - role check and application state check
2. provision_members - find or create an account for every roster entry
3. record_linkage - upsert team membership and signup attribution rows
4. finalize_approval - mark the team approved and write the audit entry

There is no surrounding transaction. Each new account is committed before
its welcome email goes out and each linkage row commits on its own, so a
request that dies half way leaves reusable accounts behind and the team
still submitted. Running the approval again reuses those accounts and the
upserts keep the linkage rows unique.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from portal.db import upsert
from portal.errors import (
    AlreadyProcessed,
    Forbidden,
    InvalidState,
    LinkageWriteError,
    MemberProvisioningError,
    NotFound,
    NotificationError,
    ProvisioningFailed,
)
from portal.models.audit import ApplicationStatusHistory, SignupSourceType, SystemLog, UserSignupSource
from portal.models.base import utcnow
from portal.models.team_member import TeamMember
from portal.models.user import User, normalize_email
from portal.models.volunteer_team import (
    MIN_TEAM_MEMBERS,
    ApplicationStatus,
    OnboardingStep,
    TeamStatus,
    VolunteerTeam,
)
from portal.services.email import send_welcome_email
from portal.services.identity import IdentityService
from portal.services.permissions import VOLUNTEERS_APPROVE, has_capability

logger = logging.getLogger(__name__)

WelcomeNotifier = Callable[..., Awaitable[bool]]


@dataclass(frozen=True)
class RosterEntry:
    name: str
    email: str
    phone: str | None = None
    school: str | None = None

    @classmethod
    def from_json(cls, raw: Any) -> "RosterEntry":
        if not isinstance(raw, dict):
            return cls(name="", email="")

        def text(key: str) -> str:
            value = raw.get(key)
            return value.strip() if isinstance(value, str) else ""

        return cls(
            name=text("name"),
            email=text("email"),
            phone=text("phone") or None,
            # older submissions used "highschool"
            school=text("school") or text("highschool") or None,
        )


@dataclass(frozen=True)
class TeamSnapshot:
    """Plain copy of the application taken once it has been validated."""

    id: int
    name: str
    email: str
    primary_contact_phone: str | None
    members: tuple[RosterEntry, ...]

    @classmethod
    def from_team(cls, team: VolunteerTeam) -> "TeamSnapshot":
        return cls(
            id=team.id,
            name=team.display_name,
            email=normalize_email(team.email or ""),
            primary_contact_phone=team.primary_contact_phone,
            members=tuple(RosterEntry.from_json(m) for m in team.group_members or []),
        )

    def is_primary_contact(self, email: str, phone: str | None) -> bool:
        if normalize_email(email) == self.email:
            return True
        return bool(phone and self.primary_contact_phone and phone == self.primary_contact_phone)


@dataclass(frozen=True)
class ProvisionSuccess:
    user_id: int
    email: str
    name: str
    phone: str | None = None
    school: str | None = None
    created: bool = False

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "email": self.email, "name": self.name}


@dataclass(frozen=True)
class ProvisionFailure:
    email: str
    reason: str

    def to_dict(self) -> dict:
        return {"email": self.email, "error": self.reason}


ProvisionOutcome = ProvisionSuccess | ProvisionFailure


@dataclass
class ProvisioningReport:
    successes: list[ProvisionSuccess] = field(default_factory=list)
    failures: list[ProvisionFailure] = field(default_factory=list)
    linkage_failures: list[LinkageWriteError] = field(default_factory=list)

    def add(self, outcome: ProvisionOutcome) -> None:
        if isinstance(outcome, ProvisionSuccess):
            self.successes.append(outcome)
        else:
            self.failures.append(outcome)

    @property
    def errors(self) -> list[dict]:
        """Itemized problems: members without an account, then members whose
        membership or attribution row was not written."""
        return [f.to_dict() for f in self.failures] + [e.to_dict() for e in self.linkage_failures]


@dataclass
class ApprovalSummary:
    ok: bool
    message: str
    created_users: list[dict]
    errors: list[dict] = field(default_factory=list)

    def to_payload(self) -> dict:
        payload = {
            "ok": self.ok,
            "message": self.message,
            "created_users": self.created_users,
        }
        if self.errors:
            payload["errors"] = self.errors
        return payload


async def validate_approval_request(
    db: AsyncSession,
    actor: User | None,
    team_id: int,
) -> VolunteerTeam:
    """Check the actor may approve and the team is in an approvable state."""
    if not has_capability(actor, VOLUNTEERS_APPROVE):
        raise Forbidden("Forbidden: Only founders and interns can approve volunteers")

    team = await db.get(VolunteerTeam, team_id)
    if team is None:
        raise NotFound("Volunteer team not found")

    if team.application_status == ApplicationStatus.APPROVED.value:
        raise AlreadyProcessed("Volunteer team already approved")
    if team.application_status == ApplicationStatus.REJECTED.value:
        raise AlreadyProcessed("Volunteer team was rejected")

    members = team.group_members
    if not isinstance(members, list) or len(members) < MIN_TEAM_MEMBERS:
        raise InvalidState(
            f"Invalid group members data: a team needs at least {MIN_TEAM_MEMBERS} members"
        )

    return team


async def provision_members(
    db: AsyncSession,
    team: TeamSnapshot,
    identity: IdentityService,
    notifier: WelcomeNotifier,
) -> ProvisioningReport:
    """Find or create an account for each roster entry.

    Every entry with a name and an email produces exactly one outcome; one
    member failing never stops the rest.
    """
    report = ProvisioningReport()
    seen: set[str] = set()

    for entry in team.members:
        if not entry.name or not entry.email:
            logger.info(f"Team {team.id}: skipping roster entry without name or email")
            continue

        email = normalize_email(entry.email)
        if email in seen:
            report.add(ProvisionFailure(email=email, reason="Duplicate email in team roster"))
            continue
        seen.add(email)

        report.add(await _provision_member(db, team, entry, identity, notifier))

    logger.info(
        f"Team {team.id}: provisioned {len(report.successes)} member(s), "
        f"{len(report.failures)} failure(s)"
    )
    return report


async def _provision_member(
    db: AsyncSession,
    team: TeamSnapshot,
    entry: RosterEntry,
    identity: IdentityService,
    notifier: WelcomeNotifier,
) -> ProvisionOutcome:
    email = normalize_email(entry.email)

    try:
        existing = await identity.get_by_email(email)
        if existing is not None:
            return ProvisionSuccess(
                user_id=existing.id,
                email=email,
                name=entry.name,
                phone=entry.phone,
                school=entry.school,
            )

        account = await identity.create_account(
            email=email,
            name=entry.name,
            phone=entry.phone,
            school=entry.school,
        )
        user_id = account.user.id
        await db.commit()
    except MemberProvisioningError as e:
        await db.rollback()
        logger.warning(f"Team {team.id}: could not provision {email}: {e.reason}")
        return ProvisionFailure(email=email, reason=e.reason)
    except Exception as e:
        await db.rollback()
        logger.error(f"Team {team.id}: identity service error for {email}: {e}", exc_info=True)
        return ProvisionFailure(email=email, reason=str(e) or "Failed to create user")

    await _send_welcome(notifier, email, entry.name, account.temp_password, team.name)

    return ProvisionSuccess(
        user_id=user_id,
        email=email,
        name=entry.name,
        phone=entry.phone,
        school=entry.school,
        created=True,
    )


async def _send_welcome(
    notifier: WelcomeNotifier,
    email: str,
    name: str,
    temp_password: str,
    team_name: str,
) -> None:
    try:
        delivered = await notifier(
            to_email=email,
            name=name,
            temp_password=temp_password,
            team_name=team_name,
        )
        if not delivered:
            raise NotificationError("no email provider accepted the message")
    except Exception as e:
        logger.warning(f"Welcome email to {email} failed: {e}")


async def record_linkage(
    db: AsyncSession,
    team: TeamSnapshot,
    successes: list[ProvisionSuccess],
) -> list[LinkageWriteError]:
    """Upsert membership and attribution rows for provisioned members.

    Returns the write failures. A failed write is rolled back and logged and
    the remaining members are still linked.
    """
    failures: list[LinkageWriteError] = []

    for member in successes:
        membership = {
            "volunteer_team_id": team.id,
            "user_id": member.user_id,
            "member_name": member.name,
            "member_email": member.email,
            "member_phone": member.phone,
            "member_school": member.school,
            "is_primary_contact": team.is_primary_contact(member.email, member.phone),
        }
        error = await _write(
            db,
            member.email,
            f"link to team {team.id}",
            lambda: upsert(
                db,
                TeamMember,
                membership,
                conflict_columns=("volunteer_team_id", "user_id"),
                update_columns=(
                    "member_name",
                    "member_email",
                    "member_phone",
                    "member_school",
                    "is_primary_contact",
                ),
            ),
        )
        if error:
            failures.append(error)

        attribution = {
            "user_id": member.user_id,
            "email": member.email,
            "source_type": SignupSourceType.VOLUNTEER_FORM.value,
            "source_reference_id": team.id,
            "source_metadata": {"team_name": team.name},
        }
        error = await _write(
            db,
            member.email,
            "record signup source",
            lambda: upsert(
                db,
                UserSignupSource,
                attribution,
                conflict_columns=("user_id", "source_type"),
                update_columns=("source_reference_id", "source_metadata"),
            ),
        )
        if error:
            failures.append(error)

    return failures


async def _write(
    db: AsyncSession,
    email: str,
    description: str,
    statement: Callable[[], Awaitable[None]],
) -> LinkageWriteError | None:
    try:
        await statement()
        await db.commit()
    except Exception as e:
        await db.rollback()
        error = LinkageWriteError(email, f"Failed to {description}: {e}")
        logger.error(f"Linkage write for {email} failed: {error.reason}")
        return error
    return None


async def finalize_approval(
    db: AsyncSession,
    team: TeamSnapshot,
    actor_id: int | None,
    report: ProvisioningReport,
) -> ApprovalSummary:
    """Transition the team to approved and write the audit entry."""
    if not report.successes:
        logger.warning(f"Team {team.id}: no accounts provisioned, leaving application unchanged")
        raise ProvisioningFailed(errors=report.errors)

    row = await db.get(VolunteerTeam, team.id, populate_existing=True)
    if row is None:
        raise NotFound("Volunteer team not found")

    old_status = row.application_status
    row.application_status = ApplicationStatus.APPROVED.value
    row.status = TeamStatus.ACTIVE.value
    row.approved_at = utcnow()
    row.approved_by_id = actor_id
    row.onboarding_step = OnboardingStep.first().value

    details: dict[str, Any] = {
        "volunteer_id": team.id,
        "team_name": team.name,
        "members_created": len(report.successes),
        "new_accounts": sum(1 for s in report.successes if s.created),
    }
    errors = report.errors
    if errors:
        details["errors"] = errors

    db.add(SystemLog(
        event_type="volunteer_approved",
        description=f"Approved {team.name}",
        details=details,
        actor_id=actor_id,
    ))
    db.add(ApplicationStatusHistory(
        application_type="volunteer",
        application_id=team.id,
        old_status=old_status,
        new_status=ApplicationStatus.APPROVED.value,
        changed_by_id=actor_id,
    ))
    await db.commit()

    count = len(report.successes)
    return ApprovalSummary(
        ok=True,
        message=f"Successfully approved team and created {count} user account(s)",
        created_users=[s.to_dict() for s in report.successes],
        errors=errors,
    )


async def approve_team(
    db: AsyncSession,
    actor: User | None,
    team_id: int,
    identity: IdentityService | None = None,
    notifier: WelcomeNotifier | None = None,
) -> ApprovalSummary:
    """Approve a volunteer team and provision accounts for its members."""
    team = TeamSnapshot.from_team(await validate_approval_request(db, actor, team_id))
    actor_id = actor.id if actor else None

    report = await provision_members(
        db,
        team,
        identity or IdentityService(db),
        notifier or send_welcome_email,
    )
    report.linkage_failures.extend(await record_linkage(db, team, report.successes))
    summary = await finalize_approval(db, team, actor_id, report)

    logger.info(f"Team {team.id} approved by user {actor_id}: {len(summary.created_users)} account(s)")
    return summary
