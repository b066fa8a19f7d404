"""Tests for the dialect-aware upsert helper."""

from datetime import datetime, timezone

from sqlalchemy import select

from portal.db import upsert
from portal.models import TeamMember
from portal.models.base import as_utc

STALE = datetime(2020, 1, 1, tzinfo=timezone.utc)


async def test_upsert_updates_existing_row(db, make_user, make_team, count):
    user = await make_user(email="a@x.com")
    team = await make_team()
    db.add(TeamMember(
        volunteer_team_id=team.id,
        user_id=user.id,
        member_name="Old Name",
        member_email="a@x.com",
        created_at=STALE,
        updated_at=STALE,
    ))
    await db.commit()

    await upsert(
        db,
        TeamMember,
        {
            "volunteer_team_id": team.id,
            "user_id": user.id,
            "member_name": "New Name",
            "member_email": "a@x.com",
        },
        conflict_columns=("volunteer_team_id", "user_id"),
        update_columns=("member_name",),
    )
    await db.commit()

    row = await db.scalar(select(TeamMember).execution_options(populate_existing=True))
    assert await count(TeamMember) == 1
    assert row.member_name == "New Name"
    assert as_utc(row.created_at) == STALE
    assert as_utc(row.updated_at) > STALE
