"""Shared fixtures: a throwaway SQLite database per test and an app client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from portal.db import Base, get_db
from portal.main import app
from portal.models import (
    ApplicationStatus,
    TeamStatus,
    User,
    UserRole,
    UserSession,
    VolunteerTeam,
)
from portal.services.password import hash_password
from portal.services.rate_limiter import auth_rate_limiter

STAFF_PASSWORD = "correct-horse-battery"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    auth_rate_limiter.reset()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="https://testserver") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def factory(
        email: str = "founder@example.org",
        role: UserRole | str = UserRole.FOUNDER,
        name: str = "Staff Member",
        password: str = STAFF_PASSWORD,
        **fields,
    ) -> User:
        user = User(
            email=email,
            name=name,
            role=role.value if isinstance(role, UserRole) else role,
            hashed_password=hash_password(password),
            is_verified=True,
            **fields,
        )
        db.add(user)
        await db.commit()
        return user

    return factory


def roster(*names: str) -> list[dict]:
    """Roster entries named A, B, C... with emails a@x.com, b@x.com..."""
    return [
        {"name": n, "email": f"{n.lower()}@x.com", "phone": f"555-01{i:02d}", "school": "Lincoln High"}
        for i, n in enumerate(names)
    ]


@pytest.fixture
def make_team(db):
    async def factory(
        members: list | dict | None = None,
        email: str = "a@x.com",
        application_status: ApplicationStatus = ApplicationStatus.SUBMITTED,
        **fields,
    ) -> VolunteerTeam:
        team = VolunteerTeam(
            team_name=fields.pop("team_name", "Solar Sprouts"),
            email=email,
            group_members=roster("A", "B", "C") if members is None else members,
            application_status=application_status.value,
            status=TeamStatus.PENDING.value,
            **fields,
        )
        db.add(team)
        await db.commit()
        return team

    return factory


@pytest.fixture
def login_as(db, client):
    async def login(user: User) -> None:
        session = UserSession.create_session(user_id=user.id)
        db.add(session)
        await db.commit()
        client.cookies.set("session_token", session.session_token)

    return login


@pytest.fixture
def count(db):
    async def counter(model) -> int:
        return await db.scalar(select(func.count()).select_from(model))

    return counter


class RecordingNotifier:
    """Stands in for the welcome email sender."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    async def __call__(self, **kwargs) -> bool:
        self.sent.append(kwargs)
        if self.fail:
            raise RuntimeError("smtp unreachable")
        return True

    @property
    def recipients(self) -> list[str]:
        return [m["to_email"] for m in self.sent]


@pytest.fixture
def notifier():
    return RecordingNotifier()
