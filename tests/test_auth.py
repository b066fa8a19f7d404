"""Tests for cookie session authentication."""

from datetime import timedelta

from sqlalchemy import select

from portal.models import User, UserRole, UserSession
from portal.models.base import utcnow
from portal.services.password import verify_password

from conftest import STAFF_PASSWORD


async def login(client, email="founder@example.org", password=STAFF_PASSWORD):
    return await client.post("/auth/login", data={"email": email, "password": password})


class TestLogin:

    async def test_login_sets_session_cookie(self, client, make_user):
        await make_user()

        response = await login(client, email="Founder@Example.org")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["user"]["email"] == "founder@example.org"
        assert body["must_change_password"] is False
        assert "session_token" in response.cookies

    async def test_wrong_password(self, client, make_user):
        await make_user()

        response = await login(client, password="not-it")

        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Invalid email or password"}

    async def test_unknown_email(self, client):
        response = await login(client, email="nobody@example.org")

        assert response.status_code == 401

    async def test_disabled_account(self, client, make_user):
        await make_user(is_active=False)

        response = await login(client)

        assert response.status_code == 403

    async def test_rate_limited(self, client, make_user):
        await make_user()

        statuses = [(await login(client, password="wrong")).status_code for _ in range(12)]

        assert statuses[-1] == 429


class TestSession:

    async def test_me_lists_capabilities(self, client, make_user):
        await make_user(email="intern@example.org", role=UserRole.INTERN, department="outreach")
        await login(client, email="intern@example.org")

        response = await client.get("/auth/me")

        assert response.status_code == 200
        caps = response.json()["capabilities"]
        assert "volunteers.approve" in caps
        assert "teachers.edit" in caps
        assert "users.manage" not in caps

    async def test_me_requires_session(self, client):
        response = await client.get("/auth/me")

        assert response.status_code == 401

    async def test_logout_ends_session(self, client, db, make_user):
        await make_user()
        await login(client)

        response = await client.post("/auth/logout")
        client.cookies.clear()

        assert response.status_code == 200
        assert (await db.execute(select(UserSession))).scalars().all() == []
        assert (await client.get("/auth/me")).status_code == 401

    async def test_expired_session_is_rejected(self, client, db, make_user, login_as):
        user = await make_user()
        await login_as(user)
        session = await db.scalar(select(UserSession))
        session.expires_at = utcnow() - timedelta(minutes=1)
        await db.commit()

        response = await client.get("/auth/me")

        assert response.status_code == 401


class TestChangePassword:

    async def test_temporary_password_is_replaced(self, client, db, make_user):
        user = await make_user(email="a@x.com", role=UserRole.VOLUNTEER, must_change_password=True)
        first = await login(client, email="a@x.com")
        assert first.json()["must_change_password"] is True

        response = await client.post("/auth/change-password", data={
            "current_password": STAFF_PASSWORD,
            "new_password": "a-much-better-one",
            "confirm_password": "a-much-better-one",
        })

        assert response.status_code == 200
        stored = await db.get(User, user.id, populate_existing=True)
        assert stored.must_change_password is False
        assert verify_password("a-much-better-one", stored.hashed_password)

    async def test_wrong_current_password(self, client, make_user):
        await make_user()
        await login(client)

        response = await client.post("/auth/change-password", data={
            "current_password": "guess",
            "new_password": "a-much-better-one",
            "confirm_password": "a-much-better-one",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "Current password is incorrect"

    async def test_mismatched_confirmation(self, client, make_user):
        await make_user()
        await login(client)

        response = await client.post("/auth/change-password", data={
            "current_password": STAFF_PASSWORD,
            "new_password": "a-much-better-one",
            "confirm_password": "a-much-better-two",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "Passwords do not match"
