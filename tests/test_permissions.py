"""Tests for the capability matrix."""

import pytest

from portal.models import User
from portal.services import permissions
from portal.services.permissions import (
    ALL_CAPABILITIES,
    HOURS_APPROVE,
    INTERNS_VIEW,
    PRESENTATIONS_REQUEST,
    USERS_MANAGE,
    VOLUNTEERS_APPROVE,
    VOLUNTEERS_REJECT,
    VOLUNTEERS_VIEW,
    capabilities_for,
    has_capability,
    user_capabilities,
)


class TestCapabilitiesFor:

    def test_founder_has_everything(self):
        assert capabilities_for("founder") == ALL_CAPABILITIES

    def test_intern_reviews_volunteers(self):
        caps = capabilities_for("intern")
        assert {VOLUNTEERS_VIEW, VOLUNTEERS_APPROVE, VOLUNTEERS_REJECT} <= caps
        assert USERS_MANAGE not in caps

    def test_role_is_case_insensitive(self):
        assert capabilities_for("Intern") == capabilities_for("intern")

    @pytest.mark.parametrize("role", ["volunteer", "teacher", "guest", "janitor", None])
    def test_other_roles_cannot_approve(self, role):
        assert VOLUNTEERS_APPROVE not in capabilities_for(role)

    def test_unknown_role_is_empty(self):
        assert capabilities_for("janitor") == frozenset()

    def test_teacher_requests_presentations(self):
        assert capabilities_for("teacher") == frozenset({PRESENTATIONS_REQUEST})

    def test_department_extends_intern(self):
        assert HOURS_APPROVE in capabilities_for("intern", department="volunteer_development")
        assert HOURS_APPROVE not in capabilities_for("intern", department="outreach")

    def test_subrole_extends_intern(self):
        assert INTERNS_VIEW in capabilities_for("intern", subrole="lead")
        assert INTERNS_VIEW not in capabilities_for("intern")

    def test_department_ignored_for_other_roles(self):
        assert capabilities_for("volunteer", department="volunteer_development", subrole="lead") == (
            capabilities_for("volunteer")
        )


class TestUserCapabilities:

    def test_no_user(self):
        assert user_capabilities(None) == frozenset()
        assert not has_capability(None, VOLUNTEERS_APPROVE)

    def test_inactive_user_has_nothing(self):
        user = User(email="f@example.org", name="F", role="founder", is_active=False)
        assert user_capabilities(user) == frozenset()

    def test_stored_role(self):
        user = User(email="i@example.org", name="I", role="intern", is_active=True)
        assert has_capability(user, VOLUNTEERS_APPROVE)

    def test_platform_admin_email_counts_as_founder(self, monkeypatch):
        monkeypatch.setattr(permissions.settings, "platform_admin_emails", "boss@example.org")
        user = User(email="Boss@example.org", name="Boss", role="guest", is_active=True)
        assert user_capabilities(user) == ALL_CAPABILITIES
