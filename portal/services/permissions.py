"""
Role-based capability matrix.

Capabilities are static configuration: a role grants a base set, an intern
department adds department-specific capabilities, and a subrole adds
leadership capabilities on top. ``capabilities_for`` is a pure function of
(role, department, subrole) so it can be checked without a database.
"""

from portal.models.user import User, UserRole
from portal.settings import settings

# Volunteer applications
VOLUNTEERS_VIEW = "volunteers.view"
VOLUNTEERS_APPROVE = "volunteers.approve"
VOLUNTEERS_REJECT = "volunteers.reject"
VOLUNTEERS_EDIT = "volunteers.edit"
VOLUNTEERS_ASSIGN = "volunteers.assign"

# Everything else the portal gates
TEACHERS_VIEW = "teachers.view"
TEACHERS_EDIT = "teachers.edit"
PRESENTATIONS_VIEW = "presentations.view"
PRESENTATIONS_REQUEST = "presentations.request"
CONTENT_VIEW = "content.view"
CONTENT_EDIT = "content.edit"
CONTENT_PUBLISH = "content.publish"
NEWSLETTER_SEND = "newsletter.send"
MEDIA_REVIEW = "media.review"
INVENTORY_MANAGE = "inventory.manage"
INTERNS_VIEW = "interns.view"
HOURS_LOG = "hours.log"
HOURS_APPROVE = "hours.approve"
USERS_MANAGE = "users.manage"

ALL_CAPABILITIES = frozenset({
    VOLUNTEERS_VIEW, VOLUNTEERS_APPROVE, VOLUNTEERS_REJECT, VOLUNTEERS_EDIT, VOLUNTEERS_ASSIGN,
    TEACHERS_VIEW, TEACHERS_EDIT,
    PRESENTATIONS_VIEW, PRESENTATIONS_REQUEST,
    CONTENT_VIEW, CONTENT_EDIT, CONTENT_PUBLISH,
    NEWSLETTER_SEND, MEDIA_REVIEW, INVENTORY_MANAGE,
    INTERNS_VIEW, HOURS_LOG, HOURS_APPROVE, USERS_MANAGE,
})

ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    UserRole.FOUNDER.value: ALL_CAPABILITIES,
    UserRole.INTERN.value: frozenset({
        VOLUNTEERS_VIEW,
        VOLUNTEERS_APPROVE,
        VOLUNTEERS_REJECT,
        PRESENTATIONS_VIEW,
        CONTENT_VIEW,
        HOURS_LOG,
    }),
    UserRole.VOLUNTEER.value: frozenset({PRESENTATIONS_VIEW, HOURS_LOG}),
    UserRole.TEACHER.value: frozenset({PRESENTATIONS_REQUEST}),
    UserRole.GUEST.value: frozenset(),
}

DEPARTMENT_CAPABILITIES: dict[str, frozenset[str]] = {
    "volunteer_development": frozenset({VOLUNTEERS_EDIT, VOLUNTEERS_ASSIGN, HOURS_APPROVE}),
    "outreach": frozenset({TEACHERS_VIEW, TEACHERS_EDIT}),
    "communications": frozenset({CONTENT_EDIT, NEWSLETTER_SEND}),
    "media": frozenset({MEDIA_REVIEW, CONTENT_EDIT}),
    "operations": frozenset({INVENTORY_MANAGE}),
}

SUBROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    "lead": frozenset({INTERNS_VIEW, CONTENT_PUBLISH}),
}


def capabilities_for(
    role: str | None,
    department: str | None = None,
    subrole: str | None = None,
) -> frozenset[str]:
    """Resolve the capability set for a role/department/subrole triple.

    Departments and subroles only extend intern capabilities; other roles
    ignore them. Unknown roles resolve to the empty set.
    """
    role = (role or "").lower()
    caps = ROLE_CAPABILITIES.get(role)
    if caps is None:
        return frozenset()

    if role == UserRole.INTERN.value:
        caps = caps | DEPARTMENT_CAPABILITIES.get(department or "", frozenset())
        caps = caps | SUBROLE_CAPABILITIES.get(subrole or "", frozenset())

    return caps


def user_capabilities(user: User | None) -> frozenset[str]:
    """Capabilities for a stored account. Platform admin emails count as founders."""
    if user is None or not user.is_active:
        return frozenset()
    if settings.is_admin_email(user.email):
        return ROLE_CAPABILITIES[UserRole.FOUNDER.value]
    return capabilities_for(user.role, user.department, user.subrole)


def has_capability(user: User | None, capability: str) -> bool:
    return capability in user_capabilities(user)
