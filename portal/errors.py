"""
Error taxonomy for portal operations.

Fatal errors derive from PortalError and carry the HTTP status the API
answers with. The non-fatal errors are raised inside a single member's
provisioning or linkage step and are always caught there.
"""

from fastapi import status


class PortalError(Exception):
    """Base class for errors that end a request with ``{ok: false}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"ok": False, "error": self.message}


class Unauthenticated(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidInput(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class AlreadyProcessed(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Application already processed"


class InvalidState(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid application state"


class ProvisioningFailed(PortalError):
    """No member of the team could be given an account."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to create any user accounts"

    def __init__(self, message: str | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class MemberProvisioningError(Exception):
    """A single member could not be given an account."""

    def __init__(self, email: str, reason: str):
        self.email = email
        self.reason = reason
        super().__init__(f"{email}: {reason}")


class LinkageWriteError(Exception):
    """A membership or attribution row could not be written for a member."""

    def __init__(self, email: str, reason: str):
        self.email = email
        self.reason = reason
        super().__init__(f"{email}: {reason}")

    def to_dict(self) -> dict:
        return {"email": self.email, "error": self.reason}


class NotificationError(Exception):
    """An email could not be delivered."""
