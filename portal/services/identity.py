"""
Identity store access: account lookup by email and account creation with a
temporary credential.
"""

import logging
import re
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.errors import MemberProvisioningError
from portal.models.user import AccountStatus, User, UserRole, normalize_email
from portal.services.password import generate_temp_password, hash_password

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


@dataclass
class NewAccount:
    """A freshly created account and the credential generated for it."""

    user: User
    temp_password: str


class IdentityService:
    """Looks up and creates accounts in the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def create_account(
        self,
        email: str,
        name: str,
        phone: str | None = None,
        school: str | None = None,
        role: UserRole = UserRole.VOLUNTEER,
    ) -> NewAccount:
        """Create a pre-verified account with a generated temporary password.

        The row is flushed but not committed; the caller owns the transaction.
        Raises MemberProvisioningError for malformed or already-taken emails.
        """
        email = normalize_email(email)
        if not is_valid_email(email):
            raise MemberProvisioningError(email, "Invalid email address")

        temp_password = generate_temp_password()
        user = User(
            email=email,
            name=name.strip(),
            phone=phone or None,
            school=school or None,
            role=role.value,
            user_category=role.value,
            hashed_password=hash_password(temp_password),
            is_verified=True,
            must_change_password=True,
            status=AccountStatus.ACTIVE.value,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise MemberProvisioningError(email, "An account with this email already exists") from e

        logger.info(f"Created {role.value} account {user.id} for {email}")
        return NewAccount(user=user, temp_password=temp_password)
