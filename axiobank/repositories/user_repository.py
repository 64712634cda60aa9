"""
User, Employee and UserSession repositories.

Staff counts exclude users whose role is CUSTOMER.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.enums import EmploymentStatus, UserRole, UserStatus
from axiobank.models.user import Employee, User, UserSession
from axiobank.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for back-office users."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def count_staff(self, active_only: bool = False) -> int:
        """
        Count non-customer users.

        Args:
            active_only: Only count users whose status is ACTIVE

        Returns:
            Number of staff users
        """
        query = select(func.count()).select_from(User).where(User.role != UserRole.CUSTOMER)
        query = self._apply_soft_delete_filter(query)
        if active_only:
            query = query.where(User.status == UserStatus.ACTIVE)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_logged_in_since(self, since: datetime) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(User).where(User.last_login >= since)
        )
        return result.scalar_one()


class EmployeeRepository(BaseRepository[Employee]):
    """Repository for employee HR records."""

    def __init__(self, session: AsyncSession):
        super().__init__(Employee, session)

    async def count_active(self, branch_id: uuid.UUID | None = None) -> int:
        query = select(func.count()).select_from(Employee).where(
            Employee.employment_status == EmploymentStatus.ACTIVE
        )
        query = self._apply_branch_filter(query, branch_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_active_with_users(self, branch_id: uuid.UUID) -> list[Any]:
        """
        Active employees of a branch joined with their user row.

        Returns:
            Rows of (Employee, User)
        """
        query = (
            select(Employee, User)
            .join(User, Employee.user_id == User.id)
            .where(
                Employee.branch_id == branch_id,
                Employee.employment_status == EmploymentStatus.ACTIVE,
            )
        )
        result = await self.session.execute(query)
        return list(result.all())


class UserSessionRepository(BaseRepository[UserSession]):
    """Repository for login sessions."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserSession, session)

    async def count_active(self, since: datetime | None = None) -> int:
        """
        Count active sessions.

        Args:
            since: Only count sessions with activity at or after this time

        Returns:
            Number of active sessions
        """
        query = select(func.count()).select_from(UserSession).where(
            UserSession.is_active.is_(True)
        )
        if since is not None:
            query = query.where(UserSession.last_activity >= since)
        result = await self.session.execute(query)
        return result.scalar_one()
