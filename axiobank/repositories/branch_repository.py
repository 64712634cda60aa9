"""
Branch repository for database operations.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.branch import Branch
from axiobank.repositories.base import BaseRepository


class BranchRepository(BaseRepository[Branch]):
    """Repository for branch lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(Branch, session)

    async def list_ordered(self) -> list[Branch]:
        """All branches ordered by name."""
        result = await self.session.execute(select(Branch).order_by(Branch.name))
        return list(result.scalars().all())
