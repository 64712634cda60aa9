"""
Generic repository shared by every entity repository.

Two scoping rules apply to every query built here:
- models with `deleted_at` only return live rows
- models with `branch_id` can be narrowed to one branch (tenant)

Repositories flush but never commit; the calling service owns the unit of
work and commits once per operation.
"""

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    CRUD and paging for one model class.

    Usage:
        class BranchRepository(BaseRepository[Branch]):
            def __init__(self, session: AsyncSession):
                super().__init__(Branch, session)
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    # ------------------------------------------------------------------
    # Scoping
    # ------------------------------------------------------------------
    def _apply_soft_delete_filter(self, query: Select[Any]) -> Select[Any]:
        if hasattr(self.model, "deleted_at"):
            query = query.where(self.model.deleted_at.is_(None))
        return query

    def _apply_branch_filter(
        self, query: Select[Any], branch_id: uuid.UUID | None
    ) -> Select[Any]:
        """Restrict query to one branch when a branch_id is given."""
        if branch_id is not None and hasattr(self.model, "branch_id"):
            query = query.where(self.model.branch_id == branch_id)
        return query

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def add(self, instance: ModelType) -> ModelType:
        """
        Stage a new row and flush it.

        Returns:
            The instance with its id and server-side values loaded
        """
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, instance: ModelType) -> ModelType:
        """
        Flush attribute changes already made on `instance`.

        Example:
            account.status = AccountStatus.FROZEN
            account = await account_repo.update(account)
        """
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def soft_delete(self, instance: ModelType) -> ModelType:
        """
        Stamp deleted_at so the row drops out of every scoped query.

        Raises:
            AttributeError: If the model has no SoftDeleteMixin
        """
        if not hasattr(instance, "mark_deleted"):
            raise AttributeError(f"{self.model.__name__} does not support soft delete")
        instance.mark_deleted()
        return await self.update(instance)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_by_id(self, id: uuid.UUID) -> ModelType | None:
        query = self._apply_soft_delete_filter(
            select(self.model).where(self.model.id == id)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists(self, id: uuid.UUID) -> bool:
        return await self.get_by_id(id) is not None

    async def count(self, branch_id: uuid.UUID | None = None) -> int:
        query = self._apply_soft_delete_filter(select(func.count()).select_from(self.model))
        query = self._apply_branch_filter(query, branch_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_page(
        self,
        offset: int = 0,
        limit: int = 20,
        branch_id: uuid.UUID | None = None,
    ) -> tuple[list[ModelType], int]:
        """
        One page of live rows, newest first, plus the total row count.

        Args:
            offset: Rows to skip
            limit: Page size
            branch_id: Optional branch scope

        Returns:
            (rows, total) where total ignores offset and limit
        """
        query = self._apply_branch_filter(
            self._apply_soft_delete_filter(select(self.model)), branch_id
        )
        if hasattr(self.model, "created_at"):
            query = query.order_by(self.model.created_at.desc())
        result = await self.session.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all()), await self.count(branch_id)
