"""
Card repository for database operations.

This module provides the CardRepository class for managing card data access.
All queries are scoped to the owning customer. A card is "live" while
is_active is True; removed cards stay in the table with is_active False.
"""

import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.card import Card
from axiobank.repositories.base import BaseRepository


class CardRepository(BaseRepository[Card]):
    """
    Repository for card database operations.

    Inherits from BaseRepository for standard CRUD operations. Cards have no
    deleted_at column, so get_by_id returns live and removed cards alike.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize card repository.

        Args:
            session: Async database session for executing queries
        """
        super().__init__(Card, session)

    async def get_live_by_customer(self, customer_id: uuid.UUID) -> list[Card]:
        """
        Get the live cards of a customer.

        Args:
            customer_id: UUID of the owning customer

        Returns:
            Cards ordered default first, then newest first

        Example:
            cards = await repo.get_live_by_customer(customer.id)
            default = cards[0] if cards and cards[0].is_default else None
        """
        query = (
            select(Card)
            .where(Card.customer_id == customer_id, Card.is_active.is_(True))
            .order_by(Card.is_default.desc(), Card.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_live_for_customer(
        self,
        customer_id: uuid.UUID,
        card_id: uuid.UUID,
    ) -> Card | None:
        """Get a live card only if it belongs to the customer."""
        query = select(Card).where(
            Card.id == card_id,
            Card.customer_id == customer_id,
            Card.is_active.is_(True),
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_last_four(
        self,
        customer_id: uuid.UUID,
        last_four_digits: str,
        live_only: bool = True,
    ) -> Card | None:
        """
        Find a customer's card by its last four digits.

        Args:
            customer_id: UUID of the owning customer
            last_four_digits: Last 4 digits of the PAN
            live_only: Ignore removed cards (default: True)

        Returns:
            Most recent matching card or None
        """
        query = select(Card).where(
            Card.customer_id == customer_id,
            Card.last_four_digits == last_four_digits,
        )
        if live_only:
            query = query.where(Card.is_active.is_(True))
        query = query.order_by(Card.created_at.desc()).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def count_live(self, customer_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Card)
            .where(Card.customer_id == customer_id, Card.is_active.is_(True))
        )
        return result.scalar_one()

    async def get_live_default(self, customer_id: uuid.UUID) -> Card | None:
        query = select(Card).where(
            Card.customer_id == customer_id,
            Card.is_active.is_(True),
            Card.is_default.is_(True),
        )
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def get_newest_live(
        self,
        customer_id: uuid.UUID,
        exclude_id: uuid.UUID | None = None,
    ) -> Card | None:
        """Most recently added live card of the customer."""
        query = select(Card).where(
            Card.customer_id == customer_id,
            Card.is_active.is_(True),
        )
        if exclude_id is not None:
            query = query.where(Card.id != exclude_id)
        query = query.order_by(Card.created_at.desc()).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def clear_defaults(self, customer_id: uuid.UUID) -> None:
        """
        Clear the default flag on every card of a customer.

        Uses a bulk UPDATE; loaded Card instances are synchronized in the
        session so later reads see is_default False.
        """
        await self.session.execute(
            update(Card)
            .where(Card.customer_id == customer_id, Card.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )
