"""
Service request and account freeze request repositories.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.models.account import Account
from axiobank.models.customer import Customer
from axiobank.models.enums import (
    FreezeRequestStatus,
    ServiceRequestStatus,
    ServiceRequestType,
)
from axiobank.models.user import User
from axiobank.models.workflow import AccountFreezeRequest, ServiceRequest
from axiobank.repositories.base import BaseRepository


class ServiceRequestRepository(BaseRepository[ServiceRequest]):
    """Repository for customer service requests."""

    def __init__(self, session: AsyncSession):
        super().__init__(ServiceRequest, session)

    async def get_pending_account_openings(self) -> list[Any]:
        """
        PENDING account opening requests with the customer's name.

        Returns:
            Rows of (ServiceRequest, first_name, last_name), newest first
        """
        query = (
            select(ServiceRequest, Customer.first_name, Customer.last_name)
            .outerjoin(Customer, ServiceRequest.customer_id == Customer.id)
            .where(
                ServiceRequest.request_type == ServiceRequestType.ACCOUNT_OPENING,
                ServiceRequest.status == ServiceRequestStatus.PENDING,
            )
            .order_by(ServiceRequest.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.all())


class AccountFreezeRequestRepository(BaseRepository[AccountFreezeRequest]):
    """Repository for account freeze requests."""

    def __init__(self, session: AsyncSession):
        super().__init__(AccountFreezeRequest, session)

    async def get_pending_with_requester(self) -> list[Any]:
        """
        PENDING freeze requests with the requesting user and account number.

        Returns:
            Rows of (AccountFreezeRequest, first_name, last_name, account_number)
        """
        query = (
            select(
                AccountFreezeRequest,
                User.first_name,
                User.last_name,
                Account.account_number,
            )
            .outerjoin(User, AccountFreezeRequest.requested_by == User.id)
            .outerjoin(Account, AccountFreezeRequest.account_id == Account.id)
            .where(AccountFreezeRequest.status == FreezeRequestStatus.PENDING)
            .order_by(AccountFreezeRequest.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.all())
