"""
Account service for business logic and validation.

This module provides the AccountService class for opening, reading,
updating and closing customer accounts, with audit logging.
"""

import logging
import uuid
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import to_money, utc_now
from axiobank.core.handlers import envelope
from axiobank.core.identifiers import generate_account_number
from axiobank.exceptions import NotFoundError
from axiobank.models import Account, AuditAction
from axiobank.models.enums import AccountStatus
from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.schemas.account import AccountCreate, AccountResponse, AccountUpdate
from axiobank.schemas.common import ApiResponse, ListResponse, PaginationParams
from axiobank.services.audit_service import AuditService, snapshot

logger = logging.getLogger(__name__)

_AUDITED_FIELDS = (
    "status",
    "nickname",
    "minimum_balance",
    "interest_rate",
    "credit_limit",
    "balance",
    "available_balance",
)


class AccountService:
    """
    Service for account business logic.

    Every public method returns an envelope; domain errors raised inside
    are turned into failure envelopes by the `envelope` decorator.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize account service.

        Args:
            session: Async database session for operations
        """
        self.session = session
        self.account_repo = AccountRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.audit_service = AuditService(session)

    async def _get_or_raise(self, account_id: uuid.UUID) -> Account:
        account = await self.account_repo.get_by_id(account_id)
        if account is None:
            raise NotFoundError("Account")
        return account

    async def _unique_account_number(self) -> str:
        while True:
            account_number = generate_account_number()
            if not await self.account_repo.number_exists(account_number):
                return account_number

    @envelope("Failed to retrieve accounts", response_cls=ListResponse)
    async def get_all_accounts(
        self,
        page: int = 1,
        page_size: int = 20,
        branch_id: uuid.UUID | None = None,
    ) -> ListResponse[AccountResponse]:
        """
        List live accounts, newest first.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page (max 100)
            branch_id: Optional branch scope

        Returns:
            ListResponse with the page of accounts and the total count
        """
        pagination = PaginationParams(page=page, page_size=page_size)
        accounts, total = await self.account_repo.get_page(
            offset=pagination.offset,
            limit=pagination.page_size,
            branch_id=branch_id,
        )
        return ListResponse.ok(
            [AccountResponse.model_validate(account) for account in accounts],
            message="Accounts retrieved successfully",
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    @envelope("Failed to retrieve account")
    async def get_account_by_id(self, account_id: uuid.UUID) -> ApiResponse[AccountResponse]:
        account = await self._get_or_raise(account_id)
        return ApiResponse.ok(
            AccountResponse.model_validate(account),
            message="Account retrieved successfully",
        )

    @envelope("Failed to retrieve account")
    async def get_account_by_number(self, account_number: str) -> ApiResponse[AccountResponse]:
        account = await self.account_repo.get_by_number(account_number)
        if account is None:
            raise NotFoundError("Account")
        return ApiResponse.ok(
            AccountResponse.model_validate(account),
            message="Account retrieved successfully",
        )

    @envelope("Failed to retrieve customer accounts", response_cls=ListResponse)
    async def get_accounts_by_customer(
        self, customer_id: uuid.UUID
    ) -> ListResponse[AccountResponse]:
        accounts = await self.account_repo.get_by_customer(customer_id)
        return ListResponse.ok(
            [AccountResponse.model_validate(account) for account in accounts],
            message="Customer accounts retrieved successfully",
        )

    @envelope("Failed to create account")
    async def create_account(
        self,
        request: AccountCreate,
        created_by: uuid.UUID | None = None,
    ) -> ApiResponse[AccountResponse]:
        """
        Open a new account for an existing customer.

        Args:
            request: Account creation data
            created_by: Staff user opening the account (for the audit log)

        Returns:
            ApiResponse with the created account

        Raises:
            NotFoundError: If the customer does not exist (as a failure envelope)

        Example:
            response = await service.create_account(
                AccountCreate(
                    customer_id=customer.id,
                    account_type=AccountType.SAVINGS,
                    initial_deposit=Decimal("250.00"),
                )
            )
        """
        # 1. Customer must exist
        customer = await self.customer_repo.get_by_id(request.customer_id)
        if customer is None:
            raise NotFoundError("Customer")

        # 2. Allocate a unique 7-digit number
        account_number = await self._unique_account_number()

        # 3. Create account
        opening_balance = to_money(request.initial_deposit)
        account = Account(
            account_number=account_number,
            customer_id=customer.id,
            branch_id=request.branch_id or customer.branch_id,
            account_type=request.account_type,
            status=AccountStatus.ACTIVE,
            nickname=request.nickname,
            balance=opening_balance,
            available_balance=opening_balance,
            minimum_balance=request.minimum_balance,
            interest_rate=request.interest_rate,
            credit_limit=request.credit_limit,
            currency=str(request.currency),
            opened_date=utc_now(),
        )
        account = await self.account_repo.add(account)

        # 4. Audit log
        await self.audit_service.log_event(
            user_id=created_by,
            action=AuditAction.CREATE,
            entity_type="account",
            entity_id=account.id,
            new_values=snapshot(account, ("account_number", "account_type", "balance")),
            description=f"Account {account_number} opened",
            branch_id=account.branch_id,
        )
        await self.session.commit()

        logger.info(f"Account {account_number} opened for customer {customer.id}")
        return ApiResponse.ok(
            AccountResponse.model_validate(account),
            message="Account created successfully",
        )

    @envelope("Failed to update account")
    async def update_account(
        self,
        account_id: uuid.UUID,
        request: AccountUpdate,
        updated_by: uuid.UUID | None = None,
    ) -> ApiResponse[AccountResponse]:
        """
        Partially update an account.

        Only the fields set on `request` change. Moving the account to
        CLOSED stamps closed_date.
        """
        account = await self._get_or_raise(account_id)
        changes = request.model_dump(exclude_unset=True)
        old_values = snapshot(account, [name for name in changes if name in _AUDITED_FIELDS])

        for field, value in changes.items():
            setattr(account, field, value)
        if changes.get("status") == AccountStatus.CLOSED and account.closed_date is None:
            account.closed_date = utc_now()

        account = await self.account_repo.update(account)

        await self.audit_service.log_event(
            user_id=updated_by,
            action=AuditAction.UPDATE,
            entity_type="account",
            entity_id=account.id,
            old_values=old_values,
            new_values=snapshot(account, list(old_values)),
            description=f"Account {account.account_number} updated",
            branch_id=account.branch_id,
        )
        await self.session.commit()

        return ApiResponse.ok(
            AccountResponse.model_validate(account),
            message="Account updated successfully",
        )

    @envelope("Failed to update account balance")
    async def update_balance(
        self,
        account_id: uuid.UUID,
        new_balance: Decimal,
        updated_by: uuid.UUID | None = None,
    ) -> ApiResponse[AccountResponse]:
        """Set balance and available balance, stamping last_transaction_date."""
        account = await self._get_or_raise(account_id)
        old_values = snapshot(account, ("balance", "available_balance"))

        new_balance = to_money(new_balance)
        account.balance = new_balance
        account.available_balance = new_balance
        account.last_transaction_date = utc_now()
        account = await self.account_repo.update(account)

        await self.audit_service.log_event(
            user_id=updated_by,
            action=AuditAction.UPDATE,
            entity_type="account",
            entity_id=account.id,
            old_values=old_values,
            new_values=snapshot(account, ("balance", "available_balance")),
            description=f"Balance of account {account.account_number} set",
            branch_id=account.branch_id,
        )
        await self.session.commit()

        return ApiResponse.ok(
            AccountResponse.model_validate(account),
            message="Account balance updated successfully",
        )

    @envelope("Failed to delete account")
    async def delete_account(
        self,
        account_id: uuid.UUID,
        deleted_by: uuid.UUID | None = None,
    ) -> ApiResponse[None]:
        """Close and soft-delete an account."""
        account = await self._get_or_raise(account_id)
        old_status = account.status

        account.status = AccountStatus.CLOSED
        account.closed_date = utc_now()
        await self.account_repo.soft_delete(account)

        await self.audit_service.log_event(
            user_id=deleted_by,
            action=AuditAction.DELETE,
            entity_type="account",
            entity_id=account.id,
            old_values={"status": old_status.value},
            new_values={"status": AccountStatus.CLOSED.value},
            description=f"Account {account.account_number} closed",
            branch_id=account.branch_id,
        )
        await self.session.commit()

        return ApiResponse.ok(message="Account deleted successfully")
