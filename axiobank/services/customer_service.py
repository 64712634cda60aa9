"""
Customer service for business logic and validation.

This module provides the CustomerService class for registering,
searching, updating and closing customers. SSN and tax id are encrypted
before they reach the database and never come back out through DTOs.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.handlers import envelope
from axiobank.core.identifiers import generate_customer_number
from axiobank.core.security import digits_only
from axiobank.exceptions import AlreadyExistsError, InvalidInputError, NotFoundError
from axiobank.models import AuditAction, Customer
from axiobank.models.enums import CustomerStatus
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.schemas.common import ApiResponse, ListResponse, PaginationParams
from axiobank.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from axiobank.services.audit_service import AuditService, snapshot
from axiobank.services.encryption_service import EncryptionService

logger = logging.getLogger(__name__)

# Values that go through the cipher instead of straight onto the model
_ENCRYPTED_FIELDS = {"ssn": "ssn_encrypted", "tax_id": "tax_id_encrypted"}

# Fields never written into audit snapshots
_UNAUDITED_FIELDS = {"ssn", "tax_id", "annual_income", "business_license_number"}


class CustomerService:
    """
    Service for customer business logic.

    Responsibilities:
    - Unique customer numbers and unique live emails
    - Encryption of SSN and tax id
    - Audit logging of every change
    """

    def __init__(self, session: AsyncSession, encryption_service: EncryptionService | None = None):
        """
        Initialize customer service.

        Args:
            session: Async database session for operations
            encryption_service: Cipher for sensitive identifiers (default: from settings)
        """
        self.session = session
        self.customer_repo = CustomerRepository(session)
        self.audit_service = AuditService(session)
        self.encryption_service = encryption_service or EncryptionService()

    async def _get_or_raise(self, customer_id: uuid.UUID) -> Customer:
        customer = await self.customer_repo.get_by_id(customer_id)
        if customer is None:
            raise NotFoundError("Customer")
        return customer

    async def _unique_customer_number(self) -> str:
        while True:
            customer_number = generate_customer_number()
            if not await self.customer_repo.number_exists(customer_number):
                return customer_number

    @envelope("Failed to retrieve customers", response_cls=ListResponse)
    async def get_all_customers(
        self,
        page: int = 1,
        page_size: int = 20,
        branch_id: uuid.UUID | None = None,
    ) -> ListResponse[CustomerResponse]:
        pagination = PaginationParams(page=page, page_size=page_size)
        customers, total = await self.customer_repo.get_page(
            offset=pagination.offset,
            limit=pagination.page_size,
            branch_id=branch_id,
        )
        return ListResponse.ok(
            [CustomerResponse.model_validate(customer) for customer in customers],
            message="Customers retrieved successfully",
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    @envelope("Failed to search customers", response_cls=ListResponse)
    async def search_customers(
        self,
        query: str,
        page: int = 1,
        page_size: int = 20,
    ) -> ListResponse[CustomerResponse]:
        """
        Search live customers.

        Matches name, email and customer number case-insensitively. When
        the query contains digits, phone numbers are matched on digits only,
        so "(555) 123" finds "+1-555-123-4567".

        Args:
            query: Search text (must not be blank)
            page: Page number (1-indexed)
            page_size: Items per page

        Returns:
            ListResponse of matches with the total match count
        """
        term = (query or "").strip()
        if not term:
            raise InvalidInputError("query", "Search query must not be empty")

        pagination = PaginationParams(page=page, page_size=page_size)
        digits = digits_only(term)
        customers = await self.customer_repo.search(
            term, digits, offset=pagination.offset, limit=pagination.page_size
        )
        total = await self.customer_repo.count_search(term, digits)
        return ListResponse.ok(
            [CustomerResponse.model_validate(customer) for customer in customers],
            message=f"Found {total} customers matching '{term}'",
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    @envelope("Failed to retrieve customer")
    async def get_customer_by_id(self, customer_id: uuid.UUID) -> ApiResponse[CustomerResponse]:
        customer = await self._get_or_raise(customer_id)
        return ApiResponse.ok(
            CustomerResponse.model_validate(customer),
            message="Customer retrieved successfully",
        )

    @envelope("Failed to retrieve customer")
    async def get_customer_by_number(self, customer_number: str) -> ApiResponse[CustomerResponse]:
        customer = await self.customer_repo.get_by_number(customer_number)
        if customer is None:
            raise NotFoundError("Customer")
        return ApiResponse.ok(
            CustomerResponse.model_validate(customer),
            message="Customer retrieved successfully",
        )

    @envelope("Failed to create customer")
    async def create_customer(
        self,
        request: CustomerCreate,
        created_by: uuid.UUID | None = None,
    ) -> ApiResponse[CustomerResponse]:
        """
        Register a new customer.

        Args:
            request: Customer registration data
            created_by: Staff user registering the customer

        Returns:
            ApiResponse with the created customer (no sensitive fields)

        Raises:
            AlreadyExistsError: If a live customer already uses the email
        """
        # 1. Email must be unique among live customers
        if request.email and await self.customer_repo.get_by_email(request.email):
            raise AlreadyExistsError(
                "Customer", message="A customer with this email already exists"
            )

        # 2. Build the customer with encrypted identifiers
        values = request.model_dump(exclude=set(_ENCRYPTED_FIELDS))
        for field, column in _ENCRYPTED_FIELDS.items():
            values[column] = self.encryption_service.encrypt(getattr(request, field))
        values["country"] = str(request.country)

        customer = Customer(
            customer_number=await self._unique_customer_number(),
            status=CustomerStatus.ACTIVE,
            **values,
        )
        customer = await self.customer_repo.add(customer)

        # 3. Audit log
        await self.audit_service.log_event(
            user_id=created_by,
            action=AuditAction.CREATE,
            entity_type="customer",
            entity_id=customer.id,
            new_values=snapshot(customer, ("customer_number", "customer_type", "email")),
            description=f"Customer {customer.customer_number} registered",
            branch_id=customer.branch_id,
        )
        await self.session.commit()

        logger.info(f"Customer {customer.customer_number} registered")
        return ApiResponse.ok(
            CustomerResponse.model_validate(customer),
            message="Customer created successfully",
        )

    @envelope("Failed to update customer")
    async def update_customer(
        self,
        customer_id: uuid.UUID,
        request: CustomerUpdate,
        updated_by: uuid.UUID | None = None,
    ) -> ApiResponse[CustomerResponse]:
        """Partially update a customer; SSN and tax id are re-encrypted when given."""
        customer = await self._get_or_raise(customer_id)
        changes = request.model_dump(exclude_unset=True)

        # 1. Email must stay unique (ignoring this customer)
        new_email = changes.get("email")
        if new_email and await self.customer_repo.get_by_email(new_email, exclude_id=customer.id):
            raise AlreadyExistsError(
                "Customer", message="A customer with this email already exists"
            )

        # 2. Apply changes
        audited = [name for name in changes if name not in _UNAUDITED_FIELDS]
        old_values = snapshot(customer, audited)
        for field, value in changes.items():
            if field in _ENCRYPTED_FIELDS:
                setattr(customer, _ENCRYPTED_FIELDS[field], self.encryption_service.encrypt(value))
            elif field == "country" and value is not None:
                customer.country = str(value)
            else:
                setattr(customer, field, value)
        customer = await self.customer_repo.update(customer)

        # 3. Audit log
        await self.audit_service.log_event(
            user_id=updated_by,
            action=AuditAction.UPDATE,
            entity_type="customer",
            entity_id=customer.id,
            old_values=old_values,
            new_values=snapshot(customer, audited),
            description=f"Customer {customer.customer_number} updated",
            branch_id=customer.branch_id,
        )
        await self.session.commit()

        return ApiResponse.ok(
            CustomerResponse.model_validate(customer),
            message="Customer updated successfully",
        )

    @envelope("Failed to delete customer")
    async def delete_customer(
        self,
        customer_id: uuid.UUID,
        deleted_by: uuid.UUID | None = None,
    ) -> ApiResponse[None]:
        customer = await self._get_or_raise(customer_id)
        old_status = customer.status

        customer.status = CustomerStatus.CLOSED
        await self.customer_repo.soft_delete(customer)

        await self.audit_service.log_event(
            user_id=deleted_by,
            action=AuditAction.DELETE,
            entity_type="customer",
            entity_id=customer.id,
            old_values={"status": old_status.value},
            new_values={"status": CustomerStatus.CLOSED.value},
            description=f"Customer {customer.customer_number} closed",
            branch_id=customer.branch_id,
        )
        await self.session.commit()

        return ApiResponse.ok(message="Customer deleted successfully")
