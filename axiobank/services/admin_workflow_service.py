"""
Admin workflow approval service.

Builds the approval queue from four kinds of pending work and routes
approve/reject decisions back to the underlying records:

    Prefix   Kind                        Record
    LOAN_    LOAN_APPLICATION            LoanApplication
    ACCT_    CUSTOMER_ACCOUNT_OPENING    ServiceRequest
    TXN_     LARGE_TRANSACTION           Transaction
    FRZA_    ACCOUNT_FREEZE_APPROVAL     AccountFreezeRequest
"""

import logging
import uuid
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.config import settings
from axiobank.core.formatting import ensure_utc, utc_now
from axiobank.core.handlers import envelope
from axiobank.exceptions import InvalidInputError, NotFoundError
from axiobank.models import AuditAction
from axiobank.models.enums import (
    AccountStatus,
    FreezeReason,
    FreezeRequestStatus,
    LoanStatus,
    ServiceRequestPriority,
    ServiceRequestStatus,
    TransactionStatus,
)
from axiobank.repositories.account_repository import AccountRepository
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.repositories.loan_repository import LoanApplicationRepository
from axiobank.repositories.transaction_repository import TransactionRepository
from axiobank.repositories.workflow_repository import (
    AccountFreezeRequestRepository,
    ServiceRequestRepository,
)
from axiobank.schemas.admin import WorkflowApproval
from axiobank.schemas.common import ApiResponse, ListResponse
from axiobank.services.audit_service import AuditService

logger = logging.getLogger(__name__)

LOAN_PREFIX = "LOAN_"
ACCOUNT_OPENING_PREFIX = "ACCT_"
TRANSACTION_PREFIX = "TXN_"
FREEZE_PREFIX = "FRZA_"

# (entity_type, old_status, new_status) reported by each decision handler
StatusChange = tuple[str, str, str]

PRIORITY_RANKS = {"CRITICAL": 4, "HIGH": 3, "NORMAL": 2, "LOW": 1}

LARGE_TRANSACTION_LOOKBACK = timedelta(days=30)


def loan_priority(amount: Decimal) -> str:
    if amount > 100_000:
        return "HIGH"
    if amount > 50_000:
        return "NORMAL"
    return "LOW"


def transaction_priority(amount: Decimal) -> str:
    if amount > 250_000:
        return "CRITICAL"
    if amount > 100_000:
        return "HIGH"
    return "NORMAL"


def request_priority(priority: ServiceRequestPriority) -> str:
    if priority in (ServiceRequestPriority.URGENT, ServiceRequestPriority.HIGH):
        return "HIGH"
    if priority == ServiceRequestPriority.MEDIUM:
        return "NORMAL"
    return "LOW"


def freeze_priority(reason: FreezeReason) -> str:
    if reason == FreezeReason.FRAUD:
        return "CRITICAL"
    if reason in (FreezeReason.SUSPICIOUS_ACTIVITY, FreezeReason.LEGAL):
        return "HIGH"
    return "NORMAL"


def sort_approvals(approvals: list[WorkflowApproval]) -> list[WorkflowApproval]:
    """Highest priority first, then most recent first."""
    return sorted(
        approvals,
        key=lambda item: (PRIORITY_RANKS.get(item.priority, 1), item.created_at),
        reverse=True,
    )


def _name(first_name: str | None, last_name: str | None, default: str = "Unknown") -> str:
    return f"{first_name} {last_name}" if first_name else default


class AdminWorkflowService:
    """Service behind the admin approval queue."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.application_repo = LoanApplicationRepository(session)
        self.request_repo = ServiceRequestRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.freeze_repo = AccountFreezeRequestRepository(session)
        self.account_repo = AccountRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.audit_service = AuditService(session)

    async def _loan_approvals(self) -> list[WorkflowApproval]:
        approvals = []
        for application, first_name, last_name in await self.application_repo.get_pending_with_customer():
            created_at = ensure_utc(application.application_date)
            approvals.append(
                WorkflowApproval(
                    id=f"{LOAN_PREFIX}{application.id}",
                    workflow_type="LOAN_APPLICATION",
                    entity_id=str(application.id),
                    requester_id=str(application.customer_id),
                    requester_name=_name(first_name, last_name),
                    description=(
                        f"{application.loan_type.value.replace('_', ' ').title()} loan application "
                        f"{application.application_number}"
                    ),
                    amount=application.requested_amount,
                    status="PENDING" if application.status == LoanStatus.APPLIED else "IN_PROGRESS",
                    priority=loan_priority(application.requested_amount),
                    created_at=created_at,
                    deadline=created_at + timedelta(days=7),
                )
            )
        return approvals

    async def _account_opening_approvals(self) -> list[WorkflowApproval]:
        approvals = []
        for request, first_name, last_name in await self.request_repo.get_pending_account_openings():
            created_at = ensure_utc(request.created_at)
            approvals.append(
                WorkflowApproval(
                    id=f"{ACCOUNT_OPENING_PREFIX}{request.id}",
                    workflow_type="CUSTOMER_ACCOUNT_OPENING",
                    entity_id=str(request.id),
                    requester_id=str(request.customer_id),
                    requester_name=_name(first_name, last_name),
                    description=request.description or f"Account opening request {request.request_number}",
                    status="PENDING",
                    priority=request_priority(request.priority),
                    created_at=created_at,
                    deadline=created_at + timedelta(days=3),
                )
            )
        return approvals

    async def _large_transaction_approvals(self) -> list[WorkflowApproval]:
        transactions = await self.transaction_repo.get_pending_above(
            settings.large_transaction_threshold,
            since=utc_now() - LARGE_TRANSACTION_LOOKBACK,
        )
        approvals = []
        for transaction in transactions:
            account = await self.account_repo.get_by_id(transaction.account_id)
            customer = (
                await self.customer_repo.get_by_id(account.customer_id) if account else None
            )
            created_at = ensure_utc(transaction.transaction_date)
            approvals.append(
                WorkflowApproval(
                    id=f"{TRANSACTION_PREFIX}{transaction.id}",
                    workflow_type="LARGE_TRANSACTION",
                    entity_id=str(transaction.id),
                    requester_id=str(customer.id) if customer else None,
                    requester_name=customer.full_name if customer else "Unknown",
                    description=(
                        f"Large {transaction.transaction_type.value.lower()} "
                        f"{transaction.transaction_id} awaiting approval"
                    ),
                    amount=transaction.amount,
                    status="PENDING",
                    priority=transaction_priority(transaction.amount),
                    created_at=created_at,
                    deadline=created_at + timedelta(hours=4),
                )
            )
        return approvals

    async def _freeze_approvals(self) -> list[WorkflowApproval]:
        approvals = []
        rows = await self.freeze_repo.get_pending_with_requester()
        for request, first_name, last_name, account_number in rows:
            created_at = ensure_utc(request.created_at)
            approvals.append(
                WorkflowApproval(
                    id=f"{FREEZE_PREFIX}{request.id}",
                    workflow_type="ACCOUNT_FREEZE_APPROVAL",
                    entity_id=str(request.account_id),
                    requester_id=str(request.requested_by) if request.requested_by else None,
                    requester_name=_name(first_name, last_name, default="System"),
                    description=(
                        f"Freeze account {account_number}: "
                        f"{request.reason.value.replace('_', ' ').lower()}"
                    ),
                    status="PENDING",
                    priority=freeze_priority(request.reason),
                    created_at=created_at,
                    deadline=created_at + timedelta(hours=24),
                )
            )
        return approvals

    async def _all_approvals(self) -> list[WorkflowApproval]:
        approvals = (
            await self._loan_approvals()
            + await self._account_opening_approvals()
            + await self._large_transaction_approvals()
            + await self._freeze_approvals()
        )
        return sort_approvals(approvals)

    @envelope("Error retrieving workflow approvals", response_cls=ListResponse)
    async def get_workflow_approvals(self) -> ListResponse[WorkflowApproval]:
        approvals = await self._all_approvals()
        return ListResponse.ok(approvals, message="Workflow approvals retrieved successfully")

    @envelope("Error retrieving workflow approvals", response_cls=ListResponse)
    async def get_workflow_approvals_by_status(self, status: str) -> ListResponse[WorkflowApproval]:
        wanted = status.strip().upper()
        approvals = [item for item in await self._all_approvals() if item.status == wanted]
        return ListResponse.ok(
            approvals,
            message=f"Workflow approvals with status {wanted} retrieved successfully",
        )

    @envelope("Error processing workflow approval")
    async def process_workflow_approval(
        self,
        approval_id: str,
        action: str,
        comments: str | None = None,
        processed_by: uuid.UUID | None = None,
    ) -> ApiResponse[str]:
        """
        Apply an approval decision to the record behind a queue item.

        Args:
            approval_id: Queue id (LOAN_, ACCT_, TXN_ or FRZA_ + UUID)
            action: APPROVE, REJECT, or anything else to send it back for review
            comments: Decision comments (the rejection reason for account openings)
            processed_by: Staff user making the decision

        Returns:
            ApiResponse whose data is the record's new status

        Raises:
            InvalidInputError: For an unknown id prefix ("Unknown workflow type")
            NotFoundError: If the underlying record does not exist
        """
        handlers = {
            LOAN_PREFIX: self._decide_loan,
            ACCOUNT_OPENING_PREFIX: self._decide_account_opening,
            TRANSACTION_PREFIX: self._decide_transaction,
            FREEZE_PREFIX: self._decide_freeze,
        }
        prefix = next((p for p in handlers if approval_id.startswith(p)), None)
        if prefix is None:
            raise InvalidInputError("approval_id", "Unknown workflow type")

        try:
            record_id = uuid.UUID(approval_id.removeprefix(prefix))
        except ValueError:
            raise NotFoundError("Workflow item") from None

        decision = action.strip().upper()
        entity_type, old_status, new_status = await handlers[prefix](
            record_id, decision, comments, processed_by
        )

        await self.audit_service.log_event(
            user_id=processed_by,
            action=(
                AuditAction.APPROVE
                if decision == "APPROVE"
                else AuditAction.REJECT if decision == "REJECT" else AuditAction.REVIEW
            ),
            entity_type=entity_type,
            entity_id=record_id,
            old_values={"status": old_status},
            new_values={"status": new_status, "comments": comments},
            description=f"Workflow {approval_id} processed: {decision}",
        )
        await self.session.commit()

        logger.info(f"Workflow {approval_id} processed: {decision} -> {new_status}")
        return ApiResponse.ok(new_status, message="Workflow approval processed successfully")

    async def _decide_loan(
        self,
        record_id: uuid.UUID,
        decision: str,
        comments: str | None,
        processed_by: uuid.UUID | None,
    ) -> StatusChange:
        application = await self.application_repo.get_by_id(record_id)
        if application is None:
            raise NotFoundError("Loan application")

        old_status = application.status
        if decision == "APPROVE":
            application.status = LoanStatus.APPROVED
            application.reviewed_date = utc_now()
        elif decision == "REJECT":
            application.status = LoanStatus.REJECTED
            application.reviewed_date = utc_now()
        else:
            application.status = LoanStatus.UNDER_REVIEW
        application.reviewed_by = processed_by
        if comments:
            application.notes = comments
        await self.application_repo.update(application)
        return "loan_application", old_status.value, application.status.value

    async def _decide_account_opening(
        self,
        record_id: uuid.UUID,
        decision: str,
        comments: str | None,
        processed_by: uuid.UUID | None,
    ) -> StatusChange:
        request = await self.request_repo.get_by_id(record_id)
        if request is None:
            raise NotFoundError("Service request")

        old_status = request.status
        if decision == "APPROVE":
            request.status = ServiceRequestStatus.COMPLETED
            request.completed_at = utc_now()
        elif decision == "REJECT":
            request.status = ServiceRequestStatus.REJECTED
            request.rejection_reason = comments
        else:
            request.status = ServiceRequestStatus.IN_PROGRESS
        request.assigned_to = processed_by
        await self.request_repo.update(request)
        return "service_request", old_status.value, request.status.value

    async def _decide_transaction(
        self,
        record_id: uuid.UUID,
        decision: str,
        comments: str | None,
        processed_by: uuid.UUID | None,
    ) -> StatusChange:
        transaction = await self.transaction_repo.get_by_id(record_id)
        if transaction is None:
            raise NotFoundError("Transaction")

        old_status = transaction.status
        if decision == "APPROVE":
            transaction.status = TransactionStatus.COMPLETED
        elif decision == "REJECT":
            transaction.status = TransactionStatus.FAILED
        else:
            transaction.status = TransactionStatus.PENDING
        await self.transaction_repo.update(transaction)
        return "transaction", old_status.value, transaction.status.value

    async def _decide_freeze(
        self,
        record_id: uuid.UUID,
        decision: str,
        comments: str | None,
        processed_by: uuid.UUID | None,
    ) -> StatusChange:
        request = await self.freeze_repo.get_by_id(record_id)
        if request is None:
            raise NotFoundError("Account freeze request")

        old_status = request.status
        if decision == "APPROVE":
            request.status = FreezeRequestStatus.APPROVED
            account = await self.account_repo.get_by_id(request.account_id)
            if account is not None:
                account.status = AccountStatus.FROZEN
        elif decision == "REJECT":
            request.status = FreezeRequestStatus.REJECTED
        else:
            request.status = FreezeRequestStatus.PENDING
        request.reviewed_by = processed_by
        request.reviewed_at = utc_now()
        await self.freeze_repo.update(request)
        return "account_freeze_request", old_status.value, request.status.value
