"""
Unit tests for AdminWorkflowService.

Tests:
- Priority helpers
- Approval queue assembled from loans, account openings, large
  transactions and freeze requests
- Decisions routed back to the underlying records
"""

import typing
import uuid
from decimal import Decimal

import pytest

from axiobank.models import AccountFreezeRequest, LoanApplication, ServiceRequest
from axiobank.models.enums import (
    AccountStatus,
    FreezeReason,
    FreezeRequestStatus,
    LoanStatus,
    LoanType,
    ServiceRequestPriority,
    ServiceRequestStatus,
    ServiceRequestType,
    TransactionStatus,
    TransactionType,
)
from axiobank.services.admin_workflow_service import (
    AdminWorkflowService,
    StatusChange,
    freeze_priority,
    loan_priority,
    request_priority,
    transaction_priority,
)


@pytest.fixture
def pending_work(db_session, test_customer, test_account, admin_user, make_transaction):
    """Create one pending item of each workflow kind."""

    async def _create(loan_status=LoanStatus.APPLIED):
        application = LoanApplication(
            application_number="LA-0001",
            customer_id=test_customer.id,
            loan_type=LoanType.AUTO_LOAN,
            requested_amount=Decimal("60000.00"),
            status=loan_status,
        )
        request = ServiceRequest(
            request_number="SR-0001",
            customer_id=test_customer.id,
            request_type=ServiceRequestType.ACCOUNT_OPENING,
            priority=ServiceRequestPriority.LOW,
        )
        freeze = AccountFreezeRequest(
            account_id=test_account.id,
            requested_by=admin_user.id,
            reason=FreezeReason.FRAUD,
        )
        db_session.add_all([application, request, freeze])
        await db_session.commit()
        transaction = await make_transaction(
            test_account,
            TransactionType.WIRE_TRANSFER,
            "150000.00",
            status=TransactionStatus.PENDING,
        )
        return application, request, transaction, freeze

    return _create


class TestPriorities:
    def test_loan_priority(self):
        assert loan_priority(Decimal("150000")) == "HIGH"
        assert loan_priority(Decimal("60000")) == "NORMAL"
        assert loan_priority(Decimal("50000")) == "LOW"

    def test_transaction_priority(self):
        assert transaction_priority(Decimal("300000")) == "CRITICAL"
        assert transaction_priority(Decimal("150000")) == "HIGH"
        assert transaction_priority(Decimal("60000")) == "NORMAL"

    def test_request_priority(self):
        assert request_priority(ServiceRequestPriority.URGENT) == "HIGH"
        assert request_priority(ServiceRequestPriority.MEDIUM) == "NORMAL"
        assert request_priority(ServiceRequestPriority.LOW) == "LOW"

    def test_freeze_priority(self):
        assert freeze_priority(FreezeReason.FRAUD) == "CRITICAL"
        assert freeze_priority(FreezeReason.LEGAL) == "HIGH"
        assert freeze_priority(FreezeReason.CUSTOMER_REQUEST) == "NORMAL"


class TestDecisionHandlers:
    @pytest.mark.parametrize(
        "handler",
        ["_decide_loan", "_decide_account_opening", "_decide_transaction", "_decide_freeze"],
    )
    def test_handlers_share_one_signature(self, handler):
        hints = typing.get_type_hints(getattr(AdminWorkflowService, handler))

        assert hints["record_id"] is uuid.UUID
        assert hints["decision"] is str
        assert hints["comments"] == str | None
        assert hints["processed_by"] == uuid.UUID | None
        assert hints["return"] == StatusChange


@pytest.mark.asyncio
class TestAdminWorkflowService:
    """Test suite for AdminWorkflowService."""

    async def test_queue_is_sorted_by_priority(self, db_session, pending_work):
        application, request, transaction, freeze = await pending_work()

        response = await AdminWorkflowService(db_session).get_workflow_approvals()

        assert response.success is True
        assert [item.id for item in response.data] == [
            f"FRZA_{freeze.id}",
            f"TXN_{transaction.id}",
            f"LOAN_{application.id}",
            f"ACCT_{request.id}",
        ]
        freeze_item, transaction_item, loan_item, request_item = response.data
        assert freeze_item.requester_name == "Avery Admin"
        assert freeze_item.description == "Freeze account 7654321: fraud"
        assert transaction_item.requester_name == "Jordan Blake"
        assert transaction_item.amount == Decimal("150000.00")
        assert loan_item.description == "Auto Loan loan application LA-0001"
        assert loan_item.status == "PENDING"
        assert request_item.description == "Account opening request SR-0001"

    async def test_queue_by_status(self, db_session, pending_work):
        application, *_ = await pending_work(loan_status=LoanStatus.UNDER_REVIEW)
        service = AdminWorkflowService(db_session)

        in_progress = await service.get_workflow_approvals_by_status("in_progress")

        assert [item.id for item in in_progress.data] == [f"LOAN_{application.id}"]
        assert in_progress.message == (
            "Workflow approvals with status IN_PROGRESS retrieved successfully"
        )

    async def test_approve_loan(self, db_session, admin_user, pending_work):
        application, *_ = await pending_work()

        response = await AdminWorkflowService(db_session).process_workflow_approval(
            f"LOAN_{application.id}", "approve", processed_by=admin_user.id
        )

        assert response.success is True
        assert response.data == "APPROVED"
        assert application.status == LoanStatus.APPROVED
        assert application.reviewed_by == admin_user.id
        assert application.reviewed_date is not None

    async def test_reject_account_opening_records_reason(self, db_session, pending_work):
        _, request, _, _ = await pending_work()

        response = await AdminWorkflowService(db_session).process_workflow_approval(
            f"ACCT_{request.id}", "REJECT", comments="Missing documents"
        )

        assert response.data == "REJECTED"
        assert request.status == ServiceRequestStatus.REJECTED
        assert request.rejection_reason == "Missing documents"

    async def test_transaction_sent_back_stays_pending(self, db_session, pending_work):
        _, _, transaction, _ = await pending_work()

        response = await AdminWorkflowService(db_session).process_workflow_approval(
            f"TXN_{transaction.id}", "HOLD"
        )

        assert response.data == "PENDING"
        assert transaction.status == TransactionStatus.PENDING

    async def test_approved_freeze_freezes_account(
        self, db_session, test_account, pending_work
    ):
        _, _, _, freeze = await pending_work()

        response = await AdminWorkflowService(db_session).process_workflow_approval(
            f"FRZA_{freeze.id}", "APPROVE"
        )

        assert response.data == "APPROVED"
        assert freeze.status == FreezeRequestStatus.APPROVED
        assert test_account.status == AccountStatus.FROZEN

    async def test_processed_items_leave_the_queue(self, db_session, pending_work):
        application, *_ = await pending_work()
        service = AdminWorkflowService(db_session)

        await service.process_workflow_approval(f"LOAN_{application.id}", "REJECT")
        queue = await service.get_workflow_approvals()

        assert f"LOAN_{application.id}" not in {item.id for item in queue.data}

    async def test_unknown_workflow_type(self, db_session):
        response = await AdminWorkflowService(db_session).process_workflow_approval(
            f"CARD_{uuid.uuid4()}", "APPROVE"
        )

        assert response.success is False
        assert response.message == "Unknown workflow type"
        assert response.error == "INVALID_INPUT"

    async def test_missing_records(self, db_session):
        service = AdminWorkflowService(db_session)

        malformed = await service.process_workflow_approval("LOAN_not-a-uuid", "APPROVE")
        missing = await service.process_workflow_approval(f"LOAN_{uuid.uuid4()}", "APPROVE")

        assert malformed.message == "Workflow item not found"
        assert missing.message == "Loan application not found"
