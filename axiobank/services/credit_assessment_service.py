"""
Credit assessment service.

Records credit assessments, computes the debt-to-income ratio and keeps
each customer's credit score in step with their latest assessment.
"""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from axiobank.core.formatting import utc_now
from axiobank.core.handlers import envelope
from axiobank.exceptions import NotFoundError
from axiobank.models import AuditAction, CreditAssessment
from axiobank.repositories.credit_assessment_repository import CreditAssessmentRepository
from axiobank.repositories.customer_repository import CustomerRepository
from axiobank.schemas.common import ApiResponse, ListResponse, PaginationParams
from axiobank.schemas.credit_assessment import (
    CreditAssessmentCreate,
    CreditAssessmentResponse,
    CreditScoreSyncResult,
)
from axiobank.services.audit_service import AuditService

logger = logging.getLogger(__name__)

_RATIO_PLACES = Decimal("0.0001")


def debt_to_income_ratio(existing_debt: Decimal, annual_income: Decimal) -> Decimal:
    """
    Debt divided by income, rounded half-up to 4 places.

    Example:
        >>> debt_to_income_ratio(Decimal("15000"), Decimal("60000"))
        Decimal('0.2500')
        >>> debt_to_income_ratio(Decimal("500"), Decimal("0"))
        Decimal('0.0000')
    """
    if not annual_income:
        return Decimal("0.0000")
    ratio = Decimal(existing_debt) / Decimal(annual_income)
    return ratio.quantize(_RATIO_PLACES, rounding=ROUND_HALF_UP)


class CreditAssessmentService:
    """Service for credit assessment business logic."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.assessment_repo = CreditAssessmentRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.audit_service = AuditService(session)

    @envelope("Failed to retrieve credit assessments", response_cls=ListResponse)
    async def get_all_assessments(
        self,
        page: int = 1,
        page_size: int = 20,
    ) -> ListResponse[CreditAssessmentResponse]:
        pagination = PaginationParams(page=page, page_size=page_size)
        rows = await self.assessment_repo.list_with_customer(
            offset=pagination.offset, limit=pagination.page_size
        )
        total = await self.assessment_repo.count_all()
        return ListResponse.ok(
            [CreditAssessmentResponse.from_row(row) for row in rows],
            message="Credit assessments retrieved successfully",
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    @envelope("Failed to retrieve credit assessment")
    async def get_assessment_by_id(
        self, assessment_id: uuid.UUID
    ) -> ApiResponse[CreditAssessmentResponse]:
        row = await self.assessment_repo.get_with_customer(assessment_id)
        if row is None:
            raise NotFoundError("Credit assessment")
        return ApiResponse.ok(
            CreditAssessmentResponse.from_row(row),
            message="Credit assessment retrieved successfully",
        )

    @envelope("Failed to retrieve customer credit assessments", response_cls=ListResponse)
    async def get_assessments_by_customer(
        self, customer_id: uuid.UUID
    ) -> ListResponse[CreditAssessmentResponse]:
        rows = await self.assessment_repo.list_for_customer(customer_id)
        return ListResponse.ok(
            [CreditAssessmentResponse.from_row(row) for row in rows],
            message="Customer credit assessments retrieved successfully",
        )

    @envelope("Failed to create credit assessment")
    async def create_assessment(
        self, request: CreditAssessmentCreate
    ) -> ApiResponse[CreditAssessmentResponse]:
        """
        Record an assessment and copy its score onto the customer.

        Args:
            request: Assessment data

        Returns:
            ApiResponse with the stored assessment

        Raises:
            NotFoundError: If the customer does not exist
        """
        # 1. Customer must exist
        customer = await self.customer_repo.get_by_id(request.customer_id)
        if customer is None:
            raise NotFoundError("Customer")

        # 2. Store assessment
        assessment = CreditAssessment(
            customer_id=customer.id,
            credit_score=request.credit_score,
            annual_income=request.annual_income,
            existing_debt=request.existing_debt,
            debt_to_income_ratio=debt_to_income_ratio(
                request.existing_debt, request.annual_income
            ),
            payment_history=request.payment_history,
            risk_level=request.risk_level,
            recommended_credit_limit=request.recommended_credit_limit,
            assessed_by=request.assessed_by,
            assessment_date=utc_now(),
            comments=request.comments,
        )
        assessment = await self.assessment_repo.add(assessment)

        # 3. Keep the customer's score current
        old_score = customer.credit_score
        customer.credit_score = request.credit_score
        await self.customer_repo.update(customer)

        await self.audit_service.log_event(
            user_id=request.assessed_by,
            action=AuditAction.CREATE,
            entity_type="credit_assessment",
            entity_id=assessment.id,
            old_values={"credit_score": old_score},
            new_values={
                "credit_score": request.credit_score,
                "risk_level": request.risk_level.value,
            },
            description=f"Credit assessment recorded for customer {customer.customer_number}",
            branch_id=customer.branch_id,
        )
        await self.session.commit()

        response = CreditAssessmentResponse.model_validate(assessment)
        response.customer_name = customer.full_name
        return ApiResponse.ok(response, message="Credit assessment created successfully")

    @envelope("Failed to sync credit scores")
    async def sync_credit_scores_to_customers(self) -> ApiResponse[CreditScoreSyncResult]:
        """
        Copy every assessed customer's latest score onto the customer.

        Returns:
            ApiResponse with the number of customers synced and one
            "First Last: score" line per customer
        """
        updates: list[str] = []
        for customer_id in await self.assessment_repo.get_assessed_customer_ids():
            customer = await self.customer_repo.get_by_id(customer_id)
            latest = await self.assessment_repo.get_latest_for_customer(customer_id)
            if customer is None or latest is None:
                continue
            customer.credit_score = latest.credit_score
            updates.append(f"{customer.full_name}: {latest.credit_score}")

        await self.session.flush()
        await self.session.commit()

        logger.info(f"Synced credit scores for {len(updates)} customers")
        return ApiResponse.ok(
            CreditScoreSyncResult(updated_count=len(updates), updates=updates),
            message=f"Successfully synced credit scores for {len(updates)} customers",
        )
