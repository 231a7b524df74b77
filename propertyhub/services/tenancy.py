"""Tenancy service — agreements, rent schedules and rent payments.

Rule: No FastAPI here. Pure Python business logic.
"""

import calendar
import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.exceptions import ConflictError, NotFoundError, ValidationError
from propertyhub.core.pagination import PaginationParams
from propertyhub.domain.tenancy import RentPayment, TenancyAgreement
from propertyhub.repositories.property import PropertyRepository
from propertyhub.repositories.tenancy import RentPaymentRepository, TenancyRepository
from propertyhub.schemas.tenancy import (
    RecordPaymentRequest,
    RentPaymentCreate,
    RentPaymentUpdate,
    TenancyCreate,
    TenancyFinancialSummary,
    TenancyUpdate,
)

logger = logging.getLogger(__name__)

_CLOSED_PAYMENT_STATUSES = ("paid", "cancelled", "refunded")


def _add_months(anchor: date, months: int, day: int) -> date:
    month_index = anchor.month - 1 + months
    year, month = anchor.year + month_index // 12, month_index % 12 + 1
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def rent_schedule(start: date, end: date, due_day: int) -> list[date]:
    """Monthly due dates from the start month while the anchor stays within the term."""
    due_dates: list[date] = []
    months = 0
    anchor = start
    while anchor <= end:
        due_dates.append(_add_months(start, months, due_day))
        months += 1
        anchor = _add_months(start, months, start.day)
    return due_dates


class TenancyService:
    def __init__(self, session: AsyncSession):
        self._repo = TenancyRepository(session)
        self._payments = RentPaymentRepository(session)
        self._properties = PropertyRepository(session)

    # ------------------------------------------------------------------
    # Agreements
    # ------------------------------------------------------------------

    async def list_tenancies(
        self,
        pagination: PaginationParams,
        *,
        property_id: str | None = None,
        tenant_id: str | None = None,
        landlord_id: str | None = None,
        status: str | None = None,
    ):
        return await self._repo.list(
            **pagination.window(),
            filters={
                "property_id": property_id,
                "tenant_id": tenant_id,
                "landlord_id": landlord_id,
                "status": status,
            },
        )

    async def get_tenancy(self, tenancy_id: str) -> TenancyAgreement:
        tenancy = await self._repo.get_by_id(tenancy_id)
        if not tenancy:
            raise NotFoundError("Tenancy", tenancy_id)
        return tenancy

    async def create_tenancy(self, data: TenancyCreate) -> TenancyAgreement:
        if data.end_date <= data.start_date:
            raise ValidationError("End date must be after start date")
        if not await self._properties.get_by_id(data.property_id):
            raise NotFoundError("Property", data.property_id)
        tenancy = await self._repo.create(**data.model_dump(exclude_none=True))
        logger.info("Tenancy %s created for property %s", tenancy.id, tenancy.property_id)
        return tenancy

    async def update_tenancy(self, tenancy_id: str, data: TenancyUpdate) -> TenancyAgreement:
        tenancy = await self.get_tenancy(tenancy_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        start = changes.get("start_date", tenancy.start_date)
        end = changes.get("end_date", tenancy.end_date)
        if end <= start:
            raise ValidationError("End date must be after start date")
        return await self._repo.apply(tenancy, **changes)

    async def delete_tenancy(self, tenancy_id: str) -> None:
        deleted = await self._repo.soft_delete(tenancy_id)
        if not deleted:
            raise NotFoundError("Tenancy", tenancy_id)

    async def active_tenancies(self) -> list[TenancyAgreement]:
        return await self._repo.active_on(date.today())

    async def financial_summary(self, tenancy_id: str) -> TenancyFinancialSummary:
        tenancy = await self.get_tenancy(tenancy_id)
        payments = await self._payments.for_tenancy(tenancy_id)
        total_due = sum((Decimal(p.amount) for p in payments), Decimal("0"))
        total_paid = sum((Decimal(p.amount_paid) for p in payments), Decimal("0"))
        today = date.today()
        overdue = sum(
            1
            for p in payments
            if p.due_date <= today and p.status in ("pending", "partially_paid")
        )
        return TenancyFinancialSummary(
            tenancy_id=tenancy.id,
            rent_amount=tenancy.rent_amount,
            total_rent_due=total_due,
            total_rent_paid=total_paid,
            outstanding_rent=total_due - total_paid,
            deposit=tenancy.deposit_amount,
            rent_payments=len(payments),
            overdue_payments=overdue,
        )

    async def generate_rent_schedule(self, tenancy_id: str) -> list[RentPayment]:
        tenancy = await self.get_tenancy(tenancy_id)
        taken = {(d.year, d.month) for d in await self._payments.due_dates_for_tenancy(tenancy_id)}

        created: list[RentPayment] = []
        for due in rent_schedule(tenancy.start_date, tenancy.end_date, tenancy.rent_due_day):
            if (due.year, due.month) in taken:
                continue
            created.append(
                await self._payments.create(
                    tenancy_id=tenancy.id,
                    tenant_id=tenancy.tenant_id,
                    amount=tenancy.rent_amount,
                    amount_paid=Decimal("0"),
                    due_date=due,
                    status="pending",
                    description=f"Monthly rent for {due:%B %Y}",
                )
            )
        logger.info("Generated %d rent payments for tenancy %s", len(created), tenancy_id)
        return created

    # ------------------------------------------------------------------
    # Rent payments
    # ------------------------------------------------------------------

    async def list_payments(self, tenancy_id: str) -> list[RentPayment]:
        await self.get_tenancy(tenancy_id)
        return await self._payments.for_tenancy(tenancy_id)

    async def overdue_payments(self, tenancy_id: str | None = None) -> list[RentPayment]:
        return await self._payments.overdue(date.today(), tenancy_id)

    async def get_payment(self, payment_id: str) -> RentPayment:
        payment = await self._payments.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Rent payment", payment_id)
        return payment

    async def create_payment(self, data: RentPaymentCreate) -> RentPayment:
        tenancy = await self.get_tenancy(data.tenancy_id)
        return await self._payments.create(
            tenant_id=tenancy.tenant_id,
            amount_paid=Decimal("0"),
            **data.model_dump(exclude_none=True),
        )

    async def update_payment(self, payment_id: str, data: RentPaymentUpdate) -> RentPayment:
        payment = await self.get_payment(payment_id)
        return await self._payments.apply(
            payment, **data.model_dump(exclude_unset=True, exclude_none=True)
        )

    async def delete_payment(self, payment_id: str) -> None:
        deleted = await self._payments.soft_delete(payment_id)
        if not deleted:
            raise NotFoundError("Rent payment", payment_id)

    async def record_payment(self, payment_id: str, data: RecordPaymentRequest) -> RentPayment:
        payment = await self.get_payment(payment_id)
        if payment.status in _CLOSED_PAYMENT_STATUSES:
            raise ConflictError(f"Cannot record a payment against a {payment.status} rent payment")

        amount_paid = Decimal(payment.amount_paid) + data.amount
        due = Decimal(payment.amount) + Decimal(payment.late_fee or 0)
        changes = {
            "amount_paid": amount_paid,
            "status": "paid" if amount_paid >= due else "partially_paid",
            "paid_date": date.today(),
        }
        if data.payment_method:
            changes["payment_method"] = data.payment_method
        if data.payment_reference:
            changes["payment_reference"] = data.payment_reference
        return await self._payments.apply(payment, **changes)
