"""Tenancy agreement and rent payment repositories."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from propertyhub.domain.tenancy import RentPayment, TenancyAgreement
from propertyhub.repositories.base import BaseRepository


class TenancyRepository(BaseRepository[TenancyAgreement]):
    model = TenancyAgreement

    async def active_on(self, today: date) -> list[TenancyAgreement]:
        result = await self._session.execute(
            self._base_query()
            .where(TenancyAgreement.status == "active")
            .where(TenancyAgreement.start_date <= today)
            .where(TenancyAgreement.end_date >= today)
            .order_by(TenancyAgreement.start_date.asc())
        )
        return list(result.scalars().all())


class RentPaymentRepository(BaseRepository[RentPayment]):
    model = RentPayment

    async def for_tenancy(self, tenancy_id: str) -> list[RentPayment]:
        result = await self._session.execute(
            self._base_query()
            .where(RentPayment.tenancy_id == tenancy_id)
            .order_by(RentPayment.due_date.asc())
        )
        return list(result.scalars().all())

    async def due_dates_for_tenancy(self, tenancy_id: str) -> list[date]:
        result = await self._session.execute(
            select(RentPayment.due_date)
            .where(RentPayment.tenancy_id == tenancy_id)
            .where(RentPayment.deleted_at.is_(None))
        )
        return list(result.scalars().all())

    async def overdue(self, today: date, tenancy_id: str | None = None) -> list[RentPayment]:
        q = (
            self._base_query()
            .where(RentPayment.due_date <= today)
            .where(RentPayment.status.in_(("pending", "partially_paid")))
        )
        if tenancy_id:
            q = q.where(RentPayment.tenancy_id == tenancy_id)
        result = await self._session.execute(q.order_by(RentPayment.due_date.asc()))
        return list(result.scalars().all())
