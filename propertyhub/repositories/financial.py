"""Transaction, invoice and financial report repositories."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select

from propertyhub.domain.financial import FinancialReport, Invoice, Transaction
from propertyhub.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    model = Transaction

    async def search(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        start: datetime | None = None,
        end: datetime | None = None,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[Transaction], int]:
        q = self._apply_filters(self._base_query(), filters)
        if start is not None:
            q = q.where(Transaction.created_at >= start)
        if end is not None:
            q = q.where(Transaction.created_at <= end)
        return await self._paginate(
            q, offset=offset, limit=limit, order_by=order_by, order=order
        )

    async def completed_between(
        self, start: datetime, end: datetime, property_id: str | None = None
    ) -> list[Transaction]:
        q = (
            self._base_query()
            .where(Transaction.status == "completed")
            .where(Transaction.processed_at >= start)
            .where(Transaction.processed_at <= end)
        )
        if property_id:
            q = q.where(Transaction.property_id == property_id)
        result = await self._session.execute(q.order_by(Transaction.processed_at.asc()))
        return list(result.scalars().all())

    async def sum_completed(self, types: list[str], property_id: str | None = None) -> Decimal:
        q = (
            select(func.coalesce(func.sum(Transaction.amount), 0))
            .where(Transaction.deleted_at.is_(None))
            .where(Transaction.status == "completed")
            .where(Transaction.type.in_(types))
        )
        if property_id:
            q = q.where(Transaction.property_id == property_id)
        return Decimal(str((await self._session.execute(q)).scalar_one()))

    async def count_pending(self, property_id: str | None = None) -> int:
        q = (
            select(func.count())
            .select_from(Transaction)
            .where(Transaction.deleted_at.is_(None))
            .where(Transaction.status == "pending")
        )
        if property_id:
            q = q.where(Transaction.property_id == property_id)
        return (await self._session.execute(q)).scalar_one()


class InvoiceRepository(BaseRepository[Invoice]):
    model = Invoice

    def _overdue_query(self, today: date, property_id: str | None = None):
        q = (
            self._base_query()
            .where(Invoice.due_date < today)
            .where(Invoice.status.in_(("sent", "viewed", "overdue")))
        )
        if property_id:
            q = q.where(Invoice.property_id == property_id)
        return q

    async def overdue(self, today: date) -> list[Invoice]:
        result = await self._session.execute(
            self._overdue_query(today).order_by(Invoice.due_date.asc())
        )
        return list(result.scalars().all())

    async def count_overdue(self, today: date, property_id: str | None = None) -> int:
        q = self._overdue_query(today, property_id)
        return (
            await self._session.execute(select(func.count()).select_from(q.subquery()))
        ).scalar_one()


class FinancialReportRepository(BaseRepository[FinancialReport]):
    model = FinancialReport
