"""Financial service — transactions, invoices, reports and statements.

Rule: No FastAPI here. Pure Python business logic.
"""

import logging
import secrets
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.exceptions import ConflictError, NotFoundError
from propertyhub.core.pagination import PaginationParams
from propertyhub.domain.enums import EXPENSE_TRANSACTION_TYPES, INCOME_TRANSACTION_TYPES
from propertyhub.domain.financial import FinancialReport, Invoice, Transaction
from propertyhub.domain.user import User
from propertyhub.repositories.financial import (
    FinancialReportRepository,
    InvoiceRepository,
    TransactionRepository,
)
from propertyhub.schemas.financial import (
    FinancialSummary,
    IncomeStatement,
    InvoiceCreate,
    InvoicePayment,
    InvoiceUpdate,
    ReportCreate,
    ReportUpdate,
    TransactionCreate,
    TransactionOut,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

_PENNY = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_PENNY, rounding=ROUND_HALF_UP)


def transaction_reference(today: date | None = None) -> str:
    return f"TXN-{(today or date.today()):%Y%m%d}-{secrets.token_hex(4).upper()}"


def invoice_number(today: date | None = None) -> str:
    return f"INV-{(today or date.today()):%Y%m%d}-{secrets.token_hex(3).upper()}"


def _day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


class FinancialService:
    def __init__(self, session: AsyncSession):
        self._transactions = TransactionRepository(session)
        self._invoices = InvoiceRepository(session)
        self._reports = FinancialReportRepository(session)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def list_transactions(
        self,
        pagination: PaginationParams,
        *,
        user_id: str | None = None,
        property_id: str | None = None,
        status: str | None = None,
        type: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ):
        start = _day_bounds(start_date, start_date)[0] if start_date else None
        end = _day_bounds(end_date, end_date)[1] if end_date else None
        return await self._transactions.search(
            **pagination.window(),
            start=start,
            end=end,
            filters={
                "user_id": user_id,
                "property_id": property_id,
                "status": status,
                "type": type,
            },
        )

    async def get_transaction(self, transaction_id: str) -> Transaction:
        txn = await self._transactions.get_by_id(transaction_id)
        if not txn:
            raise NotFoundError("Transaction", transaction_id)
        return txn

    async def create_transaction(self, data: TransactionCreate, user: User) -> Transaction:
        payload = data.model_dump(exclude_none=True)
        payload.setdefault("reference", transaction_reference())
        payload.setdefault("user_id", user.id)
        if payload.get("status") == "completed":
            payload.setdefault("processed_at", datetime.now(timezone.utc))
        return await self._transactions.create(**payload)

    async def update_transaction(
        self, transaction_id: str, data: TransactionUpdate
    ) -> Transaction:
        txn = await self.get_transaction(transaction_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        now = datetime.now(timezone.utc)
        if changes.get("status") == "completed" and not txn.processed_at:
            changes.setdefault("processed_at", now)
        if changes.get("status") == "failed":
            changes.setdefault("failed_at", now)
        return await self._transactions.apply(txn, **changes)

    async def delete_transaction(self, transaction_id: str) -> None:
        if not await self._transactions.soft_delete(transaction_id):
            raise NotFoundError("Transaction", transaction_id)

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    async def list_invoices(
        self,
        pagination: PaginationParams,
        *,
        created_by: str | None = None,
        invoice_to: str | None = None,
        property_id: str | None = None,
        status: str | None = None,
    ):
        return await self._invoices.list(
            **pagination.window(),
            filters={
                "created_by": created_by,
                "invoice_to": invoice_to,
                "property_id": property_id,
                "status": status,
            },
        )

    async def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = await self._invoices.get_by_id(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    async def create_invoice(self, data: InvoiceCreate, user: User) -> Invoice:
        payload = data.model_dump(exclude_none=True, mode="python")
        payload["items"] = data.model_dump(mode="json", by_alias=True)["items"]
        payload.setdefault("invoice_number", invoice_number())

        subtotal = _money(data.subtotal)
        tax_amount = (
            _money(data.tax_amount)
            if data.tax_amount is not None
            else _money(subtotal * data.tax_rate / 100)
        )
        total = (
            _money(data.total_amount)
            if data.total_amount is not None
            else subtotal + tax_amount
        )
        payload.update(
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=total,
            paid_amount=Decimal("0"),
            outstanding_amount=total,
            created_by=user.id,
        )
        if payload.get("status") == "sent":
            payload["sent_at"] = datetime.now(timezone.utc)
        return await self._invoices.create(**payload)

    async def update_invoice(self, invoice_id: str, data: InvoiceUpdate) -> Invoice:
        invoice = await self.get_invoice(invoice_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        status = changes.get("status")
        now = datetime.now(timezone.utc)
        if status == "sent" and not invoice.sent_at:
            changes["sent_at"] = now
        elif status == "cancelled":
            changes["cancelled_at"] = now
        return await self._invoices.apply(invoice, **changes)

    async def delete_invoice(self, invoice_id: str) -> None:
        if not await self._invoices.soft_delete(invoice_id):
            raise NotFoundError("Invoice", invoice_id)

    async def overdue_invoices(self) -> list[Invoice]:
        return await self._invoices.overdue(date.today())

    async def pay_invoice(self, invoice_id: str, data: InvoicePayment) -> Invoice:
        invoice = await self.get_invoice(invoice_id)
        if invoice.status in ("cancelled", "refunded"):
            raise ConflictError(f"Cannot pay a {invoice.status} invoice")

        paid = _money(Decimal(invoice.paid_amount) + data.amount)
        outstanding = _money(Decimal(invoice.total_amount) - paid)
        changes: dict = {"paid_amount": paid, "outstanding_amount": outstanding}
        if outstanding <= 0:
            changes.update(status="paid", paid_at=datetime.now(timezone.utc))
        else:
            changes["status"] = "partially_paid"
        logger.info("Invoice %s received %s (outstanding %s)", invoice.invoice_number, data.amount, outstanding)
        return await self._invoices.apply(invoice, **changes)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def list_reports(
        self,
        pagination: PaginationParams,
        *,
        generated_by: str | None = None,
        property_id: str | None = None,
        type: str | None = None,
    ):
        return await self._reports.list(
            **pagination.window(),
            filters={"generated_by": generated_by, "property_id": property_id, "type": type},
        )

    async def get_report(self, report_id: str) -> FinancialReport:
        report = await self._reports.get_by_id(report_id)
        if not report:
            raise NotFoundError("Report", report_id)
        return report

    async def create_report(self, data: ReportCreate, user: User) -> FinancialReport:
        report = await self._reports.create(
            **data.model_dump(exclude_none=True),
            generated_by=user.id,
            status="generating",
            generation_started_at=datetime.now(timezone.utc),
        )
        if report.type != "income_statement":
            # Other report types are produced offline; they stay "generating"
            return report

        statement = await self.income_statement(
            report.start_date, report.end_date, report.property_id
        )
        data_json = statement.model_dump(mode="json", by_alias=True)
        return await self._reports.apply(
            report,
            status="completed",
            data=data_json,
            summary={
                "totalIncome": data_json["income"]["total"],
                "totalExpenses": data_json["expenses"]["total"],
                "netIncome": data_json["netIncome"],
            },
            generation_completed_at=datetime.now(timezone.utc),
        )

    async def update_report(self, report_id: str, data: ReportUpdate) -> FinancialReport:
        report = await self.get_report(report_id)
        return await self._reports.apply(
            report, **data.model_dump(exclude_unset=True, exclude_none=True)
        )

    async def delete_report(self, report_id: str) -> None:
        if not await self._reports.soft_delete(report_id):
            raise NotFoundError("Report", report_id)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def income_statement(
        self, start_date: date, end_date: date, property_id: str | None = None
    ) -> IncomeStatement:
        start, end = _day_bounds(start_date, end_date)
        rows = await self._transactions.completed_between(start, end, property_id)
        income = [t for t in rows if t.type in INCOME_TRANSACTION_TYPES]
        expenses = [t for t in rows if t.type in EXPENSE_TRANSACTION_TYPES]
        income_total = sum((Decimal(t.amount) for t in income), Decimal("0"))
        expense_total = sum((Decimal(t.amount) for t in expenses), Decimal("0"))
        return IncomeStatement(
            period={"start": start_date, "end": end_date},
            income={
                "total": income_total,
                "transactions": [TransactionOut.model_validate(t) for t in income],
            },
            expenses={
                "total": expense_total,
                "transactions": [TransactionOut.model_validate(t) for t in expenses],
            },
            net_income=income_total - expense_total,
        )

    async def summary(self, property_id: str | None = None) -> FinancialSummary:
        total_income = await self._transactions.sum_completed(
            sorted(INCOME_TRANSACTION_TYPES), property_id
        )
        total_expenses = await self._transactions.sum_completed(
            sorted(EXPENSE_TRANSACTION_TYPES), property_id
        )
        return FinancialSummary(
            total_income=total_income,
            total_expenses=total_expenses,
            net_income=total_income - total_expenses,
            pending_transactions=await self._transactions.count_pending(property_id),
            overdue_invoices=await self._invoices.count_overdue(date.today(), property_id),
        )
