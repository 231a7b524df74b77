"""Financial router — transactions, invoices, reports and aggregate statements."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.exceptions import ValidationError
from propertyhub.core.pagination import PaginationParams
from propertyhub.core.response import DataResponse, ListResponse, paginated
from propertyhub.db.base import get_db
from propertyhub.domain.enums import (
    InvoiceStatus,
    ReportType,
    TransactionStatus,
    TransactionType,
)
from propertyhub.domain.user import User
from propertyhub.routers.deps import get_current_user, require_staff
from propertyhub.schemas.financial import (
    FinancialSummary,
    IncomeStatement,
    InvoiceCreate,
    InvoiceOut,
    InvoicePayment,
    InvoiceUpdate,
    ReportCreate,
    ReportOut,
    ReportUpdate,
    TransactionCreate,
    TransactionOut,
    TransactionUpdate,
)
from propertyhub.services.financial import FinancialService

router = APIRouter(prefix="/financial", tags=["Financial"])


# ------------------------------------------------------------------
# Transactions
# ------------------------------------------------------------------

@router.get("/transactions", response_model=ListResponse[TransactionOut])
async def list_transactions(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    property_id: Optional[str] = Query(default=None, alias="propertyId"),
    filter_status: Optional[TransactionStatus] = Query(default=None, alias="status"),
    txn_type: Optional[TransactionType] = Query(default=None, alias="type"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    pagination: PaginationParams = Depends(),
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items, total = await FinancialService(session).list_transactions(
        pagination,
        user_id=user_id,
        property_id=property_id,
        status=filter_status.value if filter_status else None,
        type=txn_type.value if txn_type else None,
        start_date=start_date,
        end_date=end_date,
    )
    return paginated(
        [TransactionOut.model_validate(t) for t in items], total, pagination.page, pagination.limit
    )


@router.post(
    "/transactions",
    response_model=DataResponse[TransactionOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    body: TransactionCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    txn = await FinancialService(session).create_transaction(body, user)
    return {"data": TransactionOut.model_validate(txn)}


@router.get("/transactions/{transaction_id}", response_model=DataResponse[TransactionOut])
async def get_transaction(
    transaction_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    txn = await FinancialService(session).get_transaction(transaction_id)
    return {"data": TransactionOut.model_validate(txn)}


@router.put("/transactions/{transaction_id}", response_model=DataResponse[TransactionOut])
async def update_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    txn = await FinancialService(session).update_transaction(transaction_id, body)
    return {"data": TransactionOut.model_validate(txn)}


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    await FinancialService(session).delete_transaction(transaction_id)


# ------------------------------------------------------------------
# Invoices
# ------------------------------------------------------------------

@router.get("/invoices", response_model=ListResponse[InvoiceOut])
async def list_invoices(
    created_by: Optional[str] = Query(default=None, alias="createdBy"),
    invoice_to: Optional[str] = Query(default=None, alias="invoiceTo"),
    property_id: Optional[str] = Query(default=None, alias="propertyId"),
    filter_status: Optional[InvoiceStatus] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items, total = await FinancialService(session).list_invoices(
        pagination,
        created_by=created_by,
        invoice_to=invoice_to,
        property_id=property_id,
        status=filter_status.value if filter_status else None,
    )
    return paginated(
        [InvoiceOut.model_validate(i) for i in items], total, pagination.page, pagination.limit
    )


@router.post(
    "/invoices", response_model=DataResponse[InvoiceOut], status_code=status.HTTP_201_CREATED
)
async def create_invoice(
    body: InvoiceCreate,
    user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    invoice = await FinancialService(session).create_invoice(body, user)
    return {"data": InvoiceOut.model_validate(invoice)}


@router.get("/invoices/overdue", response_model=DataResponse[list[InvoiceOut]])
async def overdue_invoices(
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items = await FinancialService(session).overdue_invoices()
    return {"data": [InvoiceOut.model_validate(i) for i in items]}


@router.get("/invoices/{invoice_id}", response_model=DataResponse[InvoiceOut])
async def get_invoice(
    invoice_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": InvoiceOut.model_validate(await FinancialService(session).get_invoice(invoice_id))}


@router.put("/invoices/{invoice_id}", response_model=DataResponse[InvoiceOut])
async def update_invoice(
    invoice_id: str,
    body: InvoiceUpdate,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    invoice = await FinancialService(session).update_invoice(invoice_id, body)
    return {"data": InvoiceOut.model_validate(invoice)}


@router.delete("/invoices/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: str,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    await FinancialService(session).delete_invoice(invoice_id)


@router.post("/invoices/{invoice_id}/pay", response_model=DataResponse[InvoiceOut])
async def pay_invoice(
    invoice_id: str,
    body: InvoicePayment,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    invoice = await FinancialService(session).pay_invoice(invoice_id, body)
    return {"data": InvoiceOut.model_validate(invoice)}


# ------------------------------------------------------------------
# Reports
# ------------------------------------------------------------------

@router.get("/reports", response_model=ListResponse[ReportOut])
async def list_reports(
    generated_by: Optional[str] = Query(default=None, alias="generatedBy"),
    property_id: Optional[str] = Query(default=None, alias="propertyId"),
    report_type: Optional[ReportType] = Query(default=None, alias="type"),
    pagination: PaginationParams = Depends(),
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    items, total = await FinancialService(session).list_reports(
        pagination,
        generated_by=generated_by,
        property_id=property_id,
        type=report_type.value if report_type else None,
    )
    return paginated(
        [ReportOut.model_validate(r) for r in items], total, pagination.page, pagination.limit
    )


@router.post("/reports", response_model=DataResponse[ReportOut], status_code=status.HTTP_201_CREATED)
async def create_report(
    body: ReportCreate,
    user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    report = await FinancialService(session).create_report(body, user)
    return {"data": ReportOut.model_validate(report)}


@router.get("/reports/{report_id}", response_model=DataResponse[ReportOut])
async def get_report(
    report_id: str,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    return {"data": ReportOut.model_validate(await FinancialService(session).get_report(report_id))}


@router.put("/reports/{report_id}", response_model=DataResponse[ReportOut])
async def update_report(
    report_id: str,
    body: ReportUpdate,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    report = await FinancialService(session).update_report(report_id, body)
    return {"data": ReportOut.model_validate(report)}


@router.delete("/reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: str,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    await FinancialService(session).delete_report(report_id)


# ------------------------------------------------------------------
# Aggregates
# ------------------------------------------------------------------

@router.get("/income-statement", response_model=DataResponse[IncomeStatement])
async def income_statement(
    start_date: date = Query(alias="startDate"),
    end_date: date = Query(alias="endDate"),
    property_id: Optional[str] = Query(default=None, alias="propertyId"),
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    if end_date < start_date:
        raise ValidationError("endDate must not be before startDate")
    statement = await FinancialService(session).income_statement(start_date, end_date, property_id)
    return {"data": statement}


@router.get("/summary", response_model=DataResponse[FinancialSummary])
async def financial_summary(
    property_id: Optional[str] = Query(default=None, alias="propertyId"),
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await FinancialService(session).summary(property_id)}
