"""Transaction, invoice and report Pydantic schemas."""


from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import Field, model_validator

from propertyhub.domain.enums import (
    InvoiceStatus,
    InvoiceType,
    ReportFormat,
    ReportPeriod,
    ReportStatus,
    ReportType,
    TransactionStatus,
    TransactionType,
)
from propertyhub.schemas.common import CamelModel, Money

# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class TransactionCreate(CamelModel):
    reference: str | None = None
    type: TransactionType
    amount: Money = Field(gt=0)
    currency: str = Field(default="GBP", min_length=3, max_length=3)
    status: TransactionStatus = TransactionStatus.PENDING
    payment_method: str | None = None
    description: str | None = None
    notes: str | None = None
    external_transaction_id: str | None = None
    processed_at: datetime | None = None
    user_id: str | None = None
    property_id: str | None = None
    related_transaction_id: str | None = None

class TransactionUpdate(CamelModel):
    status: TransactionStatus | None = None
    payment_method: str | None = None
    description: str | None = None
    notes: str | None = None
    external_transaction_id: str | None = None
    processed_at: datetime | None = None
    failure_reason: str | None = None

class TransactionOut(CamelModel):
    id: str
    reference: str
    type: str
    amount: Money
    currency: str
    status: str
    payment_method: str | None = None
    description: str | None = None
    notes: str | None = None
    external_transaction_id: str | None = None
    processed_at: datetime | None = None
    failed_at: datetime | None = None
    failure_reason: str | None = None
    user_id: str | None = None
    property_id: str | None = None
    related_transaction_id: str | None = None
    created_at: datetime
    updated_at: datetime

# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------

class InvoiceItem(CamelModel):
    description: str
    quantity: Money = Decimal("1")
    unit_price: Money
    amount: Money

class InvoiceCreate(CamelModel):
    invoice_number: str | None = None
    type: InvoiceType
    status: InvoiceStatus = InvoiceStatus.DRAFT
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    subtotal: Money = Field(ge=0)
    tax_rate: Money = Field(default=Decimal("0"), ge=0, le=100)
    tax_amount: Money | None = Field(default=None, ge=0)
    total_amount: Money | None = Field(default=None, ge=0)
    currency: str = Field(default="GBP", min_length=3, max_length=3)
    issue_date: date
    due_date: date
    billing_address: str | None = None
    notes: str | None = None
    items: list[InvoiceItem] = Field(default_factory=list)
    payment_terms: str | None = None
    invoice_to: str
    property_id: str | None = None

    @model_validator(mode="after")
    def _due_after_issue(self):
        if self.due_date < self.issue_date:
            raise ValueError("dueDate must not be before issueDate")
        return self

class InvoiceUpdate(CamelModel):
    status: InvoiceStatus | None = None
    title: str | None = None
    description: str | None = None
    due_date: date | None = None
    billing_address: str | None = None
    notes: str | None = None
    payment_terms: str | None = None

class InvoicePayment(CamelModel):
    amount: Money = Field(gt=0)

class InvoiceOut(CamelModel):
    id: str
    invoice_number: str
    type: str
    status: str
    title: str
    description: str | None = None
    subtotal: Money
    tax_rate: Money
    tax_amount: Money
    total_amount: Money
    paid_amount: Money
    outstanding_amount: Money
    currency: str
    issue_date: date
    due_date: date
    sent_at: datetime | None = None
    paid_at: datetime | None = None
    cancelled_at: datetime | None = None
    billing_address: str | None = None
    notes: str | None = None
    items: list[dict[str, Any]] = Field(default_factory=list)
    payment_terms: str | None = None
    created_by: str
    invoice_to: str
    property_id: str | None = None
    created_at: datetime
    updated_at: datetime

# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class ReportCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    type: ReportType
    format: ReportFormat = ReportFormat.JSON
    period: ReportPeriod = ReportPeriod.MONTHLY
    start_date: date
    end_date: date
    description: str | None = None
    property_id: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self

class ReportUpdate(CamelModel):
    title: str | None = None
    description: str | None = None
    status: ReportStatus | None = None

class ReportOut(CamelModel):
    id: str
    title: str
    type: str
    status: str
    format: str
    period: str
    start_date: date
    end_date: date
    description: str | None = None
    data: dict[str, Any] | None = None
    summary: dict[str, Any] | None = None
    error_message: str | None = None
    generation_started_at: datetime | None = None
    generation_completed_at: datetime | None = None
    generated_by: str
    property_id: str | None = None
    created_at: datetime

# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

class StatementSection(CamelModel):
    total: Money
    transactions: list[TransactionOut]

class StatementPeriod(CamelModel):
    start: date
    end: date

class IncomeStatement(CamelModel):
    period: StatementPeriod
    income: StatementSection
    expenses: StatementSection
    net_income: Money

class FinancialSummary(CamelModel):
    total_income: Money
    total_expenses: Money
    net_income: Money
    pending_transactions: int
    overdue_invoices: int
