"""Tenancy agreement and rent payment Pydantic schemas."""


from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from propertyhub.domain.enums import (
    DepositScheme,
    PaymentStatus,
    RentFrequency,
    TenancyStatus,
    TenancyType,
)
from propertyhub.schemas.common import CamelModel, Money

class TenancyCreate(CamelModel):
    property_id: str
    tenant_id: str
    landlord_id: str
    agent_id: str | None = None
    agreement_reference: str | None = None
    tenancy_type: TenancyType = TenancyType.ASSURED_SHORTHOLD
    status: TenancyStatus = TenancyStatus.DRAFT
    start_date: date
    end_date: date
    rent_amount: Money = Field(gt=0)
    rent_frequency: RentFrequency = RentFrequency.MONTHLY
    rent_due_day: int = Field(default=1, ge=1, le=31)
    deposit_amount: Money = Field(default=Decimal("0"), ge=0)
    deposit_scheme: DepositScheme | None = None
    deposit_scheme_reference: str | None = None
    notice_period_months: int = Field(default=2, ge=0, le=12)
    special_conditions: str | None = None
    signed_date: date | None = None

class TenancyUpdate(CamelModel):
    agent_id: str | None = None
    agreement_reference: str | None = None
    tenancy_type: TenancyType | None = None
    status: TenancyStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    rent_amount: Money | None = Field(default=None, gt=0)
    rent_frequency: RentFrequency | None = None
    rent_due_day: int | None = Field(default=None, ge=1, le=31)
    deposit_amount: Money | None = Field(default=None, ge=0)
    deposit_scheme: DepositScheme | None = None
    deposit_scheme_reference: str | None = None
    notice_period_months: int | None = Field(default=None, ge=0, le=12)
    special_conditions: str | None = None
    signed_date: date | None = None
    termination_reason: str | None = None

class TenancyOut(CamelModel):
    id: str
    property_id: str
    tenant_id: str
    landlord_id: str
    agent_id: str | None = None
    agreement_reference: str | None = None
    tenancy_type: str
    status: str
    start_date: date
    end_date: date
    rent_amount: Money
    rent_frequency: str
    rent_due_day: int
    deposit_amount: Money
    deposit_scheme: str | None = None
    deposit_scheme_reference: str | None = None
    notice_period_months: int
    special_conditions: str | None = None
    signed_date: date | None = None
    termination_reason: str | None = None
    created_at: datetime
    updated_at: datetime

class RentPaymentCreate(CamelModel):
    tenancy_id: str
    amount: Money = Field(gt=0)
    due_date: date
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: str | None = None
    payment_reference: str | None = None
    late_fee: Money = Field(default=Decimal("0"), ge=0)
    description: str | None = None
    notes: str | None = None

class RentPaymentUpdate(CamelModel):
    amount: Money | None = Field(default=None, gt=0)
    due_date: date | None = None
    status: PaymentStatus | None = None
    payment_method: str | None = None
    payment_reference: str | None = None
    late_fee: Money | None = Field(default=None, ge=0)
    description: str | None = None
    notes: str | None = None

class RecordPaymentRequest(CamelModel):
    amount: Money = Field(gt=0)
    payment_method: str | None = None
    payment_reference: str | None = None

class RentPaymentOut(CamelModel):
    id: str
    tenancy_id: str
    tenant_id: str
    amount: Money
    amount_paid: Money
    due_date: date
    paid_date: date | None = None
    status: str
    payment_method: str | None = None
    payment_reference: str | None = None
    late_fee: Money
    description: str | None = None
    notes: str | None = None
    created_at: datetime

class TenancyFinancialSummary(CamelModel):
    tenancy_id: str
    rent_amount: Money
    total_rent_due: Money
    total_rent_paid: Money
    outstanding_rent: Money
    deposit: Money
    rent_payments: int
    overdue_payments: int
