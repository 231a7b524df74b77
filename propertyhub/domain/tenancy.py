"""SQLAlchemy ORM models for tenancy agreements and their rent payments."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from propertyhub.db.base import Base
from propertyhub.domain.mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class TenancyAgreement(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "tenancy_agreements"

    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    landlord_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    agent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True, index=True
    )

    agreement_reference: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # see enums.TenancyType / TenancyStatus
    tenancy_type: Mapped[str] = mapped_column(
        String(30), default="assured_shorthold", nullable=False
    )
    status: Mapped[str] = mapped_column(String(30), default="draft", nullable=False, index=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    rent_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # "weekly" | "monthly" | "quarterly" | "annually"
    rent_frequency: Mapped[str] = mapped_column(String(20), default="monthly", nullable=False)
    rent_due_day: Mapped[int] = mapped_column(Integer, default=1, nullable=False)  # 1-31

    deposit_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    deposit_scheme: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    deposit_scheme_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notice_period_months: Mapped[int] = mapped_column(Integer, default=2, nullable=False)

    special_conditions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    signed_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    termination_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class RentPayment(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "rent_payments"

    tenancy_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("tenancy_agreements.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    paid_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # see enums.PaymentStatus
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    late_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
