"""SQLAlchemy ORM model for stored comparable-sales market analyses."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from propertyhub.db.base import Base
from propertyhub.domain.mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin, _now


class MarketAnalysis(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "market_analyses"

    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    estimated_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    min_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    max_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # "above_market" | "below_market" | "market_value"
    market_position: Mapped[str] = mapped_column(String(20), nullable=False)
    price_difference_percent: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    confidence_score: Mapped[int] = mapped_column(Integer, nullable=False)
    # "high" | "medium" | "low"
    investment_potential: Mapped[str] = mapped_column(String(10), nullable=False)

    comparable_properties: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list, nullable=False
    )
    methodology: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    analysis_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, nullable=False
    )
