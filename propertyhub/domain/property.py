"""SQLAlchemy ORM models for property listings, favourites and saved searches."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from propertyhub.db.base import Base
from propertyhub.domain.mixins import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Property(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # see enums.PropertyType / ListingType / PropertyStatus
    property_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    listing_type: Mapped[str] = mapped_column(String(20), default="sale", nullable=False)
    status: Mapped[str] = mapped_column(
        String(30), default="available", nullable=False, index=True
    )

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reception_rooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    square_feet: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Address
    address_line1: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    address_line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    postcode: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    amenities: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # UK specifics
    council_tax_band: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)
    epc_rating: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)  # A-G
    epc_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 1-100
    tenure: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    furnishing_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    pets_allowed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deposit: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    available_from: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    uprn: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    land_registry_title_number: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True
    )
    # "manual" | "land_registry"
    source: Mapped[str] = mapped_column(String(20), default="manual", nullable=False)

    agent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    landlord_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )


class PropertyFavorite(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "property_favorites"
    __table_args__ = (UniqueConstraint("user_id", "property_id", name="uq_favorite_user_property"),)

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )


class SavedSearch(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "saved_searches"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    criteria: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    alerts_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
