"""Property Pydantic schemas (request DTOs and response models)."""


from datetime import date, datetime
from typing import Any

from pydantic import Field

from propertyhub.domain.enums import (
    EpcRating,
    InvestmentPotential,
    ListingType,
    MarketPosition,
    PropertyStatus,
    PropertyType,
)
from propertyhub.schemas.common import CamelModel, Money

class PropertyCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    property_type: PropertyType
    listing_type: ListingType = ListingType.SALE
    status: PropertyStatus = PropertyStatus.AVAILABLE
    price: Money = Field(ge=0)
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    reception_rooms: int | None = Field(default=None, ge=0)
    square_feet: int | None = Field(default=None, ge=0)
    address_line1: str = Field(min_length=1, max_length=500)
    address_line2: str | None = None
    city: str = Field(min_length=1, max_length=100)
    county: str | None = None
    postcode: str = Field(min_length=2, max_length=10)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    amenities: list[str] = Field(default_factory=list)
    council_tax_band: str | None = Field(default=None, pattern="^[A-H]$")
    epc_rating: EpcRating | None = None
    epc_score: int | None = Field(default=None, ge=1, le=100)
    tenure: str | None = None
    furnishing_type: str | None = None
    pets_allowed: bool = False
    deposit: Money | None = Field(default=None, ge=0)
    available_from: date | None = None
    is_featured: bool = False
    uprn: str | None = None
    land_registry_title_number: str | None = None
    agent_id: str | None = None
    landlord_id: str | None = None

class PropertyUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    property_type: PropertyType | None = None
    listing_type: ListingType | None = None
    status: PropertyStatus | None = None
    price: Money | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    reception_rooms: int | None = Field(default=None, ge=0)
    square_feet: int | None = Field(default=None, ge=0)
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    county: str | None = None
    postcode: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    amenities: list[str] | None = None
    council_tax_band: str | None = Field(default=None, pattern="^[A-H]$")
    tenure: str | None = None
    furnishing_type: str | None = None
    pets_allowed: bool | None = None
    deposit: Money | None = Field(default=None, ge=0)
    available_from: date | None = None
    is_active: bool | None = None
    is_featured: bool | None = None
    landlord_id: str | None = None

class PropertyOut(CamelModel):
    id: str
    title: str
    description: str | None = None
    property_type: str
    listing_type: str
    status: str
    price: Money
    bedrooms: int
    bathrooms: int
    reception_rooms: int | None = None
    square_feet: int | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    county: str | None = None
    postcode: str
    latitude: float | None = None
    longitude: float | None = None
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    council_tax_band: str | None = None
    epc_rating: str | None = None
    epc_score: int | None = None
    tenure: str | None = None
    furnishing_type: str | None = None
    pets_allowed: bool
    deposit: Money | None = None
    available_from: date | None = None
    is_active: bool
    is_featured: bool
    uprn: str | None = None
    land_registry_title_number: str | None = None
    source: str
    agent_id: str | None = None
    landlord_id: str | None = None
    created_at: datetime
    updated_at: datetime

class NearbyPropertyOut(PropertyOut):
    distance_km: float | None = None

class EnergyRating(CamelModel):
    epc_rating: EpcRating | None = None
    epc_score: int | None = Field(default=None, ge=1, le=100)

class CompareRequest(CamelModel):
    property_ids: list[str] = Field(min_length=2, max_length=10)

class ValuationRequest(CamelModel):
    bedrooms: int = Field(ge=0)
    bathrooms: int = Field(ge=0)
    city: str | None = None
    postcode: str | None = None
    property_type: PropertyType | None = None

class PriceRange(CamelModel):
    min: Money
    max: Money

class ValuationOut(CamelModel):
    estimated_value: Money
    confidence: int
    price_range: PriceRange
    factors: list[str]

class MarketAnalysisOut(CamelModel):
    id: str
    property_id: str
    estimated_value: Money
    min_value: Money
    max_value: Money
    market_position: MarketPosition
    price_difference_percent: float
    confidence_score: int
    investment_potential: InvestmentPotential
    comparable_properties: list[dict[str, Any]]
    methodology: str | None = None
    analysis_date: datetime

class SavedSearchCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    criteria: dict[str, Any] = Field(default_factory=dict)
    alerts_enabled: bool = False

class SavedSearchOut(CamelModel):
    id: str
    user_id: str
    name: str
    criteria: dict[str, Any]
    alerts_enabled: bool
    created_at: datetime

class FavoriteStatus(CamelModel):
    property_id: str
    is_favorite: bool

class PropertyLocation(CamelModel):
    address: str
    city: str
    county: str | None = None
    postcode: str

class PropertySummary(CamelModel):
    id: str
    title: str
    price: Money
    bedrooms: int
    bathrooms: int
    square_feet: int | None = None
    location: PropertyLocation

class ComparisonStats(CamelModel):
    price_range: PriceRange
    average_price: Money

class PropertyComparison(CamelModel):
    properties: list[PropertySummary]
    comparison: ComparisonStats
