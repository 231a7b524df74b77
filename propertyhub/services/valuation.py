"""Pure valuation and market-scoring helpers.

Kept free of I/O so the heuristics can be unit-tested directly; the property
service feeds them ORM rows and persists the results.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

BEDROOM_VALUE = Decimal("50000")
BATHROOM_VALUE = Decimal("25000")
LONDON_MULTIPLIER = Decimal("2.5")
REGIONAL_MULTIPLIER = Decimal("1.2")
VALUATION_CONFIDENCE = 85
VALUATION_FACTORS = ["Location premium", "Property size", "Market conditions"]

NO_COMPARABLES_CONFIDENCE = 50
METHODOLOGY = "Comparable active listings with the same type, bedrooms and city"

_PENNY = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(_PENNY, rounding=ROUND_HALF_UP)


def estimate_value(bedrooms: int, bathrooms: int, city: str | None) -> dict:
    """Rule-of-thumb valuation: room counts priced flat, London gets a premium."""
    base = bedrooms * BEDROOM_VALUE + bathrooms * BATHROOM_VALUE
    multiplier = (
        LONDON_MULTIPLIER if city and "london" in city.lower() else REGIONAL_MULTIPLIER
    )
    estimated = _money(base * multiplier)
    return {
        "estimated_value": estimated,
        "confidence": VALUATION_CONFIDENCE,
        "price_range": {
            "min": _money(estimated * Decimal("0.9")),
            "max": _money(estimated * Decimal("1.1")),
        },
        "factors": list(VALUATION_FACTORS),
    }


def price_difference_percent(price: Decimal, average: Decimal) -> float:
    if not average:
        return 0.0
    return round(float((price - average) / average * 100), 2)


def market_position(price: Decimal, average: Decimal) -> str:
    difference = price_difference_percent(price, average)
    if difference > 10:
        return "above_market"
    if difference < -10:
        return "below_market"
    return "market_value"


def market_confidence(price: Decimal, average: Decimal) -> int:
    """Cheaper-than-average listings score higher."""
    if not average:
        return NO_COMPARABLES_CONFIDENCE
    ratio = price / average
    if ratio <= Decimal("0.8"):
        return 90
    if ratio <= Decimal("0.9"):
        return 80
    if ratio <= Decimal("1.1"):
        return 70
    if ratio <= Decimal("1.2"):
        return 60
    return 50


def _has_amenity(amenities: Iterable[str] | None, keyword: str) -> bool:
    return any(keyword in (a or "").lower() for a in amenities or ())


def investment_score(
    bedrooms: int,
    bathrooms: int,
    property_type: str,
    amenities: Iterable[str] | None = None,
) -> int:
    score = 0
    if bedrooms >= 3:
        score += 20
    if bathrooms >= 2:
        score += 15
    if property_type == "house":
        score += 15
    if _has_amenity(amenities, "garden"):
        score += 10
    if _has_amenity(amenities, "parking"):
        score += 10
    return score


def investment_potential(score: int) -> str:
    if score >= 60:
        return "high"
    if score >= 40:
        return "medium"
    return "low"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two WGS84 points, in kilometres."""
    r = 6371.0
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * r * math.asin(math.sqrt(a))
