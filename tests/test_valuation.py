"""
Tests for the pure valuation and market-scoring helpers.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from propertyhub.services import valuation


class TestEstimateValue:
    def test_regional_multiplier(self):
        result = valuation.estimate_value(3, 2, "Manchester")
        # (3*50k + 2*25k) * 1.2
        assert result["estimated_value"] == Decimal("240000.00")
        assert result["confidence"] == 85
        assert result["price_range"] == {
            "min": Decimal("216000.00"),
            "max": Decimal("264000.00"),
        }
        assert result["factors"] == ["Location premium", "Property size", "Market conditions"]

    def test_london_premium_is_case_insensitive(self):
        result = valuation.estimate_value(2, 1, "Greater LONDON")
        assert result["estimated_value"] == Decimal("312500.00")

    def test_no_city(self):
        assert valuation.estimate_value(1, 0, None)["estimated_value"] == Decimal("60000.00")


class TestMarketPosition:
    @pytest.mark.parametrize(
        "price, expected",
        [
            (Decimal("111000"), "above_market"),
            (Decimal("110000"), "market_value"),
            (Decimal("90000"), "market_value"),
            (Decimal("89000"), "below_market"),
        ],
    )
    def test_ten_percent_band(self, price, expected):
        assert valuation.market_position(price, Decimal("100000")) == expected

    def test_difference_percent(self):
        assert valuation.price_difference_percent(Decimal("125"), Decimal("100")) == 25.0
        assert valuation.price_difference_percent(Decimal("125"), Decimal("0")) == 0.0

    @pytest.mark.parametrize(
        "price, expected",
        [("80", 90), ("85", 80), ("100", 70), ("115", 60), ("130", 50)],
    )
    def test_confidence_bands(self, price, expected):
        assert valuation.market_confidence(Decimal(price), Decimal("100")) == expected


class TestInvestmentPotential:
    def test_house_with_garden_and_parking_is_high(self):
        score = valuation.investment_score(3, 2, "house", ["Private Garden", "Off-street parking"])
        assert score == 70
        assert valuation.investment_potential(score) == "high"

    def test_medium_band(self):
        score = valuation.investment_score(3, 1, "house")
        assert score == 35
        assert valuation.investment_potential(score) == "low"
        assert valuation.investment_potential(40) == "medium"

    def test_flat_without_extras(self):
        assert valuation.investment_score(1, 1, "flat", None) == 0


class TestHaversine:
    def test_zero_distance(self):
        assert valuation.haversine_km(51.5, -0.12, 51.5, -0.12) == 0

    def test_london_to_manchester(self):
        distance = valuation.haversine_km(51.5074, -0.1278, 53.4808, -2.2426)
        assert 255 < distance < 265
