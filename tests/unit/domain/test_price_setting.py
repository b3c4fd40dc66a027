"""Unit tests for selling price calculation"""

import pytest
from decimal import Decimal

from src.domain.price_setting import calculate_selling_price


class TestCalculateSellingPrice:

    @pytest.mark.parametrize(
        "cost_price,expected",
        [
            (Decimal("5000"), Decimal("6000")),
            (Decimal("19999"), Decimal("20999")),
            (Decimal("20000"), Decimal("21500")),
            (Decimal("50000"), Decimal("51500")),
            (Decimal("50001"), Decimal("52001")),
            (Decimal("100000"), Decimal("102000")),
        ],
    )
    def test_default_markup_tiers(self, cost_price, expected):
        assert calculate_selling_price(cost_price) == expected

    def test_custom_price_wins(self):
        assert calculate_selling_price(Decimal("10150"), Decimal("12500")) == Decimal("12500")

    def test_non_positive_custom_price_falls_back_to_tiers(self):
        assert calculate_selling_price(Decimal("10150"), Decimal("0")) == Decimal("11150")
