"""
Unit Tests for shipping option pricing
"""
import pytest

from pricebook.services.shipping import BASE_SHIPPING_RATES, compute_shipping_options, shipping_cost

AIR_15 = BASE_SHIPPING_RATES["air_15"]
AIR_EXPRESS = BASE_SHIPPING_RATES["air_express"]
SEA = BASE_SHIPPING_RATES["sea_freight"]


class TestShippingCost:

    def test_minimum_charge_applies(self):
        assert shipping_cost(AIR_15, 1, None) == 18000

    def test_above_minimum(self):
        assert shipping_cost(AIR_15, 3.5, None) == 26250
        assert shipping_cost(AIR_EXPRESS, 4, None) == 42000

    def test_sea_freight_by_volume(self):
        assert shipping_cost(SEA, None, 0.5) == 145000
        assert shipping_cost(SEA, None, 1.5) == 217500

    @pytest.mark.parametrize("weight,volume", [(None, None), (0, 0), (-1, None)])
    def test_missing_measure(self, weight, volume):
        assert shipping_cost(AIR_15, weight, volume) is None
        assert shipping_cost(SEA, weight, volume) is None


class TestComputeShippingOptions:

    def test_all_methods(self):
        options = compute_shipping_options(100000, 2, 1, "FCFA")

        assert [o["id"] for o in options] == ["air_15", "air_express", "sea_freight"]
        assert all(o["total"] == 100000 + o["cost"] for o in options)
        assert all(o["currency"] == "FCFA" for o in options)

    def test_without_sale_price(self):
        options = compute_shipping_options(None, 2, None, "FCFA")
        assert all(o["total"] == o["cost"] for o in options)

    def test_no_measures(self):
        assert compute_shipping_options(100000, None, None, "FCFA") == []
