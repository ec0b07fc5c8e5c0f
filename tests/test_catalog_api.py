"""
API Tests for /api/catalog
"""
from pricebook.routers.catalog import format_price


class TestCatalogListing:

    def test_service_types(self, client):
        response = client.get("/api/catalog/service-types")

        assert response.status_code == 200
        ids = [s["id"] for s in response.json()]
        assert "videosurveillance" in ids
        assert "domotique" in ids

    def test_product_types_by_service(self, client):
        response = client.get("/api/catalog/product-types", params={"service_type_id": "domotique"})

        ids = {pt["id"] for pt in response.json()}
        assert ids == {"smart_hubs", "smart_switches", "smart_sensors", "smart_plugs"}

    def test_product_types_search_matches_variant_names(self, client):
        response = client.get(
            "/api/catalog/product-types",
            params={"service_type_id": "videosurveillance", "search": "poe switch"},
        )
        assert [pt["id"] for pt in response.json()] == ["network_equipment"]

    def test_product_type(self, client):
        response = client.get("/api/catalog/product-types/network_equipment")

        assert response.status_code == 200
        data = response.json()
        assert [v["id"] for v in data["variants"]] == ["switch_poe_8p", "switch_poe_16p", "switch_poe_24p"]
        assert data["variants"][0]["is_default"] is True

    def test_unknown_product_type(self, client):
        assert client.get("/api/catalog/product-types/laser_systems").status_code == 404


class TestVariantPrices:

    def test_unpriced_variants(self, client, auth_headers):
        response = client.get("/api/catalog/product-types/network_equipment/prices", headers=auth_headers)

        assert response.status_code == 200
        variants = response.json()["variants"]
        assert len(variants) == 3
        assert all(v["configured"] is False for v in variants)
        assert all(v["display_price"] == "Price not configured" for v in variants)

    def test_priced_variant(self, client, auth_headers):
        client.post(
            "/api/price-overrides/",
            json={"product_type_id": "nvr_systems", "variant_id": "nvr_8ch", "cost_price": 60000, "margin": 30},
            headers=auth_headers,
        )

        variants = client.get("/api/catalog/product-types/nvr_systems/prices", headers=auth_headers).json()["variants"]
        by_id = {v["variant"]["id"]: v for v in variants}

        assert by_id["nvr_8ch"]["configured"] is True
        assert by_id["nvr_8ch"]["display_price"] == "85 714 FCFA"
        assert by_id["nvr_8ch"]["active_price"]["unit_price"] == 85714
        assert by_id["nvr_4ch"]["display_price"] == "Price not configured"


class TestFormatPrice:

    def test_thousands_separator(self):
        assert format_price(1234567, "FCFA") == "1 234 567 FCFA"

    def test_small_amount(self):
        assert format_price(950, "FCFA") == "950 FCFA"
