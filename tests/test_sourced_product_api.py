"""
API Tests for /api/sourced-products
"""
import pytest

BASE = "/api/sourced-products"


def create_product(client, headers, **payload):
    body = {"name": "IP camera 4MP", "sourcing_platform": "1688", "foreign_price": 57}
    body.update(payload)
    return client.post(f"{BASE}/", json=body, headers=headers)


class TestCreateSourcedProduct:

    def test_cost_and_price_derived(self, client, auth_headers):
        response = create_product(client, auth_headers, exchange_rate=100, margin=25)

        assert response.status_code == 201
        data = response.json()
        assert data["base_cost"] == 5700
        assert float(data["price"]) == 7600
        assert data["currency"] == "FCFA"
        assert data["foreign_currency"] == "CNY"

    def test_default_exchange_rate(self, client, auth_headers):
        data = create_product(client, auth_headers, exchange_rate=0, margin=25).json()

        assert data["exchange_rate"] is None
        assert data["base_cost"] == 5700

    def test_default_margin(self, client, auth_headers):
        data = create_product(client, auth_headers).json()

        assert data["margin"] == 30
        assert float(data["price"]) == 8143  # 5700 / 0.7

    def test_manual_price(self, client, auth_headers):
        data = create_product(client, auth_headers, auto_price=False, price=9000).json()

        assert data["base_cost"] == 5700
        assert float(data["price"]) == 9000

    def test_local_cost_without_foreign_price(self, client, auth_headers):
        data = create_product(client, auth_headers, foreign_price=None, base_cost=60000, margin=30).json()
        assert float(data["price"]) == 85714

    def test_invalid_margin(self, client, auth_headers):
        response = create_product(client, auth_headers, margin=120)

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_MARGIN"

    def test_requires_authentication(self, client):
        assert create_product(client, {}).status_code in (401, 403)


class TestUpdateSourcedProduct:

    @pytest.fixture
    def product(self, client, auth_headers):
        return create_product(client, auth_headers, exchange_rate=100, margin=25).json()

    def test_margin_change_reprices(self, client, auth_headers, product):
        response = client.put(f"{BASE}/{product['id']}", json={"margin": 40}, headers=auth_headers)

        assert response.status_code == 200
        assert float(response.json()["price"]) == 9500

    def test_exchange_rate_change_recomputes_cost(self, client, auth_headers, product):
        data = client.put(f"{BASE}/{product['id']}", json={"exchange_rate": 90}, headers=auth_headers).json()

        assert data["base_cost"] == 5130
        assert float(data["price"]) == 6840

    def test_name_change_keeps_price(self, client, auth_headers, product):
        data = client.put(f"{BASE}/{product['id']}", json={"name": "Dome camera"}, headers=auth_headers).json()

        assert data["name"] == "Dome camera"
        assert float(data["price"]) == 7600

    def test_switching_to_manual_keeps_price(self, client, auth_headers, product):
        data = client.put(
            f"{BASE}/{product['id']}",
            json={"auto_price": False, "price": 8000},
            headers=auth_headers,
        ).json()
        assert float(data["price"]) == 8000

    def test_missing_product(self, client, auth_headers):
        assert client.put(f"{BASE}/999", json={"margin": 40}, headers=auth_headers).status_code == 404


class TestReadAndDelete:

    def test_list_and_search(self, client, auth_headers):
        create_product(client, auth_headers, name="PoE switch 8 ports", sourcing_platform="alibaba")
        create_product(client, auth_headers, name="Dome camera 2MP")

        everything = client.get(f"{BASE}/", headers=auth_headers).json()
        assert everything["total"] == 2

        found = client.get(f"{BASE}/", params={"search": "alibaba"}, headers=auth_headers).json()
        assert [p["name"] for p in found["items"]] == ["PoE switch 8 ports"]

    def test_get_and_delete(self, client, auth_headers):
        product = create_product(client, auth_headers).json()

        assert client.get(f"{BASE}/{product['id']}", headers=auth_headers).status_code == 200
        assert client.delete(f"{BASE}/{product['id']}", headers=auth_headers).status_code == 204
        assert client.get(f"{BASE}/{product['id']}", headers=auth_headers).status_code == 404

    def test_delete_missing(self, client, auth_headers):
        assert client.delete(f"{BASE}/999", headers=auth_headers).status_code == 404


class TestPricingSummary:

    def test_air_options_from_weight(self, client, auth_headers):
        product = create_product(client, auth_headers, exchange_rate=100, margin=25, weight_kg=2).json()

        response = client.get(f"{BASE}/{product['id']}/pricing", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["sale_price"] == 7600
        options = {o["id"]: o for o in data["shipping_options"]}
        assert set(options) == {"air_15", "air_express"}
        assert options["air_15"]["cost"] == 18000
        assert options["air_15"]["total"] == 25600
        assert options["air_express"]["cost"] == 25000

    def test_sea_option_from_volume(self, client, auth_headers):
        product = create_product(client, auth_headers, exchange_rate=100, margin=25, volume_m3=2).json()

        data = client.get(f"{BASE}/{product['id']}/pricing", headers=auth_headers).json()

        assert [o["id"] for o in data["shipping_options"]] == ["sea_freight"]
        assert data["shipping_options"][0]["cost"] == 290000

    def test_missing_product(self, client, auth_headers):
        assert client.get(f"{BASE}/999/pricing", headers=auth_headers).status_code == 404
