"""
API Tests for /api/price-overrides
"""
import inspect

import pytest

from pricebook.routers.price_override import upload_csv_prices

BASE = "/api/price-overrides"


def set_price(client, headers, **payload):
    body = {"product_type_id": "nvr_systems", "variant_id": "nvr_8ch", "cost_price": 60000}
    body.update(payload)
    return client.post(f"{BASE}/", json=body, headers=headers)


class TestSetPrice:

    def test_requires_authentication(self, client):
        response = set_price(client, {}, margin=30)
        assert response.status_code in (401, 403)

    def test_rejects_invalid_token(self, client):
        response = set_price(client, {"Authorization": "Bearer not-a-token"}, margin=30)
        assert response.status_code == 401

    def test_from_margin(self, client, auth_headers, admin_user):
        response = set_price(client, auth_headers, margin=30)

        assert response.status_code == 201
        data = response.json()
        assert data["record"]["unit_price"] == 85714
        assert data["record"]["is_active"] is True
        assert data["record"]["updated_by"] == admin_user.email
        assert data["record"]["currency"] == "FCFA"
        assert data["replaced"] is None
        assert data["warning"] is False

    def test_from_sale_price(self, client, auth_headers):
        response = set_price(client, auth_headers, unit_price=100000)

        assert response.status_code == 201
        assert response.json()["record"]["margin"] == pytest.approx(40.0)

    def test_requires_exactly_one_of_price_or_margin(self, client, auth_headers):
        assert set_price(client, auth_headers).status_code == 422
        assert set_price(client, auth_headers, margin=30, unit_price=90000).status_code == 422

    def test_invalid_margin(self, client, auth_headers):
        response = set_price(client, auth_headers, margin=100)

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_MARGIN"

    def test_negative_cost(self, client, auth_headers):
        response = set_price(client, auth_headers, cost_price=-1, margin=30)

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_COST"

    def test_unknown_variant(self, client, auth_headers):
        response = set_price(client, auth_headers, variant_id="nvr_128ch", margin=30)

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "NOT_FOUND"
        assert body["details"]["variant_id"] == "nvr_128ch"

    def test_low_margin_needs_confirmation(self, client, auth_headers):
        response = set_price(client, auth_headers, margin=5)

        assert response.status_code == 409
        assert response.json()["code"] == "MARGIN_CONFIRMATION_REQUIRED"

        active = client.get(f"{BASE}/active/nvr_systems/nvr_8ch", headers=auth_headers).json()
        assert active["configured"] is False

    def test_low_margin_confirmed(self, client, auth_headers):
        response = set_price(client, auth_headers, margin=5, confirmed=True)

        assert response.status_code == 201
        data = response.json()
        assert data["requires_confirmation"] is True
        assert data["warning"] is True
        assert len(data["warnings"]) == 1

    def test_replacing_returns_previous(self, client, auth_headers):
        first = set_price(client, auth_headers, margin=30).json()["record"]
        second = set_price(client, auth_headers, margin=35).json()

        assert second["replaced"]["id"] == first["id"]
        assert second["record"]["id"] != first["id"]


class TestActivePrice:

    def test_not_configured(self, client, auth_headers):
        response = client.get(f"{BASE}/active/nvr_systems/nvr_8ch", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["configured"] is False
        assert data["message"] == "Price not configured"
        assert data["record"] is None

    def test_configured(self, client, auth_headers):
        set_price(client, auth_headers, margin=30)
        set_price(client, auth_headers, margin=40)

        data = client.get(f"{BASE}/active/nvr_systems/nvr_8ch", headers=auth_headers).json()

        assert data["configured"] is True
        assert data["record"]["margin"] == 40
        assert data["record"]["unit_price"] == 100000

    def test_unknown_pair(self, client, auth_headers):
        response = client.get(f"{BASE}/active/nvr_systems/unknown", headers=auth_headers)
        assert response.status_code == 404


class TestHistoryAndList:

    def test_history_grows_by_one_per_save(self, client, auth_headers):
        for margin in (30, 35, 40):
            set_price(client, auth_headers, margin=margin)

        history = client.get(f"{BASE}/history/nvr_systems/nvr_8ch", headers=auth_headers).json()

        assert len(history) == 3
        assert [r["is_active"] for r in history].count(True) == 1

    def test_list_filters(self, client, auth_headers):
        set_price(client, auth_headers, margin=30)
        set_price(client, auth_headers, margin=35)
        set_price(client, auth_headers, variant_id="nvr_4ch", cost_price=30000, margin=12)

        all_records = client.get(f"{BASE}/", headers=auth_headers).json()
        assert all_records["total"] == 3

        active = client.get(f"{BASE}/", params={"active_only": True}, headers=auth_headers).json()
        assert active["total"] == 2

        low = client.get(f"{BASE}/", params={"max_margin": 15}, headers=auth_headers).json()
        assert [r["variant_id"] for r in low["items"]] == ["nvr_4ch"]

        by_variant = client.get(f"{BASE}/", params={"variant_id": "nvr_8ch"}, headers=auth_headers).json()
        assert by_variant["total"] == 2

    def test_list_pagination(self, client, auth_headers):
        for margin in (30, 31, 32):
            set_price(client, auth_headers, margin=margin)

        page = client.get(f"{BASE}/", params={"skip": 1, "limit": 1}, headers=auth_headers).json()

        assert page["total"] == 3
        assert len(page["items"]) == 1
        assert page["skip"] == 1


class TestBulkMargin:

    @pytest.fixture
    def priced(self, client, auth_headers):
        set_price(client, auth_headers, variant_id="nvr_4ch", cost_price=1000, margin=20)
        set_price(client, auth_headers, variant_id="nvr_8ch", cost_price=2000, margin=20)

    def test_product_type_scope(self, client, auth_headers, priced):
        response = client.post(
            f"{BASE}/bulk-margin",
            json={"target_margin": 40, "product_type_id": "nvr_systems"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["product_type_count"] == 1
        assert data["updated_count"] == 2
        assert data["skipped_count"] == 3
        assert sorted(r["unit_price"] for r in data["created"]) == [1667, 3333]

        unpriced = client.get(f"{BASE}/active/nvr_systems/nvr_16ch", headers=auth_headers).json()
        assert unpriced["configured"] is False

    def test_service_type_scope(self, client, auth_headers, priced):
        response = client.post(
            f"{BASE}/bulk-margin",
            json={"target_margin": 40, "service_type_id": "domotique"},
            headers=auth_headers,
        )

        data = response.json()
        assert data["product_type_count"] == 4
        assert data["updated_count"] == 0

    def test_invalid_margin(self, client, auth_headers, priced):
        response = client.post(
            f"{BASE}/bulk-margin",
            json={"target_margin": 99.5, "product_type_id": "nvr_systems"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_MARGIN"

    def test_unknown_product_type(self, client, auth_headers):
        response = client.post(
            f"{BASE}/bulk-margin",
            json={"target_margin": 40, "product_type_id": "laser_systems"},
            headers=auth_headers,
        )
        assert response.status_code == 404


class TestPreview:

    def test_margin_change(self, client, auth_headers):
        response = client.post(
            f"{BASE}/preview",
            json={"cost_price": 60000, "field": "margin", "value": 30},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["unit_price"] == 85714
        assert data["warning"] is False

    def test_cost_change_flags_low_margin(self, client, auth_headers):
        response = client.post(
            f"{BASE}/preview",
            json={"unit_price": 100000, "cost_price": 60000, "margin": 40, "field": "cost_price", "value": 95000},
            headers=auth_headers,
        )

        data = response.json()
        assert data["margin"] == pytest.approx(5.0)
        assert data["requires_confirmation"] is True
        assert "Confirmation required" in data["message"]

    def test_unknown_field(self, client, auth_headers):
        response = client.post(
            f"{BASE}/preview",
            json={"field": "currency", "value": 1},
            headers=auth_headers,
        )
        assert response.status_code == 422


class TestCSVUpload:

    def upload(self, client, headers, content, filename="prices.csv", **form):
        return client.post(
            f"{BASE}/upload-csv",
            files={"file": (filename, content.encode("utf-8"), "text/csv")},
            data=form,
            headers=headers,
        )

    def test_runs_in_threadpool(self):
        assert not inspect.iscoroutinefunction(upload_csv_prices)

    def test_mixed_rows(self, client, auth_headers):
        content = (
            "Product Type ID,Variant ID,Cost Price,Margin,Unit Price\n"
            "nvr_systems,nvr_8ch,60000,30,\n"
            "nvr_systems,nvr_16ch,90000,,120000\n"
            "nvr_systems,nvr_128ch,1000,30,\n"
        )

        response = self.upload(client, auth_headers, content)

        assert response.status_code == 200
        data = response.json()
        assert data["total_rows"] == 3
        assert data["created_count"] == 2
        assert data["failed_count"] == 1
        assert data["errors"][0]["row"] == 4
        assert data["errors"][0]["code"] == "NOT_FOUND"

        active = client.get(f"{BASE}/active/nvr_systems/nvr_8ch", headers=auth_headers).json()
        assert active["record"]["unit_price"] == 85714

    def test_low_margin_rows(self, client, auth_headers):
        content = "product_type_id,variant_id,cost_price,margin\nnvr_systems,nvr_8ch,60000,5\n"

        refused = self.upload(client, auth_headers, content).json()
        assert refused["failed_count"] == 1
        assert refused["errors"][0]["code"] == "MARGIN_CONFIRMATION_REQUIRED"

        confirmed = self.upload(client, auth_headers, content, confirm_low_margins="true").json()
        assert confirmed["created_count"] == 1
        assert len(confirmed["warnings"]) == 1

    def test_row_with_price_and_margin(self, client, auth_headers):
        content = "product_type_id,variant_id,cost_price,margin,unit_price\nnvr_systems,nvr_8ch,60000,30,90000\n"

        data = self.upload(client, auth_headers, content).json()

        assert data["failed_count"] == 1
        assert data["errors"][0]["code"] == "INVALID_ROW"

    def test_missing_columns(self, client, auth_headers):
        response = self.upload(client, auth_headers, "variant_id,margin\nnvr_8ch,30\n")
        assert response.status_code == 400

    def test_not_a_csv(self, client, auth_headers):
        response = self.upload(client, auth_headers, "irrelevant", filename="prices.xlsx")
        assert response.status_code == 400
