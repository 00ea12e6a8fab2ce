"""
Tests: pricing HTTP API and the command-line entry point.

Run with:
    pytest basil_core/tests/test_api.py -v
"""

import json

import pytest
from fastapi.testclient import TestClient

from basil_core.__main__ import main
from basil_core.api import create_app


@pytest.fixture
def client():
    return TestClient(create_app())


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "timestamp" in response.json()


class TestPricingRoutes:
    def test_calculate_prices(self, client):
        response = client.post(
            "/api/pricing/calculate-prices",
            json={"mrp": 200, "taxPercentage": 18, "purchaseMarginPercentage": 20},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["costPrice"] == 160.0
        assert body["costPriceBase"] == 135.59
        assert body["costGST"] == 24.41
        assert body["sellingPrice"] == 200.0

    def test_calculate_prices_rejects_zero_mrp(self, client):
        response = client.post("/api/pricing/calculate-prices", json={"mrp": 0})
        assert response.status_code == 422

    def test_derived_fields(self, client):
        response = client.post(
            "/api/pricing/calculate-derived-fields",
            json={"field": "costPrice", "value": "118", "currentData": {"taxPercentage": 18}},
        )
        assert response.status_code == 200
        assert response.json() == {"costPriceBase": 100.0, "costGST": 18.0}

    def test_derived_fields_with_base_flag(self, client):
        response = client.post(
            "/api/pricing/calculate-derived-fields",
            json={
                "field": "mrp",
                "value": 200,
                "currentData": {"purchaseMarginPercentage": 20, "taxPercentage": 18},
                "editCostPriceAsBase": True,
            },
        )
        assert response.json()["costPriceBase"] == 160.0
        assert response.json()["costPrice"] == 188.8

    def test_derived_fields_mid_typing(self, client):
        response = client.post(
            "/api/pricing/calculate-derived-fields",
            json={"field": "mrp", "value": "12.", "currentData": {}},
        )
        assert response.status_code == 200
        assert response.json() == {}

    def test_derived_fields_overlong_value(self, client):
        response = client.post(
            "/api/pricing/calculate-derived-fields",
            json={"field": "costPrice", "value": "9" * 400, "currentData": {"taxPercentage": 18}},
        )
        assert response.status_code == 200
        assert response.json() == {}

    def test_derived_fields_unknown_field(self, client):
        response = client.post(
            "/api/pricing/calculate-derived-fields",
            json={"field": "stockQuantity", "value": "5"},
        )
        assert response.status_code == 400

    def test_mrp_from_cost(self, client):
        response = client.post(
            "/api/pricing/mrp-from-cost",
            json={"costPrice": 80, "purchaseMarginPercentage": 20},
        )
        assert response.json() == {"mrp": 100.0}

    def test_bulk_update(self, client):
        response = client.post(
            "/api/pricing/bulk-update",
            json={
                "product": {"mrp": 100, "taxPercentage": 18, "marginPercentage": 10, "purchaseMarginPercentage": 20},
                "field": "mrp",
                "newValue": 200,
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["costPrice"] == 160.0
        assert body["sellingPrice"] == 180.0
        assert body["sellingGST"] == 27.46

    def test_bulk_update_unknown_field(self, client):
        response = client.post(
            "/api/pricing/bulk-update",
            json={"product": {"mrp": 100}, "field": "costPrice", "newValue": 10},
        )
        assert response.status_code == 400


class TestCli:
    def test_derive_prints_update(self, capsys):
        code = main(["derive", "mrp", "200", "--purchase-margin", "20", "--tax", "18"])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["costPrice"] == 160.0
        assert output["costGST"] == 24.41
        assert output["sellingPrice"] == 200.0

    def test_derive_mid_typing_prints_empty(self, capsys):
        main(["derive", "costPrice", "12."])
        assert json.loads(capsys.readouterr().out) == {}
