"""
Tests: PriceCalculationService — backend first, local engine as fallback.

Run with:
    pytest basil_core/tests/test_price_service.py -v
"""

import asyncio

from basil_core.errors import ApiError
from basil_core.models.schemas import ModeFlags
from basil_core.pricing.service import (
    DERIVED_FIELDS_PATH,
    PRICES_FROM_MRP_PATH,
    PriceCalculationService,
)


class FakeApi:
    """Records posts and answers with a canned payload or error."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def post(self, path, json=None):
        self.calls.append((path, json))
        if self.error is not None:
            raise self.error
        return self.response


def _service(api, use_backend=True):
    return PriceCalculationService(api=api, use_backend=use_backend, default_tax_percentage=0)


class TestDerivedFields:
    def test_backend_result_used(self):
        api = FakeApi(response={"costPriceBase": 100, "costGST": 18})
        result = asyncio.run(
            _service(api).calculate_derived_fields("cost_price", "118", {"taxPercentage": 18})
        )

        assert result == {"cost_price_base": 100.0, "cost_gst": 18.0}
        path, payload = api.calls[0]
        assert path == DERIVED_FIELDS_PATH
        assert payload["field"] == "costPrice"
        assert payload["value"] == 118.0
        assert payload["currentData"]["taxPercentage"] == 18
        assert payload["editCostPriceAsBase"] is False

    def test_flags_forwarded(self):
        api = FakeApi(response={})
        flags = ModeFlags(edit_selling_price_as_base=True)
        asyncio.run(_service(api).calculate_derived_fields("mrp", "200", {}, flags))
        assert api.calls[0][1]["editSellingPriceAsBase"] is True
        assert api.calls[0][1]["currentData"]["taxPercentage"] == 0

    def test_falls_back_on_api_error(self):
        api = FakeApi(error=ApiError("Unable to connect", code="NETWORK_ERROR"))
        result = asyncio.run(
            _service(api).calculate_derived_fields("cost_price", "118", {"taxPercentage": 18})
        )
        assert result["cost_price_base"] == 100.0
        assert result["cost_gst"] == 18.0

    def test_falls_back_on_malformed_response(self):
        api = FakeApi(response=["not", "a", "dict"])
        result = asyncio.run(
            _service(api).calculate_derived_fields("cost_price", "118", {"taxPercentage": 18})
        )
        assert result["cost_price_base"] == 100.0

    def test_mid_typing_skips_network(self):
        api = FakeApi(response={"costPriceBase": 1})
        result = asyncio.run(_service(api).calculate_derived_fields("cost_price", "12.", {}))
        assert result == {}
        assert api.calls == []

    def test_backend_disabled(self):
        api = FakeApi(response={"costPriceBase": 1})
        result = asyncio.run(
            _service(api, use_backend=False).calculate_derived_fields("cost_price", "50", {})
        )
        assert result["cost_price_base"] == 50.0
        assert api.calls == []

    def test_unknown_field(self):
        api = FakeApi(response={})
        assert asyncio.run(_service(api).calculate_derived_fields("stock", "5", {})) == {}
        assert api.calls == []


class TestPricesFromMRP:
    def test_backend(self):
        api = FakeApi(response={"costPrice": 160, "sellingPrice": 200})
        result = asyncio.run(_service(api).calculate_prices_from_mrp(200, 18, 0, 20))
        assert result == {"cost_price": 160.0, "selling_price": 200.0}
        path, payload = api.calls[0]
        assert path == PRICES_FROM_MRP_PATH
        assert payload == {
            "mrp": 200,
            "taxPercentage": 18,
            "purchaseMarginPercentage": 20,
            "marginPercentage": 0,
        }

    def test_local_without_client(self):
        service = PriceCalculationService(api=None, use_backend=True)
        assert service.backend_enabled is False
        result = asyncio.run(service.calculate_prices_from_mrp(200, 18, 0, 20))
        assert result["cost_price"] == 160.0
        assert result["cost_price_base"] == 135.59
