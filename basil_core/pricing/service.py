"""
Price Calculation Service — backend first, local engine as fallback.

The backend's price endpoints are authoritative (GST compliant). When they
are disabled or unreachable, the local PriceDerivationEngine answers
instead so the form still updates instantly. Reconciling the two results is
left to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from basil_core.config import get_settings
from basil_core.errors import ApiError
from basil_core.models.enums import PriceField
from basil_core.models.schemas import ModeFlags, PriceFieldSet
from basil_core.pricing.engine import (
    PriceDerivationEngine,
    PriceUpdate,
    RawValue,
    calculate_prices_from_mrp,
    sanitize_numeric,
)
from basil_core.services.api_client import ApiClient

logger = logging.getLogger(__name__)

DERIVED_FIELDS_PATH = "/shopkeeper/inventory/calculate-derived-fields"
PRICES_FROM_MRP_PATH = "/shopkeeper/inventory/calculate-prices"


class PriceCalculationService:
    """Async facade over the backend price endpoints with a local fallback."""

    def __init__(
        self,
        api: Optional[ApiClient] = None,
        use_backend: Optional[bool] = None,
        default_tax_percentage: Optional[float] = None,
    ):
        settings = get_settings()
        self.api = api
        self.use_backend = settings.use_backend_pricing if use_backend is None else use_backend
        if default_tax_percentage is None:
            default_tax_percentage = settings.default_tax_percentage
        self.engine = PriceDerivationEngine(default_tax_percentage)

    @property
    def backend_enabled(self) -> bool:
        return self.use_backend and self.api is not None

    async def calculate_derived_fields(
        self,
        field: Union[PriceField, str],
        raw_value: RawValue,
        current: Union[PriceFieldSet, Mapping[str, Any]],
        flags: Optional[ModeFlags] = None,
    ) -> PriceUpdate:
        """Fields to update after ``field`` was edited (snake_case keys)."""
        try:
            field = PriceField.parse(field)
        except ValueError:
            return {}

        cleaned = sanitize_numeric(raw_value) if isinstance(raw_value, str) else None
        if cleaned is not None and cleaned.endswith("."):
            # mid-typing: no recompute, no request
            return {}

        flags = flags or ModeFlags()
        if self.backend_enabled and (cleaned is None or cleaned):
            if not isinstance(current, PriceFieldSet):
                try:
                    current = PriceFieldSet.model_validate(current)
                except ValidationError:
                    return {}
            value = float(cleaned) if cleaned is not None else raw_value
            try:
                return await self._derived_from_backend(field, value, current, flags)
            except ApiError as e:
                logger.warning(f"Backend price calculation failed, using local engine: {e.message}")

        return self.engine.recompute(field, raw_value, current, flags)

    async def calculate_prices_from_mrp(
        self,
        mrp: float,
        tax_percentage: float = 0.0,
        margin_percentage: float = 0.0,
        purchase_margin_percentage: float = 0.0,
    ) -> PriceUpdate:
        """The six price fields for a product priced off its MRP."""
        if self.backend_enabled:
            payload = {
                "mrp": mrp,
                "taxPercentage": tax_percentage,
                "purchaseMarginPercentage": purchase_margin_percentage,
                "marginPercentage": margin_percentage,
            }
            try:
                data = await self.api.post(PRICES_FROM_MRP_PATH, payload)
                return self._parse_update(data)
            except ApiError as e:
                logger.warning(f"Backend MRP pricing failed, using local engine: {e.message}")
        return calculate_prices_from_mrp(mrp, margin_percentage, purchase_margin_percentage, tax_percentage)

    async def _derived_from_backend(
        self,
        field: PriceField,
        value: Any,
        current: PriceFieldSet,
        flags: ModeFlags,
    ) -> PriceUpdate:
        current_data = current.to_wire()
        current_data.setdefault("taxPercentage", self.engine.default_tax_percentage)
        payload = {
            "field": to_camel(field.value),
            "value": value,
            "currentData": current_data,
            "editCostPriceAsBase": flags.edit_cost_price_as_base,
            "editSellingPriceAsBase": flags.edit_selling_price_as_base,
        }
        data = await self.api.post(DERIVED_FIELDS_PATH, payload)
        return self._parse_update(data)

    @staticmethod
    def _parse_update(data: Any) -> PriceUpdate:
        if not isinstance(data, dict):
            raise ApiError("Failed to calculate prices", code="INVALID_RESPONSE")
        try:
            return PriceFieldSet.model_validate(data).model_dump(exclude_none=True)
        except ValidationError as e:
            raise ApiError("Failed to calculate prices", code="INVALID_RESPONSE", details=str(e)) from e
