"""Pricing — derivation engine, bulk recalculation and the backend-first service."""

from basil_core.pricing.engine import (
    PriceDerivationEngine,
    calculate_mrp_from_cost_price,
    calculate_prices_from_mrp,
    recompute,
    sanitize_numeric,
)
from basil_core.pricing.bulk import calculate_bulk_update_fields
from basil_core.pricing.service import PriceCalculationService

__all__ = [
    "PriceDerivationEngine",
    "PriceCalculationService",
    "calculate_bulk_update_fields",
    "calculate_mrp_from_cost_price",
    "calculate_prices_from_mrp",
    "recompute",
    "sanitize_numeric",
]
