"""
API routes — thin HTTP layer over the local pricing engine.

Mirrors the backend price-calculation contract so clients can point at this
service for instant, offline-capable feedback.

Routes:
  GET  /health                                → API health check
  POST /api/pricing/calculate-prices          → price both sides from MRP
  POST /api/pricing/calculate-derived-fields  → recompute after a single-field edit
  POST /api/pricing/mrp-from-cost             → MRP from cost price and purchase margin
  POST /api/pricing/bulk-update               → recompute a product for a bulk edit
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Union

from fastapi import APIRouter, HTTPException
from pydantic import Field

from basil_core.config import get_settings
from basil_core.models.enums import BulkField, PriceField
from basil_core.models.schemas import CamelModel, ModeFlags, PriceFieldSet
from basil_core.pricing.bulk import calculate_bulk_update_fields
from basil_core.pricing.engine import (
    PriceDerivationEngine,
    calculate_mrp_from_cost_price,
    calculate_prices_from_mrp,
)

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
pricing_router = APIRouter()


# ── Request schemas ──────────────────────────────────────
class PricesFromMRPRequest(CamelModel):
    mrp: float = Field(gt=0)
    tax_percentage: float = Field(default=0.0, ge=0)
    margin_percentage: float = Field(default=0.0, ge=0, lt=100)
    purchase_margin_percentage: float = Field(default=0.0, ge=0, lt=100)


class DerivedFieldsRequest(CamelModel):
    field: str
    value: Union[str, float, None] = None
    current_data: PriceFieldSet = Field(default_factory=PriceFieldSet)
    edit_cost_price_as_base: bool = False
    edit_selling_price_as_base: bool = False


class MRPFromCostRequest(CamelModel):
    cost_price: float = Field(ge=0)
    purchase_margin_percentage: float = Field(default=0.0, ge=0)


class MRPResponse(CamelModel):
    mrp: float


class BulkUpdateRequest(CamelModel):
    product: PriceFieldSet
    field: str
    new_value: float


def _to_wire(updates: dict[str, float]) -> dict[str, float]:
    return PriceFieldSet(**updates).to_wire()


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Pricing ──────────────────────────────────────────────

@pricing_router.post("/calculate-prices")
async def calculate_prices(request: PricesFromMRPRequest) -> dict[str, float]:
    updates = calculate_prices_from_mrp(
        request.mrp,
        request.margin_percentage,
        request.purchase_margin_percentage,
        request.tax_percentage,
    )
    return _to_wire(updates)


@pricing_router.post("/calculate-derived-fields")
async def calculate_derived_fields(request: DerivedFieldsRequest) -> dict[str, float]:
    try:
        field = PriceField.parse(request.field)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    engine = PriceDerivationEngine(get_settings().default_tax_percentage)
    flags = ModeFlags(
        edit_cost_price_as_base=request.edit_cost_price_as_base,
        edit_selling_price_as_base=request.edit_selling_price_as_base,
    )
    updates = engine.recompute(field, request.value, request.current_data, flags)
    return _to_wire(updates)


@pricing_router.post("/mrp-from-cost", response_model=MRPResponse)
async def mrp_from_cost(request: MRPFromCostRequest) -> MRPResponse:
    mrp = calculate_mrp_from_cost_price(request.cost_price, request.purchase_margin_percentage)
    return MRPResponse(mrp=mrp)


@pricing_router.post("/bulk-update")
async def bulk_update(request: BulkUpdateRequest) -> dict[str, float]:
    try:
        field = BulkField.parse(request.field)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Unsupported bulk field: {request.field}") from e

    updates = calculate_bulk_update_fields(request.product, field, request.new_value)
    return _to_wire(updates)
