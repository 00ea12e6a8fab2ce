"""
Bulk-update price calculation.

When a bulk edit changes MRP, tax or a margin across many products, every
related field of each product is recomputed so the catalogue stays
consistent. Unlike the per-keystroke engine, intermediate values are rounded
at each step, matching the backend's stored figures.
"""

from __future__ import annotations

import logging
from typing import Union

from basil_core.models.enums import BulkField
from basil_core.models.schemas import PriceFieldSet
from basil_core.utils.rounding import round2

logger = logging.getLogger(__name__)


def _split(price: float, tax_rate: float) -> tuple[float, float]:
    """(base, gst) of a tax-inclusive price, each rounded."""
    if tax_rate > 0:
        base = round2(price / (1 + tax_rate))
        return base, round2(price - base)
    return price, 0.0


def _margin_from_price(price: float, mrp: float) -> float | None:
    """Back-derived margin, or None when it falls outside (0, 100)."""
    margin = round2((1 - price / mrp) * 100)
    if 0 < margin < 100:
        return margin
    return None


def calculate_bulk_update_fields(
    product: PriceFieldSet,
    field: Union[BulkField, str],
    new_value: float,
) -> dict[str, float]:
    """
    Recalculate all pricing fields of ``product`` after ``field`` changes to ``new_value``.
    Fields that end up zero or blank are omitted from the result.
    """
    field = BulkField.parse(field)

    mrp = product.mrp or 0.0
    tax_percentage = product.tax_percentage or 0.0
    margin = product.margin_percentage or 0.0
    purchase_margin = product.purchase_margin_percentage or 0.0
    current_cost_price = product.cost_price or 0.0
    current_selling_price = product.selling_price or 0.0

    if field == BulkField.MRP:
        mrp = round2(new_value)
    elif field == BulkField.TAX_PERCENTAGE:
        tax_percentage = round2(new_value)
    elif field == BulkField.MARGIN_PERCENTAGE:
        margin = round2(new_value)
    elif field == BulkField.PURCHASE_MARGIN_PERCENTAGE:
        purchase_margin = round2(new_value)

    tax_rate = tax_percentage / 100
    cost_price = cost_price_base = cost_gst = 0.0
    selling_price = selling_price_base = selling_gst = 0.0

    if field == BulkField.TAX_PERCENTAGE:
        # Base prices stay put; GST and inclusive prices follow the new rate
        cost_price_base = product.cost_price_base or 0.0
        selling_price_base = product.selling_price_base or 0.0

        if cost_price_base > 0:
            cost_gst = round2(cost_price_base * tax_percentage / 100)
            cost_price = round2(cost_price_base + cost_gst)
        if selling_price_base > 0:
            selling_gst = round2(selling_price_base * tax_percentage / 100)
            selling_price = round2(selling_price_base + selling_gst)

        if mrp > 0 and cost_price > 0:
            purchase_margin = _margin_from_price(cost_price, mrp) or purchase_margin
        if mrp > 0 and selling_price > 0:
            margin = _margin_from_price(selling_price, mrp) or margin
    else:
        if mrp > 0 and 0 < purchase_margin < 100:
            cost_price = round2(mrp * (1 - purchase_margin / 100))
            cost_price_base, cost_gst = _split(cost_price, tax_rate)
        elif current_cost_price > 0:
            cost_price = current_cost_price
            cost_price_base, cost_gst = _split(cost_price, tax_rate)

        if mrp > 0 and 0 < margin < 100:
            selling_price = round2(mrp * (1 - margin / 100))
            selling_price_base, selling_gst = _split(selling_price, tax_rate)
        elif mrp > 0:
            selling_price = mrp
            selling_price_base, selling_gst = _split(selling_price, tax_rate)
        elif current_selling_price > 0:
            selling_price = current_selling_price
            selling_price_base, selling_gst = _split(selling_price, tax_rate)

        if mrp > 0 and cost_price > 0 and purchase_margin == 0:
            purchase_margin = _margin_from_price(cost_price, mrp) or purchase_margin
        if mrp > 0 and selling_price > 0 and margin == 0:
            margin = _margin_from_price(selling_price, mrp) or margin

    result = {
        "mrp": mrp,
        "cost_price": cost_price,
        "cost_price_base": cost_price_base,
        "cost_gst": cost_gst,
        "selling_price": selling_price,
        "selling_price_base": selling_price_base,
        "selling_gst": selling_gst,
        "margin_percentage": margin,
        "purchase_margin_percentage": purchase_margin,
        "tax_percentage": tax_percentage,
    }
    calculated = {k: v for k, v in result.items() if v > 0}
    logger.debug(f"[BULK] {field.value}={new_value} → {sorted(calculated)}")
    return calculated
