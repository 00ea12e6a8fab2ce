"""
Price Derivation Engine — keeps a product's pricing fields consistent.

Given the field the user just edited, recomputes the dependent fields:

  costPrice    = costPriceBase * (1 + tax/100)         costGST    = costPrice - costPriceBase
  sellingPrice = sellingPriceBase * (1 + tax/100)      sellingGST = sellingPrice - sellingPriceBase
  costPrice    = mrp * (1 - purchaseMargin/100)        (mrp present, margin > 0)
  sellingPrice = mrp * (1 - margin/100)                (mrp present, margin > 0)
  price        = mrp                                   (mrp present, that margin == 0)

Pure and synchronous: safe to call on every keystroke. Invalid or partially
typed input yields an empty update, never an exception. Only the returned
fields are rounded (2 dp); the chain itself runs in full float precision.

This is the local counterpart of the backend price-calculation endpoints,
used while a product does not exist in inventory yet.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from basil_core.models.enums import PriceField
from basil_core.models.schemas import ModeFlags, PriceFieldSet
from basil_core.utils.rounding import to_fixed

logger = logging.getLogger(__name__)

RawValue = Union[str, int, float, None]
PriceUpdate = dict[str, float]

_NON_NUMERIC = re.compile(r"[^0-9.]")


# ── Input handling ───────────────────────────────────────

def sanitize_numeric(raw: RawValue) -> str:
    """Strip everything but digits and the first decimal point."""
    cleaned = _NON_NUMERIC.sub("", "" if raw is None else str(raw))
    head, dot, tail = cleaned.partition(".")
    return head + dot + tail.replace(".", "")


class _MidTyping(Exception):
    """Raised internally for input like ``"10."``; never escapes the engine."""


def _read_input(raw: RawValue) -> Optional[float]:
    """Parse the typed value. ``None`` means blank or invalid."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        if not math.isfinite(value) or value < 0:
            return None
        return value
    cleaned = sanitize_numeric(raw)
    if cleaned.endswith("."):
        raise _MidTyping(cleaned)
    if not cleaned:
        return None
    value = float(cleaned)
    # very long digit strings parse to inf
    return value if math.isfinite(value) else None


def _num(value: Optional[float]) -> float:
    """Blank reads as zero, the way an empty form field does."""
    return value if value is not None else 0.0


# ── Price triads ─────────────────────────────────────────

def _split_inclusive(price: float, tax_rate: float) -> tuple[float, float, float]:
    """(inclusive, base, gst) from a tax-inclusive price."""
    base = price / (1 + tax_rate) if tax_rate > 0 else price
    return price, base, price - base


def _from_base(base: float, tax_rate: float) -> tuple[float, float, float]:
    """(inclusive, base, gst) from a tax-exclusive price."""
    price = base * (1 + tax_rate) if tax_rate > 0 else base
    return price, base, price - base


def _side_from_mrp(
    mrp: float, margin: float, tax_rate: float, as_base: bool
) -> tuple[float, float, float]:
    """
    Price one side (cost or selling) from MRP.

    A zero margin means the price equals MRP. In base mode the MRP-derived
    figure is the tax-exclusive price the user controls.
    """
    target = mrp * (1 - margin / 100) if margin > 0 else mrp
    if as_base:
        return _from_base(target, tax_rate)
    return _split_inclusive(target, tax_rate)


def _cost(triad: tuple[float, float, float]) -> PriceUpdate:
    price, base, gst = triad
    return {"cost_price": to_fixed(price), "cost_price_base": to_fixed(base), "cost_gst": to_fixed(gst)}


def _selling(triad: tuple[float, float, float]) -> PriceUpdate:
    price, base, gst = triad
    return {
        "selling_price": to_fixed(price),
        "selling_price_base": to_fixed(base),
        "selling_gst": to_fixed(gst),
    }


# ── Engine ───────────────────────────────────────────────

class PriceDerivationEngine:
    """Recompute dependent pricing fields after a single-field edit."""

    def __init__(self, default_tax_percentage: float = 0.0):
        self.default_tax_percentage = default_tax_percentage

    def recompute(
        self,
        changed_field: Union[PriceField, str],
        raw_value: RawValue,
        current: Union[PriceFieldSet, Mapping[str, Any]],
        flags: Optional[ModeFlags] = None,
    ) -> PriceUpdate:
        """
        Return the fields to update (snake_case keys, rounded to 2 dp).
        An empty dict means "leave the form as it is".
        """
        try:
            field = PriceField.parse(changed_field)
        except ValueError:
            logger.debug(f"Ignoring edit of non-price field {changed_field!r}")
            return {}

        if not isinstance(current, PriceFieldSet):
            try:
                current = PriceFieldSet.model_validate(current)
            except ValidationError as e:
                logger.debug(f"Ignoring edit over unreadable form data: {e}")
                return {}
        flags = flags or ModeFlags()

        try:
            value = _read_input(raw_value)
        except _MidTyping:
            return {}

        if field == PriceField.TAX_PERCENTAGE:
            tax_percentage = _num(value)
        else:
            tax_percentage = current.tax_percentage or self.default_tax_percentage or 0.0
        tax_rate = tax_percentage / 100

        handler = _HANDLERS[field]
        try:
            updates = handler(value, current, flags, tax_rate)
        except ArithmeticError as e:
            # overflow to inf or nan somewhere in the chain
            logger.debug(f"Ignoring edit with out-of-range result: {e!r}")
            return {}
        logger.debug(f"[PRICING] {field.value}={raw_value!r} → {sorted(updates)}")
        return updates


# ── Per-field rules ──────────────────────────────────────

def _on_cost_price(value, current: PriceFieldSet, flags: ModeFlags, tax_rate: float) -> PriceUpdate:
    if value is None:
        return {}
    updates = _cost(_split_inclusive(value, tax_rate))
    del updates["cost_price"]
    mrp = _num(current.mrp)
    if mrp > 0 and value > 0:
        # margin follows price in this direction
        updates["purchase_margin_percentage"] = to_fixed((1 - value / mrp) * 100)
    return updates


def _on_cost_price_base(value, current: PriceFieldSet, flags: ModeFlags, tax_rate: float) -> PriceUpdate:
    if value is None or tax_rate <= 0:
        return {}
    updates = _cost(_from_base(value, tax_rate))
    del updates["cost_price_base"]
    return updates


def _on_selling_price(value, current: PriceFieldSet, flags: ModeFlags, tax_rate: float) -> PriceUpdate:
    if value is None:
        return {}
    updates = _selling(_split_inclusive(value, tax_rate))
    del updates["selling_price"]
    mrp = _num(current.mrp)
    if mrp > 0 and value > 0:
        updates["margin_percentage"] = to_fixed((1 - value / mrp) * 100)
    return updates


def _on_selling_price_base(value, current: PriceFieldSet, flags: ModeFlags, tax_rate: float) -> PriceUpdate:
    if value is None or tax_rate <= 0:
        return {}
    updates = _selling(_from_base(value, tax_rate))
    del updates["selling_price_base"]
    return updates


def _on_mrp(value, current: PriceFieldSet, flags: ModeFlags, tax_rate: float) -> PriceUpdate:
    if value is None or value <= 0:
        return {}
    purchase_margin = _num(current.purchase_margin_percentage)
    margin = _num(current.margin_percentage)
    updates = _cost(_side_from_mrp(value, purchase_margin, tax_rate, flags.edit_cost_price_as_base))
    updates.update(_selling(_side_from_mrp(value, margin, tax_rate, flags.edit_selling_price_as_base)))
    return updates


def _on_purchase_margin(value, current: PriceFieldSet, flags: ModeFlags, tax_rate: float) -> PriceUpdate:
    mrp = _num(current.mrp)
    purchase_margin = _num(value)
    if mrp <= 0 or not 0 <= purchase_margin < 100:
        return {}
    updates = _cost(_side_from_mrp(mrp, purchase_margin, tax_rate, flags.edit_cost_price_as_base))
    margin = _num(current.margin_percentage)
    if margin > 0:
        updates.update(_selling(_side_from_mrp(mrp, margin, tax_rate, flags.edit_selling_price_as_base)))
    return updates


def _on_margin(value, current: PriceFieldSet, flags: ModeFlags, tax_rate: float) -> PriceUpdate:
    mrp = _num(current.mrp)
    margin = _num(value)
    if mrp <= 0 or not 0 <= margin < 100:
        return {}
    updates = _selling(_side_from_mrp(mrp, margin, tax_rate, flags.edit_selling_price_as_base))
    purchase_margin = _num(current.purchase_margin_percentage)
    if purchase_margin > 0:
        updates.update(_cost(_side_from_mrp(mrp, purchase_margin, tax_rate, flags.edit_cost_price_as_base)))
    return updates


def _on_tax_percentage(value, current: PriceFieldSet, flags: ModeFlags, tax_rate: float) -> PriceUpdate:
    # A zero rate leaves the base/GST split untouched.
    if tax_rate <= 0:
        return {}
    updates: PriceUpdate = {}
    if current.cost_price is not None:
        cost = _cost(_split_inclusive(current.cost_price, tax_rate))
        updates["cost_price_base"] = cost["cost_price_base"]
        updates["cost_gst"] = cost["cost_gst"]
    if flags.edit_selling_price_as_base and current.selling_price_base is not None:
        selling = _selling(_from_base(current.selling_price_base, tax_rate))
        updates["selling_price"] = selling["selling_price"]
        updates["selling_gst"] = selling["selling_gst"]
    elif current.selling_price is not None:
        selling = _selling(_split_inclusive(current.selling_price, tax_rate))
        updates["selling_price_base"] = selling["selling_price_base"]
        updates["selling_gst"] = selling["selling_gst"]

    mrp = _num(current.mrp)
    margin = _num(current.margin_percentage)
    purchase_margin = _num(current.purchase_margin_percentage)
    if mrp > 0 and (margin > 0 or purchase_margin > 0):
        # MRP is tax-inclusive: re-slice both prices under the new rate
        updates.update(_cost(_side_from_mrp(mrp, purchase_margin, tax_rate, as_base=False)))
        updates.update(_selling(_side_from_mrp(mrp, margin, tax_rate, as_base=False)))
    return updates


_HANDLERS = {
    PriceField.COST_PRICE: _on_cost_price,
    PriceField.COST_PRICE_BASE: _on_cost_price_base,
    PriceField.SELLING_PRICE: _on_selling_price,
    PriceField.SELLING_PRICE_BASE: _on_selling_price_base,
    PriceField.MRP: _on_mrp,
    PriceField.PURCHASE_MARGIN_PERCENTAGE: _on_purchase_margin,
    PriceField.MARGIN_PERCENTAGE: _on_margin,
    PriceField.TAX_PERCENTAGE: _on_tax_percentage,
}


# ── Module-level helpers ─────────────────────────────────

def recompute(
    changed_field: Union[PriceField, str],
    raw_value: RawValue,
    current: Union[PriceFieldSet, Mapping[str, Any]],
    flags: Optional[ModeFlags] = None,
    default_tax_percentage: float = 0.0,
) -> PriceUpdate:
    """Functional form of :meth:`PriceDerivationEngine.recompute`."""
    return PriceDerivationEngine(default_tax_percentage).recompute(changed_field, raw_value, current, flags)


def calculate_prices_from_mrp(
    mrp: float,
    margin_percentage: float = 0.0,
    purchase_margin_percentage: float = 0.0,
    tax_percentage: float = 0.0,
) -> PriceUpdate:
    """
    Price both sides from MRP.
    Formula: Selling Price = MRP * (1 - margin/100), Cost Price = MRP * (1 - purchaseMargin/100).
    """
    tax_rate = tax_percentage / 100
    updates = _cost(_split_inclusive(mrp * (1 - purchase_margin_percentage / 100), tax_rate))
    updates.update(_selling(_split_inclusive(mrp * (1 - margin_percentage / 100), tax_rate)))
    return updates


def calculate_mrp_from_cost_price(cost_price: float, purchase_margin_percentage: float) -> float:
    """MRP = Cost Price / (1 - purchaseMargin/100); the cost price itself for margins >= 100."""
    purchase_margin_rate = purchase_margin_percentage / 100
    if purchase_margin_rate >= 1:
        return to_fixed(cost_price)
    return to_fixed(cost_price / (1 - purchase_margin_rate))
