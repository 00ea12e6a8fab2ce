"""
BASIL Core — Main Entry Point

Derive the dependent price fields for a single edit (CLI):
    python -m basil_core derive mrp 200 --purchase-margin 20 --tax 18

Run the pricing API server:
    python -m basil_core serve
    # or: uvicorn basil_core.api:app --reload --port 8000

Or import and run programmatically:
    from basil_core.main import derive
    updates = derive("mrp", "200", {"purchaseMarginPercentage": 20})
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

from basil_core.config import get_settings
from basil_core.models.schemas import ModeFlags, PriceFieldSet
from basil_core.pricing.engine import PriceDerivationEngine
from basil_core.utils.logger import setup_logging


def derive(
    field: str,
    value: str,
    current: Optional[Mapping[str, Any]] = None,
    cost_as_base: bool = False,
    selling_as_base: bool = False,
) -> dict[str, float]:
    """Run one recompute and return the update with camelCase keys."""
    logger = logging.getLogger(__name__)
    engine = PriceDerivationEngine(get_settings().default_tax_percentage)
    flags = ModeFlags(
        edit_cost_price_as_base=cost_as_base,
        edit_selling_price_as_base=selling_as_base,
    )
    updates = engine.recompute(field, value, dict(current or {}), flags)
    if not updates:
        logger.debug(f"No fields to update for {field}={value!r}")
    return PriceFieldSet(**updates).to_wire()


def print_derived(updates: dict[str, float]) -> None:
    print(json.dumps(updates, indent=2, sort_keys=True))


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI pricing server."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("basil_core.api:app", host=host, port=port, reload=settings.debug)
