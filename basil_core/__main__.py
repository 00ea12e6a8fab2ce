"""Allow running as: python -m basil_core"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from basil_core.config import get_settings
from basil_core.main import derive, print_derived, serve
from basil_core.utils.logger import setup_logging

# option name → camelCase form field
_CURRENT_FIELDS = {
    "mrp": "mrp",
    "tax": "taxPercentage",
    "margin": "marginPercentage",
    "purchase_margin": "purchaseMarginPercentage",
    "cost_price": "costPrice",
    "cost_price_base": "costPriceBase",
    "selling_price": "sellingPrice",
    "selling_price_base": "sellingPriceBase",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="basil_core", description="BASIL pricing and session core")
    commands = parser.add_subparsers(dest="command", required=True)

    derive_cmd = commands.add_parser("derive", help="recompute price fields after one edit")
    derive_cmd.add_argument("field", help="edited field, snake_case or camelCase")
    derive_cmd.add_argument("value", help="value as typed")
    for option in _CURRENT_FIELDS:
        derive_cmd.add_argument(f"--{option.replace('_', '-')}", dest=option, type=float)
    derive_cmd.add_argument("--cost-as-base", action="store_true")
    derive_cmd.add_argument("--selling-as-base", action="store_true")

    serve_cmd = commands.add_parser("serve", help="run the pricing API")
    serve_cmd.add_argument("--host", default="0.0.0.0")
    serve_cmd.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        serve(args.host, args.port)
        return 0

    setup_logging(get_settings().log_level)
    current = {
        wire: getattr(args, option)
        for option, wire in _CURRENT_FIELDS.items()
        if getattr(args, option) is not None
    }
    print_derived(derive(args.field, args.value, current, args.cost_as_base, args.selling_as_base))
    return 0


if __name__ == "__main__":
    sys.exit(main())
