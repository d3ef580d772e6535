"""Command-line interface for the leveraged position valuation."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import load_config
from .errors import ValuationError
from .logging_setup import configure_logging
from .services import ValuationService, format_valuation


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="leverage-valuation",
        description="Point-in-time USD valuation of leveraged LP positions",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    value_parser = sub.add_parser("value", help="Value one wallet's position in a pair")
    value_parser.add_argument("wallet", help="Wallet (authority) address, base58")
    value_parser.add_argument("pair", help="Configured pair name, e.g. RAY-USDC")
    value_parser.add_argument(
        "--protocol", default="solfarm", help="Protocol name (default: solfarm)"
    )
    value_parser.add_argument(
        "--gross-only",
        action="store_true",
        help="Accept positions without an outstanding borrow",
    )

    sub.add_parser("report", help="Value every configured wallet and pair")

    return parser


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    service = ValuationService(config)

    if args.command == "value":
        try:
            valuation = await service.value(
                args.wallet,
                args.pair,
                protocol=args.protocol,
                require_borrow=not args.gross_only,
            )
        except (ValuationError, KeyError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(format_valuation(valuation))
    elif args.command == "report":
        print(await service.generate_report())
    else:
        build_parser().print_help()
        return 1
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
