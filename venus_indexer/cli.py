"""Command-line interface for the Venus market indexer."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .models import Market
from .services import Indexer
from .stores import JsonFileMarketStore


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="venus-indexer",
        description="Venus lending market indexer",
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

    sub.add_parser("sync", help="Refresh all markets at the latest block")
    sub.add_parser("show", help="Print the stored markets")

    watch_parser = sub.add_parser("watch", help="Refresh markets on every new block")
    watch_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Poll interval in seconds (overrides config)",
    )

    return parser


def format_market(market: Market) -> str:
    """One-line summary of a stored market."""
    return (
        f"{market.symbol or market.id:<10} {market.underlying_symbol:<8} "
        f"${market.underlying_price_usd} · {market.underlying_price} BNB · "
        f"supply {market.total_supply} · borrows {market.total_borrows} · "
        f"block {market.accrual_block_number}"
    )


def _show(config: AppConfig) -> None:
    store = JsonFileMarketStore(config.indexer.store_path)
    markets = store.all()
    if not markets:
        print("No markets stored yet. Run 'sync' first.")
        return
    for market in markets:
        print(format_market(market))


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "show":
        _show(config)
        return

    indexer = Indexer(config)
    if args.command == "sync":
        await indexer.sync_once()
    elif args.command == "watch":
        await indexer.run_continuous(args.interval)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
