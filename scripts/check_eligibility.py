#!/usr/bin/env python3
"""
Check registered Injective addresses for airdrop eligibility.

This script reads a registration sheet export, resolves NFT collection
ownership, marketplace listings, INJ balance and Helix/Mito participation
for every address, and writes a JSON report of the eligible ones.
"""

import argparse
import sys
from typing import List, Optional

from scripts.lib.aggregator import EligibilityAggregator
from scripts.lib.config import ConfigError, load_config
from scripts.lib.formatters import InputError, load_sheet, write_report
from scripts.lib.injective_client import CatalogClient, InjectiveAPIError, InjectiveClient
from scripts.lib.models import DEFAULT_COLLECTIONS, OUTPUT_FORMATS
from scripts.lib.rate_limiter import DEFAULT_BATCH_SIZE, DEFAULT_PAUSE, BatchRateLimiter
from scripts.lib.resolvers import (
    BalanceResolver,
    ParticipationResolver,
    create_ownership_resolver,
    fetch_sell_order_index,
    log,
)


DEFAULT_OUTPUT = "results.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check registered addresses for eligibility and write a JSON report.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from the environment (or a .env file):
  REGISTERED_FILE, RPC_URL, INDEXER_URL       required
  CATALOG_URL, CATALOG_API_KEY                optional, set together
  REQUEST_TIMEOUT                             optional, seconds

Examples:
  # Full report to results.json
  %(prog)s

  # Address list only, printed to stdout
  %(prog)s --format addresses --output -
        """,
    )

    parser.add_argument(
        "--env-file",
        help="Path of the .env file (default: nearest .env from the working directory)",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT,
        help=f"Output file path, or - for stdout (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default="full",
        help="Report shape (default: full)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Addresses per batch before pausing (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--pause",
        type=float,
        default=DEFAULT_PAUSE,
        help=f"Pause between batches in seconds (default: {DEFAULT_PAUSE})",
    )
    return parser


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parsed_args = build_parser().parse_args(args)

    log("scan", "Starting...")

    try:
        config = load_config(parsed_args.env_file)
        sheet = load_sheet(config.registered_file)
        rate_limiter = BatchRateLimiter(parsed_args.batch_size, parsed_args.pause)
    except (ConfigError, InputError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    client = InjectiveClient(config.rpc_url, config.indexer_url, timeout=config.request_timeout)
    catalog = None
    if config.uses_catalog:
        catalog = CatalogClient(
            config.catalog_url,
            config.catalog_api_key,
            timeout=config.request_timeout,
            session=client.session,
        )

    log("scan", "Scanning sell orders...")
    try:
        sell_orders = fetch_sell_order_index(client)
    except InjectiveAPIError as e:
        print(f"Error: could not fetch sell orders: {e}", file=sys.stderr)
        return 1
    log("scan", f"Found {len(sell_orders)} address(es) with open sell orders")

    aggregator = EligibilityAggregator(
        sell_orders=sell_orders,
        tracked=DEFAULT_COLLECTIONS,
        ownership=create_ownership_resolver(client, DEFAULT_COLLECTIONS, catalog),
        balance=BalanceResolver(client),
        participation=ParticipationResolver(client),
        rate_limiter=rate_limiter,
    )

    log("scan", "Scanning nft and sell orders...")
    report = aggregator.scan(sheet.registered_addresses())
    log("scan", f"Scanned {report.scanned} address(es), {report.retained} eligible")

    output_path = None if parsed_args.output == "-" else parsed_args.output
    try:
        written = write_report(
            report.records, output_path, parsed_args.output_format, DEFAULT_COLLECTIONS
        )
    except OSError as e:
        print(f"Error writing results: {e}", file=sys.stderr)
        return 1

    if written:
        print(f"\nResults written to: {written}", file=sys.stderr)
    log("scan", "Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
