"""
Retail Search - command line demo.

Runs one search against the configured sources and prints the ranked
recommendations.

Usage:
    python -m retail_search "running shoes under 3000" --location 110001

    # Machine-readable output
    python -m retail_search "gaming laptop under 80000" --location 560001 --json

Environment Variables:
    RETAIL_SEARCH_SOURCES: Comma-separated source names
    RETAIL_SEARCH_SOURCE_TIMEOUT: Per-source deadline in seconds
    RETAIL_SEARCH_LOG_LEVEL: Logging level (default: INFO)
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

from retail_search.application.service import Recommendation
from retail_search.config import Settings
from retail_search.container import create_container
from retail_search.shared.exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retail_search",
        description="Search several retailers at once and rank the results",
    )
    parser.add_argument("query", help="What you are looking for, e.g. \"running shoes under 3000\"")
    parser.add_argument(
        "--location",
        default="110001",
        help="6-digit delivery location code (default: 110001)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full recommendation as JSON",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-source deadline in seconds (overrides RETAIL_SEARCH_SOURCE_TIMEOUT)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides RETAIL_SEARCH_LOG_LEVEL)",
    )
    return parser


def format_recommendation(recommendation: Recommendation) -> str:
    lines = [f"Results for \"{recommendation.query.description}\" ({recommendation.query.location_code})", ""]
    for source, result in recommendation.results.items():
        status = result.status.value
        detail = f"{len(result.items)} items" if result.ok else (result.error or status)
        lines.append(f"  {source:<10} {status:<16} {detail}")
    lines.append("")

    if not recommendation.ranked:
        lines.append("No matching products found.")
        return "\n".join(lines)

    for rank, item in enumerate(recommendation.ranked, start=1):
        badges = " ".join(f"[{h.kind.value}]" for h in item.highlights)
        lines.append(
            f"{rank:>2}. {item.name} ({item.source}) {item.currency}{item.price:,.0f}"
            f"  {item.match_score:.1f}% {badges}".rstrip()
        )
        lines.append(f"    {item.explanation}")
    return "\n".join(lines)


async def run(args: argparse.Namespace, settings: Settings) -> int:
    container = create_container(settings)
    service = container.service()
    try:
        query = service.build_query(args.query, args.location)
        recommendation = await service.recommend(query)
    finally:
        await container.lookup_client().close()

    if args.json:
        print(json.dumps(recommendation.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_recommendation(recommendation))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    if args.timeout is not None:
        if args.timeout <= 0:
            print("Configuration error: --timeout must be positive", file=sys.stderr)
            return 2
        settings = dataclasses.replace(settings, source_timeout=args.timeout)
    if args.log_level:
        settings = dataclasses.replace(settings, log_level=args.log_level)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return asyncio.run(run(args, settings))
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
