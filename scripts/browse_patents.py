"""Command-line access to the NASA Technology Transfer portal."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional, Sequence

from patentradar.core.config import get_settings
from patentradar.core.errors import PortalError
from patentradar.schemas import PatentCategory
from patentradar.services.portal import PatentPortalClient

LOGGER = logging.getLogger("browse_patents")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search, browse and scrape NASA technology listings")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    parser.add_argument("--timeout", type=float, help="Override the per-request timeout in seconds")
    subcommands = parser.add_subparsers(dest="command", required=True)

    search = subcommands.add_parser("search", help="Free-text search")
    search.add_argument("query", help="Search terms")
    search.add_argument("--page", type=int, default=1, help="1-based result page")

    browse = subcommands.add_parser("browse", help="List a category (default: all categories)")
    browse.add_argument(
        "category",
        nargs="?",
        default="all",
        help=f"Category label or slug, e.g. {PatentCategory.SENSORS.value!r}",
    )

    detail = subcommands.add_parser("detail", help="Scrape a listing's detail page")
    detail.add_argument("case_number", help="NASA case number, e.g. ARC-12345")

    subcommands.add_parser("categories", help="Print the category catalogue")
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format="%(asctime)s %(levelname)s %(message)s")


async def run(args: argparse.Namespace) -> Any:
    if args.command == "categories":
        return [
            {"label": category.value, "display_name": category.display_name, "slug": category.api_slug}
            for category in PatentCategory
        ]

    settings = get_settings()
    if args.timeout:
        settings = settings.model_copy(update={"request_timeout": args.timeout})

    async with PatentPortalClient(settings) as portal:
        if args.command == "search":
            patents = await portal.search(args.query, args.page)
            return [patent.model_dump() for patent in patents]
        if args.command == "browse":
            patents = await portal.browse_by_category(args.category)
            return [patent.model_dump() for patent in patents]
        detail = await portal.get_detail(args.case_number)
        return detail.model_dump()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        payload = asyncio.run(run(args))
    except PortalError as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        return 1
    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
