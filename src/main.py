"""Main entry point with CLI."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import orjson

from src.config import config, Config
from src.fetch.client import FetchClient, direct_client
from src.fetch.endpoints import EVENT_PATHS, is_allowed_domain
from src.fetch.errors import CompareError
from src.fetch.events import fetch_events
from src.jobs.counts import fetch_counts
from src.jobs.runner import compare
from src.logging_conf import setup_logging
from src.parse.kinds import RecordKind
from src.parse.models import SourceDescriptor

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Compare listing services between two servers")
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Log level (default: {config.LOG_LEVEL})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare_parser = subparsers.add_parser("compare", help="Compare one service between two servers")
    compare_parser.add_argument("--domain1", default=config.DEFAULT_LEFT_DOMAIN, help="Left server")
    compare_parser.add_argument("--domain2", default=config.DEFAULT_RIGHT_DOMAIN, help="Right server")
    compare_parser.add_argument(
        "--service",
        choices=[kind.value for kind in RecordKind],
        required=True,
        help="Listing service to compare",
    )
    compare_parser.add_argument(
        "--incremental",
        action="store_true",
        help="Stop as soon as the difference is explained instead of scanning everything",
    )
    compare_parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help=f"Page size (default: {config.DEFAULT_BATCH_SIZE} incremental, fallback sizes {config.FALLBACK_PAGE_SIZES} full)",
    )
    compare_parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help=f"Page cap for incremental scans (default: {config.DEFAULT_MAX_PAGES})",
    )
    compare_parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help=f"Concurrent page requests (default: {config.CONCURRENCY})",
    )

    counts_parser = subparsers.add_parser("counts", help="Totals of every service on one server")
    counts_parser.add_argument("--domain", default=config.MAIN_DOMAIN)

    events_parser = subparsers.add_parser("events", help="List the events of one server")
    events_parser.add_argument("--domain", default=config.MAIN_DOMAIN)
    events_parser.add_argument("--type", dest="event_type", choices=list(EVENT_PATHS), default="upcoming")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def _print_json(data) -> None:
    print(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())


def _check_domains(*domains: str) -> None:
    for domain in domains:
        if not is_allowed_domain(domain):
            logger.error(f"Domain not allowed: {domain}")
            sys.exit(2)


async def run_compare(args: argparse.Namespace) -> None:
    kind = RecordKind(args.service)
    result = await compare(
        SourceDescriptor(domain=args.domain1, kind=kind),
        SourceDescriptor(domain=args.domain2, kind=kind),
        batch_size=args.batch_size,
        max_pages=args.max_pages,
        incremental=args.incremental,
        concurrency=args.concurrency,
    )
    _print_json(result.to_response())


async def run_counts(args: argparse.Namespace) -> None:
    async with FetchClient() as client:
        counts = await fetch_counts(client, args.domain)
    _print_json({"domain": args.domain, **{service: result.model_dump() for service, result in counts.items()}})


async def run_events(args: argparse.Namespace) -> None:
    async with direct_client() as client:
        listing = await fetch_events(client, args.domain, args.event_type)
    _print_json(listing.to_response())


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if args.command == "serve":
        import uvicorn
        from src.api.main import app

        logger.info(f"Serving on {args.host}:{args.port} (proxy: {config.PROXY_URL or 'none'})")
        uvicorn.run(app, host=args.host, port=args.port, log_level=(args.log_level or config.LOG_LEVEL).lower())
        return

    if args.command == "compare":
        _check_domains(args.domain1, args.domain2)
        job = run_compare(args)
    elif args.command == "counts":
        _check_domains(args.domain)
        job = run_counts(args)
    else:
        _check_domains(args.domain)
        job = run_events(args)

    try:
        asyncio.run(job)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except CompareError as e:
        logger.error(f"Comparison failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
