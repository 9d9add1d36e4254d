"""
Command-line entrypoint.

Usage:
    pleco [SEEDS ...] [--root KEY] [--mount] [--store PATH | --daemon-url URL]

Seeds are hyperdrive URIs, bare keys, or HTTP(S) pages to scrape once.
Visited drive addresses are printed to stdout; progress goes to the log
(stderr).
"""

import argparse
import asyncio
import sys

import httpx
import structlog

from pleco import __version__
from pleco.core.config import Settings, get_settings
from pleco.core.logging import configure_logging
from pleco.crawler.addresses import format_address, normalize_key
from pleco.crawler.orchestrator import Crawler
from pleco.crawler.policy import ScrapePolicy
from pleco.crawler.seeds import resolve_seeds
from pleco.drives.base import DriveProvider, DriveUnavailableError, TransportError
from pleco.drives.local import LocalDriveStore
from pleco.drives.remote import RemoteDriveClient

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pleco",
        description="Crawl hyperdrives reachable from seed input and index discovered drives",
    )
    parser.add_argument(
        "seeds",
        nargs="*",
        help="hyper:// URIs, bare drive keys, or http(s) pages to scrape once",
    )
    parser.add_argument("--root", help="Working drive key; seeded first and used as mount target")
    parser.add_argument(
        "--mount",
        action="store_true",
        help="Mount every discovered drive into the root drive",
    )
    backend = parser.add_mutually_exclusive_group()
    backend.add_argument("--store", help="Local drive store directory (default: PLECO_STORE_PATH)")
    backend.add_argument("--daemon-url", help="Remote drive daemon URL (default: PLECO_DAEMON_URL)")
    parser.add_argument(
        "--read-concurrency",
        type=int,
        help="Files read at once within one drive (default: PLECO_READ_CONCURRENCY)",
    )
    parser.add_argument("--json-logs", action="store_true", default=None, help="Emit JSON log lines")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Minimum log level (default: PLECO_LOG_LEVEL)",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    return parser


async def _open_provider(args: argparse.Namespace, settings: Settings) -> DriveProvider:
    """Build and connect the drive backend. Raises TransportError on failure."""
    daemon_url = args.daemon_url or (None if args.store else settings.daemon_url)
    provider: DriveProvider
    if daemon_url:
        provider = RemoteDriveClient(
            daemon_url,
            token=settings.daemon_token,
            timeout=settings.http_timeout,
            user_agent=settings.user_agent,
        )
    else:
        provider = LocalDriveStore(args.store or settings.store_path)

    try:
        await provider.connect()
    except TransportError:
        await provider.close()
        raise
    return provider


async def run(args: argparse.Namespace, settings: Settings) -> int:
    log = logger.bind(component="cli")

    try:
        provider = await _open_provider(args, settings)
    except TransportError as e:
        log.error("Drive transport unavailable", error=e.message, url=e.url, hint=e.hint)
        return EXIT_FAILURE

    async with provider:
        async with httpx.AsyncClient(
            timeout=settings.http_timeout,
            headers={"User-Agent": settings.user_agent},
        ) as http:
            seeds = await resolve_seeds(args.seeds, http)

        if args.root is None and not seeds.keys:
            log.error("No drive keys to crawl", seeds=len(args.seeds))
            return EXIT_FAILURE

        if args.mount and isinstance(provider, LocalDriveStore):
            await provider.create(args.root)

        crawler = Crawler(
            provider,
            ScrapePolicy(settings.exclude_dirs, settings.scrapable_extensions),
            root_key=args.root,
            mount=args.mount,
            read_concurrency=args.read_concurrency or settings.read_concurrency,
        )

        try:
            report = await crawler.run(seeds.keys)
        except DriveUnavailableError as e:
            log.error("Root drive unavailable", key=e.key, error=e.message)
            return EXIT_FAILURE

    for key in report.visited:
        print(format_address(key))

    print(
        f"Found {report.metrics.visited} drives in {report.metrics.elapsed_display}",
        file=sys.stderr,
    )
    if report.metrics.mounted:
        print(f"Mounted {report.metrics.mounted} drives in root drive", file=sys.stderr)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"Pleco v{__version__}")
        return EXIT_OK

    if args.root is not None:
        root = normalize_key(args.root)
        if root is None:
            parser.error(f"--root is not a drive key: {args.root}")
        args.root = root

    if args.mount and args.root is None:
        parser.error("--mount requires --root")

    if args.read_concurrency is not None and args.read_concurrency < 1:
        parser.error("--read-concurrency must be at least 1")

    settings = get_settings()
    configure_logging(
        json_logs=settings.json_logs if args.json_logs is None else args.json_logs,
        log_level=args.log_level or settings.log_level,
    )

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    raise SystemExit(main())
