"""
Hyperdrive crawler.

Drains the frontier one drive at a time:
1. Optionally mount the drive into the root drive
2. List the drive recursively
3. Read every scrapable file and queue the addresses found in it
4. Queue every drive mounted inside it

Per-item failures (open, list, read, stat, mount) are recorded in the
report and skipped. A drive that fails stays visited and is never retried
within the run.
"""

import asyncio
import time
from collections.abc import Iterable

import structlog

from pleco.core.logging import crawl_context, new_crawl_id
from pleco.crawler.addresses import scrape_addresses
from pleco.crawler.base import CrawlFailure, CrawlMetrics, CrawlReport
from pleco.crawler.frontier import CrawlFrontier
from pleco.crawler.policy import ScrapePolicy
from pleco.drives.base import (
    DriveAccessor,
    DriveError,
    DriveProvider,
    DriveUnavailableError,
    ListError,
    MountError,
    ReadError,
)

logger = structlog.get_logger()


class CrawlSession:
    """Traversal state of one run. Owned by the crawler, never shared."""

    def __init__(self) -> None:
        self.frontier = CrawlFrontier()
        self.failures: list[CrawlFailure] = []
        self.mounted: list[str] = []
        self.started = time.monotonic()

    def record(self, key: str | None, error: DriveError) -> None:
        self.failures.append(
            CrawlFailure(key=key, operation=error.operation, error=error.message, path=error.path)
        )

    def report(self) -> CrawlReport:
        metrics = CrawlMetrics(
            visited=self.frontier.crawled,
            pending=self.frontier.size,
            mounted=len(self.mounted),
            elapsed=time.monotonic() - self.started,
        )
        return CrawlReport(
            metrics=metrics,
            visited=self.frontier.visited,
            mounted=list(self.mounted),
            failures=list(self.failures),
        )


class Crawler:
    """Crawls the drive graph reachable from a set of seed keys.

    The crawler is stateless between runs; every ``run()`` gets its own
    session, so one instance can serve several independent crawls.
    """

    def __init__(
        self,
        provider: DriveProvider,
        policy: ScrapePolicy | None = None,
        *,
        root_key: str | None = None,
        mount: bool = False,
        read_concurrency: int = 1,
    ):
        """Initialize crawler.

        Args:
            provider: Drive backend (local store or remote daemon)
            policy: Scrape policy, defaults to ScrapePolicy()
            root_key: Working drive; seeded first and used as mount target
            mount: Mount every crawled drive into the root drive
            read_concurrency: Files read at once within one drive
        """
        if mount and root_key is None:
            raise ValueError("Mount mode requires a root drive key")

        self.provider = provider
        self.policy = policy or ScrapePolicy()
        self.root_key = root_key
        self.mount = mount
        self.read_concurrency = max(1, read_concurrency)
        self.log = logger.bind(component="Crawler")

    async def run(self, seeds: Iterable[str] = ()) -> CrawlReport:
        """Crawl until no undiscovered drives remain.

        Args:
            seeds: Drive keys or hyperdrive URIs to start from

        Returns:
            CrawlReport with metrics, visited keys and skipped failures

        Raises:
            DriveUnavailableError: Mount mode and the root drive cannot be opened
        """
        session = CrawlSession()
        frontier = session.frontier

        with crawl_context(new_crawl_id()):
            if self.root_key is not None:
                frontier.add(self.root_key)
            frontier.add(*seeds)

            root_drive: DriveAccessor | None = None
            already_mounted: set[str] = set()
            if self.mount:
                root_drive, already_mounted = await self._open_root()

            self.log.info(
                "Starting crawl",
                seeds=frontier.size,
                mount=self.mount,
                read_concurrency=self.read_concurrency,
            )

            while (key := frontier.drain()) is not None:
                self.log.info(
                    "Crawling drive",
                    key=key,
                    queued=frontier.size,
                    crawled=frontier.crawled,
                )

                if root_drive is not None and key != self.root_key and key not in already_mounted:
                    await self._mount(session, root_drive, key)
                    already_mounted.add(key)

                await self._crawl_drive(session, key)

            report = session.report()
            self.log.info(
                "Crawl complete",
                drives=report.metrics.visited,
                elapsed=report.metrics.elapsed_display,
                failures=len(report.failures),
            )
            if report.metrics.mounted:
                self.log.info("Mounted drives in root drive", mounted=report.metrics.mounted)

        return report

    async def _open_root(self) -> tuple[DriveAccessor, set[str]]:
        """Open the root drive and collect the drives already mounted in it."""
        root_drive = await self.provider.open(self.root_key)
        try:
            entries = await root_drive.list("/")
        except ListError as e:
            self.log.warning("Could not list root drive", error=e.message)
            return root_drive, set()
        mounted = await self.policy.filter_mounts(entries, root_drive.stat)
        self.log.debug("Root drive mounts", count=len(mounted))
        return root_drive, set(mounted)

    async def _mount(self, session: CrawlSession, root_drive: DriveAccessor, key: str) -> None:
        """Best-effort mount of key at /<key> in the root drive."""
        try:
            await root_drive.mount(key, f"/{key}")
        except MountError as e:
            self.log.debug("Mount failed", key=key[:12], error=e.message)
            session.record(key, e)
            return
        session.mounted.append(key)
        self.log.info("Mounted", key=key)

    async def _crawl_drive(self, session: CrawlSession, key: str) -> None:
        frontier = session.frontier
        log = self.log.bind(key=key[:12])

        try:
            drive = await self.provider.open(key)
        except DriveUnavailableError as e:
            log.debug("Drive unavailable", error=e.message)
            session.record(key, e)
            return

        try:
            entries = await drive.list("/", recursive=True)
        except ListError as e:
            log.debug("Listing failed", error=e.message)
            session.record(key, e)
            return

        targets = self.policy.filter_scrapable(entries)
        texts = await self._read_all(session, drive, targets)

        added = 0
        for text in texts:
            if text is not None:
                added += frontier.add(*scrape_addresses(text))

        mounts = await self.policy.filter_mounts(
            entries,
            drive.stat,
            on_error=lambda entry, e: session.record(key, e),
        )
        added += frontier.add(*mounts)

        log.debug(
            "Drive scraped",
            entries=len(entries),
            scraped=len(targets),
            mounts=len(mounts),
            added=added,
        )

    async def _read_all(
        self,
        session: CrawlSession,
        drive: DriveAccessor,
        paths: list[str],
    ) -> list[str | None]:
        """Read files in listing order; failed reads come back as None."""

        async def read_one(path: str) -> str | None:
            try:
                return await drive.read(f"/{path}")
            except ReadError as e:
                self.log.debug("Read failed", key=drive.key[:12], path=path[:80], error=e.message)
                session.record(drive.key, e)
                return None

        if self.read_concurrency == 1:
            return [await read_one(path) for path in paths]

        semaphore = asyncio.Semaphore(self.read_concurrency)

        async def bounded(path: str) -> str | None:
            async with semaphore:
                return await read_one(path)

        return list(await asyncio.gather(*(bounded(path) for path in paths)))
