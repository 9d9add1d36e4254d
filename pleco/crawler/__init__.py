"""
Crawler Module for Pleco.

Discovers hyperdrives by scraping drive contents for ``hyper://`` addresses
and following every new address until none remain.

Main components:
- Crawler: Drains the frontier, reads drives, queues discovered keys
- CrawlFrontier: Deduplicating pending/visited key set
- ScrapePolicy: Which entries are read, which sub-trees are skipped
- scrape_addresses / normalize_key: Address extraction

Usage:
    from pleco.crawler import Crawler
    from pleco.drives import LocalDriveStore

    async with LocalDriveStore("./drives") as store:
        report = await Crawler(store).run([seed_key])
        print(report.metrics.visited, report.metrics.elapsed_display)
"""

from pleco.crawler.addresses import format_address, is_key, normalize_key, scrape_addresses
from pleco.crawler.base import CrawlFailure, CrawlMetrics, CrawlReport, format_elapsed
from pleco.crawler.frontier import CrawlFrontier
from pleco.crawler.orchestrator import Crawler, CrawlSession
from pleco.crawler.policy import ScrapePolicy
from pleco.crawler.seeds import SeedKind, SeedResolution, classify_seed, resolve_seeds, scrape_url

__all__ = [
    # Main crawler
    "Crawler",
    "CrawlSession",
    "CrawlFrontier",
    "ScrapePolicy",

    # Result types
    "CrawlFailure",
    "CrawlMetrics",
    "CrawlReport",

    # Seeds
    "SeedKind",
    "SeedResolution",
    "classify_seed",
    "resolve_seeds",
    "scrape_url",

    # Utilities
    "scrape_addresses",
    "normalize_key",
    "is_key",
    "format_address",
    "format_elapsed",
]
