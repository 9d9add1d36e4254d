"""
Seed input handling.

Seeds come from the command line and are either drive addresses
(``hyper://<key>`` or a bare key), which go straight onto the frontier, or
HTTP(S) URLs. An HTTP seed is fetched once and scraped for addresses; its
links are never followed.
"""

from dataclasses import dataclass, field
from enum import Enum

import httpx
import structlog

from pleco.crawler.addresses import normalize_key, scrape_addresses
from pleco.crawler.base import CrawlFailure
from pleco.drives.base import FetchError

logger = structlog.get_logger()


class SeedKind(str, Enum):
    """How a seed URI is handled."""
    HTTP = "http"        # One-shot fetch and scrape
    DRIVE = "drive"      # Added to the frontier
    INVALID = "invalid"  # Ignored


@dataclass
class SeedResolution:
    """Drive keys resolved from seed input."""
    keys: list[str] = field(default_factory=list)
    failures: list[CrawlFailure] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)


def classify_seed(uri: str) -> SeedKind:
    lowered = uri.lower()
    if lowered.startswith(("http://", "https://")):
        return SeedKind.HTTP
    if normalize_key(uri) is not None:
        return SeedKind.DRIVE
    return SeedKind.INVALID


async def scrape_url(client: httpx.AsyncClient, url: str) -> list[str]:
    """Fetch a web page once and return the hyperdrive addresses in it.

    Raises:
        FetchError: Transport error or non-2xx response
    """
    try:
        response = await client.get(url, follow_redirects=True)
    except httpx.HTTPError as e:
        raise FetchError(f"Request failed: {e}", url=url) from e

    if not response.is_success:
        raise FetchError(f"HTTP {response.status_code}", url=url)

    return scrape_addresses(response.text)


async def resolve_seeds(uris: list[str], client: httpx.AsyncClient) -> SeedResolution:
    """
    Turn seed URIs into drive keys.

    Drive seeds resolve directly. HTTP seeds are scraped; a failed fetch is
    recorded and skipped.

    Args:
        uris: Seed URIs in command-line order
        client: httpx AsyncClient used for HTTP seeds

    Returns:
        SeedResolution with keys in seed order (duplicates kept)
    """
    result = SeedResolution()

    for uri in uris:
        kind = classify_seed(uri)

        if kind is SeedKind.DRIVE:
            result.keys.append(normalize_key(uri))
            continue

        if kind is SeedKind.INVALID:
            logger.warning("Ignoring invalid seed", seed=uri[:80])
            result.invalid.append(uri)
            continue

        try:
            addresses = await scrape_url(client, uri)
        except FetchError as e:
            logger.warning("Seed fetch failed", url=uri[:80], error=e.message)
            result.failures.append(
                CrawlFailure(key=None, operation=e.operation, error=e.message, path=uri)
            )
            continue

        keys = [k for k in (normalize_key(a) for a in addresses) if k is not None]
        logger.info("Scraped seed page", url=uri[:80], addresses=len(keys))
        result.keys.extend(keys)

    return result
