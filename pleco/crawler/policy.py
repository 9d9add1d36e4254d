"""
Scrape policy: which drive entries are read for addresses.

An entry is scrapable when its extension is on the allow-list and no
segment of its path is an excluded directory name. Exclusion applies at
any depth, so ``a/node_modules/b.js`` is skipped just like
``node_modules/b.js``.
"""

from collections.abc import Awaitable, Callable, Iterable

import structlog

from pleco.drives.base import MountInfo, StatError

logger = structlog.get_logger()


# Dependency caches and VCS metadata
DEFAULT_EXCLUDE_DIRS = frozenset({"node_modules", ".git"})

# Markup, markdown, structured data, scripts, stylesheets
DEFAULT_EXTENSIONS = (".htm", ".html", ".md", ".xml", ".json", ".js", ".css")


StatLookup = Callable[[str], Awaitable[MountInfo | None]]
StatFailureHook = Callable[[str, StatError], None]


class ScrapePolicy:
    """Decides which entries of a drive listing get scraped."""

    def __init__(
        self,
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        self.exclude_dirs = frozenset(exclude_dirs)
        self.extensions = tuple(extensions)

    def is_excluded_path(self, path: str) -> bool:
        return any(segment in self.exclude_dirs for segment in path.split("/"))

    def is_scrapable(self, path: str) -> bool:
        return path.endswith(self.extensions) and not self.is_excluded_path(path)

    def filter_scrapable(self, entries: Iterable[str]) -> list[str]:
        return [entry for entry in entries if self.is_scrapable(entry)]

    async def filter_mounts(
        self,
        entries: Iterable[str],
        stat: StatLookup,
        on_error: StatFailureHook | None = None,
    ) -> list[str]:
        """Collect the keys of all drives mounted at the given entries.

        Every entry is stat'ed regardless of the scrape rules; nested drives
        are always followed. A failed stat only drops that entry.

        Args:
            entries: Drive-relative entry paths
            stat: Stat lookup of the drive being crawled
            on_error: Called with (entry, error) for every failed stat

        Returns:
            Mounted drive keys in entry order
        """
        mounts: list[str] = []
        for entry in entries:
            try:
                info = await stat(f"/{entry}")
            except StatError as e:
                logger.debug("Stat failed", entry=entry[:80], error=e.message)
                if on_error is not None:
                    on_error(entry, e)
                continue
            if info is not None:
                mounts.append(info.key)
        return mounts
