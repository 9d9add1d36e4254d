"""
Crawl frontier: the deduplicating work set of one crawl.
"""

from collections.abc import Iterator

from pleco.crawler.addresses import normalize_key


class CrawlFrontier:
    """Pending and visited drive keys of one crawl run.

    A key moves from unseen to pending to visited exactly once; once it is
    pending or visited, adding it again is a no-op.

    Keys are drained last-in-first-out, so the crawl explores depth-first:
    the most recently discovered drive is visited next. The order only
    changes when a drive is visited relative to its siblings, never whether
    it is.

    Not thread-safe. The crawler owns the frontier and only touches it
    from the event loop.
    """

    def __init__(self) -> None:
        self._pending: list[str] = []
        self._pending_set: set[str] = set()
        self._visited: dict[str, None] = {}

    def add(self, *candidates: str) -> int:
        """Queue drive keys or hyperdrive URIs.

        Invalid candidates and keys already pending or visited are skipped,
        including duplicates within the same call.

        Returns:
            Number of keys actually queued
        """
        count = 0
        for candidate in candidates:
            key = normalize_key(candidate)
            if key is None:
                continue
            if key in self._pending_set or key in self._visited:
                continue
            self._pending.append(key)
            self._pending_set.add(key)
            count += 1
        return count

    def drain(self) -> str | None:
        """Take the next key and mark it visited. None when exhausted."""
        if not self._pending:
            return None
        key = self._pending.pop()
        self._pending_set.discard(key)
        self._visited[key] = None
        return key

    def __iter__(self) -> Iterator[str]:
        """Drain until empty. Keys added while iterating are picked up."""
        while (key := self.drain()) is not None:
            yield key

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    def __contains__(self, key: object) -> bool:
        return key in self._pending_set or key in self._visited

    @property
    def size(self) -> int:
        """Keys still queued."""
        return len(self._pending)

    @property
    def crawled(self) -> int:
        """Keys drained so far."""
        return len(self._visited)

    @property
    def pending(self) -> list[str]:
        """Snapshot of queued keys, next-to-drain last."""
        return list(self._pending)

    @property
    def visited(self) -> list[str]:
        """Snapshot of drained keys in visit order."""
        return list(self._visited)
