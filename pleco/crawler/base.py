"""
Crawler Module - Base Data Classes.

Shared types for crawl runs.
"""

from dataclasses import dataclass, field


@dataclass
class CrawlFailure:
    """A single per-item failure that was skipped during a crawl."""
    key: str | None
    operation: str          # open, list, read, stat, mount, fetch
    error: str
    path: str | None = None


@dataclass
class CrawlMetrics:
    """Counters for one crawl run."""
    visited: int = 0
    pending: int = 0
    mounted: int = 0
    elapsed: float = 0.0    # seconds

    @property
    def elapsed_display(self) -> str:
        return format_elapsed(self.elapsed)


@dataclass
class CrawlReport:
    """
    Result of a crawl run.

    Contains the drives visited, in visit order, and every failure that
    was skipped along the way.
    """
    metrics: CrawlMetrics
    visited: list[str] = field(default_factory=list)
    mounted: list[str] = field(default_factory=list)
    failures: list[CrawlFailure] = field(default_factory=list)

    def failures_for(self, key: str) -> list[CrawlFailure]:
        """Get all failures recorded for one drive."""
        return [f for f in self.failures if f.key == key]


def format_elapsed(seconds: float) -> str:
    """Format a duration as seconds, minutes, or hours by magnitude."""
    if seconds < 60:
        return f"{seconds:.2f} sec"
    if seconds < 3600:
        return f"{seconds / 60:.2f} min"
    return f"{seconds / 3600:.2f} hr"
