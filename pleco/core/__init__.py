"""
Core package initialization.
"""

from pleco.core.config import Settings, get_settings
from pleco.core.logging import configure_logging, crawl_context, new_crawl_id

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
    "crawl_context",
    "new_crawl_id",
]
