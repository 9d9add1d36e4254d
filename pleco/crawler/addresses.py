"""
Hyperdrive address extraction.

Provides:
- scrape_addresses: find every ``hyper://<key>`` in a body of text
- normalize_key: turn a URI or bare key into a canonical drive key
"""

import re

SCHEME = "hyper://"
KEY_LENGTH = 64

ADDRESS_PATTERN = re.compile(r"hyper://[0-9a-f]{64}")
KEY_PATTERN = re.compile(r"[0-9a-f]{64}")


def scrape_addresses(text: str) -> list[str]:
    """Collect all hyperdrive addresses in a body of text.

    Matches are returned in order of occurrence. Duplicates are kept;
    deduplication is the frontier's job.
    """
    return ADDRESS_PATTERN.findall(text)


def normalize_key(ref: str) -> str | None:
    """Extract the drive key from a hyperdrive URI or bare key.

    ``hyper://<key>/some/path`` and ``<key>`` both resolve to ``<key>``.
    Anything that does not yield 64 lowercase hex characters is rejected
    with ``None``.
    """
    if ref.startswith("hyper:"):
        key = ref[len(SCHEME):len(SCHEME) + KEY_LENGTH]
    else:
        key = ref[:KEY_LENGTH]
    return key if KEY_PATTERN.fullmatch(key) else None


def is_key(value: str) -> bool:
    """Check whether value is already a canonical drive key."""
    return bool(KEY_PATTERN.fullmatch(value))


def format_address(key: str) -> str:
    return f"{SCHEME}{key}"
