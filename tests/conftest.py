"""
Pytest configuration and fixtures for Pleco tests.
"""

from collections.abc import Callable

import pytest

from pleco.drives.base import (
    DriveAccessor,
    DriveProvider,
    DriveUnavailableError,
    ListError,
    MountError,
    MountInfo,
    ReadError,
    StatError,
)


def make_key(char: str) -> str:
    """Build a valid drive key from a single hex character."""
    return char * 64


class FakeDrive(DriveAccessor):
    """In-memory drive.

    ``files`` maps entry paths to text, ``mounts`` maps entry paths to
    mounted drive keys. Entries listed in ``broken`` fail on read or stat.
    """

    def __init__(
        self,
        key: str,
        files: dict[str, str] | None = None,
        mounts: dict[str, str] | None = None,
        *,
        fail_list: bool = False,
        broken: set[str] | None = None,
        writable: bool = False,
    ):
        self.key = key
        self.files = dict(files or {})
        self.mounts = dict(mounts or {})
        self.fail_list = fail_list
        self.broken = set(broken or ())
        self.writable = writable
        self.reads: list[str] = []
        self.list_calls = 0

    async def read(self, path: str) -> str:
        entry = path.lstrip("/")
        self.reads.append(entry)
        if entry in self.broken or entry not in self.files:
            raise ReadError("unreadable", key=self.key, path=path)
        return self.files[entry]

    async def stat(self, path: str) -> MountInfo | None:
        entry = path.lstrip("/")
        if entry in self.broken:
            raise StatError("stat failed", key=self.key, path=path)
        if entry in self.mounts:
            return MountInfo(self.mounts[entry])
        if entry not in self.files:
            raise StatError("no such entry", key=self.key, path=path)
        return None

    async def mount(self, key: str, path: str) -> None:
        entry = path.lstrip("/")
        if not self.writable:
            raise MountError("read-only drive", key=self.key, path=path)
        if entry in self.mounts or entry in self.files:
            raise MountError("target exists", key=self.key, path=path)
        self.mounts[entry] = key

    async def list(self, path: str = "/", recursive: bool = False) -> list[str]:
        self.list_calls += 1
        if self.fail_list:
            raise ListError("listing failed", key=self.key, path=path)
        entries = sorted([*self.files, *self.mounts])
        if recursive:
            return entries
        return [e for e in entries if "/" not in e]


class FakeProvider(DriveProvider):
    """Provider over a dict of FakeDrive objects. Unknown keys are unavailable."""

    def __init__(self, drives: list[FakeDrive] | None = None):
        self.drives = {d.key: d for d in drives or []}
        self.opened: list[str] = []
        self.closed = False

    async def open(self, key: str) -> FakeDrive:
        self.opened.append(key)
        if key not in self.drives:
            raise DriveUnavailableError("unknown drive", key=key)
        return self.drives[key]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def key() -> Callable[[str], str]:
    """Factory for valid drive keys: key("a") -> "aaa...a"."""
    return make_key


@pytest.fixture
def fake_drive() -> type[FakeDrive]:
    return FakeDrive


@pytest.fixture
def fake_provider() -> type[FakeProvider]:
    return FakeProvider
