"""
Drive Access Interface

Abstract base classes defining the contract that drive backends must
implement, plus the error types they raise.

A ``DriveProvider`` hands out one ``DriveAccessor`` per drive key. The
crawler only talks to these two interfaces, so the local store and the
remote daemon client are interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import TracebackType


# =============================================================================
# Errors
# =============================================================================


class DriveError(Exception):
    """Base error for a failed drive operation.

    Scoped to a single key, entry or URL. The crawler records it and
    moves on.
    """

    operation = "drive"

    def __init__(self, message: str, key: str | None = None, path: str | None = None):
        self.message = message
        self.key = key
        self.path = path
        super().__init__(message)


class DriveUnavailableError(DriveError):
    """The drive could not be opened (unknown, unreachable, corrupt)."""

    operation = "open"


class ListError(DriveError):
    operation = "list"


class ReadError(DriveError):
    operation = "read"


class StatError(DriveError):
    operation = "stat"


class MountError(DriveError):
    operation = "mount"


class FetchError(DriveError):
    """One-shot HTTP seed fetch failed."""

    operation = "fetch"

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message, path=url)
        self.url = url


class TransportError(Exception):
    """The drive transport could not be started.

    Not a per-item failure: nothing can be crawled without a transport.
    """

    def __init__(self, message: str, url: str | None = None, hint: str | None = None):
        self.message = message
        self.url = url
        self.hint = hint
        super().__init__(message)


class DaemonConnectionError(TransportError):
    """The drive daemon could not be reached at startup."""


class StoreUnavailableError(TransportError):
    """The local drive store directory is missing or unreadable."""


# =============================================================================
# Types
# =============================================================================


@dataclass(frozen=True)
class MountInfo:
    """Mount descriptor of an entry that points at another drive."""
    key: str


# =============================================================================
# Interfaces
# =============================================================================


class DriveAccessor(ABC):
    """Handle to one drive.

    Paths are drive-absolute (``/index.html``). Listings return entries
    relative to the listed directory without a leading slash.
    """

    key: str

    @abstractmethod
    async def list(self, path: str = "/", recursive: bool = False) -> list[str]:
        """List entries under path.

        Raises:
            ListError: Drive unreachable, corrupt, or path missing
        """
        pass

    @abstractmethod
    async def read(self, path: str) -> str:
        """Read a regular file as text.

        Raises:
            ReadError: File missing, unreadable, or not a regular file
        """
        pass

    @abstractmethod
    async def stat(self, path: str) -> MountInfo | None:
        """Return the mount descriptor for path, or None for plain entries.

        Raises:
            StatError: Entry missing or drive unreachable
        """
        pass

    @abstractmethod
    async def mount(self, key: str, path: str) -> None:
        """Mount drive ``key`` at path inside this drive.

        Raises:
            MountError: Drive not writable or target already exists
        """
        pass


class DriveProvider(ABC):
    """Factory for drive handles, selected once when the crawler is built."""

    @abstractmethod
    async def open(self, key: str) -> DriveAccessor:
        """Acquire a handle for the drive identified by key.

        Raises:
            DriveUnavailableError: Drive cannot be acquired
        """
        pass

    async def connect(self) -> None:
        """Check the transport is usable before crawling.

        Raises:
            TransportError: Transport cannot be started
        """
        return None

    async def close(self) -> None:
        """Release transport resources."""
        return None

    async def __aenter__(self) -> DriveProvider:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
