"""
Drive backends for Pleco.

Main components:
- DriveProvider / DriveAccessor: capability interface the crawler uses
- LocalDriveStore: drives synced into a local directory
- RemoteDriveClient: drives served by a remote daemon over HTTP

Usage:
    from pleco.drives import LocalDriveStore

    async with LocalDriveStore("./drives") as store:
        drive = await store.open(key)
        entries = await drive.list("/", recursive=True)
"""

from pleco.drives.base import (
    DaemonConnectionError,
    DriveAccessor,
    DriveError,
    DriveProvider,
    DriveUnavailableError,
    FetchError,
    ListError,
    MountError,
    MountInfo,
    ReadError,
    StatError,
    StoreUnavailableError,
    TransportError,
)
from pleco.drives.local import LocalDrive, LocalDriveStore
from pleco.drives.remote import RemoteDrive, RemoteDriveClient

__all__ = [
    # Interfaces
    "DriveAccessor",
    "DriveProvider",
    "MountInfo",

    # Backends
    "LocalDrive",
    "LocalDriveStore",
    "RemoteDrive",
    "RemoteDriveClient",

    # Errors
    "DriveError",
    "DriveUnavailableError",
    "ListError",
    "ReadError",
    "StatError",
    "MountError",
    "FetchError",
    "TransportError",
    "DaemonConnectionError",
    "StoreUnavailableError",
]
