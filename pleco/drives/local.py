"""
Local Drive Store

Drives synced to a local directory, one sub-directory per drive key:

    <store>/
        <key-a>/index.html
        <key-a>/friends/<key-b> -> <store>/<key-b>    (mount)
        <key-b>/README.md

A mount is a symbolic link inside a drive that points at another drive's
directory in the store. Listings never descend into mounts; the mounted
drive is crawled on its own.

Filesystem calls are blocking, so every operation runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path, PurePosixPath

import structlog

from pleco.crawler.addresses import is_key
from pleco.drives.base import (
    DriveAccessor,
    DriveProvider,
    DriveUnavailableError,
    ListError,
    MountError,
    MountInfo,
    ReadError,
    StatError,
    StoreUnavailableError,
)

logger = structlog.get_logger()

STORE_HINT = "Point --store or PLECO_STORE_PATH at an existing, readable drive store directory"


class LocalDrive(DriveAccessor):
    """Handle to one drive directory in a LocalDriveStore."""

    def __init__(self, key: str, root: Path, store_root: Path):
        self.key = key
        self.root = root
        self.store_root = store_root

    def _resolve(self, path: str) -> Path | None:
        """Map a drive-absolute path onto the drive directory.

        Returns None for paths that would escape the drive.
        """
        parts = PurePosixPath("/", path).parts[1:]
        if ".." in parts:
            return None
        return self.root.joinpath(*parts)

    def _mount_target(self, link: Path) -> str | None:
        """Key of the store drive a symlink points at, if any."""
        target = Path(os.readlink(link))
        if not target.is_absolute():
            target = link.parent / target
        target = Path(os.path.normpath(target))
        if target.parent != self.store_root or not is_key(target.name):
            return None
        return target.name

    # -------------------------------------------------------------------------
    # Blocking implementations
    # -------------------------------------------------------------------------

    def _list_sync(self, path: str, recursive: bool) -> list[str]:
        top = self._resolve(path)
        if top is None:
            raise ListError(f"Invalid path: {path}", key=self.key, path=path)

        entries: list[str] = []
        try:
            if top.is_symlink() or not top.is_dir():
                raise ListError(f"Not a directory: {path}", key=self.key, path=path)
            if not recursive:
                return sorted(child.name for child in top.iterdir())

            for dirpath, dirnames, filenames in os.walk(top, onerror=_raise):
                rel = Path(dirpath).relative_to(top)
                dirnames.sort()
                for name in dirnames + sorted(filenames):
                    entries.append((rel / name).as_posix())
        except OSError as e:
            raise ListError(str(e), key=self.key, path=path) from e
        return entries

    def _read_sync(self, path: str) -> str:
        target = self._resolve(path)
        if target is None:
            raise ReadError(f"Invalid path: {path}", key=self.key, path=path)
        try:
            if target.is_symlink() or not target.is_file():
                raise ReadError(f"Not a regular file: {path}", key=self.key, path=path)
            return target.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ReadError(str(e), key=self.key, path=path) from e

    def _stat_sync(self, path: str) -> MountInfo | None:
        target = self._resolve(path)
        if target is None:
            raise StatError(f"Invalid path: {path}", key=self.key, path=path)
        try:
            if not target.is_symlink():
                target.lstat()
                return None
            mount_key = self._mount_target(target)
        except OSError as e:
            raise StatError(str(e), key=self.key, path=path) from e
        return MountInfo(mount_key) if mount_key else None

    def _mount_sync(self, key: str, path: str) -> None:
        target = self._resolve(path)
        if target is None or target == self.root:
            raise MountError(f"Invalid mount path: {path}", key=self.key, path=path)
        if os.path.lexists(target):
            raise MountError(f"Mount target exists: {path}", key=self.key, path=path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.symlink_to(self.store_root / key, target_is_directory=True)
        except OSError as e:
            raise MountError(str(e), key=self.key, path=path) from e

    # -------------------------------------------------------------------------
    # DriveAccessor
    # -------------------------------------------------------------------------

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self._read_sync, path)

    async def stat(self, path: str) -> MountInfo | None:
        return await asyncio.to_thread(self._stat_sync, path)

    async def mount(self, key: str, path: str) -> None:
        await asyncio.to_thread(self._mount_sync, key, path)
        logger.debug("Mounted drive", drive=self.key[:12], mounted=key[:12], path=path)

    async def list(self, path: str = "/", recursive: bool = False) -> list[str]:
        return await asyncio.to_thread(self._list_sync, path, recursive)


class LocalDriveStore(DriveProvider):
    """Provider for drives synced into a local directory."""

    def __init__(self, root_path: str | os.PathLike[str]):
        self.root = Path(os.path.abspath(root_path))
        self.log = logger.bind(component="LocalDriveStore")

    async def connect(self) -> None:
        """Check the store directory exists and can be listed.

        Raises:
            StoreUnavailableError: Store missing or unreadable
        """
        usable = await asyncio.to_thread(self._usable)
        if not usable:
            raise StoreUnavailableError(
                "Drive store is missing or unreadable", url=str(self.root), hint=STORE_HINT
            )
        self.log.info("Opened drive store", path=str(self.root))

    def _usable(self) -> bool:
        try:
            return self.root.is_dir() and os.access(self.root, os.R_OK | os.X_OK)
        except OSError:
            return False

    async def open(self, key: str) -> LocalDrive:
        if not is_key(key):
            raise DriveUnavailableError(f"Invalid drive key: {key!r}", key=key)

        drive_root = self.root / key
        try:
            present = await asyncio.to_thread(drive_root.is_dir)
        except OSError as e:
            raise DriveUnavailableError(str(e), key=key) from e
        if not present:
            raise DriveUnavailableError("Drive not in local store", key=key)

        return LocalDrive(key, drive_root, self.root)

    async def create(self, key: str) -> LocalDrive:
        """Create an empty drive directory (used for the root drive)."""
        if not is_key(key):
            raise DriveUnavailableError(f"Invalid drive key: {key!r}", key=key)
        drive_root = self.root / key
        await asyncio.to_thread(drive_root.mkdir, parents=True, exist_ok=True)
        self.log.info("Created drive", key=key[:12], path=str(drive_root))
        return LocalDrive(key, drive_root, self.root)


def _raise(error: OSError) -> None:
    raise error
