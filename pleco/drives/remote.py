"""
Remote Drive Daemon Client

Async client for a drive daemon exposing hyperdrives over a small
JSON-over-HTTP API:

    GET  /health                                   daemon liveness
    GET  /drives/{key}                             open (404 if unknown)
    GET  /drives/{key}/entries?path=&recursive=    {"entries": [...]}
    GET  /drives/{key}/files/{path}                raw file body
    GET  /drives/{key}/stat?path=                  {"mount": {"key": ...} | null}
    POST /drives/{key}/mounts                      {"key": ..., "path": ...}

Every non-2xx response and transport error is translated into the drive
error for the operation that was attempted.
"""

from __future__ import annotations

import urllib.parse
from typing import Any

import httpx
import structlog

from pleco.crawler.addresses import is_key
from pleco.drives.base import (
    DaemonConnectionError,
    DriveAccessor,
    DriveError,
    DriveProvider,
    DriveUnavailableError,
    ListError,
    MountError,
    MountInfo,
    ReadError,
    StatError,
)

logger = structlog.get_logger()

STATUS_CONFLICT = 409

CONNECT_HINT = (
    "Make sure the drive daemon is running and reachable, "
    "or set PLECO_DAEMON_URL / --daemon-url to its address."
)


class RemoteDrive(DriveAccessor):
    """Handle to one drive served by the daemon."""

    def __init__(self, key: str, client: RemoteDriveClient):
        self.key = key
        self.client = client

    @property
    def _base(self) -> str:
        return f"/drives/{self.key}"

    async def read(self, path: str) -> str:
        quoted = urllib.parse.quote(path.lstrip("/"))
        response = await self.client.request(
            "GET", f"{self._base}/files/{quoted}", ReadError, key=self.key, path=path
        )
        return response.text

    async def stat(self, path: str) -> MountInfo | None:
        response = await self.client.request(
            "GET", f"{self._base}/stat", StatError,
            key=self.key, path=path, params={"path": path},
        )
        data = _json(response, StatError, self.key, path)
        if not isinstance(data, dict):
            raise StatError("Malformed stat", key=self.key, path=path)
        mount = data.get("mount")
        if mount is None:
            return None
        if not isinstance(mount, dict) or not isinstance(mount.get("key"), str):
            raise StatError("Malformed stat", key=self.key, path=path)
        return MountInfo(mount["key"])

    async def mount(self, key: str, path: str) -> None:
        response = await self.client.request(
            "POST", f"{self._base}/mounts", MountError,
            key=self.key, path=path, json={"key": key, "path": path},
            allow_status={STATUS_CONFLICT},
        )
        if response.status_code == STATUS_CONFLICT:
            raise MountError(f"Mount target exists: {path}", key=self.key, path=path)

    async def list(self, path: str = "/", recursive: bool = False) -> list[str]:
        response = await self.client.request(
            "GET", f"{self._base}/entries", ListError,
            key=self.key, path=path,
            params={"path": path, "recursive": str(recursive).lower()},
        )
        data = _json(response, ListError, self.key, path)
        entries = data.get("entries") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ListError("Malformed listing", key=self.key, path=path)
        return [str(e).lstrip("/") for e in entries]


class RemoteDriveClient(DriveProvider):
    """
    Drive provider backed by a remote daemon.

    Call ``connect()`` once before crawling; it verifies the daemon is
    reachable and raises DaemonConnectionError otherwise.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the daemon client.

        Args:
            base_url: Daemon API root (e.g. "http://localhost:4973")
            token: Optional bearer token
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header value
            transport: Custom httpx transport (tests)
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if user_agent:
            headers["User-Agent"] = user_agent

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self.log = logger.bind(component="RemoteDriveClient")

    async def connect(self) -> None:
        """Check the daemon is up.

        Raises:
            DaemonConnectionError: Daemon unreachable or unhealthy
        """
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError as e:
            raise DaemonConnectionError(
                f"Cannot reach drive daemon: {e}", url=self.base_url, hint=CONNECT_HINT
            ) from e

        if response.status_code != 200:
            raise DaemonConnectionError(
                f"Drive daemon unhealthy (HTTP {response.status_code})",
                url=self.base_url,
                hint=CONNECT_HINT,
            )
        self.log.info("Connected to drive daemon", url=self.base_url)

    async def request(
        self,
        method: str,
        url: str,
        error_cls: type[DriveError],
        *,
        key: str,
        path: str | None = None,
        allow_status: set[int] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, mapping failures onto error_cls."""
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise error_cls(f"Request failed: {e}", key=key, path=path) from e

        if response.is_success or response.status_code in (allow_status or set()):
            return response
        raise error_cls(f"HTTP {response.status_code}", key=key, path=path)

    async def open(self, key: str) -> RemoteDrive:
        if not is_key(key):
            raise DriveUnavailableError(f"Invalid drive key: {key!r}", key=key)
        await self.request("GET", f"/drives/{key}", DriveUnavailableError, key=key)
        return RemoteDrive(key, self)

    async def close(self) -> None:
        await self._client.aclose()


def _json(
    response: httpx.Response, error_cls: type[DriveError], key: str, path: str
) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise error_cls("Invalid JSON from daemon", key=key, path=path) from e
