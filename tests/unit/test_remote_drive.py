"""
Unit tests for the remote drive daemon client.
"""

import json

import httpx
import pytest
import pytest_asyncio

from pleco.crawler.orchestrator import Crawler
from pleco.drives.base import (
    DaemonConnectionError,
    DriveUnavailableError,
    ListError,
    MountError,
    MountInfo,
    ReadError,
    StatError,
)
from pleco.drives.remote import RemoteDriveClient

pytestmark = pytest.mark.asyncio

KEY_A = "a" * 64
KEY_B = "b" * 64
KEY_C = "c" * 64


class FakeDaemon:
    """Minimal drive daemon behind httpx.MockTransport."""

    def __init__(self, drives: dict[str, dict[str, str]], mounts: dict[str, dict[str, str]]):
        self.drives = drives
        self.mounts = mounts
        self.requests: list[httpx.Request] = []
        self.healthy = True

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/", 3)

        if parts == ["health"]:
            return httpx.Response(200 if self.healthy else 503, json={"ok": self.healthy})

        if len(parts) < 2 or parts[0] != "drives" or parts[1] not in self.drives:
            return httpx.Response(404, json={"error": "not found"})

        key = parts[1]
        files = self.drives[key]
        mounts = self.mounts.setdefault(key, {})

        if len(parts) == 2:
            return httpx.Response(200, json={"key": key})

        action = parts[2]
        if action == "entries":
            return httpx.Response(200, json={"entries": sorted([*files, *mounts])})
        if action == "files":
            path = parts[3] if len(parts) > 3 else ""
            if path not in files:
                return httpx.Response(404)
            return httpx.Response(200, text=files[path])
        if action == "stat":
            entry = request.url.params["path"].lstrip("/")
            if entry in mounts:
                return httpx.Response(200, json={"mount": {"key": mounts[entry]}})
            if entry in files:
                return httpx.Response(200, json={"mount": None})
            return httpx.Response(404)
        if action == "mounts" and request.method == "POST":
            body = json.loads(request.content)
            entry = body["path"].lstrip("/")
            if entry in mounts or entry in files:
                return httpx.Response(409)
            mounts[entry] = body["key"]
            return httpx.Response(201)
        return httpx.Response(400)


@pytest.fixture
def daemon() -> FakeDaemon:
    return FakeDaemon(
        drives={
            KEY_A: {"index.html": f"hyper://{KEY_C}", "logo.png": "binary"},
            KEY_B: {"README.md": f"back to hyper://{KEY_A}"},
        },
        mounts={KEY_A: {"friends/b": KEY_B}},
    )


@pytest_asyncio.fixture
async def client(daemon):
    client = RemoteDriveClient(
        "http://daemon.test",
        token="secret",
        transport=httpx.MockTransport(daemon),
    )
    yield client
    await client.close()


class TestConnect:
    async def test_connect_ok(self, client, daemon):
        await client.connect()
        assert daemon.requests[0].url.path == "/health"
        assert daemon.requests[0].headers["Authorization"] == "Bearer secret"

    async def test_connect_unhealthy(self, client, daemon):
        daemon.healthy = False
        with pytest.raises(DaemonConnectionError) as exc_info:
            await client.connect()
        assert exc_info.value.hint

    async def test_connect_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = RemoteDriveClient("http://daemon.test", transport=httpx.MockTransport(refuse))
        try:
            with pytest.raises(DaemonConnectionError):
                await client.connect()
        finally:
            await client.close()


class TestOperations:
    async def test_open_unknown(self, client):
        with pytest.raises(DriveUnavailableError):
            await client.open(KEY_C)

    async def test_open_invalid_key(self, client, daemon):
        with pytest.raises(DriveUnavailableError):
            await client.open("nope")
        assert daemon.requests == []

    async def test_list(self, client, daemon):
        drive = await client.open(KEY_A)
        assert await drive.list("/", recursive=True) == ["friends/b", "index.html", "logo.png"]
        assert daemon.requests[-1].url.params["recursive"] == "true"

    async def test_read(self, client):
        drive = await client.open(KEY_B)
        assert await drive.read("/README.md") == f"back to hyper://{KEY_A}"

    async def test_read_missing(self, client):
        drive = await client.open(KEY_B)
        with pytest.raises(ReadError):
            await drive.read("/missing.md")

    async def test_stat(self, client):
        drive = await client.open(KEY_A)
        assert await drive.stat("/friends/b") == MountInfo(KEY_B)
        assert await drive.stat("/index.html") is None
        with pytest.raises(StatError):
            await drive.stat("/missing")

    @pytest.mark.parametrize(
        "payload",
        [{"mount": KEY_B}, {"mount": [KEY_B]}, {"mount": {"key": 7}}, []],
    )
    async def test_malformed_stat(self, payload):
        def handler(request):
            if request.url.path.endswith("/stat"):
                return httpx.Response(200, json=payload)
            return httpx.Response(200, json={})

        client = RemoteDriveClient("http://daemon.test", transport=httpx.MockTransport(handler))
        try:
            drive = await client.open(KEY_A)
            with pytest.raises(StatError):
                await drive.stat("/friend")
        finally:
            await client.close()

    async def test_mount(self, client, daemon):
        drive = await client.open(KEY_B)
        await drive.mount(KEY_C, f"/{KEY_C}")
        assert daemon.mounts[KEY_B] == {KEY_C: KEY_C}

        with pytest.raises(MountError):
            await drive.mount(KEY_C, f"/{KEY_C}")

    async def test_malformed_listing(self):
        def handler(request):
            if request.url.path.endswith("/entries"):
                return httpx.Response(200, text="not json")
            return httpx.Response(200, json={})

        client = RemoteDriveClient("http://daemon.test", transport=httpx.MockTransport(handler))
        try:
            drive = await client.open(KEY_A)
            with pytest.raises(ListError):
                await drive.list("/", recursive=True)
        finally:
            await client.close()

    async def test_transport_error_maps_to_drive_error(self):
        def handler(request):
            if request.url.path.startswith("/drives/") and "/files/" in request.url.path:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={})

        client = RemoteDriveClient("http://daemon.test", transport=httpx.MockTransport(handler))
        try:
            drive = await client.open(KEY_A)
            with pytest.raises(ReadError):
                await drive.read("/index.html")
        finally:
            await client.close()


class TestCrawlRemote:
    async def test_crawl_through_daemon(self, client):
        """A links C (unknown), mounts B; B links back to A."""
        report = await Crawler(client).run([f"hyper://{KEY_A}"])

        assert set(report.visited) == {KEY_A, KEY_B, KEY_C}
        assert [f.operation for f in report.failures_for(KEY_C)] == ["open"]

    async def test_malformed_stat_is_recorded(self):
        """A bare-string mount descriptor fails the stat, not the crawl."""
        def handler(request):
            path = request.url.path
            if path.endswith("/entries"):
                return httpx.Response(200, json={"entries": ["index.md", "friend"]})
            if "/files/" in path:
                return httpx.Response(200, text="no links")
            if path.endswith("/stat"):
                return httpx.Response(200, json={"mount": KEY_B})
            return httpx.Response(200, json={})

        client = RemoteDriveClient("http://daemon.test", transport=httpx.MockTransport(handler))
        try:
            report = await Crawler(client).run([KEY_A])
        finally:
            await client.close()

        assert report.visited == [KEY_A]
        assert {f.operation for f in report.failures_for(KEY_A)} == {"stat"}
