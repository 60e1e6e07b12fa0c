"""Test fixtures — a running dispatcher and an HTTP client bound to it.

Learn: httpx's ASGITransport does not run the app lifespan, so the
`dispatcher` fixture starts one on the test's event loop and the app is
built around it. WebSocket tests use Starlette's TestClient instead,
which runs the real lifespan in a background thread.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pushevent.config import Settings
from pushevent.main import create_app
from pushevent.realtime.connection import ConnectionHandle, OutboundChannel
from pushevent.realtime.dispatcher import Dispatcher


def make_handle(path: str, *, maxsize: int = 16, id: str | None = None) -> ConnectionHandle:
    """Build a ConnectionHandle with a fresh outbound channel."""
    return ConnectionHandle(
        id=id or uuid.uuid4().hex,
        path=path,
        outbound=OutboundChannel(maxsize=maxsize),
    )


def drain_outbound(handle: ConnectionHandle) -> list[str]:
    """Pop everything currently buffered for a handle, without waiting."""
    items = []
    while handle.outbound.qsize():
        items.append(handle.outbound._queue.get_nowait())
    return items


@pytest.fixture
def settings() -> Settings:
    return Settings(outbound_queue_size=8)


@pytest_asyncio.fixture()
async def dispatcher():
    """A dispatcher running on the test's event loop."""
    d = Dispatcher()
    d.start()
    try:
        yield d
    finally:
        await d.stop()


@pytest_asyncio.fixture()
async def client(dispatcher, settings):
    """HTTP client against an app wired to the `dispatcher` fixture."""
    app = create_app(settings, dispatcher=dispatcher)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
