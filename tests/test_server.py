"""Embedded Server tests — real uvicorn on a background thread.

Learn: Port 0 lets the OS pick a free port; Server.port reports the one
actually bound. The WebSocket client is synchronous, so the producer and
the subscriber both live on the test thread while the dispatcher runs on
uvicorn's loop.
"""

import pytest
from websockets.sync.client import connect

from pushevent.config import Settings
from pushevent.events import Event, SimplePushEvent
from pushevent.realtime.dispatcher import SendFailureError
from pushevent.server import Server

HELLO = Event("/hello_world", SimplePushEvent(message="Hello world"))


@pytest.fixture
def server():
    srv = Server("127.0.0.1", 0, settings=Settings(log_level="WARNING"))
    try:
        yield srv
    finally:
        srv.join_threads()


def test_server_binds_free_port(server):
    assert server.port > 0
    assert server.dispatcher.running


def test_send_from_thread_reaches_subscriber(server):
    tx = server.get_tx()
    with connect(f"ws://127.0.0.1:{server.port}/hello_world") as ws:
        tx.send(HELLO)
        assert ws.recv(timeout=5) == '{"message":"Hello world"}'


def test_other_path_not_delivered(server):
    tx = server.get_tx()
    with connect(f"ws://127.0.0.1:{server.port}/other") as ws:
        tx.send(HELLO)
        tx.send(Event("/other", SimplePushEvent(message="for other")))
        assert ws.recv(timeout=5) == '{"message":"for other"}'


def test_join_threads_closes_dispatcher():
    server = Server("127.0.0.1", 0, settings=Settings(log_level="WARNING"))
    tx = server.get_tx()
    with connect(f"ws://127.0.0.1:{server.port}/hello_world") as ws:
        tx.send(HELLO)
        assert ws.recv(timeout=5) == '{"message":"Hello world"}'

    server.join_threads()

    assert server.dispatcher.closed
    assert not server.dispatcher.running
    with pytest.raises(SendFailureError):
        tx.send(HELLO)


def test_context_manager_stops_server():
    with Server("127.0.0.1", 0, settings=Settings(log_level="WARNING")) as server:
        tx = server.get_tx()
    with pytest.raises(SendFailureError):
        tx.send(HELLO)
