"""Embedded server — run pushevent inside another program.

Learn: Server starts uvicorn on a background thread and hands out
EventSenders that work from any thread:

    server = Server("127.0.0.1", 3012)
    tx = server.get_tx()

    def worker():
        tx.send(Event("/hello_world", SimplePushEvent(message="Hello world")))

    threading.Thread(target=worker).start()
    ...
    server.join_threads()

The constructor returns once the server is accepting connections.
"""

import threading
import time
from typing import Optional

import structlog
import uvicorn

from pushevent.config import Settings, settings as default_settings
from pushevent.main import create_app
from pushevent.realtime.dispatcher import Dispatcher, EventSender

logger = structlog.get_logger()


class Server:
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        *,
        settings: Optional[Settings] = None,
        startup_timeout: float = 10.0,
    ):
        cfg = settings or default_settings
        updates = {}
        if host is not None:
            updates["host"] = host
        if port is not None:
            updates["port"] = port
        self.settings = cfg.model_copy(update=updates)

        self.dispatcher = Dispatcher()
        self.app = create_app(self.settings, dispatcher=self.dispatcher)
        self._server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.settings.host,
                port=self.settings.port,
                log_level=self.settings.log_level.lower(),
                lifespan="on",
                loop="asyncio",
            )
        )
        self._thread = threading.Thread(
            target=self._server.run, name="pushevent-server", daemon=True
        )
        self._thread.start()
        self._wait_started(startup_timeout)

    def _wait_started(self, timeout: float) -> None:
        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not self._thread.is_alive():
                raise RuntimeError(
                    f"Failed to start ws server on {self.settings.host}:{self.settings.port}"
                )
            if time.monotonic() > deadline:
                self.join_threads()
                raise RuntimeError("Timed out waiting for ws server to start")
            time.sleep(0.01)
        logger.info("server.started", host=self.settings.host, port=self.port)

    @property
    def port(self) -> int:
        """The bound port (differs from settings.port when that is 0)."""
        for server in getattr(self._server, "servers", []):
            for sock in server.sockets:
                return sock.getsockname()[1]
        return self.settings.port

    def get_tx(self) -> EventSender:
        """Return a new EventSender for this server's dispatcher."""
        return self.dispatcher.sender()

    def join_threads(self) -> None:
        """Stop the server and wait for its thread. Call on application exit."""
        self._server.should_exit = True
        if self._thread.is_alive():
            self._thread.join()
        logger.info("server.stopped")

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, *exc) -> None:
        self.join_threads()
