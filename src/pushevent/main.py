"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan owns the dispatcher: it is started before the first
connection is accepted and drained on shutdown.

Routes:
- /api/v1/health              dispatcher status + counters
- /api/v1/events/{path}       HTTP producer (POST)
- ws://.../{path}             subscribe to {path}
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from pushevent import __version__
from pushevent.api import api_router
from pushevent.config import Settings, settings as default_settings
from pushevent.log_config import configure_logging
from pushevent.realtime.dispatcher import Dispatcher

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. A dispatcher handed to create_app() is reused, otherwise a
    fresh one is created per startup.
    """
    cfg: Settings = app.state.settings
    configure_logging(cfg.log_level, cfg.log_json)

    dispatcher: Optional[Dispatcher] = app.state.dispatcher
    if dispatcher is None or dispatcher.closed:
        dispatcher = Dispatcher()
        app.state.dispatcher = dispatcher

    logger.info(
        "pushevent.starting",
        version=__version__,
        environment=cfg.environment,
        host=cfg.host,
        port=cfg.port,
    )
    dispatcher.start()

    yield

    logger.info("pushevent.shutdown")
    await dispatcher.stop()


def create_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[Dispatcher] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="pushevent",
        description="Push events to WebSocket clients by resource path",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or default_settings
    app.state.dispatcher = dispatcher

    app.include_router(api_router)

    # The WebSocket route matches every path, so it goes last
    from pushevent.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: pushevent.main:app)
app = create_app()
