"""Health check endpoint.

Learn: Reports whether the dispatcher loop is alive, plus its counters
and the current subscription count.
"""

from fastapi import APIRouter, Request

from pushevent import __version__
from pushevent.realtime.dispatcher import Dispatcher

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and dispatcher state."""
    dispatcher: Dispatcher = request.app.state.dispatcher
    stats = dispatcher.stats

    alive = dispatcher.running and not dispatcher.closed
    checks = {
        "server": "ok",
        "version": __version__,
        "dispatcher": "ok" if alive else "stopped",
    }
    status = "healthy" if alive else "degraded"

    return {
        "status": status,
        **checks,
        "subscribers": len(dispatcher.registry),
        "paths": len(dispatcher.registry.paths()),
        "published": stats.published,
        "delivered": stats.delivered,
        "dropped": stats.dropped,
    }
