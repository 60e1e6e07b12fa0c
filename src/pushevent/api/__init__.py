"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.
"""

from fastapi import APIRouter

from pushevent.api.events import router as events_router
from pushevent.api.health import router as health_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(events_router, tags=["events"])
