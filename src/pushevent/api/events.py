"""HTTP producer — publish an event to a resource path over REST.

Learn: POST /api/v1/events/hello_world with a JSON body publishes that
body (as compact JSON) to every client connected on "/hello_world".

202 means "accepted for routing", nothing more — delivery to individual
subscribers is best-effort and never reported back.
"""

import json
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request, status

from pushevent.events import Event, RawEvent
from pushevent.realtime.dispatcher import Dispatcher, SendFailureError

router = APIRouter()


@router.post("/events/{resource:path}", status_code=status.HTTP_202_ACCEPTED)
async def publish_event(request: Request, resource: str, payload: Any = Body(...)):
    """Publish the request body to /{resource}."""
    dispatcher: Dispatcher = request.app.state.dispatcher
    path = "/" + resource
    text = json.dumps(payload, separators=(",", ":"))

    try:
        dispatcher.sender().send(Event(path, RawEvent(text)))
    except SendFailureError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {"accepted": True, "path": path}
