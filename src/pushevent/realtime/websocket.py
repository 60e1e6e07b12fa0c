"""WebSocket endpoint — one subscription per connected client.

Learn: Clients subscribe by the path they connect on:

    ws://localhost:3012/hello_world   →  receives events sent to "/hello_world"

The handler:
1. Builds a ConnectionHandle and submits Connect *before* accepting, so
   any Publish sent after the client sees the socket open reaches it
2. Forwards the connection's outbound channel to the socket
3. Reads client frames (only ping/pong for now)
4. Submits Disconnect when either side ends

When either task finishes, the other is cancelled.
"""

import asyncio
import json
import uuid

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from pushevent.realtime.connection import ChannelClosedError, ConnectionHandle, OutboundChannel
from pushevent.realtime.dispatcher import Connect, Disconnect, Dispatcher, SendFailureError

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/{resource:path}")
async def resource_websocket(websocket: WebSocket, resource: str):
    """Subscribe the client to the path it connected on."""
    dispatcher: Dispatcher = websocket.app.state.dispatcher
    queue_size: int = websocket.app.state.settings.outbound_queue_size

    handle = ConnectionHandle(
        id=uuid.uuid4().hex,
        path=websocket.url.path,
        outbound=OutboundChannel(maxsize=queue_size),
    )
    log = logger.bind(connection_id=handle.id, path=handle.path)

    try:
        dispatcher.submit(Connect(handle))
    except SendFailureError:
        log.warning("ws.rejected", reason="dispatcher closed")
        await websocket.close(code=1013, reason="Server shutting down")
        return

    async def outbound_writer():
        """Forward dispatched events to the WebSocket client."""
        try:
            while True:
                text = await handle.outbound.receive()
                await websocket.send_text(text)
        except ChannelClosedError:
            log.debug("ws.outbound_closed")
        except (WebSocketDisconnect, RuntimeError, asyncio.CancelledError):
            pass

    async def client_listener():
        """Handle incoming client frames (ping only)."""
        try:
            while True:
                data = await websocket.receive_text()
                try:
                    msg = json.loads(data)
                    if isinstance(msg, dict) and msg.get("type") == "ping":
                        await websocket.send_text(json.dumps({"type": "pong"}))
                except json.JSONDecodeError:
                    pass
        except (WebSocketDisconnect, RuntimeError, asyncio.CancelledError):
            pass

    # Connect is already queued, so every exit from here on must undo it
    try:
        await websocket.accept()
        log.info("ws.connected")

        writer_task = asyncio.create_task(outbound_writer())
        reader_task = asyncio.create_task(client_listener())

        done, pending = await asyncio.wait(
            [writer_task, reader_task],
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
    finally:
        try:
            dispatcher.submit(Disconnect(handle.id, handle=handle))
        except SendFailureError:
            pass
        handle.outbound.close()
        if websocket.client_state == WebSocketState.CONNECTED:
            try:
                await websocket.close()
            except RuntimeError:
                pass
        log.info("ws.disconnected")
