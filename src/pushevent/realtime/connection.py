"""Connection handles and their outbound channels.

Learn: The dispatcher never touches a socket. Each connection gets an
OutboundChannel — a small bounded buffer — and the transport runs a
writer task that drains it into the WebSocket:

    dispatcher ──send_nowait()──▶ OutboundChannel ──receive()──▶ writer ──▶ socket

send_nowait() never waits. A full buffer means the client is not keeping
up, and the dispatcher drops it rather than stalling every other
subscriber. Closing the channel wakes the writer, which ends the socket.
"""

import asyncio
from dataclasses import dataclass, field

DEFAULT_OUTBOUND_QUEUE_SIZE = 64

_CLOSED = object()


class DeliveryError(Exception):
    """A write to an outbound channel could not complete immediately."""


class ChannelClosedError(DeliveryError):
    pass


class ChannelFullError(DeliveryError):
    pass


class OutboundChannel:
    """Bounded single-reader buffer between the dispatcher and a socket writer."""

    def __init__(self, maxsize: int = DEFAULT_OUTBOUND_QUEUE_SIZE):
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send_nowait(self, text: str) -> None:
        """Buffer text for the writer, or raise DeliveryError."""
        if self._closed:
            raise ChannelClosedError("outbound channel is closed")
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            raise ChannelFullError("outbound channel is full") from None

    async def receive(self) -> str:
        """Wait for the next buffered message. Raises ChannelClosedError once closed."""
        if self._closed:
            raise ChannelClosedError("outbound channel is closed")
        item = await self._queue.get()
        if item is _CLOSED or self._closed:
            raise ChannelClosedError("outbound channel is closed")
        return item

    def close(self) -> None:
        """Close the channel. Pending messages are discarded. Idempotent."""
        if self._closed:
            return
        self._closed = True
        # Make room for the marker so a blocked receive() wakes up
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    def qsize(self) -> int:
        return 0 if self._closed else self._queue.qsize()


@dataclass(eq=False)
class ConnectionHandle:
    """The dispatcher's view of one connected client.

    `path` is fixed at handshake time; a connection never changes or adds
    subscriptions.
    """

    id: str
    path: str
    outbound: OutboundChannel = field(default_factory=OutboundChannel)

    def deliver(self, text: str) -> None:
        self.outbound.send_nowait(text)

    def __repr__(self) -> str:
        return f"ConnectionHandle(id={self.id!r}, path={self.path!r})"
