"""Dispatcher — the single owner of the subscriber registry.

Learn: Every change to "who is listening where" and every publish goes
through one FIFO queue of control messages:

    transport ──Connect / Disconnect──┐
                                      ├──▶ queue ──▶ Dispatcher.run() ──▶ registry + fan-out
    producers ──Publish (send)────────┘

Because one task applies the messages in order, there are no locks and
no races: a client whose Connect is dequeued before a Publish for its
path gets that event; one connected after does not (no replay).

Producers hold an EventSender. send() never waits on delivery — it only
enqueues. It is safe to call from the event loop or from plain threads.
"""

import asyncio
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

import structlog

from pushevent.events import Event
from pushevent.realtime.connection import ConnectionHandle
from pushevent.realtime.registry import DuplicateConnectionError, SubscriberRegistry

logger = structlog.get_logger()

_SHUTDOWN = object()


class SendFailureError(Exception):
    """The dispatcher's queue is closed; the message was not accepted."""


# ─── Control messages ───────────────────────────────────


@dataclass(frozen=True)
class Connect:
    handle: ConnectionHandle


@dataclass(frozen=True)
class Disconnect:
    """Remove a connection.

    With `handle` set, only that exact handle is removed; a transport whose
    own Connect was rejected as a duplicate cannot evict the original.
    """
    connection_id: str
    handle: Optional[ConnectionHandle] = None


@dataclass(frozen=True)
class Publish:
    event: Event


ControlMessage = Union[Connect, Disconnect, Publish]


@dataclass
class DispatcherStats:
    """Runtime counters for the health endpoint."""
    published: int = 0
    delivered: int = 0
    dropped: int = 0
    rejected: int = 0
    errors: int = 0
    started_at: Optional[datetime] = None


# ─── Dispatcher ─────────────────────────────────────────


class Dispatcher:
    """Single-consumer actor over the control message queue.

    Usage:
        dispatcher = Dispatcher()
        dispatcher.start()              # inside a running event loop
        tx = dispatcher.sender()
        tx.send(Event("/hello_world", SimplePushEvent(message="hi")))
        ...
        await dispatcher.stop()
    """

    def __init__(self):
        self.registry = SubscriberRegistry()
        self.stats = DispatcherStats()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self._closed = False
        self._enqueue_lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Messages queued but not yet processed."""
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sender(self) -> "EventSender":
        """Return a new producer handle over this dispatcher's queue."""
        return EventSender(self)

    # ─── Enqueue side (any thread) ──────────────────────

    def submit(self, message: ControlMessage) -> None:
        """Enqueue a control message without waiting.

        Raises SendFailureError if the dispatcher has been closed.
        """
        # Check and enqueue under one lock so nothing accepted here can land
        # behind the shutdown marker
        with self._enqueue_lock:
            if self._closed:
                raise SendFailureError("Dispatcher queue is closed")
            self._enqueue(message)

    def _enqueue(self, item, *, via_loop: bool = False) -> None:
        loop = self._loop
        if loop is None or (not via_loop and _running_loop() is loop):
            self._queue.put_nowait(item)
            return
        try:
            loop.call_soon_threadsafe(self._queue.put_nowait, item)
        except RuntimeError:
            # The owning loop is gone; nothing will ever drain the queue
            self._closed = True
            raise SendFailureError("Dispatcher event loop is closed") from None

    def close(self) -> None:
        """Stop accepting messages. Already-queued messages are still processed.

        The shutdown marker goes through the loop's callback queue, behind
        any put already handed over by a producer thread.
        """
        with self._enqueue_lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._enqueue(_SHUTDOWN, via_loop=True)
            except SendFailureError:
                pass
        logger.info("dispatcher.closing")

    # ─── Consumer side (event loop) ─────────────────────

    def start(self) -> asyncio.Task:
        """Schedule run() on the current event loop."""
        if self._task is not None:
            raise RuntimeError("Dispatcher already started")
        self._loop = asyncio.get_running_loop()
        self._task = asyncio.create_task(self.run(), name="pushevent-dispatcher")
        return self._task

    async def drain(self) -> None:
        """Wait until every message queued so far has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        """Close the queue and wait for the loop to drain it."""
        self.close()
        if self._task is not None:
            await self._task

    async def run(self) -> None:
        """Drain the control queue until close()."""
        self._loop = asyncio.get_running_loop()
        self.stats.started_at = datetime.now(timezone.utc)
        logger.info("dispatcher.started")

        while True:
            message = await self._queue.get()
            if message is _SHUTDOWN:
                self._queue.task_done()
                break
            try:
                self.handle(message)
            except Exception:
                # One bad message must not take the loop down
                self.stats.errors += 1
                logger.exception("dispatcher.message_failed", kind=type(message).__name__)
            finally:
                self._queue.task_done()

        logger.info(
            "dispatcher.stopped",
            published=self.stats.published,
            delivered=self.stats.delivered,
            dropped=self.stats.dropped,
            errors=self.stats.errors,
        )

    def handle(self, message: ControlMessage) -> None:
        """Apply one control message to the registry."""
        if isinstance(message, Publish):
            self._publish(message.event)
        elif isinstance(message, Connect):
            self._connect(message.handle)
        elif isinstance(message, Disconnect):
            self._disconnect(message.connection_id, message.handle)
        else:
            raise TypeError(f"Unknown control message: {message!r}")

    def _connect(self, handle: ConnectionHandle) -> None:
        try:
            self.registry.register(handle)
        except DuplicateConnectionError as e:
            self.stats.rejected += 1
            logger.warning(
                "dispatcher.duplicate_connection",
                connection_id=handle.id,
                path=handle.path,
                error=str(e),
            )
            if self.registry.get(handle.id) is not handle:
                handle.outbound.close()
            return
        logger.debug("dispatcher.subscribed", connection_id=handle.id, path=handle.path)

    def _disconnect(self, connection_id: str, expected: Optional[ConnectionHandle] = None) -> None:
        if expected is not None and self.registry.get(connection_id) is not expected:
            return
        handle = self.registry.unregister(connection_id)
        if handle is not None:
            logger.debug("dispatcher.unsubscribed", connection_id=connection_id, path=handle.path)

    def _publish(self, event: Event) -> None:
        self.stats.published += 1
        text = event.build()

        subscribers = self.registry.subscribers_for(event.path)
        if not subscribers:
            logger.debug("dispatcher.no_subscribers", path=event.path)
            return

        failed = []
        for handle in subscribers:
            try:
                handle.deliver(text)
            except Exception as e:
                failed.append((handle, e))
            else:
                self.stats.delivered += 1

        for handle, error in failed:
            self.registry.unregister(handle.id)
            handle.outbound.close()
            self.stats.dropped += 1
            logger.info(
                "dispatcher.subscriber_dropped",
                connection_id=handle.id,
                path=handle.path,
                reason=str(error),
            )


class EventSender:
    """Producer handle. Cheap to clone, safe to share across threads and tasks."""

    def __init__(self, dispatcher: Dispatcher):
        self._dispatcher = dispatcher

    def send(self, event: Event) -> None:
        """Queue event for routing. Raises SendFailureError if the dispatcher is closed.

        Returns as soon as the event is queued; "no subscribers" is not an error.
        """
        self._dispatcher.submit(Publish(event))

    def clone(self) -> "EventSender":
        return EventSender(self._dispatcher)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
