"""pushevent — push events to WebSocket clients by resource path.

Clients subscribe by connecting to a path (ws://host:port/hello_world).
Producers send events targeting a path; every client connected on that
path receives the event's serialized text.
"""

from pushevent.events import Event, JsonEvent, RawEvent, SerializableEvent, SimplePushEvent

__version__ = "0.1.0"

__all__ = [
    "Event",
    "JsonEvent",
    "RawEvent",
    "SerializableEvent",
    "SimplePushEvent",
    "__version__",
]
