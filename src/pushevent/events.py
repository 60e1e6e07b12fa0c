"""Events and payloads.

Learn: An Event pairs a target resource path with a payload. The payload
is anything that can turn itself into text — the dispatcher never looks
inside it, it only calls serialize() once per publish and fans the
resulting string out to every subscriber of the path.

Most payloads are JSON, so JsonEvent gives pydantic models a
serialize() for free:

    class Price(JsonEvent):
        symbol: str
        price: float

    tx.send(Event("/prices", Price(symbol="BTC", price=1.0)))
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


@runtime_checkable
class SerializableEvent(Protocol):
    """Anything that can render itself to a wire string."""

    def serialize(self) -> str: ...


@dataclass(frozen=True)
class Event:
    """An immutable (path, payload) pair sent through an EventSender."""

    path: str
    payload: SerializableEvent

    def __post_init__(self):
        if not isinstance(self.path, str):
            raise TypeError(f"Event path must be a str, got {type(self.path).__name__}")
        if not isinstance(self.payload, SerializableEvent):
            raise TypeError(
                f"Event payload must implement serialize(), got {type(self.payload).__name__}"
            )

    def build(self) -> str:
        """Serialize the payload."""
        return self.payload.serialize()


# ─── Payload helpers ─────────────────────────────────────


class JsonEvent(BaseModel):
    """Base class for payloads that serialize to compact JSON."""

    model_config = ConfigDict(frozen=True)

    def serialize(self) -> str:
        return self.model_dump_json()


class SimplePushEvent(JsonEvent):
    message: str


@dataclass(frozen=True)
class RawEvent:
    """Payload whose wire text is given up front."""

    text: str

    def serialize(self) -> str:
        return self.text
