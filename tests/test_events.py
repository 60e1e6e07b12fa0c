"""Tests for events and payload helpers."""

import pytest

from pushevent.events import Event, JsonEvent, RawEvent, SerializableEvent, SimplePushEvent


class Message:
    def serialize(self) -> str:
        return "Hello world"


def test_event_build_serializes_payload():
    event = Event("/events/message", Message())
    assert event.path == "/events/message"
    assert event.build() == "Hello world"


def test_simple_push_event_renders_compact_json():
    """Matches the wire text subscribers of /hello_world expect."""
    payload = SimplePushEvent(message="Hello world")
    assert payload.serialize() == '{"message":"Hello world"}'


def test_json_event_subclass():
    class Price(JsonEvent):
        symbol: str
        price: float

    assert Price(symbol="BTC", price=1.5).serialize() == '{"symbol":"BTC","price":1.5}'


def test_raw_event_returns_text_verbatim():
    assert RawEvent("not json at all").serialize() == "not json at all"


def test_payloads_satisfy_protocol():
    assert isinstance(Message(), SerializableEvent)
    assert isinstance(SimplePushEvent(message="x"), SerializableEvent)
    assert isinstance(RawEvent("x"), SerializableEvent)


def test_event_is_immutable():
    event = Event("/a", RawEvent("x"))
    with pytest.raises(AttributeError):
        event.path = "/b"


def test_event_rejects_payload_without_serialize():
    with pytest.raises(TypeError, match="serialize"):
        Event("/a", "plain string")


def test_event_rejects_non_string_path():
    with pytest.raises(TypeError, match="path"):
        Event(42, RawEvent("x"))
