"""Configuration tests."""

import pytest
from pydantic import ValidationError

from pushevent.config import Settings


def test_defaults():
    s = Settings()
    assert s.host == "127.0.0.1"
    assert s.port == 3012
    assert s.outbound_queue_size == 64
    assert s.log_level == "INFO"


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("PUSHEVENT_PORT", "9000")
    monkeypatch.setenv("PUSHEVENT_OUTBOUND_QUEUE_SIZE", "5")
    monkeypatch.setenv("PUSHEVENT_LOG_LEVEL", "debug")

    s = Settings()
    assert s.port == 9000
    assert s.outbound_queue_size == 5
    assert s.log_level == "DEBUG"


def test_queue_size_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(outbound_queue_size=0)


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")
