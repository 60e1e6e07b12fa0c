"""CLI smoke tests."""

from click.testing import CliRunner

from pushevent.cli import main


def test_help_lists_commands():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "serve" in result.output
    assert "demo" in result.output


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_serve_passes_explicit_zero_port(monkeypatch):
    calls = []
    monkeypatch.setattr("pushevent.cli.uvicorn.run", lambda app, **kw: calls.append((app, kw)))

    result = CliRunner().invoke(main, ["serve", "--port", "0", "--host", "0.0.0.0"])

    assert result.exit_code == 0
    assert calls == [
        ("pushevent.main:app", {"host": "0.0.0.0", "port": 0, "log_level": "info"})
    ]


def test_serve_defaults_from_settings(monkeypatch):
    calls = []
    monkeypatch.setattr("pushevent.cli.uvicorn.run", lambda app, **kw: calls.append(kw))

    result = CliRunner().invoke(main, ["serve"])

    assert result.exit_code == 0
    assert calls[0]["port"] == 3012
    assert calls[0]["host"] == "127.0.0.1"
