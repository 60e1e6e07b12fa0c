"""pushevent CLI — run the server or a demo producer.

Usage:
    pushevent serve                        # ws://127.0.0.1:3012/<path>
    pushevent serve --host 0.0.0.0 --port 9000
    pushevent demo                         # publish "Hello world" to /hello_world every 100ms
"""

import time
from typing import Optional

import click
import uvicorn

from pushevent.config import settings


@click.group()
@click.version_option(version="0.1.0", prog_name="pushevent")
def main():
    """pushevent — push events to WebSocket clients by resource path."""


@main.command()
@click.option("--host", default=None, help=f"Bind address (default {settings.host})")
@click.option("--port", default=None, type=int, help=f"Bind port (default {settings.port})")
def serve(host: Optional[str], port: Optional[int]):
    """Run the pushevent server."""
    uvicorn.run(
        "pushevent.main:app",
        host=host if host is not None else settings.host,
        port=port if port is not None else settings.port,
        log_level=settings.log_level.lower(),
    )


@main.command()
@click.option("--host", default=None, help=f"Bind address (default {settings.host})")
@click.option("--port", default=None, type=int, help=f"Bind port (default {settings.port})")
@click.option("--path", default="/hello_world", show_default=True, help="Resource path to publish to")
@click.option("--message", default="Hello world", show_default=True)
@click.option("--interval", default=0.1, type=float, show_default=True, help="Seconds between events")
@click.option("--count", default=0, type=int, help="Stop after N events (0 = run until Ctrl-C)")
def demo(host: Optional[str], port: Optional[int], path: str, message: str,
         interval: float, count: int):
    """Start a server and publish a SimplePushEvent on a loop."""
    from pushevent.events import Event, SimplePushEvent
    from pushevent.realtime.dispatcher import SendFailureError
    from pushevent.server import Server

    server = Server(host, port)
    tx = server.get_tx()
    click.secho(
        f"Publishing to ws://{server.settings.host}:{server.port}{path}",
        fg="green",
    )

    sent = 0
    try:
        while count == 0 or sent < count:
            event = Event(path, SimplePushEvent(message=message))
            try:
                tx.send(event)
            except SendFailureError as e:
                click.secho(f"Err {e}", fg="red", err=True)
                break
            sent += 1
            time.sleep(interval)
    except KeyboardInterrupt:
        pass
    finally:
        server.join_threads()
        click.echo(f"Sent {sent} events")


if __name__ == "__main__":
    main()
