"""
Simple embedded producer.

Starts a pushevent server on 127.0.0.1:3012 and publishes
{"message":"Hello world"} to /hello_world every 100ms.

Subscribe from another terminal, e.g.:
    websocat ws://127.0.0.1:3012/hello_world
"""

import time

from pushevent import Event, JsonEvent
from pushevent.realtime.dispatcher import SendFailureError
from pushevent.server import Server


class SimplePushEvent(JsonEvent):
    """Basic event that serializes to JSON."""

    message: str


def main() -> None:
    server = Server("127.0.0.1", 3012)
    tx = server.get_tx()

    try:
        while True:
            # Target every client connected on /hello_world
            event = Event("/hello_world", SimplePushEvent(message="Hello world"))
            try:
                tx.send(event)
            except SendFailureError as e:
                print(f"Err {e}")
            time.sleep(0.1)
    except KeyboardInterrupt:
        pass
    finally:
        server.join_threads()


if __name__ == "__main__":
    main()
