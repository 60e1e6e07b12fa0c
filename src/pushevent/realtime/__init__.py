"""Real-time core — subscriber registry, dispatcher, WebSocket transport.

Learn: Events flow through one queue:
1. Transport (WebSocket) → Connect / Disconnect
2. Producers (EventSender) → Publish
3. Dispatcher → registry lookup → per-connection outbound channels

The WebSocket layer owns sockets; the dispatcher owns subscriptions.
"""
