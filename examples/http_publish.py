"""
Publish over HTTP to a running pushevent server.

Start the server first:
    pushevent serve

Then:
    python examples/http_publish.py /hello_world "Hello from HTTP"
"""

import sys

import httpx

BASE = "http://127.0.0.1:3012/api/v1"


def main() -> None:
    path = sys.argv[1] if len(sys.argv) > 1 else "/hello_world"
    message = sys.argv[2] if len(sys.argv) > 2 else "Hello world"

    try:
        health = httpx.get(f"{BASE}/health", timeout=5).json()
    except httpx.ConnectError:
        print(f"ERROR: Server not reachable at {BASE}")
        print("Start it with:  pushevent serve")
        sys.exit(1)

    print(f"Server: {health['status']} ({health['subscribers']} subscribers)")

    resp = httpx.post(f"{BASE}/events{path}", json={"message": message}, timeout=5)
    if resp.status_code != 202:
        print(f"ERROR: Publish failed: {resp.status_code} {resp.text}")
        sys.exit(1)
    print(f"Published to {resp.json()['path']}")


if __name__ == "__main__":
    main()
