"""Subscriber registry — which connections listen on which path.

Learn: A plain in-memory mapping, path → {connection_id: handle}.
There is no lock: the registry is owned by the Dispatcher and only
ever touched from its loop, one message at a time.

Paths are matched exactly (case-sensitive, no wildcards). Insertion
order within a path is preserved so fan-out order is deterministic.
"""

from typing import Optional

from pushevent.realtime.connection import ConnectionHandle


class DuplicateConnectionError(Exception):
    pass


class SubscriberRegistry:
    def __init__(self):
        self._by_path: dict[str, dict[str, ConnectionHandle]] = {}
        self._path_of: dict[str, str] = {}

    def register(self, handle: ConnectionHandle) -> None:
        """Subscribe handle to handle.path.

        Raises DuplicateConnectionError if a handle with the same id is
        already registered under any path.
        """
        if handle.id in self._path_of:
            raise DuplicateConnectionError(
                f"Connection {handle.id!r} already registered on {self._path_of[handle.id]!r}"
            )
        self._by_path.setdefault(handle.path, {})[handle.id] = handle
        self._path_of[handle.id] = handle.path

    def unregister(self, connection_id: str) -> Optional[ConnectionHandle]:
        """Remove a connection. Returns the removed handle, or None if absent."""
        path = self._path_of.pop(connection_id, None)
        if path is None:
            return None
        subscribers = self._by_path[path]
        handle = subscribers.pop(connection_id)
        if not subscribers:
            del self._by_path[path]
        return handle

    def subscribers_for(self, path: str) -> list[ConnectionHandle]:
        """Snapshot of the handles subscribed to path (empty if none)."""
        return list(self._by_path.get(path, {}).values())

    def get(self, connection_id: str) -> Optional[ConnectionHandle]:
        path = self._path_of.get(connection_id)
        if path is None:
            return None
        return self._by_path[path][connection_id]

    def paths(self) -> list[str]:
        return list(self._by_path)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._path_of

    def __len__(self) -> int:
        return len(self._path_of)
