from __future__ import annotations

from threading import Lock
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from model_context.transport.connection import Connection


class ConnectionRegistry:
    # Live connections, keyed by object identity; shared bookkeeping across handler threads.
    def __init__(self) -> None:
        self._lock = Lock()
        self._connections: dict[int, Connection] = {}

    def register(self, connection: Connection) -> None:
        with self._lock:
            self._connections[id(connection)] = connection

    def deregister(self, connection: Connection) -> bool:
        # Returns False when the connection was not registered (double close).
        with self._lock:
            return self._connections.pop(id(connection), None) is not None

    def snapshot(self) -> list[Connection]:
        with self._lock:
            return list(self._connections.values())

    def identifiers(self) -> list[str]:
        return [connection.identifier for connection in self.snapshot()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
