from .connection import Connection, ConnectionHandler, ConnectionState, format_peer
from .listener import ConnectionWorkers, LineServer, ListenerBindError, ListenerConfig, ListenerError
from .registry import ConnectionRegistry

__all__ = [
    "Connection",
    "ConnectionHandler",
    "ConnectionRegistry",
    "ConnectionState",
    "ConnectionWorkers",
    "LineServer",
    "ListenerBindError",
    "ListenerConfig",
    "ListenerError",
    "format_peer",
]
