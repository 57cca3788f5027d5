from __future__ import annotations

from typing import TYPE_CHECKING

from model_context.observability.logging import ServiceLog, null_log

if TYPE_CHECKING:
    from model_context.transport.connection import Connection
    from model_context.transport.registry import ConnectionRegistry


class BroadcastService:
    # Chat relay: each received line goes verbatim to every other connected client.
    # No store and no command parsing; the sender gets no reply.
    name = "broadcast"

    def __init__(self, registry: ConnectionRegistry, log: ServiceLog | None = None) -> None:
        self.registry = registry
        self.log = log or null_log()

    def handle_line(self, connection: Connection, line: str) -> str | None:
        for peer in self.registry.snapshot():
            if peer is connection:
                continue
            try:
                peer.send_line(line)
            except OSError as exc:
                # The peer's own handler notices the broken socket and closes it.
                self.log.warning("broadcast write failed", peer=peer.identifier, error=str(exc))
        return None
