from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from model_context.transport.connection import Connection


# LineService port: what a connection handler does with each received line.
@runtime_checkable
class LineService(Protocol):
    name: str

    def handle_line(self, connection: Connection, line: str) -> str | None:
        """Process one received line (without terminator).

        Return the response line to write back to the sender, or None when the
        service writes nothing to the sender for this line.
        """
        raise NotImplementedError("LineService is a port; use a concrete service.")
