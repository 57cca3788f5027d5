from __future__ import annotations

from typing import TYPE_CHECKING

from model_context.codec.protocol import (
    Command,
    GetContext,
    LoadModel,
    MalformedCommand,
    Response,
    UnknownCommand,
    UpdateContext,
    decode_command,
    encode_response,
)
from model_context.domain.errors import ContextStoreError
from model_context.observability.logging import ServiceLog, null_log
from model_context.ports.context_store import ContextStore

if TYPE_CHECKING:
    from model_context.transport.connection import Connection


class ContextCommandService:
    """Model-context line service: decode, apply to the store, encode.

    Every failure a command can produce (format or store semantics) is turned
    into an ``ERROR:`` response here, so exactly one response line comes back
    for every line received.
    """

    name = "model_context"

    def __init__(self, store: ContextStore, log: ServiceLog | None = None) -> None:
        self.store = store
        self.log = log or null_log()

    def handle_line(self, connection: Connection, line: str) -> str | None:
        command = decode_command(line)
        self.log.debug("command received", peer=connection.identifier, command=type(command).__name__)
        return encode_response(self.execute(command))

    def execute(self, command: Command) -> Response:
        try:
            return self._apply(command)
        except ContextStoreError as exc:
            self.log.debug("command rejected", command=type(command).__name__, reason=str(exc))
            return Response.error(str(exc))

    def _apply(self, command: Command) -> Response:
        if isinstance(command, LoadModel):
            self.store.load(command.model_id)
            return Response.success(f"Model {command.model_id} loaded.")
        if isinstance(command, GetContext):
            return Response.context_data(self.store.get(command.model_id))
        if isinstance(command, UpdateContext):
            self.store.update(command.model_id, command.payload)
            return Response.success(f"Model {command.model_id} updated.")
        if isinstance(command, MalformedCommand):
            return Response.error(command.reason)
        if isinstance(command, UnknownCommand):
            return Response.error(f"Unknown command: {command.raw}")
        raise TypeError(f"unsupported command type: {type(command)!r}")
