from __future__ import annotations

import socket
from enum import Enum
from threading import Lock
from typing import BinaryIO

from model_context.codec.protocol import strip_line_ending
from model_context.observability.logging import ServiceLog, null_log
from model_context.ports.line_service import LineService
from model_context.transport.registry import ConnectionRegistry

ENCODING = "utf-8"


def format_peer(address: object) -> str:
    # AF_INET/AF_INET6 peers become "host:port"; anything else falls back to str().
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address)


class Connection:
    """One accepted client socket with its line reader and writer.

    Owned by exactly one ConnectionHandler; other threads may only call
    ``send_line`` (the broadcast service does), which is serialized by a lock.
    """

    def __init__(self, sock: socket.socket, identifier: str | None = None) -> None:
        self.socket = sock
        if identifier is None:
            try:
                identifier = format_peer(sock.getpeername())
            except OSError:
                identifier = "UNKNOWN_CLIENT"
        self.identifier = identifier
        self._reader: BinaryIO = sock.makefile("rb")
        self._writer: BinaryIO = sock.makefile("wb")
        self._write_lock = Lock()
        self.closed = False

    def read_line(self) -> str | None:
        # None at end of stream. Undecodable bytes are replaced rather than dropping the connection.
        raw = self._reader.readline()
        if not raw:
            return None
        return strip_line_ending(raw.decode(ENCODING, errors="replace"))

    def send_line(self, line: str) -> None:
        with self._write_lock:
            if self.closed:
                raise OSError(f"connection {self.identifier} is closed")
            self._writer.write((line + "\n").encode(ENCODING))
            self._writer.flush()

    def close(self, log: ServiceLog | None = None) -> None:
        # Release order: reader, writer, socket. Secondary errors are logged and swallowed.
        log = log or null_log()
        with self._write_lock:
            if self.closed:
                return
            self.closed = True
        for label, resource in (("reader", self._reader), ("writer", self._writer), ("socket", self.socket)):
            try:
                resource.close()
            except OSError as exc:
                log.warning(
                    "error while releasing connection resource",
                    peer=self.identifier,
                    resource=label,
                    error=str(exc),
                )


class ConnectionState(str, Enum):
    OPEN = "open"
    SERVING = "serving"
    CLOSED = "closed"


class ConnectionHandler:
    # Read-dispatch-write loop for one connection; runs on its own worker thread.
    def __init__(
        self,
        connection: Connection,
        service: LineService,
        registry: ConnectionRegistry,
        log: ServiceLog | None = None,
    ) -> None:
        self.connection = connection
        self.service = service
        self.registry = registry
        self.log = log or null_log()
        self.state = ConnectionState.OPEN

    def run(self) -> None:
        self.state = ConnectionState.SERVING
        self.log.info("connection opened", peer=self.connection.identifier, service=self.service.name)
        try:
            self._serve()
        except OSError as exc:
            # Covers resets, broken pipes and read timeouts; only this connection is affected.
            self.log.warning("connection I/O error", peer=self.connection.identifier, error=str(exc))
        finally:
            self._close()

    def _serve(self) -> None:
        # Strictly one line at a time: the next read starts only after the response is written.
        while True:
            line = self.connection.read_line()
            if line is None:
                self.log.info("client closed the stream", peer=self.connection.identifier)
                return
            response = self.service.handle_line(self.connection, line)
            if response is not None:
                self.connection.send_line(response)

    def _close(self) -> None:
        if self.state is ConnectionState.CLOSED:
            return
        self.state = ConnectionState.CLOSED
        self.registry.deregister(self.connection)
        self.connection.close(self.log)
        self.log.info("connection closed", peer=self.connection.identifier)
