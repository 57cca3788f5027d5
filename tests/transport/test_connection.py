from __future__ import annotations

import socket
import threading

import pytest

from model_context.adapters.context_store import InMemoryContextStore
from model_context.observability.logging import LogMessage, ServiceLog
from model_context.transport.connection import Connection, ConnectionHandler, ConnectionState, format_peer
from model_context.transport.registry import ConnectionRegistry
from model_context.usecases.dispatch import ContextCommandService


class _ListSink:
    def __init__(self) -> None:
        self.messages: list[LogMessage] = []

    def emit(self, message: LogMessage) -> None:
        self.messages.append(message)


class _FailingClose:
    def close(self) -> None:
        raise OSError("close failed")


def _start_handler(
    registry: ConnectionRegistry, log: ServiceLog
) -> tuple[socket.socket, ConnectionHandler, threading.Thread]:
    server_side, client_side = socket.socketpair()
    connection = Connection(server_side, "test-peer")
    registry.register(connection)
    handler = ConnectionHandler(connection, ContextCommandService(InMemoryContextStore()), registry, log)
    thread = threading.Thread(target=handler.run, daemon=True)
    thread.start()
    return client_side, handler, thread


def test_format_peer() -> None:
    assert format_peer(("127.0.0.1", 5000)) == "127.0.0.1:5000"
    assert format_peer("unix-peer") == "unix-peer"


def test_handler_answers_each_line_in_order() -> None:
    registry = ConnectionRegistry()
    client, handler, thread = _start_handler(registry, ServiceLog(_ListSink()))
    with client, client.makefile("rwb") as stream:
        stream.write(b"LOAD_MODEL:m\nUPDATE_CONTEXT:m:{\"k\":\"v\"}\nGET_CONTEXT:m\nNOPE\n")
        stream.flush()
        responses = [stream.readline() for _ in range(4)]
    thread.join(timeout=5)

    assert responses == [
        b"SUCCESS:Model m loaded.\n",
        b"SUCCESS:Model m updated.\n",
        b'CONTEXT_DATA:{"k":"v"}\n',
        b"ERROR:Unknown command: NOPE\n",
    ]
    assert handler.state is ConnectionState.CLOSED


def test_end_of_stream_closes_and_deregisters() -> None:
    registry = ConnectionRegistry()
    sink = _ListSink()
    client, handler, thread = _start_handler(registry, ServiceLog(sink))
    client.close()
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert handler.state is ConnectionState.CLOSED
    assert handler.connection.closed
    assert len(registry) == 0
    assert "connection closed" in [message.message for message in sink.messages]


def test_invalid_utf8_is_replaced_not_fatal() -> None:
    registry = ConnectionRegistry()
    client, _, thread = _start_handler(registry, ServiceLog(_ListSink()))
    with client, client.makefile("rwb") as stream:
        stream.write(b"\xff\xfe\n")
        stream.flush()
        response = stream.readline()
    thread.join(timeout=5)
    assert response.startswith(b"ERROR:Unknown command: ")


def test_release_errors_are_logged_not_raised() -> None:
    server_side, client_side = socket.socketpair()
    sink = _ListSink()
    connection = Connection(server_side, "test-peer")
    connection._reader = _FailingClose()  # type: ignore[assignment]
    try:
        connection.close(ServiceLog(sink))
    finally:
        client_side.close()

    warnings = [message for message in sink.messages if message.level == "warning"]
    assert len(warnings) == 1
    assert warnings[0].fields["resource"] == "reader"
    assert connection.closed


def test_send_after_close_raises_os_error() -> None:
    server_side, client_side = socket.socketpair()
    connection = Connection(server_side, "test-peer")
    connection.close()
    client_side.close()
    with pytest.raises(OSError):
        connection.send_line("x")
