from __future__ import annotations

import socket
from types import TracebackType
from typing import BinaryIO, TextIO

from model_context.codec.protocol import (
    GetContext,
    LoadModel,
    Response,
    UpdateContext,
    decode_response,
    encode_command,
)
from model_context.transport.connection import ENCODING

USAGE = "Available: load <model_id>, get <model_id>, update <model_id> <json_data>, exit"


class ContextClient:
    """Blocking line client for the model-context protocol.

    Each call writes one command line and waits for its single response line.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 12345, *, timeout: float | None = 10.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self._socket: socket.socket | None = None
        self._reader: BinaryIO | None = None
        self._writer: BinaryIO | None = None

    def connect(self) -> None:
        sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        self._socket = sock
        self._reader = sock.makefile("rb")
        self._writer = sock.makefile("wb")

    def close(self) -> None:
        for resource in (self._reader, self._writer, self._socket):
            if resource is None:
                continue
            try:
                resource.close()
            except OSError:
                # Nothing useful to do with a failed close on the client side.
                continue
        self._socket = self._reader = self._writer = None

    def __enter__(self) -> ContextClient:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def send(self, line: str) -> str:
        # Raw request/response exchange; returns the response line without terminator.
        if self._reader is None or self._writer is None:
            raise ConnectionError("client is not connected")
        self._writer.write((line + "\n").encode(ENCODING))
        self._writer.flush()
        raw = self._reader.readline()
        if not raw:
            raise ConnectionError("server closed the connection")
        return raw.decode(ENCODING, errors="replace").rstrip("\r\n")

    def request(self, command: LoadModel | GetContext | UpdateContext) -> Response:
        return decode_response(self.send(encode_command(command)))

    def load(self, model_id: str) -> Response:
        return self.request(LoadModel(model_id))

    def get(self, model_id: str) -> Response:
        return self.request(GetContext(model_id))

    def update(self, model_id: str, payload: str) -> Response:
        return self.request(UpdateContext(model_id, payload))


def translate_input(text: str) -> str | None:
    # Console shorthand -> protocol line; None when the input is not a valid shorthand.
    parts = text.strip().split(" ", 2)
    command = parts[0].lower() if parts else ""
    if command == "load" and len(parts) == 2:
        return encode_command(LoadModel(parts[1].strip()))
    if command == "get" and len(parts) == 2:
        return encode_command(GetContext(parts[1].strip()))
    if command == "update" and len(parts) == 3:
        model_id = parts[1].strip()
        if not model_id:
            return None
        return encode_command(UpdateContext(model_id, parts[2].strip()))
    return None


def run_interactive(client: ContextClient, stdin: TextIO, stdout: TextIO) -> int:
    stdout.write(f"Enter commands. {USAGE}\n")
    for raw in stdin:
        text = raw.strip()
        if not text:
            continue
        if text.lower() in {"exit", "quit"}:
            break
        line = translate_input(text)
        if line is None:
            stdout.write(f"Unknown command or incorrect format. {USAGE}\n")
            continue
        try:
            response = client.send(line)
        except OSError as exc:
            stdout.write(f"Connection to server lost: {exc}\n")
            return 1
        stdout.write(f"Received from Server: {response}\n")
        stdout.flush()
    return 0
