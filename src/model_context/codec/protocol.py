from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Line protocol: one command per line in, exactly one response line out.

LOAD_MODEL_PREFIX = "LOAD_MODEL:"
GET_CONTEXT_PREFIX = "GET_CONTEXT:"
UPDATE_CONTEXT_PREFIX = "UPDATE_CONTEXT:"


class ResponseKind(str, Enum):
    # Wire prefixes for server responses.
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    CONTEXT_DATA = "CONTEXT_DATA"


@dataclass(frozen=True, slots=True)
class LoadModel:
    model_id: str


@dataclass(frozen=True, slots=True)
class GetContext:
    model_id: str


@dataclass(frozen=True, slots=True)
class UpdateContext:
    model_id: str
    payload: str


@dataclass(frozen=True, slots=True)
class UnknownCommand:
    # Line that matched no command prefix; kept verbatim for the error message.
    raw: str


@dataclass(frozen=True, slots=True)
class MalformedCommand:
    # Known prefix with unusable arguments; reason is sent back as-is.
    reason: str


Command = LoadModel | GetContext | UpdateContext | UnknownCommand | MalformedCommand


@dataclass(frozen=True, slots=True)
class Response:
    kind: ResponseKind
    body: str

    @classmethod
    def success(cls, message: str) -> Response:
        return cls(ResponseKind.SUCCESS, message)

    @classmethod
    def error(cls, message: str) -> Response:
        return cls(ResponseKind.ERROR, message)

    @classmethod
    def context_data(cls, payload: str) -> Response:
        return cls(ResponseKind.CONTEXT_DATA, payload)


def strip_line_ending(line: str) -> str:
    # Accept both "\n" and "\r\n" terminated lines; everything else is kept.
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def decode_command(line: str) -> Command:
    """Parse a single protocol line into a command.

    Never raises: lines with a known prefix but bad arguments decode to
    ``MalformedCommand``; anything else decodes to ``UnknownCommand``.
    """
    request = strip_line_ending(line)
    if request.startswith(LOAD_MODEL_PREFIX):
        model_id = request[len(LOAD_MODEL_PREFIX) :].strip()
        if not model_id:
            return MalformedCommand("Model ID cannot be empty for LOAD_MODEL.")
        return LoadModel(model_id)

    if request.startswith(GET_CONTEXT_PREFIX):
        model_id = request[len(GET_CONTEXT_PREFIX) :].strip()
        if not model_id:
            return MalformedCommand("Model ID cannot be empty for GET_CONTEXT.")
        return GetContext(model_id)

    if request.startswith(UPDATE_CONTEXT_PREFIX):
        return _decode_update(request[len(UPDATE_CONTEXT_PREFIX) :])

    return UnknownCommand(request)


def _decode_update(parts: str) -> Command:
    # Only the first colon splits id from payload; the payload may contain more colons.
    separator = parts.find(":")
    if separator <= 0 or separator == len(parts) - 1:
        return MalformedCommand("Invalid format for UPDATE_CONTEXT. Expected: <model_id>:<json_data>")
    model_id = parts[:separator].strip()
    payload = parts[separator + 1 :].strip()
    if not model_id:
        return MalformedCommand("Model ID cannot be empty for UPDATE_CONTEXT.")
    if not payload:
        return MalformedCommand("JSON data cannot be empty for UPDATE_CONTEXT.")
    return UpdateContext(model_id, payload)


def encode_command(command: LoadModel | GetContext | UpdateContext) -> str:
    # Client-side counterpart of decode_command (no trailing newline).
    if isinstance(command, LoadModel):
        return LOAD_MODEL_PREFIX + command.model_id
    if isinstance(command, GetContext):
        return GET_CONTEXT_PREFIX + command.model_id
    return f"{UPDATE_CONTEXT_PREFIX}{command.model_id}:{command.payload}"


def encode_response(response: Response) -> str:
    # Response line without the trailing newline; the transport adds it.
    return f"{response.kind.value}:{response.body}"


def decode_response(line: str) -> Response:
    # Used by the client; a line without a known prefix is reported as an error response.
    text = strip_line_ending(line)
    for kind in ResponseKind:
        prefix = kind.value + ":"
        if text.startswith(prefix):
            return Response(kind, text[len(prefix) :])
    return Response.error(f"Unrecognized response: {text}")
