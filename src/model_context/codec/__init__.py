from .context_json import ContextDecodeError, decode_context, encode_context, escape_text
from .protocol import (
    Command,
    GetContext,
    LoadModel,
    MalformedCommand,
    Response,
    ResponseKind,
    UnknownCommand,
    UpdateContext,
    decode_command,
    decode_response,
    encode_command,
    encode_response,
)

__all__ = [
    "Command",
    "ContextDecodeError",
    "GetContext",
    "LoadModel",
    "MalformedCommand",
    "Response",
    "ResponseKind",
    "UnknownCommand",
    "UpdateContext",
    "decode_command",
    "decode_context",
    "decode_response",
    "encode_command",
    "encode_context",
    "encode_response",
    "escape_text",
]
