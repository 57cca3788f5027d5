from __future__ import annotations

from collections.abc import Mapping

# Flat string-to-string object grammar used on the wire for CONTEXT_DATA and UPDATE_CONTEXT payloads.
# Not a JSON parser: no nesting, no numbers, no unescaping.

_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\b", "\\b"),
    ("\f", "\\f"),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)

# Keys and values never span these (same set a regex "." refuses to match).
_LINE_TERMINATORS = frozenset("\n\r\u0085\u2028\u2029")

_PAIR_SEPARATOR = '":"'


class ContextDecodeError(ValueError):
    # Raised for any payload outside the flat string-pair grammar; message is the client-facing diagnostic.
    pass


def escape_text(value: str) -> str:
    # Substitution order matters: backslash first so later escapes are not doubled.
    for raw, escaped in _ESCAPES:
        value = value.replace(raw, escaped)
    return value


def encode_context(data: Mapping[str, str]) -> str:
    # Pairs keep the mapping's iteration order.
    pairs = [f'"{escape_text(key)}":"{escape_text(value)}"' for key, value in data.items()]
    return "{" + ",".join(pairs) + "}"


def decode_context(text: str) -> dict[str, str]:
    """Decode a flat ``{"key":"value",...}`` object into a new dict.

    Decoding is strict: anything other than whitespace before the first pair,
    exactly one ``,`` between pairs, or whitespace after the last pair is
    rejected. Escape sequences inside keys and values are kept verbatim.
    """
    if not text or not text.strip():
        raise ContextDecodeError("JSON string cannot be null or empty.")
    trimmed = text.strip()
    if not trimmed.startswith("{") or not trimmed.endswith("}"):
        raise ContextDecodeError("JSON string must start with '{' and end with '}'.")

    body = trimmed[1:-1].strip()
    if not body:
        return {}

    result: dict[str, str] = {}
    cursor = 0
    found = False
    while True:
        match = _next_pair(body, cursor)
        if match is None:
            break
        start, end, key, value = match
        between = body[cursor:start].strip()
        if not found:
            if between:
                raise ContextDecodeError(
                    f"Invalid JSON format: Unexpected characters before first key-value pair: '{between}'"
                )
        elif between != ",":
            raise ContextDecodeError(
                f"Invalid JSON format: Expected ',' separator, found: '{between}' near {body[cursor:start]}"
            )
        result[key] = value
        found = True
        cursor = end

    if not found:
        raise ContextDecodeError(f"Invalid JSON format: No valid key-value pairs found in '{body}'")
    trailing = body[cursor:].strip()
    if trailing:
        raise ContextDecodeError(
            f"Invalid JSON format: Trailing characters after last key-value pair: '{trailing}'"
        )
    return result


def _next_pair(body: str, start: int) -> tuple[int, int, str, str] | None:
    # Leftmost "<key>":"<value>" at or after start; returns (match_start, match_end, key, value).
    quote = body.find('"', start)
    while quote != -1:
        match = _pair_at(body, quote)
        if match is not None:
            return match
        quote = body.find('"', quote + 1)
    return None


def _pair_at(body: str, quote: int) -> tuple[int, int, str, str] | None:
    # Key is the shortest run up to the first '":"'; value is the shortest run up to the next quote.
    separator = body.find(_PAIR_SEPARATOR, quote + 1)
    if separator == -1:
        return None
    key = body[quote + 1 : separator]
    if _spans_line(key):
        return None
    value_start = separator + len(_PAIR_SEPARATOR)
    closing = body.find('"', value_start)
    if closing == -1:
        return None
    value = body[value_start:closing]
    if _spans_line(value):
        # A later separator would put a line terminator inside the key, so no match starts here.
        return None
    return quote, closing + 1, key, value


def _spans_line(text: str) -> bool:
    return any(ch in _LINE_TERMINATORS for ch in text)
