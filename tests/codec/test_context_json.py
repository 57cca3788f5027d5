from __future__ import annotations

import pytest

from model_context.codec.context_json import ContextDecodeError, decode_context, encode_context, escape_text


def test_encode_empty_record() -> None:
    # An empty record serializes to a bare pair of braces.
    assert encode_context({}) == "{}"


def test_encode_keeps_insertion_order_and_joins_with_commas() -> None:
    assert encode_context({"owner": "bob", "version": "2"}) == '{"owner":"bob","version":"2"}'


def test_escape_order_backslash_first() -> None:
    # Backslash is escaped before the quote, so the quote's own backslash is not doubled.
    assert escape_text('a\\"b') == 'a\\\\\\"b'
    assert escape_text("\b\f\n\r\t") == "\\b\\f\\n\\r\\t"


def test_round_trip_for_plain_values() -> None:
    record = {"k": "v", "name": "model one", "empty": ""}
    assert decode_context(encode_context(record)) == record


def test_decode_keeps_escape_sequences_verbatim() -> None:
    # Escape sequences are not turned back into the characters they stand for.
    encoded = encode_context({"k": "a\nb"})
    assert decode_context(encoded) == {"k": "a\\nb"}


def test_decode_literal_quote_in_key_comes_back_escaped() -> None:
    # Key 'a"' encodes as a\" and decodes to the escaped form, not back to a bare quote.
    encoded = encode_context({'a"': "b"})
    assert decode_context(encoded) == {'a\\"': "b"}


def test_decode_literal_quote_in_value_is_rejected_after_encoding() -> None:
    # Value 'say "hi"' encodes to say \"hi\"; the first inner quote ends the value early
    # and the leftover text is not a separator.
    encoded = encode_context({"k": 'say "hi"'})
    assert encoded == '{"k":"say \\"hi\\""}'
    with pytest.raises(ContextDecodeError):
        decode_context(encoded)


def test_decode_backslash_value_keeps_escaped_form() -> None:
    encoded = encode_context({"path": "C:\\tmp"})
    assert decode_context(encoded) == {"path": "C:\\\\tmp"}


@pytest.mark.parametrize("text", ["{}", "{ }", "  {\t}  ", "{\n}"])
def test_decode_empty_objects(text: str) -> None:
    assert decode_context(text) == {}


def test_decode_tolerates_whitespace_around_pairs() -> None:
    assert decode_context('  { "a":"1" , "b":"2" }  ') == {"a": "1", "b": "2"}


def test_decode_allows_colons_and_braces_inside_values() -> None:
    assert decode_context('{"url":"http://x/{id}"}') == {"url": "http://x/{id}"}


def test_decode_later_duplicate_key_wins() -> None:
    assert decode_context('{"a":"1","a":"2"}') == {"a": "2"}


@pytest.mark.parametrize("text", ["", "   ", "not json", '"a":"b"', '{"a":"b"', '"a":"b"}'])
def test_decode_rejects_missing_braces_or_empty_input(text: str) -> None:
    with pytest.raises(ContextDecodeError):
        decode_context(text)


def test_decode_rejects_text_before_first_pair() -> None:
    with pytest.raises(ContextDecodeError, match="before first key-value pair"):
        decode_context('{x "a":"b"}')


def test_decode_rejects_missing_separator() -> None:
    with pytest.raises(ContextDecodeError, match="Expected ','"):
        decode_context('{"a":"1" "b":"2"}')


def test_decode_rejects_double_separator() -> None:
    with pytest.raises(ContextDecodeError, match="Expected ','"):
        decode_context('{"a":"1",,"b":"2"}')


def test_decode_rejects_trailing_characters() -> None:
    with pytest.raises(ContextDecodeError, match="Trailing characters"):
        decode_context('{"a":"1",}')


@pytest.mark.parametrize("text", ['{"a":1}', '{"a":true}', '{"a":{"b":"c"}}', "{abc}", '{"a" : "b"}'])
def test_decode_rejects_non_string_pairs(text: str) -> None:
    # Numbers, booleans, nesting and spaced separators are outside the grammar.
    with pytest.raises(ContextDecodeError):
        decode_context(text)


def test_decode_rejects_value_spanning_lines() -> None:
    with pytest.raises(ContextDecodeError):
        decode_context('{"a":"line\nbreak"}')


def test_decode_error_is_value_error() -> None:
    # Callers can treat decode failures as plain ValueError.
    with pytest.raises(ValueError):
        decode_context("[]")
