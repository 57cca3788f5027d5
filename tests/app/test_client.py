from __future__ import annotations

import io

import pytest

from model_context.app.client import ContextClient, run_interactive, translate_input


class _ScriptedClient:
    # Stands in for ContextClient: records lines and replies with canned responses.
    def __init__(self, replies: list[str]) -> None:
        self.sent: list[str] = []
        self._replies = list(replies)

    def send(self, line: str) -> str:
        self.sent.append(line)
        if not self._replies:
            raise ConnectionError("server closed the connection")
        return self._replies.pop(0)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("load alpha", "LOAD_MODEL:alpha"),
        ("GET alpha", "GET_CONTEXT:alpha"),
        ('update alpha {"k":"v"}', 'UPDATE_CONTEXT:alpha:{"k":"v"}'),
        ('update alpha {"k":"v w"}', 'UPDATE_CONTEXT:alpha:{"k":"v w"}'),
    ],
)
def test_translate_shorthand(text: str, expected: str) -> None:
    assert translate_input(text) == expected


@pytest.mark.parametrize("text", ["load", "get a b", "update alpha", "delete alpha", ""])
def test_translate_rejects_bad_shorthand(text: str) -> None:
    assert translate_input(text) is None


def test_interactive_session_sends_only_valid_commands() -> None:
    client = _ScriptedClient(["SUCCESS:Model a loaded.", "CONTEXT_DATA:{}"])
    stdin = io.StringIO("load a\nbogus\n\nget a\nexit\nload b\n")
    stdout = io.StringIO()

    code = run_interactive(client, stdin, stdout)  # type: ignore[arg-type]

    assert code == 0
    assert client.sent == ["LOAD_MODEL:a", "GET_CONTEXT:a"]
    output = stdout.getvalue()
    assert "Received from Server: SUCCESS:Model a loaded." in output
    assert "Unknown command or incorrect format." in output


def test_interactive_session_reports_lost_connection() -> None:
    client = _ScriptedClient([])
    stdout = io.StringIO()
    assert run_interactive(client, io.StringIO("load a\n"), stdout) == 1  # type: ignore[arg-type]
    assert "Connection to server lost" in stdout.getvalue()


def test_send_requires_connection() -> None:
    with pytest.raises(ConnectionError):
        ContextClient().send("LOAD_MODEL:a")
