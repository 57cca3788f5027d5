from __future__ import annotations

import json
from pathlib import Path

import pytest

from model_context.adapters.resources import FileSystemResources, ResourceRootError


def _tree(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    (root / "docs").mkdir(parents=True)
    (root / "docs" / "readme.txt").write_text("hello", encoding="utf-8")
    (root / "data.bin").write_bytes(b"\x00\x01\x02")
    (tmp_path / "secret.txt").write_text("outside", encoding="utf-8")
    return root


def test_root_must_be_directory(tmp_path: Path) -> None:
    with pytest.raises(ResourceRootError):
        FileSystemResources(tmp_path / "missing")


def test_root_uri_lists_root_directory(tmp_path: Path) -> None:
    resources = FileSystemResources(_tree(tmp_path))
    result = resources.read("file:///")
    assert not result.is_error
    assert result.mime_type == "application/json"
    listing = json.loads(result.text)
    assert listing["path"] == "file:///"
    assert listing["entries"] == [
        {"name": "data.bin", "type": "file", "size": 3},
        {"name": "docs", "type": "directory"},
    ]


def test_reads_file_with_guessed_mime_type(tmp_path: Path) -> None:
    resources = FileSystemResources(_tree(tmp_path))
    result = resources.read("file:///docs/readme.txt")
    assert not result.is_error
    assert result.content == b"hello"
    assert result.mime_type == "text/plain"


def test_unknown_extension_defaults_to_octet_stream(tmp_path: Path) -> None:
    resources = FileSystemResources(_tree(tmp_path))
    result = resources.read("file:///data.bin")
    assert result.content == b"\x00\x01\x02"
    assert result.mime_type == "application/octet-stream"


@pytest.mark.parametrize("uri", ["file:///../secret.txt", "file:///docs/../../secret.txt", "http://x/", "file://x"])
def test_paths_outside_root_are_denied(tmp_path: Path, uri: str) -> None:
    resources = FileSystemResources(_tree(tmp_path))
    result = resources.read(uri)
    assert result.is_error
    assert result.text == "Access denied or invalid path."


def test_absolute_path_in_uri_cannot_escape(tmp_path: Path) -> None:
    resources = FileSystemResources(_tree(tmp_path))
    secret = (tmp_path / "secret.txt").resolve()
    result = resources.read("file:///" + str(secret))
    assert result.is_error


def test_missing_path_is_reported(tmp_path: Path) -> None:
    resources = FileSystemResources(_tree(tmp_path))
    result = resources.read("file:///nope.txt")
    assert result.is_error
    assert result.text == "Path is not a regular file or directory, or does not exist."
