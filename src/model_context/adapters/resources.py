from __future__ import annotations

import json
import mimetypes
from dataclasses import dataclass
from pathlib import Path

FILE_URI_PREFIX = "file:///"


class ResourceRootError(ValueError):
    # Configured resource root is missing or not a directory.
    pass


@dataclass(frozen=True, slots=True)
class ResourceResult:
    # Result of a resource read: either content with a mime type or an error text.
    content: bytes
    mime_type: str
    is_error: bool = False

    @classmethod
    def error(cls, message: str) -> ResourceResult:
        return cls(content=message.encode("utf-8"), mime_type="text/plain", is_error=True)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class FileSystemResources:
    """Read-only ``file://`` resource handler rooted at one directory.

    Every resolved path must stay under the root: ``file:///`` is the root
    itself, ``file:///a/b`` is ``<root>/a/b``. Directories are listed as JSON,
    regular files are returned as raw bytes.
    """

    def __init__(self, root: Path | str) -> None:
        resolved = Path(root).expanduser().resolve()
        if not resolved.is_dir():
            raise ResourceRootError(f"Root path is not a directory or does not exist: {resolved}")
        self.root = resolved

    def read(self, uri: str) -> ResourceResult:
        path = self.resolve(uri)
        if path is None:
            return ResourceResult.error("Access denied or invalid path.")
        if path.is_dir():
            return self._list_directory(uri, path)
        if path.is_file():
            return self._read_file(path)
        return ResourceResult.error("Path is not a regular file or directory, or does not exist.")

    def resolve(self, uri: str) -> Path | None:
        # None for non-file URIs and for anything that escapes the root (including via symlinks).
        if not uri.startswith(FILE_URI_PREFIX):
            return None
        relative = uri[len(FILE_URI_PREFIX) :]
        if not relative:
            return self.root
        candidate = (self.root / relative).resolve()
        if not candidate.is_relative_to(self.root):
            return None
        return candidate

    def _list_directory(self, uri: str, path: Path) -> ResourceResult:
        try:
            entries: list[dict[str, object]] = []
            for child in sorted(path.iterdir(), key=lambda item: item.name):
                entry: dict[str, object] = {
                    "name": child.name,
                    "type": "directory" if child.is_dir() else "file",
                }
                if child.is_file():
                    entry["size"] = child.stat().st_size
                entries.append(entry)
        except OSError as exc:
            return ResourceResult.error(f"Error listing directory: {exc}")
        payload = json.dumps({"path": uri, "entries": entries}, ensure_ascii=False)
        return ResourceResult(content=payload.encode("utf-8"), mime_type="application/json")

    @staticmethod
    def _read_file(path: Path) -> ResourceResult:
        try:
            content = path.read_bytes()
        except OSError as exc:
            return ResourceResult.error(f"Error reading file: {exc}")
        mime_type, _ = mimetypes.guess_type(path.name)
        return ResourceResult(content=content, mime_type=mime_type or "application/octet-stream")
