from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock
from typing import Protocol, TextIO, runtime_checkable

LEVELS: dict[str, int] = {"debug": 10, "info": 20, "warning": 30, "error": 40}


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured log payload; fields carry per-event context (peer, model_id, ...).
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")
        if self.level not in LEVELS:
            raise ValueError(f"unknown log level: {self.level}")


@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None:
        """Write one structured log record."""
        raise NotImplementedError("LogSink is a port; use a concrete sink.")


class StdoutLogSink:
    # One JSON object per line on stdout; the lock keeps lines from interleaving across threads.
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = Lock()

    def emit(self, message: LogMessage) -> None:
        line = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        stream = self._stream or sys.stdout
        with self._lock:
            stream.write(line + "\n")
            stream.flush()


class JsonlLogSink:
    # File-backed structured log sink for server diagnostics.
    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")
        self._lock = Lock()

    def emit(self, message: LogMessage) -> None:
        payload = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        with self._lock:
            self._file.write(payload + "\n")
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            self._file.close()


class NullLogSink:
    def emit(self, message: LogMessage) -> None:
        _ = message


class ServiceLog:
    """Level-filtering front end over a LogSink.

    Fields passed as keyword arguments end up in the record's ``fields``
    mapping, e.g. ``log.info("connection opened", peer="127.0.0.1:5000")``.
    """

    def __init__(self, sink: LogSink, *, level: str = "info") -> None:
        if level not in LEVELS:
            raise ValueError(f"unknown log level: {level}")
        self.sink = sink
        self._threshold = LEVELS[level]

    def enabled(self, level: str) -> bool:
        return LEVELS[level] >= self._threshold

    def log(self, level: str, message: str, **fields: object) -> None:
        if not self.enabled(level):
            return
        self.sink.emit(LogMessage(level=level, message=message, fields=fields))

    def debug(self, message: str, **fields: object) -> None:
        self.log("debug", message, **fields)

    def info(self, message: str, **fields: object) -> None:
        self.log("info", message, **fields)

    def warning(self, message: str, **fields: object) -> None:
        self.log("warning", message, **fields)

    def error(self, message: str, **fields: object) -> None:
        self.log("error", message, **fields)

    def close(self) -> None:
        close = getattr(self.sink, "close", None)
        if callable(close):
            close()


def null_log() -> ServiceLog:
    return ServiceLog(NullLogSink())


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
