from .logging import JsonlLogSink, LogMessage, LogSink, NullLogSink, ServiceLog, StdoutLogSink, null_log

__all__ = [
    "JsonlLogSink",
    "LogMessage",
    "LogSink",
    "NullLogSink",
    "ServiceLog",
    "StdoutLogSink",
    "null_log",
]
