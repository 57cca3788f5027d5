from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from model_context.adapters.context_store import InMemoryContextStore
from model_context.adapters.resources import FileSystemResources
from model_context.config.loader import ConfigError
from model_context.config.models import AppConfig, LoggingConfig
from model_context.observability.logging import JsonlLogSink, NullLogSink, ServiceLog, StdoutLogSink
from model_context.ports.line_service import LineService
from model_context.transport.listener import ConnectionWorkers, LineServer, ListenerConfig
from model_context.transport.registry import ConnectionRegistry
from model_context.usecases.broadcast import BroadcastService
from model_context.usecases.dispatch import ContextCommandService


@dataclass(frozen=True, slots=True)
class AppRuntime:
    # Everything one server process owns; built once and passed around explicitly.
    server: LineServer
    service: LineService
    registry: ConnectionRegistry
    workers: ConnectionWorkers
    log: ServiceLog
    store: InMemoryContextStore | None = None
    resources: FileSystemResources | None = None


def build_log(config: LoggingConfig) -> ServiceLog:
    if config.sink == "jsonl":
        if not config.path:
            raise ConfigError("logging.path is required when sink is 'jsonl'")
        return ServiceLog(JsonlLogSink(Path(config.path)), level=config.level)
    if config.sink == "none":
        return ServiceLog(NullLogSink(), level=config.level)
    return ServiceLog(StdoutLogSink(), level=config.level)


def build_listener_config(config: AppConfig) -> ListenerConfig:
    server = config.server
    return ListenerConfig(
        host=server.host,
        port=server.port,
        backlog=server.backlog,
        read_timeout_seconds=server.read_timeout_seconds,
        accept_poll_seconds=server.accept_poll_seconds,
    )


def build_runtime(config: AppConfig, *, log: ServiceLog | None = None) -> AppRuntime:
    # Composition root: the selected service gets its own store/registry; nothing lives in module globals.
    log = log or build_log(config.logging)
    registry = ConnectionRegistry()
    workers = ConnectionWorkers()
    store: InMemoryContextStore | None = None
    service: LineService
    if config.server.service == "broadcast":
        service = BroadcastService(registry, log)
    else:
        store = InMemoryContextStore()
        service = ContextCommandService(store, log)

    resources = None
    if config.resources.root is not None:
        resources = FileSystemResources(config.resources.root)

    server = LineServer(build_listener_config(config), service, registry=registry, workers=workers, log=log)
    return AppRuntime(
        server=server,
        service=service,
        registry=registry,
        workers=workers,
        log=log,
        store=store,
        resources=resources,
    )
