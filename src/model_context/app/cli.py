from __future__ import annotations

import argparse
import signal
import sys
from collections.abc import Sequence
from pathlib import Path
from types import FrameType

from model_context.adapters.resources import ResourceRootError
from model_context.app.client import ContextClient, run_interactive
from model_context.config.loader import ConfigError, default_config, load_config
from model_context.config.models import AppConfig, LoggingConfig
from model_context.kernel.composition_root import AppRuntime, build_log, build_runtime
from model_context.observability.logging import ServiceLog, StdoutLogSink
from model_context.transport.listener import ListenerBindError

# NOTE: This CLI module stays a thin wrapper around composition root wiring; behavior lives in the runtime.

EXIT_OK = 0
EXIT_BIND_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Model context TCP server")
    parser.add_argument("--config", help="Path to YAML config")
    parser.add_argument("--host", help="Override server.host")
    parser.add_argument("--port", type=int, help="Override server.port")
    parser.add_argument(
        "--service",
        choices=["model_context", "broadcast"],
        help="Override server.service",
    )
    parser.add_argument("--read-timeout", type=float, help="Override server.read_timeout_seconds")
    parser.add_argument("--log-sink", choices=["stdout", "jsonl", "none"], help="Override logging.sink")
    parser.add_argument("--log-path", help="Override logging.path (jsonl sink)")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Override logging.level",
    )
    return parser


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    # Parse CLI arguments; caller passes argv for testability.
    return build_parser().parse_args(argv)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    # CLI overrides take precedence over the config file; the result is re-validated.
    data = config.model_dump()
    server = data["server"]
    if args.host is not None:
        server["host"] = args.host
    if args.port is not None:
        server["port"] = args.port
    if args.service is not None:
        server["service"] = args.service
    if args.read_timeout is not None:
        server["read_timeout_seconds"] = args.read_timeout
    log_section = data["logging"]
    if args.log_sink is not None:
        log_section["sink"] = args.log_sink
    if args.log_path is not None:
        log_section["path"] = args.log_path
    if args.log_level is not None:
        log_section["level"] = args.log_level
    return AppConfig.model_validate(data)


def resolve_config(args: argparse.Namespace) -> AppConfig:
    config = load_config(Path(args.config)) if args.config else default_config()
    try:
        return apply_overrides(config, args)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def install_signal_handlers(runtime: AppRuntime) -> None:
    # SIGINT/SIGTERM stop accepting; connected clients are left to finish.
    def _stop(signum: int, frame: FrameType | None) -> None:
        _ = frame
        runtime.log.info("shutdown signal received", signal=signal.Signals(signum).name)
        runtime.server.shutdown()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)


def drain_connections(runtime: AppRuntime) -> None:
    # Blocks until every client still connected after shutdown has disconnected.
    peers = runtime.registry.identifiers()
    if peers:
        runtime.log.info("waiting for connected clients", peers=peers)
    runtime.workers.join()
    runtime.log.info("all connections drained")


def run(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = resolve_config(args)
    except ConfigError as exc:
        ServiceLog(StdoutLogSink()).error("invalid configuration", error=str(exc))
        return EXIT_CONFIG_ERROR

    log = build_log(config.logging)
    try:
        try:
            runtime = build_runtime(config, log=log)
        except ResourceRootError as exc:
            log.error("invalid configuration", error=str(exc))
            return EXIT_CONFIG_ERROR
        try:
            runtime.server.bind()
        except ListenerBindError:
            # Already logged by the listener with host/port details.
            return EXIT_BIND_FAILED
        install_signal_handlers(runtime)
        runtime.server.serve_forever()
        drain_connections(runtime)
        return EXIT_OK
    finally:
        log.close()


def build_client_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interactive model context client")
    parser.add_argument("--host", default="127.0.0.1", help="Server host")
    parser.add_argument("--port", type=int, default=12345, help="Server port")
    return parser


def run_client(argv: Sequence[str] | None = None) -> int:
    args = build_client_parser().parse_args(argv)
    log = build_log(LoggingConfig(sink="stdout", level="info"))
    try:
        with ContextClient(args.host, args.port, timeout=None) as client:
            return run_interactive(client, sys.stdin, sys.stdout)
    except OSError as exc:
        log.error("cannot connect to server", host=args.host, port=args.port, error=str(exc))
        return EXIT_BIND_FAILED
