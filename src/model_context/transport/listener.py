from __future__ import annotations

import socket
import threading
from dataclasses import dataclass

from model_context.observability.logging import ServiceLog, null_log
from model_context.ports.line_service import LineService
from model_context.transport.connection import Connection, ConnectionHandler, format_peer
from model_context.transport.registry import ConnectionRegistry


class ListenerError(OSError):
    pass


class ListenerBindError(ListenerError):
    # Listening socket could not be bound (port in use, bad host, no permission).
    pass


@dataclass(frozen=True, slots=True)
class ListenerConfig:
    host: str = "0.0.0.0"
    port: int = 12345
    backlog: int = 50
    read_timeout_seconds: float | None = None
    accept_poll_seconds: float = 0.5

    def __post_init__(self) -> None:
        if not isinstance(self.port, int) or self.port < 0 or self.port > 65535:
            raise ValueError("port must be in range [0, 65535]")
        if self.read_timeout_seconds is not None and self.read_timeout_seconds <= 0:
            raise ValueError("read_timeout_seconds must be > 0 when set")
        if self.accept_poll_seconds <= 0:
            raise ValueError("accept_poll_seconds must be > 0")


class ConnectionWorkers:
    # Unbounded thread-per-connection pool; admission control is not this class's concern.
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._threads: set[threading.Thread] = set()
        self._accepting = True

    def submit(self, handler: ConnectionHandler) -> threading.Thread:
        with self._lock:
            if not self._accepting:
                raise RuntimeError("worker pool is shut down")
            thread = threading.Thread(
                target=self._run,
                args=(handler,),
                name=f"conn-{handler.connection.identifier}",
                daemon=True,
            )
            self._threads.add(thread)
        thread.start()
        return thread

    def _run(self, handler: ConnectionHandler) -> None:
        try:
            handler.run()
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    def shutdown(self) -> None:
        # Stops new submissions only; running handlers drain when their clients disconnect.
        with self._lock:
            self._accepting = False

    def active_count(self) -> int:
        with self._lock:
            return len(self._threads)

    def join(self, timeout: float | None = None) -> bool:
        # Waits for currently running handlers; returns True when none is left.
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout)
        return self.active_count() == 0


class LineServer:
    """TCP listener that hands every accepted connection to its own handler thread.

    The service decides what a line means (model-context commands or
    broadcast relay); the listener, handler and registry are shared skeleton.
    """

    def __init__(
        self,
        config: ListenerConfig,
        service: LineService,
        *,
        registry: ConnectionRegistry | None = None,
        workers: ConnectionWorkers | None = None,
        log: ServiceLog | None = None,
    ) -> None:
        self.config = config
        self.service = service
        self.registry = registry or ConnectionRegistry()
        self.workers = workers or ConnectionWorkers()
        self.log = log or null_log()
        self._listener: socket.socket | None = None
        self._closed = threading.Event()

    @property
    def address(self) -> tuple[str, int]:
        host, port = self._bound_listener().getsockname()[:2]
        return host, port

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def bind(self) -> tuple[str, int]:
        listener: socket.socket | None = None
        try:
            listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((self.config.host, self.config.port))
            listener.listen(self.config.backlog)
        except OSError as exc:
            if listener is not None:
                listener.close()
            self.log.error(
                "listener bind failed",
                host=self.config.host,
                port=self.config.port,
                error=str(exc),
            )
            raise ListenerBindError(f"cannot listen on {self.config.host}:{self.config.port}: {exc}") from exc
        # Periodic accept timeouts let shutdown() from another thread end the loop promptly.
        listener.settimeout(self.config.accept_poll_seconds)
        self._listener = listener
        self.log.info("server started", service=self.service.name, address=format_peer(self.address))
        return self.address

    def serve_forever(self) -> None:
        if self._listener is None:
            self.bind()
        listener = self._bound_listener()
        try:
            while not self._closed.is_set():
                try:
                    sock, address = listener.accept()
                except TimeoutError:
                    continue
                except OSError as exc:
                    if self._closed.is_set():
                        break
                    self.log.error("error accepting client connection", error=str(exc))
                    continue
                self._start_connection(sock, address)
        finally:
            self.workers.shutdown()
            self.log.info("server stopped", service=self.service.name)

    def _bound_listener(self) -> socket.socket:
        if self._listener is None:
            raise ListenerError("server is not bound")
        return self._listener

    def _start_connection(self, sock: socket.socket, address: object) -> None:
        # Accepted sockets are blocking; the optional timeout only bounds idle reads.
        sock.settimeout(self.config.read_timeout_seconds)
        connection = Connection(sock, format_peer(address))
        self.log.info("new client connected", peer=connection.identifier)
        handler = ConnectionHandler(connection, self.service, self.registry, self.log)
        self.registry.register(connection)
        try:
            self.workers.submit(handler)
        except RuntimeError:
            self.registry.deregister(connection)
            connection.close(self.log)

    def shutdown(self) -> None:
        # Closing the listener ends the accept loop; in-flight handlers are left to drain.
        if self._closed.is_set():
            return
        self._closed.set()
        listener = self._listener
        if listener is not None:
            try:
                listener.close()
            except OSError as exc:
                self.log.warning("error closing listener", error=str(exc))
