"""Run the mock LLM application on a background thread for test suites."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Optional

import httpx
import uvicorn

from .config import DEFAULT_LISTEN_ADDR
from .dispatcher import MockDispatcher
from .retry import retry_with_backoff
from .service import create_app

LOGGER = logging.getLogger(__name__)

_WILDCARD_HOSTS = {"", "0.0.0.0", "::"}


class ServerStartError(RuntimeError):
    """Raised when the server does not become healthy after starting."""


def parse_listen_addr(value: str) -> tuple[str, int]:
    """Split ``host:port``; an empty host binds every interface."""

    host, sep, port = value.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must look like host:port, got {value!r}")
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {value!r}") from None
    return host.strip("[]") or "0.0.0.0", port_number


class MockLLMServer:
    """Serve canned LLM responses on a real socket.

    ``start`` binds the listen address (an ephemeral port by default), runs
    uvicorn on a daemon thread and waits for ``/health`` to answer before
    returning the base URL.
    """

    def __init__(
        self,
        dispatcher: MockDispatcher,
        listen_addr: str = DEFAULT_LISTEN_ADDR,
        *,
        health_attempts: int = 5,
        health_initial_delay: float = 0.5,
        health_max_delay: float = 5.0,
    ) -> None:
        self._dispatcher = dispatcher
        self._listen_addr = listen_addr
        self._health_attempts = health_attempts
        self._health_initial_delay = health_initial_delay
        self._health_max_delay = health_max_delay
        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._base_url: Optional[str] = None

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    def start(self) -> str:
        if self._base_url:
            return self._base_url
        host, port = parse_listen_addr(self._listen_addr)
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            sock.close()
            raise
        self._socket = sock
        bound_host, bound_port = sock.getsockname()[:2]

        app = create_app(self._dispatcher)
        config = uvicorn.Config(app, log_level="warning", access_log=False)
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [sock]},
            daemon=True,
        )
        self._thread.start()

        connect_host = "127.0.0.1" if bound_host in _WILDCARD_HOSTS else bound_host
        if ":" in connect_host:
            connect_host = f"[{connect_host}]"
        base_url = f"http://{connect_host}:{bound_port}"
        try:
            retry_with_backoff(
                lambda: self._check_health(base_url),
                attempts=self._health_attempts,
                initial_delay=self._health_initial_delay,
                max_delay=self._health_max_delay,
                retry_on=(httpx.HTTPError,),
            )
        except httpx.HTTPError as exc:
            self.stop()
            raise ServerStartError(f"Failed to health check server at {base_url}: {exc}") from exc
        self._base_url = base_url
        LOGGER.info("Mock LLM server listening on %s", base_url)
        return base_url

    def stop(self) -> None:
        if self._server:
            self._server.should_exit = True
        if self._thread:
            self._thread.join(timeout=5)
        if self._socket:
            self._socket.close()
        self._server = None
        self._thread = None
        self._socket = None
        self._base_url = None

    def __enter__(self) -> str:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    @staticmethod
    def _check_health(base_url: str) -> None:
        response = httpx.get(f"{base_url}/health", timeout=2.0)
        response.raise_for_status()
