"""
HTTP listener that hands the note to the first request on the secret path.

Public API:
  - start(path_token, note_store, host="", port=0) -> (DeliveryServer, completion)
  - DeliveryServer.shutdown(timeout) / shutdown(server, timeout)

Each connection is served on its own thread. Who gets the note is decided
by NoteStore.take(), never by the HTTP layer.
"""

from __future__ import annotations

import contextlib
import logging
import os
import socket
import socketserver
import threading
import time
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Optional, Set, Tuple
from urllib.parse import urlsplit

from qreph.exceptions import BindError, ShutdownError
from qreph.signals import OneShotSignal
from qreph.store import NoteStore

LOGGER = logging.getLogger(__name__)

CONTENT_TYPE = "text/plain; charset=utf-8"
NOT_FOUND_BODY = b"404 page not found\n"


# ------------------------------- Handler -------------------------------------


class _DeliveryHandler(BaseHTTPRequestHandler):
    server: "_DeliveryHTTPServer"

    # Socket timeout for slow or idle clients
    timeout = 30

    def do_GET(self) -> None:
        route = urlsplit(self.path).path
        if route != self.server.route:
            self._not_found()
            return

        note = self.server.note_store.take()
        if note is None:
            LOGGER.info("Note already delivered; refusing %s", self.client_address[0])
            self._not_found()
            return

        try:
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", CONTENT_TYPE)
            self.send_header("Content-Length", str(len(note)))
            self.send_header("Cache-Control", "no-store")
            self.end_headers()
            self.wfile.write(note)
            LOGGER.info("Note delivered to %s", self.client_address[0])
        finally:
            # The note is gone either way
            self.server.completion.fire()

    def _not_found(self) -> None:
        self.send_response(HTTPStatus.NOT_FOUND)
        self.send_header("Content-Type", CONTENT_TYPE)
        self.send_header("Content-Length", str(len(NOT_FOUND_BODY)))
        self.end_headers()
        self.wfile.write(NOT_FOUND_BODY)

    def log_message(self, format: str, *args) -> None:
        LOGGER.debug("%s - %s", self.address_string(), format % args)


# ------------------------------- Listener ------------------------------------


class _DeliveryHTTPServer(ThreadingHTTPServer):
    """Threading server that tracks open connections so shutdown can drain them."""

    daemon_threads = True
    block_on_close = False

    def __init__(
        self,
        address: Tuple[str, int],
        path_token: str,
        note_store: NoteStore,
        completion: OneShotSignal,
        family: socket.AddressFamily = socket.AF_INET,
    ):
        self.address_family = family
        self.route = f"/{path_token}"
        self.note_store = note_store
        self.completion = completion
        self._open: Set[socket.socket] = set()
        self._drained = threading.Condition()
        super().__init__(address, _DeliveryHandler)

    def server_bind(self) -> None:
        # Skip HTTPServer.server_bind, whose getfqdn() can block on reverse DNS
        if self.address_family == socket.AF_INET6:
            # Accept IPv4-mapped connections on the same socket
            self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
        socketserver.TCPServer.server_bind(self)
        host, port = self.server_address[:2]
        self.server_name = host or "0.0.0.0"
        self.server_port = port

    @property
    def in_flight(self) -> int:
        with self._drained:
            return len(self._open)

    def process_request(self, request, client_address) -> None:
        # Register on the accept thread so a shutdown cannot miss the connection
        with self._drained:
            self._open.add(request)
        super().process_request(request, client_address)

    def process_request_thread(self, request, client_address) -> None:
        try:
            super().process_request_thread(request, client_address)
        finally:
            with self._drained:
                self._open.discard(request)
                self._drained.notify_all()

    def handle_error(self, request, client_address) -> None:
        LOGGER.debug("Error while serving %s", client_address, exc_info=True)

    def drain(self, timeout: float) -> int:
        """Wait up to `timeout` for open connections, then cut the rest. Returns how many were cut."""
        deadline = time.monotonic() + max(timeout, 0.0)
        with self._drained:
            while self._open:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._drained.wait(remaining)
            stranded = list(self._open)

        for request in stranded:
            # Already closed by its handler thread
            with contextlib.suppress(OSError):
                request.shutdown(socket.SHUT_RDWR)
        return len(stranded)


# ------------------------------- Public API ----------------------------------


def _abort() -> None:
    os._exit(1)


def _listen_address(host: str, port: int) -> Tuple[Tuple[str, int], socket.AddressFamily]:
    """All interfaces means dual-stack where the platform allows it."""
    if host:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        return (host, port), family
    if socket.has_dualstack_ipv6():
        return ("::", port), socket.AF_INET6
    return ("", port), socket.AF_INET


class DeliveryServer:
    """Handle on a running delivery listener and its serving thread."""

    def __init__(
        self,
        path_token: str,
        note_store: NoteStore,
        *,
        host: str = "",
        port: int = 0,
        completion: Optional[OneShotSignal] = None,
        poll_interval: float = 0.05,
        on_fatal: Callable[[], None] = _abort,
    ):
        self.path_token = path_token
        self.completion = completion or OneShotSignal("delivered")
        self._poll_interval = poll_interval
        self._on_fatal = on_fatal
        self._closed = False
        self._close_lock = threading.Lock()

        address, family = _listen_address(host, port)
        try:
            self._httpd = _DeliveryHTTPServer(
                address, path_token, note_store, self.completion, family=family
            )
        except OSError as exc:
            raise BindError(f"failed to create listener on {host or '*'}:{port}: {exc}") from exc

        self._thread = threading.Thread(
            target=self._serve, name="qreph-delivery", daemon=True
        )

    @classmethod
    def start(
        cls, path_token: str, note_store: NoteStore, **kwargs
    ) -> "DeliveryServer":
        """Bind, start serving in the background and return once the listener is up."""
        server = cls(path_token, note_store, **kwargs)
        server._thread.start()
        LOGGER.debug("Delivery server listening on port %d", server.port)
        return server

    @property
    def port(self) -> int:
        return self._httpd.server_address[1]

    @property
    def family(self) -> socket.AddressFamily:
        return self._httpd.address_family

    @property
    def in_flight(self) -> int:
        return self._httpd.in_flight

    def _serve(self) -> None:
        try:
            self._httpd.serve_forever(poll_interval=self._poll_interval)
        except Exception:
            LOGGER.critical("Delivery server failed", exc_info=True)
            self._on_fatal()

    def shutdown(self, timeout: float) -> None:
        """
        Stop accepting, wait up to `timeout` seconds for open connections,
        then force-close them.

        Raises ShutdownError if any connection had to be cut. Calling this
        more than once is a no-op.
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        if self._thread.is_alive():
            self._httpd.shutdown()
            self._thread.join()
        self._httpd.server_close()

        stranded = self._httpd.drain(timeout)
        if stranded:
            raise ShutdownError(
                f"{stranded} connection(s) still open after {timeout}s",
                stranded=stranded,
            )
        LOGGER.debug("Delivery server stopped")


def start(
    path_token: str,
    note_store: NoteStore,
    *,
    host: str = "",
    port: int = 0,
    completion: Optional[OneShotSignal] = None,
) -> Tuple[DeliveryServer, OneShotSignal]:
    server = DeliveryServer.start(
        path_token, note_store, host=host, port=port, completion=completion
    )
    return server, server.completion


def shutdown(server: DeliveryServer, timeout: float) -> None:
    server.shutdown(timeout)
