"""
HTTP transport.

The transport performs one HTTP exchange and returns the raw status, body
and headers. It never interprets the status: non-2xx responses are returned
like any other, and only failures with no response raise TransportError.
"""

import contextlib
import http.client
import socket
import threading
import urllib.error
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol

from hubspot_sdk.core.context import CallContext
from hubspot_sdk.core.errors import TransportError


@dataclass
class RawResponse:
    """Status, body and headers of one HTTP response."""

    status: int
    body: bytes = field(default=b"", repr=False)
    headers: dict[str, str] = field(default_factory=dict, repr=False)
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Anything that can send one HTTP request."""

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout: float,
        ctx: CallContext,
    ) -> RawResponse: ...


class _Exchange:
    """
    One request/response exchange run on a transport worker thread.

    Keeps the open connection reachable from the calling thread so an
    abandoned exchange can be shut down while it is still waiting on the
    server.
    """

    def __init__(self, request: urllib.request.Request, timeout: float):
        self.request = request
        self.timeout = timeout
        self.connection: http.client.HTTPConnection | None = None
        self.aborted = False
        self._lock = threading.Lock()

    def track(self, connection: http.client.HTTPConnection) -> None:
        with self._lock:
            self.connection = connection

    def abort(self) -> None:
        """Shut down the connection so a blocked connect or header wait returns."""
        with self._lock:
            self.aborted = True
            connection = self.connection
        sock = connection.sock if connection is not None else None
        if sock is not None:
            # Not connected yet, or already closed by the worker
            with contextlib.suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)

    def run(self) -> RawResponse:
        url = self.request.full_url
        opener = urllib.request.build_opener(_TrackingHTTPHandler(self), _TrackingHTTPSHandler(self))
        try:
            response = opener.open(self.request, timeout=self.timeout)
            status = response.status
        except urllib.error.HTTPError as e:
            # Non-2xx: the error object is the response
            response = e
            status = e.code
        except urllib.error.URLError as e:
            raise TransportError(f"Connection error: {e.reason}", details={"url": url}) from e
        except TimeoutError as e:
            raise TransportError(f"Request timed out after {self.timeout:g} seconds", details={"url": url}) from e
        except (OSError, http.client.HTTPException) as e:
            raise TransportError(f"Connection error: {e}", details={"url": url}) from e

        with response:
            if self.aborted:
                raise TransportError("Request aborted", details={"url": url})
            try:
                data = response.read()
            except (OSError, ValueError, http.client.HTTPException) as e:
                raise TransportError(f"Failed to read response: {e}", details={"url": url}) from e

        return RawResponse(
            status=status,
            body=data,
            headers=dict(response.headers.items()) if response.headers else {},
            reason=str(getattr(response, "reason", "") or ""),
        )


class _TrackingMixin:
    """Handler mixin that hands every opened connection to its exchange."""

    def __init__(self, exchange: _Exchange):
        super().__init__()
        self._exchange = exchange

    def do_open(self, http_class, req, **http_conn_args):
        exchange = self._exchange

        def open_connection(host, **kwargs):
            connection = http_class(host, **kwargs)
            exchange.track(connection)
            return connection

        return super().do_open(open_connection, req, **http_conn_args)


class _TrackingHTTPHandler(_TrackingMixin, urllib.request.HTTPHandler):
    pass


class _TrackingHTTPSHandler(_TrackingMixin, urllib.request.HTTPSHandler):
    pass


class UrllibTransport:
    """
    Default transport built on urllib.

    Each exchange runs on a worker thread while the calling thread waits on
    the context, so a cancel or an expired deadline returns at once, even
    while the worker is still connecting or waiting for headers. The
    abandoned connection is shut down and the worker ends on its own. One
    instance can be shared between threads.
    """

    def __init__(self, max_workers: int | None = None):
        """
        Create the transport.

        Args:
            max_workers: Upper bound on concurrent exchanges (executor default if None)

        """
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hubspot-transport")

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout: float,
        ctx: CallContext,
    ) -> RawResponse:
        request_timeout = timeout
        remaining = ctx.remaining()
        if remaining is not None:
            request_timeout = min(timeout, remaining)
        ctx.raise_if_done()

        exchange = _Exchange(urllib.request.Request(url, data=body, headers=headers, method=method), request_timeout)
        future = self._executor.submit(exchange.run)
        finished = threading.Event()
        future.add_done_callback(lambda _: finished.set())
        unregister = ctx.on_cancel(finished.set)
        try:
            while not future.done() and not ctx.done:
                finished.wait(ctx.remaining())
        finally:
            unregister()

        if not future.done():
            exchange.abort()
            ctx.raise_if_done()

        try:
            response = future.result()
        except TransportError:
            ctx.raise_if_done()
            raise
        ctx.raise_if_done()
        return response
