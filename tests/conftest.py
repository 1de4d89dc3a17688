"""Pytest configuration - loads .env for live tests and provides fake HubSpot backends."""

import json
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest
from dotenv import load_dotenv

from hubspot_sdk.core.client import APIClient
from hubspot_sdk.core.context import CallContext
from hubspot_sdk.core.transport import RawResponse
from hubspot_sdk.sdk import HubSpotClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

TEST_TOKEN = "test-token"


def json_response(status: int, payload: Any = None, headers: dict[str, str] | None = None) -> RawResponse:
    """Build a RawResponse with a JSON body (or no body for None)."""
    body = b"" if payload is None else json.dumps(payload).encode("utf-8")
    all_headers = {"Content-Type": "application/json"}
    all_headers.update(headers or {})
    return RawResponse(status=status, body=body, headers=all_headers)


# =============================================================================
# Fake transport
# =============================================================================


@dataclass
class SentRequest:
    """One call recorded by FakeTransport."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None
    timeout: float
    ctx: CallContext

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def query(self) -> dict[str, list[str]]:
        return parse_qs(urlsplit(self.url).query)

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


@dataclass
class FakeTransport:
    """
    Transport that replays scripted responses.

    Each queued item is a RawResponse, an exception to raise, or a callable
    taking the SentRequest and returning either. The last item is reused
    once the queue runs dry.
    """

    responses: list[Any] = field(default_factory=list)
    sent: list[SentRequest] = field(default_factory=list)

    def queue(self, *items: Any) -> "FakeTransport":
        self.responses.extend(items)
        return self

    def send(self, method, url, headers, body, timeout, ctx) -> RawResponse:
        sent = SentRequest(method, url, dict(headers), body, timeout, ctx)
        self.sent.append(sent)
        if not self.responses:
            raise AssertionError(f"no response queued for {method} {url}")
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if callable(item) and not isinstance(item, RawResponse):
            item = item(sent)
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def last(self) -> SentRequest:
        return self.sent[-1]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def api_client(transport) -> APIClient:
    """Low-level client on the fake transport, no throttling, instant retries."""
    return APIClient(
        access_token=TEST_TOKEN,
        base_url="https://api.test",
        transport=transport,
        rate_limit_enabled=False,
        retry_backoff=0,
        retry_backoff_max=0,
    )


@pytest.fixture
def hubspot(transport) -> HubSpotClient:
    """High-level client on the fake transport."""
    return HubSpotClient(
        access_token=TEST_TOKEN,
        base_url="https://api.test",
        transport=transport,
        rate_limit_enabled=False,
        retry_backoff=0,
        retry_backoff_max=0,
    )


# =============================================================================
# Local HTTP server
# =============================================================================


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: dict[str, list[str]]
    headers: dict[str, str]
    body: bytes


@dataclass
class ScriptedResponse:
    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    delay: float = 0.0


class LocalHubSpot:
    """Tiny HTTP server answering with scripted responses, one per request."""

    def __init__(self):
        self.requests: list[RecordedRequest] = []
        self._script: list[ScriptedResponse | Callable[[RecordedRequest], ScriptedResponse]] = []
        self._lock = threading.Lock()
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), self._handler_class())
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    def respond(self, status: int, payload: Any = None, headers: dict[str, str] | None = None, delay: float = 0.0):
        body = b"" if payload is None else json.dumps(payload).encode("utf-8")
        all_headers = {"Content-Type": "application/json"} if payload is not None else {}
        all_headers.update(headers or {})
        self._script.append(ScriptedResponse(status, body, all_headers, delay))

    def respond_raw(self, status: int, body: bytes, content_type: str = "text/plain"):
        self._script.append(ScriptedResponse(status, body, {"Content-Type": content_type}))

    def _next(self, recorded: RecordedRequest) -> ScriptedResponse:
        with self._lock:
            self.requests.append(recorded)
            if not self._script:
                return ScriptedResponse(500, b'{"message": "no response scripted"}')
            item = self._script.pop(0) if len(self._script) > 1 else self._script[0]
        return item(recorded) if callable(item) else item

    def _handler_class(self):
        server = self

        class Handler(BaseHTTPRequestHandler):
            def _handle(self):
                length = int(self.headers.get("Content-Length") or 0)
                body = self.rfile.read(length) if length else b""
                parts = urlsplit(self.path)
                recorded = RecordedRequest(
                    method=self.command,
                    path=parts.path,
                    query=parse_qs(parts.query),
                    headers={key: value for key, value in self.headers.items()},
                    body=body,
                )
                scripted = server._next(recorded)
                if scripted.delay:
                    threading.Event().wait(scripted.delay)
                self.send_response(scripted.status)
                for key, value in scripted.headers.items():
                    self.send_header(key, value)
                self.send_header("Content-Length", str(len(scripted.body)))
                self.end_headers()
                if scripted.body:
                    self.wfile.write(scripted.body)

            do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _handle

            def log_message(self, format, *args):
                pass

        return Handler

    def start(self) -> "LocalHubSpot":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=5)


@pytest.fixture
def local_server() -> Iterator[LocalHubSpot]:
    server = LocalHubSpot().start()
    yield server
    server.stop()
