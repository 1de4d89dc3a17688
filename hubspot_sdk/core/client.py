"""
Core HTTP client for the HubSpot API.

Handles authentication, request dispatch, rate limiting, retries and
error envelopes.
"""

import email.utils
import json
import logging
import os
import time
import urllib.parse
from typing import Any

from tenacity import (
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from hubspot_sdk.core.context import CallContext
from hubspot_sdk.core.envelope import parse_error_body
from hubspot_sdk.core.errors import ConfigurationError, TransportError
from hubspot_sdk.core.ratelimit import DEFAULT_INTERVAL, DEFAULT_MAX_REQUESTS, RateLimiter
from hubspot_sdk.core.request import Request
from hubspot_sdk.core.transport import RawResponse, Transport, UrllibTransport

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://api.hubapi.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header (delay in seconds or HTTP date)."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    return max(0.0, when.timestamp() - time.time())


class RetryAfterWait(wait_base):
    """Exponential backoff that defers to Retry-After on 429/503 responses."""

    def __init__(self, fallback: wait_base, cap: float):
        self._fallback = fallback
        self._cap = cap

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = float(self._fallback(retry_state))
        outcome = retry_state.outcome
        if outcome is None or outcome.failed:
            return max(0.0, delay)

        response = outcome.result()
        if isinstance(response, RawResponse) and response.status in (429, 503):
            retry_after = parse_retry_after(response.header("Retry-After"))
            if retry_after is not None:
                delay = min(retry_after, self._cap)
        return max(0.0, delay)


def _to_jsonable(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _reraise_or_return(retry_state: RetryCallState) -> Any:
    # Out of attempts: hand back the last response, or re-raise the last error
    return retry_state.outcome.result()


class APIClient:
    """
    Low-level HTTP client for the HubSpot API.

    Handles:
    - Bearer token authentication
    - URL and body encoding
    - Optional rate limiting and retries
    - Turning non-2xx responses into APIError

    One instance may be shared between threads; configuration is read-only
    after construction.
    """

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Transport | None = None,
        rate_limit_enabled: bool = True,
        rate_limit_requests: int = DEFAULT_MAX_REQUESTS,
        rate_limit_interval: float = DEFAULT_INTERVAL,
        retry_enabled: bool = True,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff: float = 0.5,
        retry_backoff_max: float = 10.0,
    ):
        """
        Initialize the API client.

        Args:
            access_token: Private app or OAuth token (or HUBSPOT_ACCESS_TOKEN env var)
            base_url: API base URL (or HUBSPOT_BASE_URL env var)
            timeout: Request timeout in seconds
            transport: HTTP transport (defaults to urllib)
            rate_limit_enabled: Throttle outgoing calls client-side
            rate_limit_requests: Calls allowed per interval
            rate_limit_interval: Interval length in seconds
            retry_enabled: Retry idempotent calls on transient failures
            max_retries: Extra attempts after the first one
            retry_backoff: Exponential backoff multiplier in seconds
            retry_backoff_max: Longest single backoff in seconds

        """
        if max_retries < 0:
            raise ConfigurationError("max_retries must not be negative")
        if timeout <= 0:
            raise ConfigurationError("timeout must be positive")

        self.access_token = access_token or os.environ.get("HUBSPOT_ACCESS_TOKEN")
        env_base_url = os.environ.get("HUBSPOT_BASE_URL", DEFAULT_BASE_URL)
        self.base_url = (base_url or env_base_url).rstrip("/")
        self.timeout = timeout
        self.transport: Transport = transport or UrllibTransport()
        self.rate_limiter = RateLimiter(rate_limit_requests, rate_limit_interval) if rate_limit_enabled else None
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.retry_backoff_max = retry_backoff_max

    def _ensure_access_token(self) -> str:
        """Ensure an access token is configured."""
        if not self.access_token:
            raise ConfigurationError("HUBSPOT_ACCESS_TOKEN environment variable not set")
        return self.access_token

    def _build_url(self, request: Request) -> str:
        """Build full URL from the request path and query."""
        path = request.path
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        if request.query:
            query_string = urllib.parse.urlencode(request.query, doseq=True)
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{query_string}"
        return url

    def _build_headers(self, has_body: bool) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._ensure_access_token()}",
            "Accept": "application/json",
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    @staticmethod
    def _encode_body(body: Any) -> bytes | None:
        if body is None:
            return None
        return json.dumps(body, default=_to_jsonable).encode("utf-8")

    # =========================================================================
    # Dispatch
    # =========================================================================

    def do(self, request: Request, ctx: CallContext | None = None) -> RawResponse:
        """
        Send a request and return the raw 2xx response.

        Args:
            request: Request to send; sealed once dispatch begins
            ctx: Cancellation/deadline token (defaults to the request's)

        Returns:
            RawResponse with a 2xx status

        Raises:
            APIError: On a non-2xx response
            TransportError: When the server could not be reached
            CancelledError: When the context is cancelled or its deadline passes
            ConfigurationError: When no access token is configured

        """
        ctx = ctx or request.ctx or CallContext.background()
        request.seal()
        ctx.raise_if_done()

        url = self._build_url(request)
        body = self._encode_body(request.body)
        headers = self._build_headers(body is not None)

        if self.retry_enabled and self.max_retries > 0 and request.idempotent:
            retrying = self._build_retrying(ctx)
            response = retrying(self._send_once, request, url, headers, body, ctx)
        else:
            response = self._send_once(request, url, headers, body, ctx)

        if not response.ok:
            error = parse_error_body(response)
            logger.debug(
                "%s %s failed: status=%s category=%s resource=%s",
                request.method,
                request.path,
                error.status,
                error.category,
                request.resource_type,
            )
            raise error
        return response

    def _send_once(
        self,
        request: Request,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        ctx: CallContext,
    ) -> RawResponse:
        """One attempt: wait for rate-limit budget, then send."""
        if self.rate_limiter is not None:
            self.rate_limiter.acquire(ctx)

        start = time.monotonic()
        try:
            response = self.transport.send(request.method, url, headers, body, self.timeout, ctx)
        except TransportError as e:
            logger.debug("%s %s transport error: %s", request.method, request.path, e.message)
            raise
        logger.debug(
            "%s %s -> %s in %.3fs (resource=%s)",
            request.method,
            request.path,
            response.status,
            time.monotonic() - start,
            request.resource_type or "-",
        )
        return response

    def _build_retrying(self, ctx: CallContext) -> Retrying:
        """Retry transient failures with backoff; sleeps honour the context."""
        return Retrying(
            retry=retry_if_exception_type(TransportError)
            | retry_if_result(lambda response: response.status in RETRY_STATUSES),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=RetryAfterWait(
                wait_exponential(multiplier=self.retry_backoff, max=self.retry_backoff_max),
                cap=self.retry_backoff_max,
            ),
            sleep=ctx.sleep,
            reraise=True,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            retry_error_callback=_reraise_or_return,
        )
