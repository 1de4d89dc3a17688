"""
Request builder.

A Request describes one HTTP call. Resource methods build it, options
mutate its query parameters, and the dispatcher seals it before sending.
"""

from typing import Any

from hubspot_sdk.core.context import CallContext

METHODS = ("GET", "POST", "PATCH", "PUT", "DELETE")


class Request:
    """One HTTP call: method, path, query parameters, body and context."""

    def __init__(
        self,
        method: str,
        path: str,
        body: Any = None,
        ctx: CallContext | None = None,
    ):
        method = method.upper()
        if method not in METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        self.method = method
        self.path = path
        self.body = body
        self.ctx = ctx
        self.query: dict[str, str | list[str]] = {}
        self.resource_type = ""
        self.idempotent = method != "POST"
        self._sealed = False

    def _check_mutable(self) -> None:
        if self._sealed:
            raise RuntimeError(f"Request {self.method} {self.path} was already dispatched")

    # =========================================================================
    # Builders
    # =========================================================================

    def add_query_param(self, name: str, value: str) -> "Request":
        """Set a query parameter; a later call with the same name wins."""
        self._check_mutable()
        self.query[name] = value
        return self

    def set_query_values(self, name: str, values: list[str]) -> "Request":
        """Set a repeated query parameter (name=a&name=b)."""
        self._check_mutable()
        self.query[name] = list(values)
        return self

    def with_body(self, body: Any) -> "Request":
        self._check_mutable()
        self.body = body
        return self

    def with_context(self, ctx: CallContext | None) -> "Request":
        self._check_mutable()
        self.ctx = ctx
        return self

    def with_resource_type(self, resource_type: str) -> "Request":
        """Tag the request for log records and error messages only."""
        self._check_mutable()
        self.resource_type = resource_type
        return self

    def with_idempotency(self, idempotent: bool = True) -> "Request":
        """Mark a POST as safe to retry (batch reads, searches)."""
        self._check_mutable()
        self.idempotent = idempotent
        return self

    # =========================================================================
    # Dispatch
    # =========================================================================

    def seal(self) -> None:
        """Freeze the request; called when dispatch begins."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __repr__(self) -> str:
        return f"Request({self.method} {self.path}, query={self.query!r}, resource_type={self.resource_type!r})"
