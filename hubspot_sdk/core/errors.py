"""
Error taxonomy for the HubSpot client.

Transport failures, structured server errors, parse failures and batch
partial failures each get their own class so callers can tell "the server
rejected this" apart from "the server could not be reached".
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hubspot_sdk.core.types import ErrorDetail


class HubSpotSDKError(Exception):
    """Base error class for the HubSpot client."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(HubSpotSDKError):
    """Client is missing required settings (e.g. the access token)."""


class TransportError(HubSpotSDKError):
    """The server could not be reached (DNS, refused connection, timeout)."""


class CancelledError(HubSpotSDKError):
    """The caller's context was cancelled before the call completed."""


class DeadlineExceededError(CancelledError):
    """The caller's context deadline passed before the call completed."""


class APIError(HubSpotSDKError):
    """
    Structured error returned by the server on a non-2xx response.

    Mirrors the HubSpot error envelope: status, category, message and the
    optional correlation id, sub-errors, context and links.
    """

    def __init__(
        self,
        message: str,
        status: int = 0,
        category: str = "",
        correlation_id: str | None = None,
        sub_category: str | None = None,
        errors: "list[ErrorDetail] | None" = None,
        context: dict[str, list[str]] | None = None,
        links: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.category = category
        self.correlation_id = correlation_id
        self.sub_category = sub_category
        self.errors = errors or []
        self.context = context or {}
        self.links = links or {}
        self.headers = headers or {}

    def __str__(self) -> str:
        if self.category:
            return f"HTTP {self.status} {self.category}: {self.message}"
        return f"HTTP {self.status}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        if self.category:
            result["category"] = self.category
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        return result


class ParseError(HubSpotSDKError):
    """A 2xx response body did not match the shape expected by the call."""

    def __init__(self, operation: str, reason: str, details: dict | None = None):
        super().__init__(f"{operation}: failed to parse response: {reason}", details)
        self.operation = operation
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["operation"] = self.operation
        return result


class NoResultsError(HubSpotSDKError):
    """An endpoint that must return results returned none."""

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result


class BatchPartialError(HubSpotSDKError):
    """
    A batch call completed but reported one or more failed items.

    The full batch result is attached so callers can still use the
    items that succeeded.
    """

    def __init__(self, operation: str, result: Any):
        rendered = "; ".join(str(error) for error in result.errors) or "batch error"
        super().__init__(f"{operation}: {result.num_errors} batch item(s) failed: {rendered}")
        self.operation = operation
        self.result = result

    @property
    def errors(self) -> list:
        """Per-item errors reported by the server."""
        return self.result.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["operation"] = self.operation
        result["num_errors"] = self.result.num_errors
        result["errors"] = [str(error) for error in self.result.errors]
        return result


# =============================================================================
# Classified errors
# =============================================================================


class DomainError(HubSpotSDKError):
    """An APIError mapped to a resource-level meaning."""

    def __init__(self, message: str, original: APIError):
        super().__init__(message, original.details)
        self.original = original

    @property
    def status(self) -> int:
        return self.original.status

    @property
    def category(self) -> str:
        return self.original.category

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["original"] = self.original.to_dict()
        return result


class NotFoundError(DomainError):
    """The requested resource does not exist."""

    def __init__(self, resource_type: str, identifier: str, original: APIError):
        if identifier:
            message = f"{resource_type} {identifier} not found"
        else:
            message = f"{resource_type} not found"
        super().__init__(message, original)
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(DomainError):
    """The server rejected the request payload (400 VALIDATION_ERROR)."""

    def __init__(self, field: str, message: str, original: APIError):
        super().__init__(f"validation error on field {field}: {message}", original)
        self.field = field
        self.reason = message


class AlreadyExistsError(DomainError):
    """The resource conflicts with an existing one (409)."""

    def __init__(self, resource_type: str, identifier: str, original: APIError):
        if identifier:
            message = f"{resource_type} {identifier} already exists"
        else:
            message = f"{resource_type} already exists"
        super().__init__(message, original)
        self.resource_type = resource_type
        self.identifier = identifier


VALIDATION_CATEGORY = "VALIDATION_ERROR"


def _validation_field(error: APIError) -> str:
    for detail in error.errors:
        names = detail.context.get("propertyName") or []
        if names:
            return names[0]
    return ""


def classify_error(error: BaseException, resource_type: str, identifier: str = "") -> BaseException:
    """
    Map a structured server error to a resource-level error.

    Only APIError instances are classified; anything else, including an
    already classified DomainError, is returned unchanged. Unmapped
    status/category pairs return the APIError itself.

    Args:
        error: Error raised by the dispatcher
        resource_type: Resource tag used in messages (e.g. "companies")
        identifier: ID or name the call referred to, if any

    Returns:
        The classified error, or the input unchanged

    """
    if not isinstance(error, APIError):
        return error

    classified: DomainError
    if error.status == 404:
        classified = NotFoundError(resource_type, identifier, error)
    elif error.status == 400 and error.category == VALIDATION_CATEGORY:
        classified = ValidationError(_validation_field(error), error.message, error)
    elif error.status == 409:
        classified = AlreadyExistsError(resource_type, identifier, error)
    else:
        return error

    classified.__cause__ = error
    return classified
