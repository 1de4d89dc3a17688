"""
Response envelope parsing.

Decodes 2xx bodies into typed results and non-2xx bodies into APIError.
A body that does not match the expected shape is a ParseError naming the
call, never a silently empty result.
"""

import json
from collections.abc import Callable
from typing import Any, TypeVar

from hubspot_sdk.core.errors import APIError, NoResultsError, ParseError
from hubspot_sdk.core.transport import RawResponse
from hubspot_sdk.core.types import ErrorDetail, string_lists

T = TypeVar("T")

BODY_PREVIEW = 200


def decode(
    raw: RawResponse,
    parser: Callable[[Any], T],
    operation: str,
    allow_empty: bool = False,
) -> T | None:
    """
    Decode a successful response body.

    Args:
        raw: Response returned by the dispatcher
        parser: Builds the result from decoded JSON (usually a from_dict)
        operation: Name of the call, used in ParseError (e.g. "companies.get")
        allow_empty: Return None for an empty body (204 No Content)

    Returns:
        The parsed result

    Raises:
        ParseError: If the body is not valid JSON or does not match the shape

    """
    if not raw.body.strip():
        if allow_empty:
            return None
        raise ParseError(operation, "empty response body", details={"status": raw.status})

    try:
        data = json.loads(raw.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(
            operation,
            f"invalid JSON: {e}",
            details={"status": raw.status, "body": raw.text()[:BODY_PREVIEW]},
        ) from e

    try:
        return parser(data)
    except KeyError as e:
        raise ParseError(operation, f"missing required field {e}", details={"status": raw.status}) from e
    except (TypeError, ValueError, AttributeError) as e:
        raise ParseError(operation, f"unexpected response shape: {e}", details={"status": raw.status}) from e


def parse_error_body(raw: RawResponse) -> APIError:
    """
    Build an APIError from a non-2xx response.

    The HubSpot error envelope is
    {"status", "message", "correlationId", "category", "subCategory",
     "errors", "context", "links"}; a non-JSON body keeps its text as
    the message.
    """
    try:
        data = json.loads(raw.body) if raw.body.strip() else None
    except (json.JSONDecodeError, UnicodeDecodeError):
        data = None

    if not isinstance(data, dict):
        message = raw.text().strip() or raw.reason or f"HTTP {raw.status}"
        return APIError(message, status=raw.status, headers=raw.headers)

    return APIError(
        data.get("message") or raw.reason or f"HTTP {raw.status}",
        status=raw.status,
        category=data.get("category") or "",
        correlation_id=data.get("correlationId"),
        sub_category=data.get("subCategory"),
        errors=[ErrorDetail.from_dict(item) for item in data.get("errors") or [] if isinstance(item, dict)],
        context=string_lists(data.get("context")),
        links=dict(data.get("links") or {}),
        headers=raw.headers,
        details=data,
    )


def require_results(result: T, what: str) -> T:
    """
    Raise NoResultsError if `result.results` is empty.

    Only for endpoints where an empty collection means something went
    wrong; ordinary listings accept zero matches.
    """
    if not getattr(result, "results", None):
        raise NoResultsError(f"no {what} found", result=result)
    return result
