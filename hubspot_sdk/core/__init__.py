"""
Core layer - Raw types, request plumbing and HTTP client.

This layer provides:
- Typed dataclasses matching the HubSpot CRM responses
- Request builder and functional options
- Low-level HTTP client with auth, rate limiting, retries and error envelopes
"""

from hubspot_sdk.core.client import APIClient
from hubspot_sdk.core.context import CallContext
from hubspot_sdk.core.errors import (
    AlreadyExistsError,
    APIError,
    BatchPartialError,
    CancelledError,
    ConfigurationError,
    DeadlineExceededError,
    DomainError,
    HubSpotSDKError,
    NoResultsError,
    NotFoundError,
    ParseError,
    TransportError,
    ValidationError,
    classify_error,
)
from hubspot_sdk.core.request import Request
from hubspot_sdk.core.transport import RawResponse, Transport, UrllibTransport
from hubspot_sdk.core.types import (
    AssociatedObject,
    AssociationLabel,
    AssociationResult,
    AssociationSpec,
    BatchItemError,
    BatchResult,
    BatchStatus,
    Company,
    ConversionSchedule,
    CrmList,
    CrmObject,
    Deal,
    ListMemberships,
    ListSearchResult,
    MembershipChange,
    ObjectSchema,
    Page,
    RecordMemberships,
    SchemaAssociation,
    SchemaCollection,
)

__all__ = [
    "APIClient",
    "APIError",
    "AlreadyExistsError",
    "AssociatedObject",
    "AssociationLabel",
    "AssociationResult",
    "AssociationSpec",
    "BatchItemError",
    "BatchPartialError",
    "BatchResult",
    "BatchStatus",
    "CallContext",
    "CancelledError",
    "Company",
    "ConfigurationError",
    "ConversionSchedule",
    "CrmList",
    "CrmObject",
    "Deal",
    "DeadlineExceededError",
    "DomainError",
    "HubSpotSDKError",
    "ListMemberships",
    "ListSearchResult",
    "MembershipChange",
    "NoResultsError",
    "NotFoundError",
    "ObjectSchema",
    "Page",
    "ParseError",
    "RawResponse",
    "RecordMemberships",
    "Request",
    "SchemaAssociation",
    "SchemaCollection",
    "Transport",
    "TransportError",
    "UrllibTransport",
    "ValidationError",
    "classify_error",
]
