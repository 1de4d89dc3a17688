"""
Core types for HubSpot CRM API responses.

These dataclasses provide type safety and IDE support for API responses.
Required fields are read with data["key"] so a missing field fails parsing.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from hubspot_sdk.core.errors import BatchPartialError

T = TypeVar("T")
CrmObjectT = TypeVar("CrmObjectT", bound="CrmObject")


# =============================================================================
# Pagination
# =============================================================================


@dataclass
class PagingLink:
    """A cursor to a neighbouring page."""

    after: str | None = None
    link: str | None = None
    before: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PagingLink":
        """Create from API response dict."""
        return cls(
            after=data.get("after"),
            link=data.get("link"),
            before=data.get("before"),
        )


@dataclass
class Paging:
    """Paging cursors. No `next` cursor means end of collection."""

    next: PagingLink | None = None
    prev: PagingLink | None = None

    @property
    def next_after(self) -> str | None:
        if self.next is None:
            return None
        return self.next.after or None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Paging | None":
        """Create from API response dict."""
        if not data:
            return None
        return cls(
            next=PagingLink.from_dict(data["next"]) if data.get("next") else None,
            prev=PagingLink.from_dict(data["prev"]) if data.get("prev") else None,
        )


@dataclass
class Page(Generic[T]):
    """One page of a cursor-paginated collection."""

    results: list[T]
    paging: Paging | None = None
    total: int | None = None

    @property
    def next_after(self) -> str | None:
        return self.paging.next_after if self.paging else None

    @property
    def has_more(self) -> bool:
        """Check if there are more results."""
        return self.next_after is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any], parser: Callable[[dict[str, Any]], T]) -> "Page[T]":
        """Create from API response dict, parsing each result with `parser`."""
        return cls(
            results=[parser(item) for item in data.get("results") or []],
            paging=Paging.from_dict(data.get("paging")),
            total=data.get("total"),
        )


# =============================================================================
# Batch Types
# =============================================================================


class BatchStatus(str, Enum):
    """Server-reported status of a batch operation."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    CANCELED = "CANCELED"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


@dataclass
class ErrorDetail:
    """A sub-error inside an error envelope or batch item error."""

    message: str = ""
    sub_category: str | None = None
    code: str | None = None
    in_: str | None = None
    context: dict[str, list[str]] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorDetail":
        """Create from API response dict."""
        return cls(
            message=data.get("message") or "",
            sub_category=data.get("subCategory"),
            code=data.get("code"),
            in_=data.get("in"),
            context=string_lists(data.get("context")),
        )


@dataclass
class BatchItemError:
    """Why one or more members of a batch failed."""

    status: str = ""
    category: str = ""
    message: str = ""
    sub_category: str | None = None
    context: dict[str, list[str]] = field(default_factory=dict)
    links: dict[str, str] = field(default_factory=dict)
    errors: list[ErrorDetail] = field(default_factory=list)

    def __str__(self) -> str:
        sub_errors = [error.message for error in self.errors]
        if self.message:
            if sub_errors:
                return f"{self.message}: {'; '.join(sub_errors)}"
            return self.message
        if sub_errors:
            return f"batch error: {sub_errors[0]}"
        return "batch error"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatchItemError":
        """Create from API response dict."""
        return cls(
            status=data.get("status") or "",
            category=data.get("category") or "",
            message=data.get("message") or "",
            sub_category=data.get("subCategory"),
            context=string_lists(data.get("context")),
            links=dict(data.get("links") or {}),
            errors=[ErrorDetail.from_dict(item) for item in data.get("errors") or []],
        )


@dataclass
class BatchResult(Generic[T]):
    """
    Outcome of a batch operation.

    A batch may partially succeed: `results` holds the members that were
    processed and `errors` the ones that failed, whatever `status` says.
    """

    status: BatchStatus
    results: list[T] = field(default_factory=list)
    num_errors: int = 0
    errors: list[BatchItemError] = field(default_factory=list)
    requested_at: str | None = None
    started_at: str | None = None
    completed_at: str | None = None
    links: dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return self.status == BatchStatus.COMPLETE

    @property
    def has_errors(self) -> bool:
        return self.num_errors > 0 or bool(self.errors)

    def raise_for_errors(self, operation: str) -> "BatchResult[T]":
        """Raise BatchPartialError if any member failed, else return self."""
        if self.has_errors:
            raise BatchPartialError(operation, self)
        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any], parser: Callable[[dict[str, Any]], T]) -> "BatchResult[T]":
        """Create from API response dict, parsing each result with `parser`."""
        errors = [BatchItemError.from_dict(item) for item in data.get("errors") or []]
        num_errors = data.get("numErrors")
        return cls(
            status=BatchStatus(data["status"]),
            results=[parser(item) for item in data.get("results") or []],
            num_errors=len(errors) if num_errors is None else int(num_errors),
            errors=errors,
            requested_at=data.get("requestedAt"),
            started_at=data.get("startedAt"),
            completed_at=data.get("completedAt"),
            links=dict(data.get("links") or {}),
        )


def string_lists(data: dict[str, Any] | None) -> dict[str, list[str]]:
    """Normalize an open context map to str -> list[str]."""
    if not data:
        return {}
    result: dict[str, list[str]] = {}
    for key, value in data.items():
        if isinstance(value, list):
            result[key] = [str(item) for item in value]
        elif value is not None:
            result[key] = [str(value)]
    return result


# =============================================================================
# CRM Object Types
# =============================================================================


@dataclass
class PropertyHistory:
    """One historical value of a property."""

    value: str | None
    timestamp: str | None = None
    source_type: str | None = None
    source_id: str | None = None
    source_label: str | None = None
    updated_by_user_id: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PropertyHistory":
        """Create from API response dict."""
        return cls(
            value=data.get("value"),
            timestamp=data.get("timestamp"),
            source_type=data.get("sourceType"),
            source_id=data.get("sourceId"),
            source_label=data.get("sourceLabel"),
            updated_by_user_id=data.get("updatedByUserId"),
        )


@dataclass
class CrmObject:
    """A CRM record (contact, company, deal, custom object...)."""

    id: str
    properties: dict[str, str | None] = field(default_factory=dict)
    properties_with_history: dict[str, list[PropertyHistory]] = field(default_factory=dict)
    associations: dict[str, Page["AssociatedId"]] = field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None
    archived: bool = False
    archived_at: str | None = None
    object_write_trace_id: str | None = None
    url: str | None = None

    @classmethod
    def from_dict(cls: type[CrmObjectT], data: dict[str, Any]) -> CrmObjectT:
        """Create from API response dict."""
        history = {
            name: [PropertyHistory.from_dict(item) for item in values or []]
            for name, values in (data.get("propertiesWithHistory") or {}).items()
        }
        associations = {
            name: Page.from_dict(value or {}, AssociatedId.from_dict)
            for name, value in (data.get("associations") or {}).items()
        }
        return cls(
            id=str(data["id"]),
            properties=dict(data.get("properties") or {}),
            properties_with_history=history,
            associations=associations,
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            archived=bool(data.get("archived", False)),
            archived_at=data.get("archivedAt"),
            object_write_trace_id=data.get("objectWriteTraceId"),
            url=data.get("url"),
        )


class Company(CrmObject):
    """A HubSpot company."""


class Deal(CrmObject):
    """A HubSpot deal."""


@dataclass
class AssociatedId:
    """An associated record as embedded in a CRM object response."""

    id: str
    type: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssociatedId":
        """Create from API response dict."""
        return cls(id=str(data["id"]), type=data.get("type"))


# =============================================================================
# Association Types (v4)
# =============================================================================


HUBSPOT_DEFINED = "HUBSPOT_DEFINED"
INTEGRATOR_DEFINED = "INTEGRATOR_DEFINED"
USER_DEFINED = "USER_DEFINED"


@dataclass
class AssociationSpec:
    """Category and type id of an association."""

    category: str
    type_id: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssociationSpec":
        """Create from API response dict."""
        return cls(
            category=data.get("associationCategory") or data.get("category") or "",
            type_id=int(data.get("associationTypeId", data.get("typeId", 0))),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {"associationCategory": self.category, "associationTypeId": self.type_id}


@dataclass
class AssociationLabel:
    """An association label defined between two object types."""

    category: str
    type_id: int
    label: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssociationLabel":
        """Create from API response dict."""
        return cls(
            category=data["category"],
            type_id=int(data["typeId"]),
            label=data.get("label"),
        )


@dataclass
class AssociatedObject:
    """A record associated with the source record, with the association types."""

    to_object_id: str
    association_types: list[AssociationSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssociatedObject":
        """Create from API response dict."""
        return cls(
            to_object_id=str(data["toObjectId"]),
            association_types=[AssociationSpec.from_dict(item) for item in data.get("associationTypes") or []],
        )


@dataclass
class AssociationResult:
    """Response to creating an association between two records."""

    from_object_type_id: str | None = None
    from_object_id: str | None = None
    to_object_type_id: str | None = None
    to_object_id: str | None = None
    labels: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssociationResult":
        """Create from API response dict."""
        from_id = data.get("fromObjectId")
        to_id = data.get("toObjectId")
        return cls(
            from_object_type_id=data.get("fromObjectTypeId"),
            from_object_id=None if from_id is None else str(from_id),
            to_object_type_id=data.get("toObjectTypeId"),
            to_object_id=None if to_id is None else str(to_id),
            labels=list(data.get("labels") or []),
        )


# =============================================================================
# Schema Types
# =============================================================================


@dataclass
class PropertyOption:
    """An enumeration option of a schema property."""

    label: str
    value: str
    hidden: bool = False
    display_order: int | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PropertyOption":
        """Create from API response dict."""
        return cls(
            label=data["label"],
            value=data["value"],
            hidden=bool(data.get("hidden", False)),
            display_order=data.get("displayOrder"),
            description=data.get("description"),
        )


@dataclass
class SchemaProperty:
    """A property definition of a custom object schema."""

    name: str
    label: str
    type: str
    field_type: str
    group_name: str | None = None
    description: str | None = None
    options: list[PropertyOption] = field(default_factory=list)
    hidden: bool = False
    display_order: int | None = None
    has_unique_value: bool = False
    hubspot_defined: bool = False
    calculated: bool = False
    archived: bool = False
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchemaProperty":
        """Create from API response dict."""
        return cls(
            name=data["name"],
            label=data["label"],
            type=data["type"],
            field_type=data["fieldType"],
            group_name=data.get("groupName"),
            description=data.get("description"),
            options=[PropertyOption.from_dict(item) for item in data.get("options") or []],
            hidden=bool(data.get("hidden", False)),
            display_order=data.get("displayOrder"),
            has_unique_value=bool(data.get("hasUniqueValue", False)),
            hubspot_defined=bool(data.get("hubspotDefined", False)),
            calculated=bool(data.get("calculated", False)),
            archived=bool(data.get("archived", False)),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class SchemaAssociation:
    """An association definition between two object types."""

    id: str
    from_object_type_id: str
    to_object_type_id: str
    name: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchemaAssociation":
        """Create from API response dict."""
        return cls(
            id=str(data["id"]),
            from_object_type_id=data["fromObjectTypeId"],
            to_object_type_id=data["toObjectTypeId"],
            name=data.get("name"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class ObjectSchema:
    """A custom object schema."""

    id: str
    name: str
    labels: dict[str, str] = field(default_factory=dict)
    required_properties: list[str] = field(default_factory=list)
    properties: list[SchemaProperty] = field(default_factory=list)
    associations: list[SchemaAssociation] = field(default_factory=list)
    object_type_id: str | None = None
    fully_qualified_name: str | None = None
    description: str | None = None
    primary_display_property: str | None = None
    secondary_display_properties: list[str] = field(default_factory=list)
    searchable_properties: list[str] = field(default_factory=list)
    archived: bool = False
    portal_id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectSchema":
        """Create from API response dict."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            labels=dict(data["labels"]),
            required_properties=list(data["requiredProperties"]),
            properties=[SchemaProperty.from_dict(item) for item in data["properties"]],
            associations=[SchemaAssociation.from_dict(item) for item in data["associations"]],
            object_type_id=data.get("objectTypeId"),
            fully_qualified_name=data.get("fullyQualifiedName"),
            description=data.get("description"),
            primary_display_property=data.get("primaryDisplayProperty"),
            secondary_display_properties=list(data.get("secondaryDisplayProperties") or []),
            searchable_properties=list(data.get("searchableProperties") or []),
            archived=bool(data.get("archived", False)),
            portal_id=data.get("portalId"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class SchemaCollection:
    """All schemas in the account."""

    results: list[ObjectSchema]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchemaCollection":
        """Create from API response dict."""
        return cls(results=[ObjectSchema.from_dict(item) for item in data["results"]])


# =============================================================================
# List Types
# =============================================================================


@dataclass
class CrmList:
    """A segment (list) of CRM records."""

    list_id: str
    name: str
    object_type_id: str
    processing_type: str
    processing_status: str | None = None
    list_version: int | None = None
    size: int | None = None
    created_at: str | None = None
    updated_at: str | None = None
    deleted_at: str | None = None
    created_by_id: str | None = None
    updated_by_id: str | None = None
    filters_updated_at: str | None = None
    filter_branch: dict[str, Any] | None = None
    membership_settings: dict[str, Any] | None = None
    list_permissions: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrmList":
        """Create from API response dict."""
        return cls(
            list_id=str(data["listId"]),
            name=data["name"],
            object_type_id=data["objectTypeId"],
            processing_type=data["processingType"],
            processing_status=data.get("processingStatus"),
            list_version=data.get("listVersion"),
            size=data.get("size"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            deleted_at=data.get("deletedAt"),
            created_by_id=data.get("createdById"),
            updated_by_id=data.get("updatedById"),
            filters_updated_at=data.get("filtersUpdatedAt"),
            filter_branch=data.get("filterBranch"),
            membership_settings=data.get("membershipSettings"),
            list_permissions=data.get("listPermissions"),
        )

    @classmethod
    def from_envelope(cls, data: dict[str, Any]) -> "CrmList":
        """Create from a {"list": {...}} or {"updatedList": {...}} response."""
        if "updatedList" in data:
            return cls.from_dict(data["updatedList"])
        return cls.from_dict(data["list"])


@dataclass
class ListSearchResult:
    """One page of list search results (offset paginated)."""

    lists: list[CrmList]
    total: int = 0
    has_more: bool = False
    offset: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListSearchResult":
        """Create from API response dict."""
        return cls(
            lists=[CrmList.from_dict(item) for item in data.get("lists") or []],
            total=data.get("total", 0),
            has_more=bool(data.get("hasMore", False)),
            offset=data.get("offset", 0),
        )


@dataclass
class RecordMembership:
    """A list a record belongs to."""

    list_id: str
    list_version: int | None = None
    first_added_timestamp: str | None = None
    last_added_timestamp: str | None = None
    is_public_list: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordMembership":
        """Create from API response dict."""
        return cls(
            list_id=str(data["listId"]),
            list_version=data.get("listVersion"),
            first_added_timestamp=data.get("firstAddedTimestamp"),
            last_added_timestamp=data.get("lastAddedTimestamp"),
            is_public_list=data.get("isPublicList"),
        )


@dataclass
class RecordMemberships:
    """Lists a record belongs to."""

    results: list[RecordMembership]
    total: int | None = None
    object_type_id: str | None = None
    record_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordMemberships":
        """Create from API response dict."""
        record_id = data.get("recordId")
        return cls(
            results=[RecordMembership.from_dict(item) for item in data.get("results") or []],
            total=data.get("total"),
            object_type_id=data.get("objectTypeId"),
            record_id=None if record_id is None else str(record_id),
        )


@dataclass
class MembershipChange:
    """Records added to or removed from a list."""

    record_ids_added: list[str] = field(default_factory=list)
    record_ids_removed: list[str] = field(default_factory=list)
    record_ids_missing: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MembershipChange":
        """Create from API response dict."""
        return cls(
            record_ids_added=[str(item) for item in data.get("recordIdsAdded") or []],
            record_ids_removed=[str(item) for item in data.get("recordIdsRemoved") or []],
            record_ids_missing=[str(item) for item in data.get("recordsIdsMissing") or []],
        )


@dataclass
class ListMemberships:
    """One page of record IDs in a list (offset-token paginated)."""

    results: list[str]
    has_more: bool = False
    offset: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListMemberships":
        """Create from API response dict."""
        offset = data.get("offset")
        return cls(
            results=[str(item) for item in data.get("results") or []],
            has_more=bool(data.get("hasMore", False)),
            offset=None if offset is None else str(offset),
        )


@dataclass
class ConversionSchedule:
    """When an active list will be converted to a static list."""

    list_id: str | None = None
    conversion_type: str | None = None
    requested_conversion_time: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConversionSchedule":
        """Create from API response dict."""
        list_id = data.get("listId")
        return cls(
            list_id=None if list_id is None else str(list_id),
            conversion_type=data.get("conversionType"),
            requested_conversion_time=data.get("requestedConversionTime"),
        )
