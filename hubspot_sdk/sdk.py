"""
HubSpot SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for the HubSpot CRM objects,
associations, lists and schemas APIs. Built on top of the core APIClient.
"""

import builtins
import urllib.parse
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from hubspot_sdk.core import options as opts
from hubspot_sdk.core.client import DEFAULT_TIMEOUT, APIClient
from hubspot_sdk.core.context import CallContext
from hubspot_sdk.core.envelope import decode, require_results
from hubspot_sdk.core.errors import APIError, classify_error
from hubspot_sdk.core.options import Option, apply_options
from hubspot_sdk.core.request import Request
from hubspot_sdk.core.transport import Transport
from hubspot_sdk.core.types import (
    AssociatedObject,
    AssociationLabel,
    AssociationResult,
    AssociationSpec,
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

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100


def _segment(value: Any) -> str:
    """Escape a value for use as one path segment."""
    return urllib.parse.quote(str(value), safe="")


class HubSpotClient:
    """
    High-level HubSpot CRM client with typed methods and nice ergonomics.

    Example:
        client = HubSpotClient()

        # Read and update a company
        company = client.companies.get("123", opts.properties(["name", "domain"]))
        client.companies.update("123", {"domain": "example.com"})

        # Walk every deal
        for deal in client.deals.iter_all(opts.properties(["dealname"])):
            print(deal.properties["dealname"])

        # Bound a call with a deadline
        ctx = CallContext.with_timeout(5)
        page = client.objects.list("contacts", ctx=ctx)

    """

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Transport | None = None,
        **client_options: Any,
    ):
        """
        Initialize the HubSpot client.

        Args:
            access_token: Private app or OAuth token (or HUBSPOT_ACCESS_TOKEN env var)
            base_url: API base URL (or HUBSPOT_BASE_URL env var)
            timeout: Request timeout in seconds
            transport: HTTP transport (defaults to urllib)
            **client_options: Rate limit and retry settings passed to APIClient

        """
        self._client = APIClient(
            access_token=access_token,
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            **client_options,
        )

        # Sub-clients for different resources
        self.objects = ObjectOperations(self._client)
        self.companies = CompanyOperations(self._client)
        self.deals = DealOperations(self._client)
        self.associations = AssociationOperations(self._client)
        self.lists = ListOperations(self._client)
        self.schemas = SchemaOperations(self._client)

    @property
    def api(self) -> APIClient:
        """The underlying low-level client."""
        return self._client


# =============================================================================
# Shared plumbing
# =============================================================================


class _Operations:
    """Request building, dispatch, decoding and error mapping for one resource."""

    resource_type = ""

    def __init__(self, client: APIClient):
        self._client = client

    def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: Iterable[Option] = (),
        ctx: CallContext | None = None,
        resource_type: str | None = None,
    ) -> Request:
        request = Request(method, path, body=body, ctx=ctx)
        request.with_resource_type(resource_type or self.resource_type)
        return apply_options(request, options)

    def _call(
        self,
        request: Request,
        parser: Callable[[Any], T],
        operation: str,
        identifier: str = "",
        allow_empty: bool = False,
    ) -> T | None:
        try:
            raw = self._client.do(request)
        except APIError as e:
            classified = classify_error(e, request.resource_type, identifier)
            if classified is e:
                raise
            raise classified from e
        return decode(raw, parser, operation, allow_empty=allow_empty)


def _ignore(data: Any) -> None:
    return None


# =============================================================================
# CRM Object Operations (/crm/v3/objects/{objectType})
# =============================================================================


class ObjectOperations(_Operations):
    """
    Operations on CRM records of any object type.

    Every method takes the object type first ("contacts", "companies",
    "p_custom_object" or an object type id such as "0-1").
    """

    def __init__(self, client: APIClient, model: type[CrmObject] = CrmObject):
        super().__init__(client)
        self._model = model

    def _path(self, object_type: str, *parts: Any) -> str:
        path = f"/crm/v3/objects/{_segment(object_type)}"
        for part in parts:
            path += f"/{_segment(part)}"
        return path

    def _page(self, data: dict[str, Any]) -> Page[CrmObject]:
        return Page.from_dict(data, self._model.from_dict)

    def _batch(self, data: dict[str, Any]) -> BatchResult[CrmObject]:
        return BatchResult.from_dict(data, self._model.from_dict)

    def list(self, object_type: str, *options: Option, ctx: CallContext | None = None) -> Page[CrmObject]:
        """
        List one page of records.

        Args:
            object_type: Object type name or id
            *options: properties, associations, limit, after, archived...
            ctx: Cancellation/deadline token

        Returns:
            Page of records; an empty page is not an error

        """
        request = self._request("GET", self._path(object_type), options=options, ctx=ctx, resource_type=object_type)
        return self._call(request, self._page, f"{object_type}.list")

    def iter_all(
        self,
        object_type: str,
        *options: Option,
        page_size: int = DEFAULT_PAGE_SIZE,
        ctx: CallContext | None = None,
    ) -> Iterator[CrmObject]:
        """Iterate over every record, following the paging cursor."""
        cursor: str | None = None
        while True:
            page_options = [*options, opts.limit(page_size)]
            if cursor:
                page_options.append(opts.after(cursor))
            page = self.list(object_type, *page_options, ctx=ctx)
            yield from page.results
            cursor = page.next_after
            if not cursor:
                return

    def get(self, object_type: str, object_id: str, *options: Option, ctx: CallContext | None = None) -> CrmObject:
        """
        Get a record by ID (or by a unique property with `id_property`).

        Raises:
            NotFoundError: If the record does not exist

        """
        request = self._request(
            "GET", self._path(object_type, object_id), options=options, ctx=ctx, resource_type=object_type
        )
        return self._call(request, self._model.from_dict, f"{object_type}.get", identifier=str(object_id))

    def create(
        self,
        object_type: str,
        properties: dict[str, Any],
        associations: builtins.list[dict[str, Any]] | None = None,
        *,
        ctx: CallContext | None = None,
    ) -> CrmObject:
        """
        Create a record.

        Args:
            object_type: Object type name or id
            properties: Property values
            associations: Records to associate on create, each
                {"to": {"id": ...}, "types": [AssociationSpec, ...]}
            ctx: Cancellation/deadline token

        Returns:
            The created record

        """
        body: dict[str, Any] = {"properties": properties}
        if associations:
            body["associations"] = associations
        request = self._request("POST", self._path(object_type), body=body, ctx=ctx, resource_type=object_type)
        return self._call(request, self._model.from_dict, f"{object_type}.create")

    def update(
        self,
        object_type: str,
        object_id: str,
        properties: dict[str, Any],
        *options: Option,
        ctx: CallContext | None = None,
    ) -> CrmObject:
        """Update a record's properties. Only the given properties change."""
        request = self._request(
            "PATCH",
            self._path(object_type, object_id),
            body={"properties": properties},
            options=options,
            ctx=ctx,
            resource_type=object_type,
        )
        return self._call(request, self._model.from_dict, f"{object_type}.update", identifier=str(object_id))

    def archive(self, object_type: str, object_id: str, *, ctx: CallContext | None = None) -> None:
        """Move a record to the recycling bin."""
        request = self._request("DELETE", self._path(object_type, object_id), ctx=ctx, resource_type=object_type)
        self._call(request, _ignore, f"{object_type}.archive", identifier=str(object_id), allow_empty=True)

    def merge(
        self,
        object_type: str,
        primary_id: str,
        id_to_merge: str,
        *,
        ctx: CallContext | None = None,
    ) -> CrmObject:
        """
        Merge two records of the same type.

        Args:
            object_type: Object type name or id
            primary_id: Record that survives the merge
            id_to_merge: Record merged into the primary one
            ctx: Cancellation/deadline token

        Returns:
            The merged record

        """
        body = {"primaryObjectId": str(primary_id), "objectIdToMerge": str(id_to_merge)}
        request = self._request("POST", self._path(object_type, "merge"), body=body, ctx=ctx, resource_type=object_type)
        return self._call(request, self._model.from_dict, f"{object_type}.merge", identifier=str(primary_id))

    def search(
        self,
        object_type: str,
        filter_groups: builtins.list[dict[str, Any]] | None = None,
        query: str | None = None,
        properties: builtins.list[str] | None = None,
        sorts: builtins.list[Any] | None = None,
        limit: int | None = None,
        after: str | None = None,
        *,
        ctx: CallContext | None = None,
    ) -> Page[CrmObject]:
        """
        Search records with filter groups and/or a free-text query.

        Searches are read-only, so the request is safe to retry.

        Args:
            object_type: Object type name or id
            filter_groups: [{"filters": [{"propertyName", "operator", "value"}]}]
            query: Free-text query
            properties: Properties to return
            sorts: Sort definitions
            limit: Page size
            after: Paging cursor from a previous page
            ctx: Cancellation/deadline token

        Returns:
            Page of matching records with the total match count

        """
        body: dict[str, Any] = {}
        if filter_groups is not None:
            body["filterGroups"] = filter_groups
        if query is not None:
            body["query"] = query
        if properties is not None:
            body["properties"] = properties
        if sorts is not None:
            body["sorts"] = sorts
        if limit is not None:
            body["limit"] = limit
        if after is not None:
            body["after"] = after

        request = self._request(
            "POST", self._path(object_type, "search"), body=body, ctx=ctx, resource_type=object_type
        ).with_idempotency()
        return self._call(request, self._page, f"{object_type}.search")

    # =========================================================================
    # Batch
    # =========================================================================

    def batch_read(
        self,
        object_type: str,
        ids: Iterable[str],
        *options: Option,
        properties: builtins.list[str] | None = None,
        properties_with_history: builtins.list[str] | None = None,
        id_property: str | None = None,
        ctx: CallContext | None = None,
    ) -> BatchResult[CrmObject]:
        """
        Read several records by ID.

        Raises:
            BatchPartialError: If any ID failed; the error carries the full result

        """
        body: dict[str, Any] = {"inputs": [{"id": str(object_id)} for object_id in ids]}
        if properties is not None:
            body["properties"] = properties
        if properties_with_history is not None:
            body["propertiesWithHistory"] = properties_with_history
        if id_property is not None:
            body["idProperty"] = id_property

        operation = f"{object_type}.batch_read"
        request = self._request(
            "POST",
            self._path(object_type, "batch", "read"),
            body=body,
            options=options,
            ctx=ctx,
            resource_type=object_type,
        ).with_idempotency()
        return self._call(request, self._batch, operation).raise_for_errors(operation)

    def batch_create(
        self,
        object_type: str,
        inputs: Iterable[dict[str, Any]],
        *,
        ctx: CallContext | None = None,
    ) -> BatchResult[CrmObject]:
        """
        Create several records.

        Each input is either a full input ({"properties": ..., "associations": ...})
        or a bare property dict.

        Raises:
            BatchPartialError: If any input failed; the error carries the full result

        """
        body = {"inputs": [item if "properties" in item else {"properties": item} for item in inputs]}
        operation = f"{object_type}.batch_create"
        request = self._request(
            "POST", self._path(object_type, "batch", "create"), body=body, ctx=ctx, resource_type=object_type
        )
        return self._call(request, self._batch, operation).raise_for_errors(operation)

    def batch_update(
        self,
        object_type: str,
        inputs: Iterable[dict[str, Any]],
        *,
        ctx: CallContext | None = None,
    ) -> BatchResult[CrmObject]:
        """
        Update several records. Each input is {"id": ..., "properties": {...}}.

        Raises:
            BatchPartialError: If any input failed; the error carries the full result

        """
        body = {"inputs": builtins.list(inputs)}
        operation = f"{object_type}.batch_update"
        request = self._request(
            "POST", self._path(object_type, "batch", "update"), body=body, ctx=ctx, resource_type=object_type
        )
        return self._call(request, self._batch, operation).raise_for_errors(operation)

    def batch_upsert(
        self,
        object_type: str,
        inputs: Iterable[dict[str, Any]],
        id_property: str,
        *,
        ctx: CallContext | None = None,
    ) -> BatchResult[CrmObject]:
        """
        Create or update several records matched on a unique property.

        Args:
            object_type: Object type name or id
            inputs: {"id": <unique value>, "properties": {...}} per record
            id_property: Unique property the ids refer to
            ctx: Cancellation/deadline token

        Raises:
            BatchPartialError: If any input failed; the error carries the full result

        """
        body = {"inputs": [{"idProperty": id_property, **item} for item in inputs]}
        operation = f"{object_type}.batch_upsert"
        request = self._request(
            "POST", self._path(object_type, "batch", "upsert"), body=body, ctx=ctx, resource_type=object_type
        )
        return self._call(request, self._batch, operation).raise_for_errors(operation)

    def batch_archive(
        self,
        object_type: str,
        ids: Iterable[str],
        *,
        ctx: CallContext | None = None,
    ) -> BatchResult[CrmObject]:
        """
        Archive several records.

        The server answers 204 No Content on success, which is reported as
        a complete batch with no results.
        """
        body = {"inputs": [{"id": str(object_id)} for object_id in ids]}
        operation = f"{object_type}.batch_archive"
        request = self._request(
            "POST", self._path(object_type, "batch", "archive"), body=body, ctx=ctx, resource_type=object_type
        )
        result = self._call(request, self._batch, operation, allow_empty=True)
        if result is None:
            return BatchResult(status=BatchStatus.COMPLETE)
        return result.raise_for_errors(operation)


class _BoundObjectOperations:
    """Object operations bound to one object type."""

    object_type = ""
    model: type[CrmObject] = CrmObject

    def __init__(self, client: APIClient):
        self._objects = ObjectOperations(client, model=self.model)

    def list(self, *options: Option, ctx: CallContext | None = None) -> Page[CrmObject]:
        return self._objects.list(self.object_type, *options, ctx=ctx)

    def iter_all(
        self, *options: Option, page_size: int = DEFAULT_PAGE_SIZE, ctx: CallContext | None = None
    ) -> Iterator[CrmObject]:
        return self._objects.iter_all(self.object_type, *options, page_size=page_size, ctx=ctx)

    def get(self, object_id: str, *options: Option, ctx: CallContext | None = None) -> CrmObject:
        return self._objects.get(self.object_type, object_id, *options, ctx=ctx)

    def create(
        self,
        properties: dict[str, Any],
        associations: builtins.list[dict[str, Any]] | None = None,
        *,
        ctx: CallContext | None = None,
    ) -> CrmObject:
        return self._objects.create(self.object_type, properties, associations, ctx=ctx)

    def update(
        self, object_id: str, properties: dict[str, Any], *options: Option, ctx: CallContext | None = None
    ) -> CrmObject:
        return self._objects.update(self.object_type, object_id, properties, *options, ctx=ctx)

    def archive(self, object_id: str, *, ctx: CallContext | None = None) -> None:
        self._objects.archive(self.object_type, object_id, ctx=ctx)

    def merge(self, primary_id: str, id_to_merge: str, *, ctx: CallContext | None = None) -> CrmObject:
        return self._objects.merge(self.object_type, primary_id, id_to_merge, ctx=ctx)

    def search(self, *args: Any, ctx: CallContext | None = None, **kwargs: Any) -> Page[CrmObject]:
        """Search; takes the same arguments as ObjectOperations.search after the object type."""
        return self._objects.search(self.object_type, *args, ctx=ctx, **kwargs)

    def batch_read(self, ids: Iterable[str], *options: Option, **kwargs: Any) -> BatchResult[CrmObject]:
        return self._objects.batch_read(self.object_type, ids, *options, **kwargs)

    def batch_create(
        self, inputs: Iterable[dict[str, Any]], *, ctx: CallContext | None = None
    ) -> BatchResult[CrmObject]:
        return self._objects.batch_create(self.object_type, inputs, ctx=ctx)

    def batch_update(
        self, inputs: Iterable[dict[str, Any]], *, ctx: CallContext | None = None
    ) -> BatchResult[CrmObject]:
        return self._objects.batch_update(self.object_type, inputs, ctx=ctx)

    def batch_upsert(
        self, inputs: Iterable[dict[str, Any]], id_property: str, *, ctx: CallContext | None = None
    ) -> BatchResult[CrmObject]:
        return self._objects.batch_upsert(self.object_type, inputs, id_property, ctx=ctx)

    def batch_archive(self, ids: Iterable[str], *, ctx: CallContext | None = None) -> BatchResult[CrmObject]:
        return self._objects.batch_archive(self.object_type, ids, ctx=ctx)


class CompanyOperations(_BoundObjectOperations):
    """Operations on companies. Results are Company instances."""

    object_type = "companies"
    model = Company


class DealOperations(_BoundObjectOperations):
    """Operations on deals. Results are Deal instances."""

    object_type = "deals"
    model = Deal


# =============================================================================
# Association Operations (/crm/v4)
# =============================================================================


class AssociationOperations(_Operations):
    """Operations on associations between records (v4)."""

    resource_type = "associations"

    @staticmethod
    def _record_path(from_type: str, from_id: str, to_type: str, to_id: str | None = None) -> str:
        path = f"/crm/v4/objects/{_segment(from_type)}/{_segment(from_id)}/associations/{_segment(to_type)}"
        if to_id is not None:
            path += f"/{_segment(to_id)}"
        return path

    @staticmethod
    def _type_path(from_type: str, to_type: str, *parts: str) -> str:
        path = f"/crm/v4/associations/{_segment(from_type)}/{_segment(to_type)}"
        for part in parts:
            path += f"/{part}"
        return path

    def create(
        self,
        from_type: str,
        from_id: str,
        to_type: str,
        to_id: str,
        specs: Iterable[AssociationSpec],
        *,
        ctx: CallContext | None = None,
    ) -> AssociationResult:
        """
        Associate two records with the given association types.

        Args:
            from_type: Source object type
            from_id: Source record ID
            to_type: Target object type
            to_id: Target record ID
            specs: Association category/type pairs to apply
            ctx: Cancellation/deadline token

        Returns:
            AssociationResult with the applied labels

        """
        body = [spec.to_dict() for spec in specs]
        request = self._request("PUT", self._record_path(from_type, from_id, to_type, to_id), body=body, ctx=ctx)
        return self._call(
            request, AssociationResult.from_dict, "associations.create", identifier=f"{from_type}/{from_id}"
        )

    def delete(
        self,
        from_type: str,
        from_id: str,
        to_type: str,
        to_id: str,
        *,
        ctx: CallContext | None = None,
    ) -> None:
        """Remove every association between two records."""
        request = self._request("DELETE", self._record_path(from_type, from_id, to_type, to_id), ctx=ctx)
        self._call(
            request, _ignore, "associations.delete", identifier=f"{from_type}/{from_id}", allow_empty=True
        )

    def list(
        self,
        from_type: str,
        from_id: str,
        to_type: str,
        *options: Option,
        ctx: CallContext | None = None,
    ) -> Page[AssociatedObject]:
        """List one page of records of `to_type` associated with a record."""
        request = self._request("GET", self._record_path(from_type, from_id, to_type), options=options, ctx=ctx)
        return self._call(
            request,
            lambda data: Page.from_dict(data, AssociatedObject.from_dict),
            "associations.list",
            identifier=f"{from_type}/{from_id}",
        )

    def batch_create(
        self,
        from_type: str,
        to_type: str,
        inputs: Iterable[dict[str, Any]],
        *,
        ctx: CallContext | None = None,
    ) -> BatchResult[AssociationResult]:
        """
        Create several associations.

        Each input is {"from": {"id": ...}, "to": {"id": ...}, "types": [AssociationSpec, ...]}.

        Raises:
            BatchPartialError: If any input failed; the error carries the full result

        """
        operation = "associations.batch_create"
        body = {"inputs": builtins.list(inputs)}
        request = self._request("POST", self._type_path(from_type, to_type, "batch", "create"), body=body, ctx=ctx)
        result = self._call(
            request, lambda data: BatchResult.from_dict(data, AssociationResult.from_dict), operation
        )
        return result.raise_for_errors(operation)

    def batch_archive(
        self,
        from_type: str,
        to_type: str,
        inputs: Iterable[dict[str, Any]],
        *,
        ctx: CallContext | None = None,
    ) -> None:
        """
        Remove several associations.

        Each input is {"from": {"id": ...}, "to": [{"id": ...}, ...]}.
        """
        body = {"inputs": builtins.list(inputs)}
        request = self._request("POST", self._type_path(from_type, to_type, "batch", "archive"), body=body, ctx=ctx)
        self._call(request, _ignore, "associations.batch_archive", allow_empty=True)

    def get_labels(
        self, from_type: str, to_type: str, *, ctx: CallContext | None = None
    ) -> builtins.list[AssociationLabel]:
        """Get the association labels defined between two object types."""
        request = self._request("GET", self._type_path(from_type, to_type, "labels"), ctx=ctx)
        return self._call(
            request,
            lambda data: [AssociationLabel.from_dict(item) for item in data["results"]],
            "associations.get_labels",
        )


# =============================================================================
# List Operations (/crm/v3/lists)
# =============================================================================


class ListOperations(_Operations):
    """
    Operations on lists (segments) and their memberships.

    Get methods accept `opts.include_filters()`; membership pages accept
    `opts.memberships_limit()` and `opts.memberships_offset()`.
    """

    resource_type = "list"

    @staticmethod
    def _path(*parts: Any) -> str:
        path = "/crm/v3/lists"
        for part in parts:
            path += f"/{part}"
        return path

    def get_by_id(self, list_id: str, *options: Option, ctx: CallContext | None = None) -> CrmList:
        """
        Get a list by ID.

        Raises:
            NotFoundError: If the list does not exist

        """
        request = self._request("GET", self._path(_segment(list_id)), options=options, ctx=ctx)
        return self._call(request, CrmList.from_envelope, "lists.get_by_id", identifier=str(list_id))

    def get_by_name(
        self, object_type_id: str, name: str, *options: Option, ctx: CallContext | None = None
    ) -> CrmList:
        """Get a list by object type id and name."""
        path = self._path("object-type-id", _segment(object_type_id), "name", _segment(name))
        request = self._request("GET", path, options=options, ctx=ctx)
        return self._call(request, CrmList.from_envelope, "lists.get_by_name", identifier=name)

    def get_by_ids(
        self, list_ids: Iterable[str], *options: Option, ctx: CallContext | None = None
    ) -> builtins.list[CrmList]:
        """Get several lists by ID in one call."""
        request = self._request("GET", self._path(), ctx=ctx)
        request.set_query_values("listIds", [str(list_id) for list_id in list_ids])
        apply_options(request, options)
        return self._call(
            request,
            lambda data: [CrmList.from_dict(item) for item in data.get("lists") or []],
            "lists.get_by_ids",
        )

    def create(
        self,
        name: str,
        object_type_id: str,
        processing_type: str,
        filter_branch: dict[str, Any] | None = None,
        membership_settings: dict[str, Any] | None = None,
        list_permissions: dict[str, Any] | None = None,
        list_folder_id: int | None = None,
        custom_properties: dict[str, str] | None = None,
        *,
        ctx: CallContext | None = None,
    ) -> CrmList:
        """
        Create a list.

        Args:
            name: List name, unique per account
            object_type_id: Object type of the members (e.g. "0-1" for contacts)
            processing_type: "MANUAL", "SNAPSHOT" or "DYNAMIC"
            filter_branch: Filter definition for dynamic and snapshot lists
            membership_settings: Membership team settings
            list_permissions: Team and user edit access
            list_folder_id: Folder to create the list in
            custom_properties: Custom properties of the list
            ctx: Cancellation/deadline token

        Returns:
            The created list

        Raises:
            AlreadyExistsError: If a list with that name exists

        """
        body: dict[str, Any] = {
            "name": name,
            "objectTypeId": object_type_id,
            "processingType": processing_type,
        }
        if filter_branch is not None:
            body["filterBranch"] = filter_branch
        if membership_settings is not None:
            body["membershipSettings"] = membership_settings
        if list_permissions is not None:
            body["listPermissions"] = list_permissions
        if list_folder_id is not None:
            body["listFolderId"] = list_folder_id
        if custom_properties is not None:
            body["customProperties"] = custom_properties

        request = self._request("POST", self._path(), body=body, ctx=ctx)
        return self._call(request, CrmList.from_envelope, "lists.create", identifier=name)

    def search(
        self,
        query: str | None = None,
        processing_types: builtins.list[str] | None = None,
        additional_properties: builtins.list[str] | None = None,
        count: int | None = None,
        offset: int | None = None,
        *,
        ctx: CallContext | None = None,
    ) -> ListSearchResult:
        """Search lists by name and processing type (offset paginated)."""
        body: dict[str, Any] = {}
        if query is not None:
            body["query"] = query
        if processing_types is not None:
            body["processingTypes"] = processing_types
        if additional_properties is not None:
            body["additionalProperties"] = additional_properties
        if count is not None:
            body["count"] = count
        if offset is not None:
            body["offset"] = offset

        request = self._request("POST", self._path("search"), body=body, ctx=ctx).with_idempotency()
        return self._call(request, ListSearchResult.from_dict, "lists.search")

    def update_name(
        self, list_id: str, name: str, include_filters: bool = False, *, ctx: CallContext | None = None
    ) -> CrmList:
        """Rename a list."""
        request = self._request(
            "PUT",
            self._path(_segment(list_id), "update-list-name"),
            options=[opts.include_filters(include_filters)],
            ctx=ctx,
        )
        request.add_query_param("listName", name)
        return self._call(request, CrmList.from_envelope, "lists.update_name", identifier=str(list_id))

    def update_filters(
        self,
        list_id: str,
        filter_branch: dict[str, Any],
        include_filters: bool = False,
        *,
        ctx: CallContext | None = None,
    ) -> CrmList:
        """Replace the filter definition of a dynamic or snapshot list."""
        request = self._request(
            "PUT",
            self._path(_segment(list_id), "update-list-filters"),
            body={"filterBranch": filter_branch},
            options=[opts.include_filters(include_filters)],
            ctx=ctx,
        )
        return self._call(request, CrmList.from_envelope, "lists.update_filters", identifier=str(list_id))

    def delete(self, list_id: str, *, ctx: CallContext | None = None) -> None:
        """Delete a list. Deleted lists can be restored for 90 days."""
        request = self._request("DELETE", self._path(_segment(list_id)), ctx=ctx)
        self._call(request, _ignore, "lists.delete", identifier=str(list_id), allow_empty=True)

    def restore(self, list_id: str, *, ctx: CallContext | None = None) -> None:
        """Restore a deleted list."""
        request = self._request("PUT", self._path(_segment(list_id), "restore"), ctx=ctx)
        self._call(request, _ignore, "lists.restore", identifier=str(list_id), allow_empty=True)

    # =========================================================================
    # Memberships
    # =========================================================================

    def get_record_memberships(
        self, object_type_id: str, record_id: str, *, ctx: CallContext | None = None
    ) -> RecordMemberships:
        """Get the lists a record belongs to."""
        path = self._path("records", _segment(object_type_id), _segment(record_id), "memberships")
        request = self._request("GET", path, ctx=ctx, resource_type="record")
        return self._call(
            request,
            RecordMemberships.from_dict,
            "lists.get_record_memberships",
            identifier=f"{object_type_id}/{record_id}",
        )

    def batch_get_record_memberships(
        self, records: Iterable[tuple[str, str]], *, ctx: CallContext | None = None
    ) -> builtins.list[RecordMemberships]:
        """
        Get list memberships for several records.

        Args:
            records: (object type id, record id) pairs
            ctx: Cancellation/deadline token

        Returns:
            One RecordMemberships per record, tagged with its object type and id

        """
        body = {
            "inputs": [
                {"objectTypeId": object_type_id, "recordId": str(record_id)} for object_type_id, record_id in records
            ]
        }
        request = self._request(
            "POST", self._path("records", "memberships", "batch", "read"), body=body, ctx=ctx
        ).with_idempotency()
        return self._call(
            request,
            lambda data: [RecordMemberships.from_dict(item) for item in data.get("results") or []],
            "lists.batch_get_record_memberships",
        )

    def add_records(
        self, list_id: str, record_ids: Iterable[str], *, ctx: CallContext | None = None
    ) -> MembershipChange:
        """Add records to a manual or snapshot list."""
        body = [str(record_id) for record_id in record_ids]
        request = self._request("PUT", self._path(_segment(list_id), "memberships", "add"), body=body, ctx=ctx)
        return self._call(request, MembershipChange.from_dict, "lists.add_records", identifier=str(list_id))

    def add_from_source_list(
        self, list_id: str, source_list_id: str, *, ctx: CallContext | None = None
    ) -> MembershipChange | None:
        """Add every member of another list to this one."""
        path = self._path(_segment(list_id), "memberships", "add-from", _segment(source_list_id))
        request = self._request("PUT", path, ctx=ctx)
        return self._call(
            request,
            MembershipChange.from_dict,
            "lists.add_from_source_list",
            identifier=str(list_id),
            allow_empty=True,
        )

    def get_memberships(self, list_id: str, *options: Option, ctx: CallContext | None = None) -> ListMemberships:
        """Get one page of record IDs in a list."""
        request = self._request("GET", self._path(_segment(list_id), "memberships"), options=options, ctx=ctx)
        return self._call(request, ListMemberships.from_dict, "lists.get_memberships", identifier=str(list_id))

    def remove_all_records(self, list_id: str, *, ctx: CallContext | None = None) -> None:
        """Remove every record from a manual or snapshot list."""
        request = self._request("DELETE", self._path(_segment(list_id), "memberships"), ctx=ctx)
        self._call(request, _ignore, "lists.remove_all_records", identifier=str(list_id), allow_empty=True)

    def remove_records(
        self, list_id: str, record_ids: Iterable[str], *, ctx: CallContext | None = None
    ) -> MembershipChange:
        """Remove records from a manual or snapshot list."""
        body = [str(record_id) for record_id in record_ids]
        request = self._request("PUT", self._path(_segment(list_id), "memberships", "remove"), body=body, ctx=ctx)
        return self._call(request, MembershipChange.from_dict, "lists.remove_records", identifier=str(list_id))

    # =========================================================================
    # Conversion
    # =========================================================================

    def schedule_conversion(
        self, list_id: str, conversion: dict[str, Any], *, ctx: CallContext | None = None
    ) -> ConversionSchedule:
        """
        Schedule conversion of an active list to a static list.

        Args:
            list_id: List to convert
            conversion: {"conversionType": "CONVERSION_DATE", "year": ..., "month": ..., "day": ...}
                or {"conversionType": "INACTIVITY", "timeUnit": "WEEK", "offset": ...}
            ctx: Cancellation/deadline token

        Returns:
            The stored schedule

        """
        request = self._request(
            "PUT", self._path(_segment(list_id), "schedule-conversion"), body=conversion, ctx=ctx
        )
        return self._call(
            request, ConversionSchedule.from_dict, "lists.schedule_conversion", identifier=str(list_id)
        )

    def get_conversion_schedule(self, list_id: str, *, ctx: CallContext | None = None) -> ConversionSchedule:
        request = self._request("GET", self._path(_segment(list_id), "schedule-conversion"), ctx=ctx)
        return self._call(
            request, ConversionSchedule.from_dict, "lists.get_conversion_schedule", identifier=str(list_id)
        )

    def delete_conversion_schedule(self, list_id: str, *, ctx: CallContext | None = None) -> None:
        request = self._request("DELETE", self._path(_segment(list_id), "schedule-conversion"), ctx=ctx)
        self._call(
            request, _ignore, "lists.delete_conversion_schedule", identifier=str(list_id), allow_empty=True
        )


# =============================================================================
# Schema Operations (/crm-object-schemas/v3/schemas)
# =============================================================================


class SchemaOperations(_Operations):
    """Operations on custom object schemas."""

    resource_type = "schema"

    @staticmethod
    def _path(*parts: Any) -> str:
        path = "/crm-object-schemas/v3/schemas"
        for part in parts:
            path += f"/{_segment(part)}"
        return path

    def get_all(self, *options: Option, ctx: CallContext | None = None) -> SchemaCollection:
        """
        Get every custom object schema in the account.

        Raises:
            NoResultsError: If the account has no schemas; the empty
                collection is attached as `.result`

        """
        request = self._request("GET", self._path(), options=options, ctx=ctx)
        result = self._call(request, SchemaCollection.from_dict, "schemas.get_all")
        return require_results(result, "schemas")

    def get(self, object_type: str, *, ctx: CallContext | None = None) -> ObjectSchema:
        """Get the schema of one object type."""
        request = self._request("GET", self._path(object_type), ctx=ctx)
        return self._call(request, ObjectSchema.from_dict, "schemas.get", identifier=object_type)

    def create(self, schema: dict[str, Any], *, ctx: CallContext | None = None) -> ObjectSchema:
        """
        Create a custom object schema.

        Args:
            schema: {"name", "labels", "properties", "requiredProperties",
                "associatedObjects", ...}
            ctx: Cancellation/deadline token

        Returns:
            The created schema

        """
        request = self._request("POST", self._path(), body=schema, ctx=ctx)
        return self._call(request, ObjectSchema.from_dict, "schemas.create", identifier=schema.get("name", ""))

    def update(self, object_type: str, changes: dict[str, Any], *, ctx: CallContext | None = None) -> ObjectSchema:
        """Update labels and display settings of a schema."""
        request = self._request("PATCH", self._path(object_type), body=changes, ctx=ctx)
        return self._call(request, ObjectSchema.from_dict, "schemas.update", identifier=object_type)

    def delete(self, object_type: str, *options: Option, ctx: CallContext | None = None) -> None:
        """Delete a schema. Pass `opts.archived()` to purge an archived one."""
        request = self._request("DELETE", self._path(object_type), options=options, ctx=ctx)
        self._call(request, _ignore, "schemas.delete", identifier=object_type, allow_empty=True)

    def create_association(
        self,
        object_type: str,
        from_object_type_id: str,
        to_object_type_id: str,
        name: str | None = None,
        *,
        ctx: CallContext | None = None,
    ) -> SchemaAssociation:
        """Define a new association between a custom object and another object type."""
        body: dict[str, Any] = {
            "fromObjectTypeId": from_object_type_id,
            "toObjectTypeId": to_object_type_id,
        }
        if name is not None:
            body["name"] = name
        request = self._request("POST", self._path(object_type, "associations"), body=body, ctx=ctx)
        return self._call(
            request, SchemaAssociation.from_dict, "schemas.create_association", identifier=object_type
        )

    def remove_association(
        self, object_type: str, association_id: str, *, ctx: CallContext | None = None
    ) -> None:
        """Remove an association definition from a schema."""
        request = self._request("DELETE", self._path(object_type, "associations", association_id), ctx=ctx)
        self._call(
            request, _ignore, "schemas.remove_association", identifier=object_type, allow_empty=True
        )
