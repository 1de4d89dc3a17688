"""Tests for CRM object operations (generic objects, companies, deals)."""

import pytest

from conftest import json_response
from hubspot_sdk.core import options as opts
from hubspot_sdk.core.context import CallContext
from hubspot_sdk.core.errors import (
    AlreadyExistsError,
    APIError,
    BatchPartialError,
    CancelledError,
    NotFoundError,
    ParseError,
    ValidationError,
)
from hubspot_sdk.core.transport import RawResponse
from hubspot_sdk.core.types import AssociationSpec, BatchStatus, Company, CrmObject, Deal


def company(object_id: str, name: str = "Acme") -> dict:
    return {
        "id": object_id,
        "properties": {"name": name, "domain": f"{name.lower()}.com"},
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-02T00:00:00.000Z",
        "archived": False,
    }


# =============================================================================
# Generic objects
# =============================================================================


class TestObjectReads:
    def test_list_applies_options_in_order(self, hubspot, transport):
        transport.queue(json_response(200, {"results": [company("1")], "paging": {"next": {"after": "2"}}}))

        page = hubspot.objects.list(
            "contacts",
            opts.limit(10),
            opts.properties(["email"]),
            opts.limit(25),
        )

        assert transport.last.path == "/crm/v3/objects/contacts"
        assert transport.last.query == {"limit": ["25"], "properties": ["email"]}
        assert [item.id for item in page.results] == ["1"]
        assert page.next_after == "2"

    def test_empty_list_is_not_an_error(self, hubspot, transport):
        transport.queue(json_response(200, {"results": []}))
        page = hubspot.objects.list("contacts")
        assert page.results == []
        assert not page.has_more

    def test_iter_all_follows_cursor(self, hubspot, transport):
        transport.queue(
            json_response(200, {"results": [company("1"), company("2")], "paging": {"next": {"after": "c2"}}}),
            json_response(200, {"results": [company("3")]}),
        )

        ids = [item.id for item in hubspot.objects.iter_all("companies", opts.properties(["name"]), page_size=2)]

        assert ids == ["1", "2", "3"]
        assert transport.sent[0].query == {"properties": ["name"], "limit": ["2"]}
        assert transport.sent[1].query == {"properties": ["name"], "limit": ["2"], "after": ["c2"]}

    def test_get(self, hubspot, transport):
        transport.queue(
            json_response(
                200,
                {
                    **company("123"),
                    "propertiesWithHistory": {"name": [{"value": "Acme", "sourceType": "CRM_UI"}]},
                    "associations": {"contacts": {"results": [{"id": "9", "type": "company_to_contact"}]}},
                },
            )
        )

        record = hubspot.objects.get("companies", "123", opts.properties_with_history(["name"]))

        assert isinstance(record, CrmObject)
        assert record.properties_with_history["name"][0].source_type == "CRM_UI"
        assert record.associations["contacts"].results[0].id == "9"
        assert transport.last.path == "/crm/v3/objects/companies/123"

    def test_get_escapes_path_segments(self, hubspot, transport):
        transport.queue(json_response(200, company("a@b.com")))
        hubspot.objects.get("contacts", "a/b@c.com", opts.id_property("email"))
        assert transport.last.url.startswith("https://api.test/crm/v3/objects/contacts/a%2Fb%40c.com?")

    def test_get_not_found(self, hubspot, transport):
        transport.queue(json_response(404, {"message": "Object not found", "category": "OBJECT_NOT_FOUND"}))

        with pytest.raises(NotFoundError) as exc_info:
            hubspot.objects.get("companies", "999")

        error = exc_info.value
        assert error.identifier == "999"
        assert "999" in str(error)
        assert isinstance(error.__cause__, APIError)
        assert error.original.category == "OBJECT_NOT_FOUND"

    def test_invalid_json_names_call(self, hubspot, transport):
        transport.queue(RawResponse(status=200, body=b"{not json"))
        with pytest.raises(ParseError, match="companies.get"):
            hubspot.objects.get("companies", "1")

    def test_unclassified_error_passes_through(self, hubspot, transport):
        transport.queue(json_response(401, {"message": "expired", "category": "INVALID_AUTHENTICATION"}))
        with pytest.raises(APIError) as exc_info:
            hubspot.objects.list("contacts")
        assert exc_info.value.status == 401

    def test_search_is_retried(self, hubspot, transport):
        transport.queue(json_response(502, {}), json_response(200, {"total": 1, "results": [company("5")]}))

        page = hubspot.objects.search(
            "companies",
            filter_groups=[{"filters": [{"propertyName": "domain", "operator": "EQ", "value": "acme.com"}]}],
            properties=["name"],
            limit=10,
        )

        assert page.total == 1
        assert len(transport.sent) == 2
        assert transport.last.path == "/crm/v3/objects/companies/search"
        assert transport.last.json() == {
            "filterGroups": [{"filters": [{"propertyName": "domain", "operator": "EQ", "value": "acme.com"}]}],
            "properties": ["name"],
            "limit": 10,
        }

    def test_context_reaches_transport(self, hubspot, transport):
        transport.queue(json_response(200, {"results": []}))
        ctx = CallContext.with_timeout(30)
        hubspot.objects.list("contacts", ctx=ctx)
        assert transport.last.ctx is ctx

    def test_cancelled_context(self, hubspot, transport):
        ctx = CallContext()
        ctx.cancel()
        with pytest.raises(CancelledError):
            hubspot.objects.get("contacts", "1", ctx=ctx)
        assert transport.sent == []


class TestObjectWrites:
    def test_create_with_associations(self, hubspot, transport):
        transport.queue(json_response(201, company("10")))

        record = hubspot.objects.create(
            "companies",
            {"name": "Acme"},
            associations=[{"to": {"id": "7"}, "types": [AssociationSpec("HUBSPOT_DEFINED", 280)]}],
        )

        assert record.id == "10"
        assert transport.last.method == "POST"
        assert transport.last.json() == {
            "properties": {"name": "Acme"},
            "associations": [
                {"to": {"id": "7"}, "types": [{"associationCategory": "HUBSPOT_DEFINED", "associationTypeId": 280}]}
            ],
        }

    def test_create_not_retried(self, hubspot, transport):
        transport.queue(json_response(503, {}), json_response(201, company("10")))
        with pytest.raises(APIError):
            hubspot.objects.create("companies", {"name": "Acme"})
        assert len(transport.sent) == 1

    def test_create_validation_error(self, hubspot, transport):
        transport.queue(
            json_response(
                400,
                {
                    "message": "Property values were not valid",
                    "category": "VALIDATION_ERROR",
                    "errors": [{"message": "invalid", "context": {"propertyName": ["annualrevenue"]}}],
                },
            )
        )
        with pytest.raises(ValidationError) as exc_info:
            hubspot.objects.create("companies", {"annualrevenue": "lots"})
        assert exc_info.value.field == "annualrevenue"

    def test_create_conflict(self, hubspot, transport):
        transport.queue(json_response(409, {"message": "Contact already exists", "category": "CONFLICT"}))
        with pytest.raises(AlreadyExistsError):
            hubspot.objects.create("contacts", {"email": "a@b.com"})

    def test_update(self, hubspot, transport):
        transport.queue(json_response(200, company("1", "Renamed")))
        record = hubspot.objects.update("companies", "1", {"name": "Renamed"}, opts.id_property("domain"))
        assert record.properties["name"] == "Renamed"
        assert transport.last.method == "PATCH"
        assert transport.last.query == {"idProperty": ["domain"]}
        assert transport.last.json() == {"properties": {"name": "Renamed"}}

    def test_archive(self, hubspot, transport):
        transport.queue(RawResponse(status=204))
        assert hubspot.objects.archive("deals", "5") is None
        assert transport.last.method == "DELETE"
        assert transport.last.path == "/crm/v3/objects/deals/5"

    def test_merge(self, hubspot, transport):
        transport.queue(json_response(200, company("1")))
        hubspot.objects.merge("companies", "1", "2")
        assert transport.last.path == "/crm/v3/objects/companies/merge"
        assert transport.last.json() == {"primaryObjectId": "1", "objectIdToMerge": "2"}


# =============================================================================
# Batch
# =============================================================================


class TestObjectBatch:
    def test_batch_read(self, hubspot, transport):
        transport.queue(
            json_response(
                200,
                {
                    "status": "COMPLETE",
                    "results": [company("1"), company("2")],
                    "startedAt": "2024-01-01T00:00:00Z",
                    "completedAt": "2024-01-01T00:00:01Z",
                },
            )
        )

        result = hubspot.objects.batch_read("companies", ["1", "2"], properties=["name"], id_property="hs_object_id")

        assert result.status is BatchStatus.COMPLETE
        assert [item.id for item in result.results] == ["1", "2"]
        assert transport.last.path == "/crm/v3/objects/companies/batch/read"
        assert transport.last.json() == {
            "inputs": [{"id": "1"}, {"id": "2"}],
            "properties": ["name"],
            "idProperty": "hs_object_id",
        }

    def test_batch_read_retried(self, hubspot, transport):
        transport.queue(json_response(429, {}), json_response(200, {"status": "COMPLETE", "results": []}))
        hubspot.objects.batch_read("companies", ["1"])
        assert len(transport.sent) == 2

    def test_batch_create_partial_failure(self, hubspot, transport):
        transport.queue(
            json_response(
                207,
                {
                    "status": "COMPLETE",
                    "results": [company("1")],
                    "numErrors": 1,
                    "errors": [
                        {
                            "status": "error",
                            "category": "VALIDATION_ERROR",
                            "message": "Property values were not valid",
                            "errors": [{"message": "domain is invalid"}],
                        }
                    ],
                },
            )
        )

        with pytest.raises(BatchPartialError) as exc_info:
            hubspot.objects.batch_create("companies", [{"name": "Acme"}, {"name": "Bad", "domain": "???"}])

        result = exc_info.value.result
        assert len(result.results) == 1
        assert result.num_errors == 1
        assert len(result.errors) == 1
        assert str(result.errors[0]) == "Property values were not valid: domain is invalid"
        assert transport.last.json() == {
            "inputs": [{"properties": {"name": "Acme"}}, {"properties": {"name": "Bad", "domain": "???"}}]
        }

    def test_batch_errors_raise_even_on_200_complete(self, hubspot, transport):
        transport.queue(json_response(200, {"status": "COMPLETE", "results": [], "numErrors": 1}))
        with pytest.raises(BatchPartialError):
            hubspot.objects.batch_update("deals", [{"id": "1", "properties": {"amount": "10"}}])

    def test_batch_create_keeps_full_inputs(self, hubspot, transport):
        transport.queue(json_response(201, {"status": "COMPLETE", "results": [company("1")]}))
        inputs = [{"properties": {"name": "Acme"}, "associations": []}]
        hubspot.objects.batch_create("companies", inputs)
        assert transport.last.json() == {"inputs": inputs}

    def test_batch_upsert(self, hubspot, transport):
        transport.queue(json_response(200, {"status": "COMPLETE", "results": [company("1")]}))
        hubspot.objects.batch_upsert("contacts", [{"id": "a@b.com", "properties": {"firstname": "A"}}], "email")
        assert transport.last.path == "/crm/v3/objects/contacts/batch/upsert"
        assert transport.last.json() == {
            "inputs": [{"idProperty": "email", "id": "a@b.com", "properties": {"firstname": "A"}}]
        }

    def test_batch_archive_no_content(self, hubspot, transport):
        transport.queue(RawResponse(status=204))
        result = hubspot.objects.batch_archive("deals", ["1", "2"])
        assert result.is_complete
        assert result.results == []
        assert transport.last.json() == {"inputs": [{"id": "1"}, {"id": "2"}]}


# =============================================================================
# Companies and deals
# =============================================================================


class TestBoundObjects:
    def test_client_options_forwarded(self, hubspot):
        assert hubspot.api.base_url == "https://api.test"
        assert hubspot.api.rate_limiter is None

    def test_from_dict_keeps_subclass(self):
        deal = Deal.from_dict({"id": 5, "properties": {"dealname": "Big"}})
        assert type(deal) is Deal
        assert deal.id == "5"
        assert type(CrmObject.from_dict({"id": "1"})) is CrmObject

    def test_companies_typed(self, hubspot, transport):
        transport.queue(json_response(200, company("1")))
        record = hubspot.companies.get("1", opts.properties(["name"]))
        assert isinstance(record, Company)
        assert transport.last.path == "/crm/v3/objects/companies/1"

    def test_deals_typed(self, hubspot, transport):
        transport.queue(json_response(200, {"results": [{"id": "3", "properties": {"dealname": "Big"}}]}))
        page = hubspot.deals.list(opts.limit(1))
        assert isinstance(page.results[0], Deal)
        assert transport.last.path == "/crm/v3/objects/deals"

    def test_deal_not_found_uses_type(self, hubspot, transport):
        transport.queue(json_response(404, {"message": "nope", "category": "OBJECT_NOT_FOUND"}))
        with pytest.raises(NotFoundError, match="deals 77 not found"):
            hubspot.deals.get("77")

    def test_company_search_and_batch(self, hubspot, transport):
        transport.queue(
            json_response(200, {"total": 0, "results": []}),
            json_response(200, {"status": "COMPLETE", "results": [company("1")]}),
        )
        assert hubspot.companies.search(query="acme").results == []
        assert transport.sent[0].json() == {"query": "acme"}

        result = hubspot.companies.batch_read(["1"], properties=["name"])
        assert isinstance(result.results[0], Company)

    def test_iter_all_bound(self, hubspot, transport):
        transport.queue(json_response(200, {"results": [{"id": "1"}, {"id": "2"}]}))
        assert [deal.id for deal in hubspot.deals.iter_all()] == ["1", "2"]
