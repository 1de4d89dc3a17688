"""Tests for response envelope decoding and error body parsing."""

import pytest

from hubspot_sdk.core.envelope import decode, parse_error_body, require_results
from hubspot_sdk.core.errors import NoResultsError, ParseError
from hubspot_sdk.core.transport import RawResponse
from hubspot_sdk.core.types import BatchResult, BatchStatus, CrmObject, Page, SchemaCollection


def raw(status: int, body: bytes, headers: dict[str, str] | None = None) -> RawResponse:
    return RawResponse(status=status, body=body, headers=headers or {})


# =============================================================================
# decode
# =============================================================================


class TestDecode:
    def test_page_of_objects(self):
        body = (
            b'{"results": [{"id": "1", "properties": {"name": "Acme"}, "createdAt": "2024-01-01T00:00:00Z"}],'
            b' "paging": {"next": {"after": "NTI1Cg%3D%3D", "link": "?after=NTI1Cg%3D%3D"}}}'
        )
        page = decode(raw(200, body), lambda data: Page.from_dict(data, CrmObject.from_dict), "companies.list")

        assert len(page.results) == 1
        assert page.results[0].properties["name"] == "Acme"
        assert page.next_after == "NTI1Cg%3D%3D"
        assert page.has_more

    def test_page_without_paging_is_last(self):
        page = decode(raw(200, b'{"results": []}'), lambda data: Page.from_dict(data, CrmObject.from_dict), "x")
        assert page.results == []
        assert page.next_after is None
        assert not page.has_more

    def test_invalid_json_names_operation(self):
        with pytest.raises(ParseError) as exc_info:
            decode(raw(200, b"<html>oops</html>"), CrmObject.from_dict, "companies.get")

        error = exc_info.value
        assert error.operation == "companies.get"
        assert str(error).startswith("companies.get: failed to parse response")
        assert error.details["body"] == "<html>oops</html>"

    def test_missing_required_field(self):
        with pytest.raises(ParseError, match="missing required field 'id'"):
            decode(raw(200, b'{"properties": {}}'), CrmObject.from_dict, "deals.get")

    def test_wrong_shape(self):
        with pytest.raises(ParseError, match="unexpected response shape"):
            decode(raw(200, b"[1, 2, 3]"), CrmObject.from_dict, "deals.get")

    def test_empty_body(self):
        assert decode(raw(204, b""), CrmObject.from_dict, "deals.archive", allow_empty=True) is None
        with pytest.raises(ParseError, match="empty response body"):
            decode(raw(200, b""), CrmObject.from_dict, "deals.get")

    def test_unknown_batch_status(self):
        with pytest.raises(ParseError):
            decode(
                raw(200, b'{"status": "EXPLODED", "results": []}'),
                lambda data: BatchResult.from_dict(data, CrmObject.from_dict),
                "deals.batch_read",
            )

    def test_batch_num_errors_defaults_to_error_count(self):
        body = b'{"status": "COMPLETE", "results": [], "errors": [{"message": "a"}, {"message": "b"}]}'
        result = decode(raw(207, body), lambda data: BatchResult.from_dict(data, CrmObject.from_dict), "x")
        assert result.status is BatchStatus.COMPLETE
        assert result.num_errors == 2


# =============================================================================
# parse_error_body
# =============================================================================


class TestParseErrorBody:
    def test_full_envelope(self):
        body = (
            b'{"status": "error", "message": "Property values were not valid", '
            b'"correlationId": "aeb5f871-7f07-4993-9211-075dc63e7cbf", "category": "VALIDATION_ERROR", '
            b'"subCategory": "sub", "errors": [{"message": "bad", "code": "INVALID_EMAIL", '
            b'"in": "email", "context": {"propertyName": ["email"]}}], '
            b'"context": {"ids": ["1", "2"]}, "links": {"docs": "https://developers.hubspot.com"}}'
        )
        error = parse_error_body(raw(400, body, {"X-Request-Id": "r1"}))

        assert error.status == 400
        assert error.category == "VALIDATION_ERROR"
        assert error.message == "Property values were not valid"
        assert error.correlation_id == "aeb5f871-7f07-4993-9211-075dc63e7cbf"
        assert error.sub_category == "sub"
        assert error.errors[0].code == "INVALID_EMAIL"
        assert error.errors[0].in_ == "email"
        assert error.errors[0].context == {"propertyName": ["email"]}
        assert error.context == {"ids": ["1", "2"]}
        assert error.links == {"docs": "https://developers.hubspot.com"}
        assert error.headers == {"X-Request-Id": "r1"}

    def test_non_json_body_becomes_message(self):
        error = parse_error_body(raw(502, b"Bad Gateway"))
        assert error.status == 502
        assert error.category == ""
        assert error.message == "Bad Gateway"

    def test_empty_body(self):
        error = parse_error_body(RawResponse(status=503, reason="Service Unavailable"))
        assert error.status == 503
        assert error.message == "Service Unavailable"


# =============================================================================
# require_results
# =============================================================================


class TestRequireResults:
    def test_empty_raises_with_result(self):
        empty = SchemaCollection(results=[])
        with pytest.raises(NoResultsError, match="no schemas found") as exc_info:
            require_results(empty, "schemas")
        assert exc_info.value.result is empty

    def test_non_empty_passes(self):
        collection = SchemaCollection(results=["x"])
        assert require_results(collection, "schemas") is collection
