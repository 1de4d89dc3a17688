"""
Request options.

Each factory returns a callable that writes one query parameter. Options
are applied in the order given; the last one to write a key wins.
"""

from collections.abc import Callable, Iterable

from hubspot_sdk.core.request import Request

Option = Callable[[Request], None]


def apply_options(request: Request, options: Iterable[Option]) -> Request:
    """Apply options to a request, left to right."""
    for option in options:
        option(request)
    return request


def _param(name: str, value: str) -> Option:
    def option(request: Request) -> None:
        request.add_query_param(name, value)

    return option


# =============================================================================
# CRM object options
# =============================================================================


def properties(names: Iterable[str]) -> Option:
    """Properties to return."""
    return _param("properties", ",".join(names))


def properties_with_history(names: Iterable[str]) -> Option:
    """Properties to return along with their value history."""
    return _param("propertiesWithHistory", ",".join(names))


def associations(object_types: Iterable[str]) -> Option:
    """Object types whose associated IDs should be returned."""
    return _param("associations", ",".join(object_types))


def limit(count: int) -> Option:
    """Maximum number of results per page."""
    return _param("limit", str(int(count)))


def after(cursor: str) -> Option:
    """Paging cursor from a previous page."""
    return _param("after", cursor)


def archived() -> Option:
    """Include archived records. There is no "false" form; omit the option instead."""
    return _param("archived", "true")


def id_property(name: str) -> Option:
    """Unique property used as the identifier instead of the record ID."""
    return _param("idProperty", name)


# =============================================================================
# List options
# =============================================================================


def include_filters(include: bool = True) -> Option:
    """Include filter definitions in list responses."""

    def option(request: Request) -> None:
        if include:
            request.add_query_param("includeFilters", "true")

    return option


def memberships_limit(count: int) -> Option:
    return _param("limit", str(int(count)))


def memberships_offset(offset: str) -> Option:
    return _param("offset", offset)
