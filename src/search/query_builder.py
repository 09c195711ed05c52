"""
Search Query Builder

Builds the Elastic-style search document sent to the RadioManager /search
endpoint.

Every query is scoped to one content type through a term filter on the
reserved _rmtype field. Field matches and an optional caller-supplied must
clause are concatenated, never deduplicated.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

TYPE_FIELD: Final[str] = "_rmtype"


def type_filter(filter_type: str) -> dict[str, Any]:
    """Term clause scoping a search to one content type."""
    return {"term": {TYPE_FIELD: filter_type}}


def match_clauses(
    fields: Mapping[str, Any],
    default_must: Any = None,
) -> list[dict[str, Any]]:
    """Build the must list: default_must first, then one match per field.

    Args:
        fields: Field name to exact value
        default_must: Caller-supplied must clause, or list of clauses

    Returns:
        List of must clauses
    """
    if default_must is None:
        clauses: list[Any] = []
    elif isinstance(default_must, list):
        clauses = list(default_must)
    else:
        clauses = [default_must]

    clauses.extend({"match": {key: value}} for key, value in fields.items())
    return clauses


def build_query(
    filter_type: str,
    fields: Mapping[str, Any] | None = None,
    options: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a search document for one content type.

    Args:
        filter_type: Content type tag (e.g. "presenters", "items")
        fields: Field name to exact value, one match clause each
        options: Free-form search options:
            filter: extra filter clauses, followed by the type filter
            query: nested query; query.bool.must is prepended to the field
                matches, other bool and query keys pass through
            sort: sort specification, defaults to []
            size: result size, omitted when not given
            any other key (e.g. min_score) passes through at the top level

    Returns:
        Search document ready to POST to /search
    """
    rest = dict(options or {})
    extra_filter = rest.pop("filter", None) or []
    if not isinstance(extra_filter, list):
        extra_filter = [extra_filter]
    query = dict(rest.pop("query", None) or {})
    bool_query = dict(query.pop("bool", None) or {})
    sort = rest.pop("sort", None)
    size = rest.pop("size", None)

    default_must = bool_query.pop("must", None)
    bool_filter = bool_query.pop("filter", None) or []
    if not isinstance(bool_filter, list):
        bool_filter = [bool_filter]

    document: dict[str, Any] = {}
    if size is not None:
        document["size"] = size
    document["query"] = {
        "bool": {
            **bool_query,
            "filter": [*bool_filter, *extra_filter, type_filter(filter_type)],
            "must": match_clauses(fields or {}, default_must),
        },
        **query,
    }
    document["sort"] = sort if sort is not None else []
    document.update(rest)
    return document
