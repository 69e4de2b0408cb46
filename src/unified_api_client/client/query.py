"""
unified_api_client.client.query

Query-string serialization for request paths.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from urllib.parse import urlencode

Scalar = str | int | float | bool
QueryPayload = str | Mapping[str, Scalar | Sequence[Scalar] | None]


def _scalar(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def stringify_query(query: QueryPayload | None) -> str:
    """
    Strings pass through (gaining a leading `?`); mappings repeat the key once
    per element of a list value, in order. `None` values are dropped.
    """

    if query is None:
        return ""
    if isinstance(query, str):
        return query if query.startswith("?") else "?" + query

    pairs: list[tuple[str, str]] = []
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _scalar(v)) for v in value)
        else:
            pairs.append((key, _scalar(value)))
    return "?" + urlencode(pairs)
