"""Query Options: parses the JSON-Server query string into pagination, sort and filters.

Invariants:
    - offset >= 0 and max >= 0 for any input; unparsable _start/_end count as 0
    - order is always "asc" or "desc"
    - Keys prefixed with "_" and the reserved id key never become filters
    - A repeated key becomes a list filter, in the order the values were sent
    - A malformed _filters value fails the whole parse (InvalidQueryOptionsError)

Design Decisions:
    - Pure function over (key, value) pairs: no Starlette import, callers pass
      QueryParams or any ordered pair iterable
    - Filter values are collected, never interpreted; matching semantics belong
      to the repository
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping
from urllib.parse import unquote

from rest_dialect.core.errors import InvalidQueryOptionsError

START_PARAM = "_start"
END_PARAM = "_end"
SORT_PARAM = "_sort"
ORDER_PARAM = "_order"
FILTERS_PARAM = "_filters"
ID_PARAM = ":id"

ORDER_ASC = "asc"
ORDER_DESC = "desc"


@dataclass(frozen=True)
class QueryOptions:
    """Pagination, sorting and filtering for count() and read_all()."""
    sort: str = ""
    order: str = ORDER_ASC
    offset: int = 0
    max: int = 0
    filters: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}),
    )


def parse_options(params, id_param: str = ID_PARAM) -> QueryOptions:
    """Build QueryOptions from query parameters.

    params is either an object exposing multi_items() (Starlette QueryParams)
    or an iterable of (key, value) pairs.
    """
    pairs = _as_pairs(params)
    values: dict[str, list[str]] = {}
    for key, value in pairs:
        values.setdefault(key, []).append(value)

    start = _to_int(_first(values, START_PARAM))
    end = _to_int(_first(values, END_PARAM))

    return QueryOptions(
        sort=_first(values, SORT_PARAM),
        order=_parse_order(_first(values, ORDER_PARAM)),
        offset=max(0, start),
        max=max(0, end - start),
        filters=MappingProxyType(_parse_filters(values, id_param)),
    )


def _as_pairs(params) -> list[tuple[str, str]]:
    if hasattr(params, "multi_items"):
        return list(params.multi_items())
    if isinstance(params, Mapping):
        pairs = []
        for key, value in params.items():
            if isinstance(value, (list, tuple)):
                pairs.extend((key, v) for v in value)
            else:
                pairs.append((key, value))
        return pairs
    return list(params)


def _first(values: dict[str, list[str]], key: str) -> str:
    found = values.get(key)
    return found[0] if found else ""


def _to_int(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        return 0


def _parse_order(raw: str) -> str:
    order = raw.lower()
    if not order:
        return ORDER_ASC
    if order not in (ORDER_ASC, ORDER_DESC):
        raise InvalidQueryOptionsError(
            f"invalid query options: _order must be '{ORDER_ASC}' or '{ORDER_DESC}', got '{raw}'",
        )
    return order


def _parse_filters(
    values: dict[str, list[str]], id_param: str,
) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    raw = _first(values, FILTERS_PARAM)
    if raw:
        filters.update(_decode_filters(raw))

    for key, found in values.items():
        if key.startswith("_") or key == id_param:
            continue
        filters[key] = found[0] if len(found) == 1 else list(found)
    return filters


def _decode_filters(raw: str) -> dict[str, Any]:
    try:
        decoded = json.loads(unquote(raw))
    except ValueError as e:
        raise InvalidQueryOptionsError(
            f"invalid query options: _filters is not valid JSON ({e})",
        ) from e
    if not isinstance(decoded, dict):
        raise InvalidQueryOptionsError(
            "invalid query options: _filters must be a JSON object",
        )
    return decoded
