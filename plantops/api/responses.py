"""
Response envelope and query-parameter helpers shared by the routers.

Successful responses are ``{"status": "success", "data": ..., "meta": ...}``;
listing meta carries ``total``, ``page``, ``limit``, ``totalPages`` and the
echoed filters. Error bodies are produced by the exception handlers in
``plantops.api.main``.

CHANGELOG:
- 2026-10-06: Add limit cap and closed-set parameter parsing (STORY-009)
- 2026-10-04: Initial creation (STORY-005)

TODO:
- None
"""

from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

from plantops.errors import InvalidInputError
from plantops.services.filters import ALL_SENTINEL
from plantops.services.query import PageResult

E = TypeVar("E", bound=Enum)


def dump(record: BaseModel) -> dict[str, Any]:
    """JSON-compatible dict of a record."""
    return record.model_dump(mode="json")


def success(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """Wrap *data* in the success envelope."""
    body: dict[str, Any] = {"status": "success", "data": data}
    if meta is not None:
        body["meta"] = meta
    return body


def error_body(message: str) -> dict[str, str]:
    return {"status": "error", "message": message}


def page_response(result: PageResult, filters: dict[str, Any], **extra: Any) -> dict[str, Any]:
    """Success envelope for one page of records.

    Args:
        result: Page produced by the query engine.
        filters: Request filters echoed back in ``meta.filters``.
        **extra: Additional meta keys (e.g. ``filterType``).
    """
    meta: dict[str, Any] = {
        "total": result.total,
        "page": result.page,
        "limit": result.page_size,
        "totalPages": result.total_pages,
        "filters": filters,
    }
    meta.update(extra)
    return success([dump(item) for item in result.items], meta)


def resolve_limit(limit: int | None, default: int, maximum: int) -> int:
    """Pick the page size for a request.

    Returns *default* when *limit* is omitted. Values below 1 pass through
    so the query engine rejects them.

    Raises:
        InvalidInputError: If *limit* exceeds *maximum*.
    """
    if limit is None:
        return default
    if limit > maximum:
        raise InvalidInputError(f"limit must be <= {maximum}.")
    return limit


def parse_choice(enum_cls: type[E], value: str | None, param: str) -> E | None:
    """Parse a closed-set query parameter.

    Args:
        enum_cls: Enum the value must belong to.
        value: Raw query value; None, blank and ``"all"`` mean no filter.
        param: Parameter name used in the error message.

    Returns:
        The enum member, or None when the filter is disabled.

    Raises:
        InvalidInputError: If *value* is not a member of *enum_cls*.
    """
    if value is None or not value.strip() or value == ALL_SENTINEL:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise InvalidInputError(
            f"Invalid {param} '{value}'. Expected one of: {allowed}."
        ) from None
