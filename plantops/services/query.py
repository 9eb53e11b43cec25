"""
Record query engine: filter, paginate and summarise an in-memory collection.

A ``RecordQueryEngine`` is configured once per record type with the fields
its free-text search covers and the named fields a query may filter on.
``run()`` takes the full collection (insertion order) and a ``QuerySpec``
and returns a ``PageResult``. The engine never mutates its input and holds
no state between calls, so identical inputs always give identical output.

Pagination is strict: ``page`` must be >= 1 and ``page_size`` >= 1, else
``InvalidInputError``. A page past the end is not an error; it yields an
empty item list with ``total`` and ``total_pages`` unchanged.

CHANGELOG:
- 2026-10-08: Add substring filters for single fields (STORY-014)
- 2026-10-04: Initial creation (STORY-005)

TODO:
- None
"""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from plantops.errors import InvalidInputError
from plantops.services.filters import (
    FieldRef,
    Predicate,
    combine,
    equality_predicate,
    prefix_predicate,
    range_predicate,
    text_predicate,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class QuerySpec:
    """Normalised search, filter and pagination parameters for one listing.

    Keys of ``filters``, ``ranges``, ``prefixes`` and ``contains`` are field
    names the engine was configured with.

    Attributes:
        search: Free-text term matched against the engine's search fields.
        filters: Exact-match values by field name.
        ranges: ``(minimum, maximum)`` inclusive bounds by field name.
        prefixes: Required leading text by field name.
        contains: Case-insensitive substring by field name.
        page: 1-based page number.
        page_size: Items per page.
    """

    search: str | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    ranges: Mapping[str, tuple[float | None, float | None]] = field(default_factory=dict)
    prefixes: Mapping[str, str | None] = field(default_factory=dict)
    contains: Mapping[str, str | None] = field(default_factory=dict)
    page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """One page of matching records.

    Attributes:
        items: Records on this page, in collection order.
        total: Number of matches before pagination.
        page: Requested page number.
        page_size: Requested page size.
        total_pages: ``max(1, ceil(total / page_size))``.
    """

    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for *total* items, never less than 1."""
    return max(1, math.ceil(total / page_size))


class RecordQueryEngine(Generic[T]):
    """Applies a QuerySpec to a collection of records of one type.

    Args:
        search_fields: Fields the free-text ``search`` term is matched against.
        fields: Filterable fields by query name, as dotted paths or callables.

    Example::

        engine = RecordQueryEngine(
            search_fields=["infra.name", "infra.address"],
            fields={"type": "infra.type", "capacity": "infra.capacity"},
        )
        result = engine.run(store.list(), QuerySpec(filters={"type": "solar"}))
    """

    def __init__(
        self,
        search_fields: Sequence[FieldRef],
        fields: Mapping[str, FieldRef],
    ) -> None:
        self._search_fields = list(search_fields)
        self._fields = dict(fields)

    def _field(self, name: str) -> FieldRef:
        try:
            return self._fields[name]
        except KeyError:
            raise InvalidInputError(f"Unknown filter field '{name}'.") from None

    def predicates(self, spec: QuerySpec) -> list[Predicate]:
        """Build the active predicates for *spec*.

        Raises:
            InvalidInputError: On an unknown field name or a non-finite bound.
        """
        built: list[Predicate | None] = [text_predicate(spec.search, self._search_fields)]
        for name, value in spec.filters.items():
            built.append(equality_predicate(self._field(name), value))
        for name, (minimum, maximum) in spec.ranges.items():
            built.append(range_predicate(self._field(name), minimum, maximum))
        for name, prefix in spec.prefixes.items():
            built.append(prefix_predicate(self._field(name), prefix))
        for name, term in spec.contains.items():
            built.append(text_predicate(term, [self._field(name)]))
        return [p for p in built if p is not None]

    def filter(self, records: Sequence[T], spec: QuerySpec) -> list[T]:
        """Return every record matching *spec*, in collection order."""
        matches = combine(self.predicates(spec))
        return [r for r in records if matches(r)]

    def run(self, records: Sequence[T], spec: QuerySpec) -> PageResult[T]:
        """Filter *records* by *spec* and slice out the requested page.

        Args:
            records: Full collection in insertion order. Not modified.
            spec: Query to apply.

        Returns:
            PageResult for the requested page.

        Raises:
            InvalidInputError: If page < 1, page_size < 1, a filter names an
                unknown field, or a range bound is not finite.
        """
        if spec.page < 1:
            raise InvalidInputError("page must be >= 1.")
        if spec.page_size < 1:
            raise InvalidInputError("page size must be >= 1.")

        matched = self.filter(records, spec)
        start = (spec.page - 1) * spec.page_size
        items = matched[start : start + spec.page_size]
        logger.debug(
            "Query matched %d of %d records (page=%d, page_size=%d)",
            len(matched),
            len(records),
            spec.page,
            spec.page_size,
        )
        return PageResult(
            items=items,
            total=len(matched),
            page=spec.page,
            page_size=spec.page_size,
            total_pages=total_pages(len(matched), spec.page_size),
        )
