"""
Composable record predicates for listing queries.

Each builder turns one piece of a query (a search term, an equality
filter, a numeric range, an address prefix) into a ``Predicate``: a pure
``record -> bool`` test tagged with a relative evaluation cost. A builder
returns ``None`` when its input makes it a no-op (empty term, absent value,
the ``"all"`` sentinel, both range bounds absent), so callers only ever
combine active predicates.

Fields are addressed either by a dotted attribute path (``"infra.name"``)
or by a callable taking the record. A field that cannot be resolved on a
record reads as ``None``.

CHANGELOG:
- 2026-10-08: Reject non-finite range bounds (STORY-014)
- 2026-10-04: Initial creation (STORY-005)

TODO:
- None
"""

import math
import operator
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from plantops.errors import InvalidInputError

FieldRef = str | Callable[[Any], Any]
"""A dotted attribute path or a callable that extracts a value from a record."""

ALL_SENTINEL = "all"
"""Filter value that disables an equality filter."""

# Relative evaluation costs. Cheaper predicates run first.
COST_EQUALITY = 10
COST_RANGE = 20
COST_PREFIX = 30
COST_TEXT = 40


@dataclass(frozen=True)
class Predicate:
    """A named, cost-tagged record test.

    Attributes:
        name: Human-readable label, used in logs and tests.
        cost: Relative evaluation cost; lower runs earlier.
        test: Pure function returning True when the record matches.
    """

    name: str
    cost: int
    test: Callable[[Any], bool]

    def __call__(self, record: Any) -> bool:
        return self.test(record)


# ---------------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------------


def make_getter(field: FieldRef) -> Callable[[Any], Any]:
    """Build a value extractor for a field reference.

    Args:
        field: Dotted attribute path or callable.

    Returns:
        Callable returning the field value, or None when any step of the
        path is missing.
    """
    if callable(field):
        return field
    getter = operator.attrgetter(field)

    def _get(record: Any) -> Any:
        try:
            return getter(record)
        except AttributeError:
            return None

    return _get


def normalise(value: Any) -> Any:
    """Unwrap enum members to their plain values."""
    if isinstance(value, Enum):
        return value.value
    return value


def _field_label(field: FieldRef) -> str:
    return field if isinstance(field, str) else getattr(field, "__name__", "field")


# ---------------------------------------------------------------------------
# Predicate builders
# ---------------------------------------------------------------------------


def text_predicate(term: str | None, fields: Sequence[FieldRef]) -> Predicate | None:
    """Case-insensitive substring match against any of several fields.

    Args:
        term: Search term. Blank or None makes the predicate a no-op.
        fields: Fields searched; a record matches if ANY contains the term.

    Returns:
        Predicate, or None when inactive.
    """
    if term is None or not term.strip() or not fields:
        return None
    needle = term.strip().casefold()
    getters = [make_getter(f) for f in fields]

    def _test(record: Any) -> bool:
        for get in getters:
            value = normalise(get(record))
            if value is not None and needle in str(value).casefold():
                return True
        return False

    label = ",".join(_field_label(f) for f in fields)
    return Predicate(name=f"text({label})", cost=COST_TEXT, test=_test)


def equality_predicate(field: FieldRef, value: Any) -> Predicate | None:
    """Exact match against a closed-set or scalar field.

    Enum members on either side compare by their plain value.

    Args:
        field: Field compared.
        value: Expected value. None or ``"all"`` makes the predicate a no-op.

    Returns:
        Predicate, or None when inactive.
    """
    expected = normalise(value)
    if expected is None or expected == ALL_SENTINEL:
        return None
    get = make_getter(field)

    def _test(record: Any) -> bool:
        return normalise(get(record)) == expected

    return Predicate(
        name=f"eq({_field_label(field)}={expected!r})",
        cost=COST_EQUALITY,
        test=_test,
    )


def range_predicate(
    field: FieldRef,
    minimum: float | None = None,
    maximum: float | None = None,
) -> Predicate | None:
    """Inclusive numeric bounds on one field.

    An absent bound is unbounded on that side. A record whose field is
    missing or non-numeric never satisfies an active range.

    Args:
        field: Numeric field tested.
        minimum: Inclusive lower bound, or None.
        maximum: Inclusive upper bound, or None.

    Returns:
        Predicate, or None when both bounds are absent.

    Raises:
        InvalidInputError: If a bound is NaN or infinite.
    """
    if minimum is None and maximum is None:
        return None
    for bound in (minimum, maximum):
        if bound is not None and not math.isfinite(bound):
            raise InvalidInputError(
                f"Range bound for '{_field_label(field)}' must be a finite number."
            )
    low = -math.inf if minimum is None else minimum
    high = math.inf if maximum is None else maximum
    get = make_getter(field)

    def _test(record: Any) -> bool:
        value = get(record)
        if isinstance(value, bool) or not isinstance(value, int | float):
            return False
        return low <= value <= high

    return Predicate(
        name=f"range({_field_label(field)}:{low}..{high})",
        cost=COST_RANGE,
        test=_test,
    )


def prefix_predicate(field: FieldRef, prefix: str | None) -> Predicate | None:
    """Leading-text match for hierarchical fields such as addresses.

    Args:
        field: Text field tested.
        prefix: Required prefix. Blank or None makes the predicate a no-op.

    Returns:
        Predicate, or None when inactive.
    """
    if prefix is None or not prefix.strip():
        return None
    head = prefix.strip()
    get = make_getter(field)

    def _test(record: Any) -> bool:
        value = get(record)
        return isinstance(value, str) and value.startswith(head)

    return Predicate(
        name=f"prefix({_field_label(field)}={head!r})",
        cost=COST_PREFIX,
        test=_test,
    )


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def combine(predicates: Iterable[Predicate | None]) -> Callable[[Any], bool]:
    """AND together the active predicates, cheapest first.

    Args:
        predicates: Predicates to combine; None entries are skipped.

    Returns:
        A record test that is True iff every active predicate holds. With no
        active predicates every record matches.
    """
    active = sorted((p for p in predicates if p is not None), key=lambda p: p.cost)

    def _matches(record: Any) -> bool:
        return all(p(record) for p in active)

    return _matches
