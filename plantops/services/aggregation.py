"""
Grouped summaries over record collections.

``aggregate_by_key`` produces one ``AggregateGroup`` per distinct key in
first-seen order, with a count and a running total of a numeric value.
``count_by_key`` is the plain tally. Neither mutates its input, and an
empty input yields an empty result.

The listing statistics for plants and RTUs are built on top of these two
functions; the STAT_CONFIG dicts name the key used by each summary.

CHANGELOG:
- 2026-10-09: Add plant and RTU statistics builders (STORY-016)
- 2026-10-04: Initial creation (STORY-008)

TODO:
- None
"""

import math
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import Any

from plantops.models.plant import Plant
from plantops.models.rtu import Rtu
from plantops.services.filters import normalise


@dataclass(frozen=True)
class AggregateGroup:
    """Summary of the records that share one key.

    Attributes:
        key: The grouping key (enum members are unwrapped to their value).
        count: Number of records with this key.
        total: Sum of the value function over those records.
    """

    key: Hashable
    count: int
    total: float


def _coerce(value: Any) -> float:
    """Map a value to a number; missing, non-numeric and non-finite read as 0."""
    if value is None or isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    if not math.isfinite(value):
        return 0
    return value


def aggregate_by_key(
    records: Iterable[Any],
    key_fn: Callable[[Any], Hashable],
    value_fn: Callable[[Any], Any],
) -> list[AggregateGroup]:
    """Group records by key and sum a value per group.

    Args:
        records: Records to summarise.
        key_fn: Extracts the grouping key.
        value_fn: Extracts the value summed; None or missing counts as 0.

    Returns:
        list[AggregateGroup]: One entry per distinct key, in first-seen order.
    """
    counts: dict[Hashable, int] = {}
    totals: dict[Hashable, float] = {}
    for record in records:
        key = normalise(key_fn(record))
        counts[key] = counts.get(key, 0) + 1
        totals[key] = totals.get(key, 0) + _coerce(value_fn(record))
    return [AggregateGroup(key=k, count=counts[k], total=totals[k]) for k in counts]


def count_by_key(
    records: Iterable[Any],
    key_fn: Callable[[Any], Hashable],
) -> dict[Hashable, int]:
    """Tally records per key, in first-seen order."""
    counts: dict[Hashable, int] = {}
    for record in records:
        key = normalise(key_fn(record))
        counts[key] = counts.get(key, 0) + 1
    return counts


# ---------------------------------------------------------------------------
# Collection statistics
# ---------------------------------------------------------------------------


PLANT_STAT_CONFIG: dict[str, Callable[[Plant], Hashable]] = {
    "byStatus": lambda p: p.status,
    "byContractType": lambda p: p.contract.contract_type,
}

RTU_STAT_CONFIG: dict[str, Callable[[Rtu], Hashable]] = {
    "byStatus": lambda r: r.status,
    "byProtocol": lambda r: r.communication_protocol,
    "byManufacturer": lambda r: r.manufacturer,
}


def plant_stats(plants: list[Plant]) -> dict[str, Any]:
    """Capacity-by-type groups plus status and contract-type tallies.

    Returns:
        dict: ``byType`` (list of type/count/total_capacity), ``byStatus``,
        ``byContractType`` and ``total`` (count and capacity).
    """
    by_type = aggregate_by_key(plants, lambda p: p.infra.type, lambda p: p.infra.capacity)
    stats: dict[str, Any] = {
        "byType": [
            {"type": g.key, "count": g.count, "total_capacity": g.total}
            for g in by_type
        ],
    }
    for name, key_fn in PLANT_STAT_CONFIG.items():
        stats[name] = count_by_key(plants, key_fn)
    stats["total"] = {
        "count": sum(g.count for g in by_type),
        "capacity": sum(g.total for g in by_type),
    }
    return stats


def rtu_stats(rtus: list[Rtu]) -> dict[str, Any]:
    """Status, protocol and manufacturer tallies plus the device total."""
    stats: dict[str, Any] = {
        name: count_by_key(rtus, key_fn) for name, key_fn in RTU_STAT_CONFIG.items()
    }
    stats["total"] = len(rtus)
    return stats
