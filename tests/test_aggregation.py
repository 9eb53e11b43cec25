"""
Tests for grouped summaries and collection statistics (STORY-008).

CHANGELOG:
- 2026-10-09: Add plant/RTU statistics tests (STORY-016)
- 2026-10-04: Initial creation (STORY-008)

TODO:
- None
"""

import random
from types import SimpleNamespace

import pytest

from plantops.models.plant import PlantType
from plantops.services.aggregation import (
    AggregateGroup,
    aggregate_by_key,
    count_by_key,
    plant_stats,
    rtu_stats,
)
from plantops.services.store import PlantStore, RtuStore


def _rec(kind: str, amount: float | None) -> SimpleNamespace:
    return SimpleNamespace(kind=kind, amount=amount)


class TestAggregateByKey:
    """Tests for aggregate_by_key()."""

    def test_empty_input_gives_empty_result(self) -> None:
        assert aggregate_by_key([], lambda r: r.kind, lambda r: r.amount) == []

    def test_groups_in_first_seen_order(self) -> None:
        records = [_rec("b", 1), _rec("a", 2), _rec("b", 3)]
        groups = aggregate_by_key(records, lambda r: r.kind, lambda r: r.amount)
        assert groups == [
            AggregateGroup(key="b", count=2, total=4),
            AggregateGroup(key="a", count=1, total=2),
        ]

    def test_missing_values_count_as_zero(self) -> None:
        records = [_rec("a", None), _rec("a", 5), _rec("a", float("nan"))]
        (group,) = aggregate_by_key(records, lambda r: r.kind, lambda r: r.amount)
        assert group.count == 3
        assert group.total == 5

    def test_enum_keys_unwrapped(self) -> None:
        records = [SimpleNamespace(kind=PlantType.WIND, amount=1)]
        (group,) = aggregate_by_key(records, lambda r: r.kind, lambda r: r.amount)
        assert group.key == "wind"

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_totals_add_up(self, seed: int) -> None:
        rng = random.Random(seed)
        records = [
            _rec(rng.choice("xyz"), rng.choice([None, rng.uniform(0, 100)]))
            for _ in range(50)
        ]
        groups = aggregate_by_key(records, lambda r: r.kind, lambda r: r.amount)
        assert sum(g.count for g in groups) == len(records)
        assert sum(g.total for g in groups) == pytest.approx(
            sum(r.amount or 0 for r in records)
        )


class TestCountByKey:
    """Tests for count_by_key()."""

    def test_empty_input(self) -> None:
        assert count_by_key([], lambda r: r) == {}

    def test_tally(self) -> None:
        assert count_by_key(["a", "b", "a"], lambda r: r) == {"a": 2, "b": 1}


class TestCollectionStats:
    """Tests for the plant and RTU statistics builders."""

    def test_plant_stats_shape(self, plant_store: PlantStore) -> None:
        plants = plant_store.list()
        stats = plant_stats(plants)
        assert stats["total"]["count"] == len(plants)
        assert stats["total"]["capacity"] == pytest.approx(
            sum(p.infra.capacity for p in plants)
        )
        assert sum(row["count"] for row in stats["byType"]) == len(plants)
        assert sum(stats["byStatus"].values()) == len(plants)
        assert sum(stats["byContractType"].values()) == len(plants)
        assert stats["byType"][0]["type"] == plants[0].infra.type.value

    def test_plant_stats_empty(self) -> None:
        stats = plant_stats([])
        assert stats["byType"] == []
        assert stats["total"] == {"count": 0, "capacity": 0}

    def test_rtu_stats(self, rtu_store: RtuStore) -> None:
        stats = rtu_stats(rtu_store.list())
        assert stats["total"] == len(rtu_store)
        for key in ("byStatus", "byProtocol", "byManufacturer"):
            assert sum(stats[key].values()) == len(rtu_store)
