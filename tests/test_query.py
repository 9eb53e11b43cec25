"""
Tests for the record query engine (STORY-005).

Covers filter correctness, exact pagination, the past-the-end boundary,
strict page validation and read idempotence, using both small synthetic
records and seeded plant records.

CHANGELOG:
- 2026-10-08: Add substring filter tests (STORY-014)
- 2026-10-04: Initial creation (STORY-005)

TODO:
- None
"""

import math
import random
from dataclasses import dataclass

import pytest

from plantops.errors import InvalidInputError
from plantops.models.plant import Plant, PlantType
from plantops.services.query import PageResult, QuerySpec, RecordQueryEngine, total_pages
from plantops.services.seed import generate_plants
from plantops.services.store import PlantStore


@dataclass(frozen=True)
class Row:
    id: int
    name: str
    kind: str
    value: float | None


ROW_ENGINE = RecordQueryEngine(
    search_fields=["name"],
    fields={"kind": "kind", "value": "value", "name": "name"},
)


def _rows(n: int) -> list[Row]:
    kinds = ["a", "b", "c"]
    return [Row(id=i, name=f"row-{i:02d}", kind=kinds[i % 3], value=float(i)) for i in range(n)]


def _solar_plants(n: int) -> list[Plant]:
    plants = generate_plants(n, random.Random(3))
    return [
        p.model_copy(update={"infra": p.infra.model_copy(update={"type": PlantType.SOLAR})})
        for p in plants
    ]


PLANT_ENGINE = RecordQueryEngine(
    search_fields=["infra.name", "infra.address"],
    fields={"type": "infra.type", "capacity": "infra.capacity"},
)


class TestExampleScenarios:
    """Worked examples for plant listings."""

    def test_no_match_gives_one_empty_page(self) -> None:
        """25 solar plants filtered by wind yield no items and one page."""
        result = PLANT_ENGINE.run(
            _solar_plants(25), QuerySpec(filters={"type": "wind"}, page=1, page_size=10)
        )
        assert result.items == []
        assert result.total == 0
        assert result.total_pages == 1

    def test_last_partial_page(self) -> None:
        """25 records at 10 per page: page 3 holds records 20-24."""
        plants = _solar_plants(25)
        result = PLANT_ENGINE.run(plants, QuerySpec(page=3, page_size=10))
        assert result.items == plants[20:25]
        assert result.total == 25
        assert result.total_pages == 3


class TestFilterCorrectness:
    """A record is returned iff it satisfies every active predicate."""

    def test_equality_and_range_combined(self) -> None:
        rows = _rows(30)
        spec = QuerySpec(filters={"kind": "a"}, ranges={"value": (3, 12)}, page_size=100)
        result = ROW_ENGINE.run(rows, spec)
        expected = [r for r in rows if r.kind == "a" and 3 <= r.value <= 12]
        assert result.items == expected
        assert result.total == len(expected)

    def test_search_is_case_insensitive_substring(self) -> None:
        result = ROW_ENGINE.run(_rows(30), QuerySpec(search="ROW-1", page_size=100))
        assert [r.id for r in result.items] == list(range(10, 20))

    def test_prefix_filter(self) -> None:
        result = ROW_ENGINE.run(_rows(30), QuerySpec(prefixes={"name": "row-2"}, page_size=100))
        assert [r.id for r in result.items] == list(range(20, 30))

    def test_contains_filter(self) -> None:
        result = ROW_ENGINE.run(_rows(30), QuerySpec(contains={"name": "-0"}, page_size=100))
        assert [r.id for r in result.items] == list(range(0, 10))

    def test_missing_value_excluded_from_range(self) -> None:
        rows = [Row(1, "x", "a", None), Row(2, "y", "a", 5.0)]
        result = ROW_ENGINE.run(rows, QuerySpec(ranges={"value": (None, 10)}))
        assert [r.id for r in result.items] == [2]

    def test_all_sentinel_disables_filter(self) -> None:
        result = ROW_ENGINE.run(_rows(9), QuerySpec(filters={"kind": "all"}, page_size=100))
        assert result.total == 9

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            ROW_ENGINE.run(_rows(3), QuerySpec(filters={"colour": "red"}))


class TestPagination:
    """Page counts, concatenation and boundaries."""

    @pytest.mark.parametrize("n", [0, 1, 9, 10, 11, 47])
    @pytest.mark.parametrize("page_size", [1, 3, 10])
    def test_pages_concatenate_to_full_result(self, n: int, page_size: int) -> None:
        rows = _rows(n)
        first = ROW_ENGINE.run(rows, QuerySpec(page=1, page_size=page_size))
        assert first.total_pages == max(1, math.ceil(n / page_size))

        collected: list[Row] = []
        for page in range(1, first.total_pages + 1):
            collected.extend(ROW_ENGINE.run(rows, QuerySpec(page=page, page_size=page_size)).items)
        assert collected == rows

    def test_page_past_end_is_empty_not_error(self) -> None:
        rows = _rows(12)
        result = ROW_ENGINE.run(rows, QuerySpec(page=9, page_size=5))
        assert result == PageResult(items=[], total=12, page=9, page_size=5, total_pages=3)

    @pytest.mark.parametrize("page", [0, -1])
    def test_page_below_one_rejected(self, page: int) -> None:
        with pytest.raises(InvalidInputError):
            ROW_ENGINE.run(_rows(3), QuerySpec(page=page))

    @pytest.mark.parametrize("page_size", [0, -5])
    def test_page_size_below_one_rejected(self, page_size: int) -> None:
        with pytest.raises(InvalidInputError):
            ROW_ENGINE.run(_rows(3), QuerySpec(page_size=page_size))

    def test_total_pages_minimum_one(self) -> None:
        assert total_pages(0, 10) == 1
        assert total_pages(21, 10) == 3


class TestReadOnly:
    """Queries never change their input or carry state between calls."""

    def test_identical_calls_identical_results(self, plant_store: PlantStore) -> None:
        spec = QuerySpec(search="e", ranges={"capacity": (1000, None)}, page=1, page_size=4)
        assert PLANT_ENGINE.run(plant_store.list(), spec) == PLANT_ENGINE.run(
            plant_store.list(), spec
        )

    def test_source_collection_untouched(self) -> None:
        rows = _rows(15)
        snapshot = list(rows)
        ROW_ENGINE.run(rows, QuerySpec(filters={"kind": "b"}, page=2, page_size=2))
        assert rows == snapshot
