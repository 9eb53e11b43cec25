"""
In-memory record stores for plants and RTUs.

``PlantStore`` and ``RtuStore`` are the single owners of their collections.
Both keep records in insertion order and hold immutable pydantic models:
every create / update / delete swaps a whole record in or out, so readers
never see a half-applied change. All operations are synchronous and run
to completion without suspending.

Partial updates follow one rule everywhere: an omitted field keeps its
value, an explicit ``None`` clears a nullable field, and ``None`` sent for
a non-nullable field is ignored. Plant sections (``infra``, ``monitoring``,
``contract``) merge independently of each other; list-valued fields are
replaced, never merged element-wise.

Plant ids come from a high-water mark and RTU ids from a set of issued
ids, so no id is ever handed out twice in a process lifetime.

CHANGELOG:
- 2026-10-14: Store-wide control channel ids; RTU plant_name only from the link (STORY-021)
- 2026-10-11: Add RtuStore.unlink_plant / relabel_plant (STORY-019)
- 2026-10-05: Per-section plant merge and explicit-null handling (STORY-007)
- 2026-10-03: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

import logging
import secrets
import types
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, Union, get_args

from pydantic import BaseModel, ValidationError

from plantops.errors import InvalidInputError, RecordNotFoundError
from plantops.models.plant import (
    Contract,
    ControlChannel,
    Infra,
    Inverter,
    KpxIdentifier,
    Monitoring,
    Plant,
    PlantCreate,
    PlantUpdate,
)
from plantops.models.rtu import Rtu, RtuCreate, RtuUpdate

logger = logging.getLogger(__name__)

PLANT_SECTIONS: dict[str, type[BaseModel]] = {
    "infra": Infra,
    "monitoring": Monitoring,
    "contract": Contract,
}
"""Nested plant sections merged field by field on update."""

RTU_TOKEN_BYTES = 4
"""Random bytes in a created RTU id (8 hex characters)."""

CONTROL_ID_BASE = 50
"""Control channel ids are allocated upward from here, one sequence per store."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


# ---------------------------------------------------------------------------
# Merge helpers
# ---------------------------------------------------------------------------


def is_nullable(model_cls: type[BaseModel], name: str) -> bool:
    """True if field *name* of *model_cls* accepts None."""
    annotation = model_cls.model_fields[name].annotation
    if annotation is None or annotation is type(None):
        return True
    origin = getattr(annotation, "__origin__", None)
    if isinstance(annotation, types.UnionType) or origin is Union:
        return type(None) in get_args(annotation)
    return False


def merge_fields(
    model_cls: type[BaseModel],
    current: dict[str, Any],
    changes: dict[str, Any],
) -> dict[str, Any]:
    """Apply *changes* over *current* using the partial-update null rule.

    Args:
        model_cls: Stored model the data belongs to.
        current: Current field values.
        changes: Fields present in the request.

    Returns:
        dict: Merged field values. Neither input is modified.
    """
    merged = dict(current)
    for name, value in changes.items():
        if name not in model_cls.model_fields:
            continue
        if value is None and not is_nullable(model_cls, name):
            continue
        merged[name] = value
    return merged


def _validate(model_cls: type[BaseModel], data: dict[str, Any]) -> Any:
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Plant store
# ---------------------------------------------------------------------------


class PlantStore:
    """Owner of the plant collection.

    Args:
        plants: Initial records, kept in the given order.
        clock: Returns the current UTC time for ``modified_at`` stamps.

    Raises:
        ValueError: If two initial records share an id.
    """

    def __init__(
        self,
        plants: Iterable[Plant] = (),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._records: dict[int, Plant] = {}
        for plant in plants:
            if plant.id in self._records:
                raise ValueError(f"duplicate plant id {plant.id}")
            self._records[plant.id] = plant
        self._last_id = max(self._records, default=0)
        self._last_control_id = max(
            (c.id for p in self._records.values() for c in p.control),
            default=CONTROL_ID_BASE,
        )

    def __len__(self) -> int:
        return len(self._records)

    def list(self) -> list[Plant]:
        """Snapshot of every plant in insertion order."""
        return list(self._records.values())

    def find(self, plant_id: int) -> Plant | None:
        return self._records.get(plant_id)

    def get(self, plant_id: int) -> Plant:
        """Return the plant with *plant_id*.

        Raises:
            RecordNotFoundError: If no such plant exists.
        """
        plant = self._records.get(plant_id)
        if plant is None:
            raise RecordNotFoundError("plant", plant_id)
        return plant

    def _allocate_id(self) -> int:
        self._last_id += 1
        return self._last_id

    def _allocate_control_id(self) -> int:
        self._last_control_id += 1
        return self._last_control_id

    def create(self, payload: PlantCreate) -> Plant:
        """Build and insert a new plant from a create request.

        Missing nested sections get defaults derived from the new id and the
        installed capacity: one inverter and one control channel covering
        the full capacity.

        Returns:
            Plant: The stored record.
        """
        plant_id = self._allocate_id()
        now = self._clock()
        infra_in = payload.infra

        if infra_in.inverter:
            share = infra_in.capacity / len(infra_in.inverter)
            inverters = [
                Inverter(
                    id=i + 1,
                    capacity=inv.capacity or share,
                    tilt=inv.tilt,
                    azimuth=inv.azimuth,
                    install_type=inv.install_type,
                    module_type=inv.module_type,
                )
                for i, inv in enumerate(infra_in.inverter)
            ]
        else:
            inverters = [Inverter(id=1, capacity=infra_in.capacity)]

        controls_in = payload.control or [None]
        control = [
            ControlChannel(
                id=self._allocate_control_id(),
                company=c.company if c else 1,
                control_type=c.control_type if c else 1,
                controllable_capacity=infra_in.capacity,
                rtu_id=payload.monitoring.rtu_id,
                priority=c.priority if c else 1,
                resource=plant_id,
            )
            for c in controls_in
        ]

        plant = Plant(
            id=plant_id,
            modified_at=now,
            status=payload.status,
            infra=Infra(
                id=plant_id,
                carrier_fk=infra_in.carrier_fk or 10000 + plant_id,
                name=infra_in.name,
                type=infra_in.type,
                address=infra_in.address,
                latitude=infra_in.latitude,
                longitude=infra_in.longitude,
                altitude=infra_in.altitude,
                capacity=infra_in.capacity,
                install_date=infra_in.install_date,
                kpx_identifier=KpxIdentifier(
                    id=plant_id, kpx_cbp_gen_id=infra_in.kpx_cbp_gen_id
                ),
                inverter=inverters,
            ),
            monitoring=Monitoring(
                id=200 + plant_id,
                company=payload.monitoring.company,
                rtu_id=payload.monitoring.rtu_id,
                resource=plant_id,
            ),
            control=control,
            contract=Contract(
                id=plant_id,
                modified_at=now,
                resource=plant_id,
                **payload.contract.model_dump(),
            ),
            substation=payload.substation,
            dl=payload.dl,
            fixed_contract_price=payload.fixed_contract_price,
            guaranteed_capacity=payload.guaranteed_capacity,
        )
        self._records[plant_id] = plant
        logger.info("Plant created: id=%d name=%s", plant_id, plant.infra.name)
        return plant

    def update(self, plant_id: int, patch: PlantUpdate) -> Plant:
        """Merge a partial update into an existing plant.

        Sections present in *patch* are merged field by field; absent
        sections are untouched. ``contract.modified_at`` is bumped when the
        contract is patched and ``modified_at`` on every update.

        Raises:
            RecordNotFoundError: If no such plant exists. Nothing is applied.
        """
        current = self.get(plant_id)
        changes = patch.model_dump(exclude_unset=True)
        now = self._clock()
        data = current.model_dump()

        for section, model_cls in PLANT_SECTIONS.items():
            section_changes = changes.pop(section, None)
            if section_changes is None:
                continue
            data[section] = merge_fields(model_cls, data[section], section_changes)
            if section == "contract":
                data[section]["modified_at"] = now

        data = merge_fields(Plant, data, changes)
        data["modified_at"] = now
        updated: Plant = _validate(Plant, data)
        self._records[plant_id] = updated
        self._last_control_id = max(
            [self._last_control_id, *(c.id for c in updated.control)]
        )
        logger.info("Plant updated: id=%d fields=%s", plant_id, sorted(patch.model_fields_set))
        return updated

    def delete(self, plant_id: int) -> Plant:
        """Remove a plant and return the removed record.

        Raises:
            RecordNotFoundError: If no such plant exists.
        """
        plant = self.get(plant_id)
        del self._records[plant_id]
        logger.info("Plant deleted: id=%d", plant_id)
        return plant


# ---------------------------------------------------------------------------
# RTU store
# ---------------------------------------------------------------------------


class RtuStore:
    """Owner of the RTU collection.

    Links to plants are checked against the given PlantStore on create and
    update; ``plant_name`` is always taken from the linked plant and is not
    writable through the request bodies.

    Args:
        plants: Plant store used to resolve ``plant_id`` links.
        rtus: Initial records, kept in the given order.
        clock: Returns the current UTC time for defaulted timestamps.
        token_factory: Returns a candidate id for a created RTU.

    Raises:
        ValueError: If two initial records share an id.
    """

    def __init__(
        self,
        plants: PlantStore,
        rtus: Iterable[Rtu] = (),
        clock: Callable[[], datetime] = _utcnow,
        token_factory: Callable[[], str] = lambda: secrets.token_hex(RTU_TOKEN_BYTES),
    ) -> None:
        self._plants = plants
        self._clock = clock
        self._token_factory = token_factory
        self._records: dict[str, Rtu] = {}
        for rtu in rtus:
            if rtu.id in self._records:
                raise ValueError(f"duplicate RTU id {rtu.id}")
            self._records[rtu.id] = rtu
        self._issued: set[str] = set(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def list(self) -> list[Rtu]:
        """Snapshot of every RTU in insertion order."""
        return list(self._records.values())

    def find(self, rtu_id: str) -> Rtu | None:
        return self._records.get(rtu_id)

    def get(self, rtu_id: str) -> Rtu:
        """Return the RTU with *rtu_id*.

        Raises:
            RecordNotFoundError: If no such RTU exists.
        """
        rtu = self._records.get(rtu_id)
        if rtu is None:
            raise RecordNotFoundError("rtu", rtu_id)
        return rtu

    def _allocate_id(self) -> str:
        while True:
            candidate = self._token_factory()
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate

    def _plant_name(self, plant_id: int) -> str:
        plant = self._plants.find(plant_id)
        if plant is None:
            raise InvalidInputError(f"Linked plant '{plant_id}' does not exist.")
        return plant.infra.name

    def create(self, payload: RtuCreate) -> Rtu:
        """Register a new RTU.

        Raises:
            InvalidInputError: If ``plant_id`` names an unknown plant.
        """
        plant_name = None
        if payload.plant_id is not None:
            plant_name = self._plant_name(payload.plant_id)
        rtu_id = self._allocate_id()
        now = self._clock()
        data = payload.model_dump()
        data.update(
            id=rtu_id,
            plant_name=plant_name,
            serial_number=payload.serial_number or f"SN-{rtu_id.upper()}",
            installation_date=payload.installation_date or now.date(),
            last_connection=payload.last_connection or now,
        )
        rtu: Rtu = _validate(Rtu, data)
        self._records[rtu_id] = rtu
        logger.info("RTU created: id=%s name=%s plant_id=%s", rtu_id, rtu.name, rtu.plant_id)
        return rtu

    def update(self, rtu_id: str, patch: RtuUpdate) -> Rtu:
        """Merge a partial update into an existing RTU.

        Setting ``plant_id`` re-derives ``plant_name``; clearing it clears
        both.

        Raises:
            RecordNotFoundError: If no such RTU exists. Nothing is applied.
            InvalidInputError: If ``plant_id`` names an unknown plant.
        """
        current = self.get(rtu_id)
        changes = patch.model_dump(exclude_unset=True)
        if "plant_id" in changes:
            plant_id = changes["plant_id"]
            changes["plant_name"] = None if plant_id is None else self._plant_name(plant_id)
        data = merge_fields(Rtu, current.model_dump(), changes)
        updated: Rtu = _validate(Rtu, data)
        self._records[rtu_id] = updated
        logger.info("RTU updated: id=%s fields=%s", rtu_id, sorted(patch.model_fields_set))
        return updated

    def delete(self, rtu_id: str) -> Rtu:
        """Remove an RTU and return the removed record.

        Raises:
            RecordNotFoundError: If no such RTU exists.
        """
        rtu = self.get(rtu_id)
        del self._records[rtu_id]
        logger.info("RTU deleted: id=%s", rtu_id)
        return rtu

    def unlink_plant(self, plant_id: int) -> list[Rtu]:
        """Clear the plant link on every RTU linked to *plant_id*.

        Returns:
            list[Rtu]: The updated records.
        """
        return self._replace_link(plant_id, None, None)

    def relabel_plant(self, plant_id: int, plant_name: str) -> list[Rtu]:
        """Refresh ``plant_name`` on every RTU linked to *plant_id*."""
        return self._replace_link(plant_id, plant_id, plant_name)

    def _replace_link(
        self, plant_id: int, new_id: int | None, new_name: str | None
    ) -> list[Rtu]:
        changed: list[Rtu] = []
        for rtu_id, rtu in self._records.items():
            if rtu.plant_id != plant_id or (
                rtu.plant_id == new_id and rtu.plant_name == new_name
            ):
                continue
            updated = rtu.model_copy(update={"plant_id": new_id, "plant_name": new_name})
            self._records[rtu_id] = updated
            changed.append(updated)
        if changed:
            logger.info(
                "Relinked %d RTU(s) from plant %d (now plant_id=%s)",
                len(changed),
                plant_id,
                new_id,
            )
        return changed
