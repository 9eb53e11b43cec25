"""
Pydantic models for power-plant records.

Defines the stored ``Plant`` record with its nested sections (infra,
monitoring, control, contract), the closed-set enums for plant type and
operating status, and the request payloads used for create and partial
update.

Stored records are frozen: the PlantStore replaces a record wholesale on
every mutation instead of editing it in place.

CHANGELOG:
- 2026-10-05: Split request payloads into PlantCreate / PlantUpdate (STORY-006)
- 2026-10-02: Initial creation (STORY-003)

TODO:
- None
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PlantType(str, Enum):
    """Generation technology of a plant."""

    SOLAR = "solar"
    WIND = "wind"
    HYDRO = "hydro"
    BIOMASS = "biomass"
    GEOTHERMAL = "geothermal"


class PlantStatus(str, Enum):
    """Operating state of a plant."""

    NORMAL = "normal"
    OPERATING = "operating"
    UNDER_INSPECTION = "under_inspection"
    UNDER_REPAIR = "under_repair"
    FAULTED = "faulted"
    STOPPED = "stopped"


# ---------------------------------------------------------------------------
# Stored record sections
# ---------------------------------------------------------------------------


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class KpxIdentifier(_Frozen):
    """Market-operator registration of the plant."""

    id: int
    kpx_cbp_gen_id: str = ""


class Inverter(_Frozen):
    """One inverter/array configuration entry."""

    id: int
    capacity: float = Field(gt=0)
    tilt: float = 0
    azimuth: float = 180
    install_type: str | None = None
    module_type: str | None = None


class Infra(_Frozen):
    """Physical description of the site.

    Attributes:
        capacity: Installed capacity in kW.
        inverter: Inverter configurations. Replaced as a whole on update.
        ess: Energy-storage descriptors (opaque). Replaced as a whole on update.
    """

    id: int
    carrier_fk: int
    name: str = Field(min_length=1)
    type: PlantType
    address: str = ""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    altitude: float | None = None
    capacity: float = Field(gt=0)
    install_date: date | None = None
    kpx_identifier: KpxIdentifier
    inverter: list[Inverter] = Field(default_factory=list)
    ess: list[dict[str, Any]] = Field(default_factory=list)


class Monitoring(_Frozen):
    """Link to the RTU that reports this plant's telemetry."""

    id: int
    company: int
    rtu_id: str = ""
    resource: int


class ControlChannel(_Frozen):
    """One remote-control channel descriptor."""

    id: int
    company: int
    control_type: int
    controllable_capacity: float
    rtu_id: str = ""
    onoff_inverter_capacity: dict[str, Any] = Field(default_factory=dict)
    priority: int = 1
    resource: int


class Contract(_Frozen):
    """Offtake contract terms. ``weight`` is an opaque numeric attribute."""

    id: int
    modified_at: datetime
    resource: int
    contract_type: str
    contract_date: str = ""
    weight: float = 1.0
    fixed_contract_type: str | None = None
    fixed_contract_price: float | None = None
    fixed_contract_agreement_date: datetime | None = None


class Plant(_Frozen):
    """A power-generation site as held by the PlantStore."""

    id: int
    modified_at: datetime
    status: PlantStatus = PlantStatus.NORMAL
    infra: Infra
    monitoring: Monitoring
    control: list[ControlChannel] = Field(default_factory=list)
    contract: Contract
    substation: int = 1
    dl: int = 1
    fixed_contract_price: float | None = None
    guaranteed_capacity: float = 0


# ---------------------------------------------------------------------------
# Create payload
# ---------------------------------------------------------------------------


class InverterIn(BaseModel):
    """One inverter of a create request. Capacity defaults to an even share."""

    capacity: float | None = Field(None, gt=0)
    tilt: float = 0
    azimuth: float = 180
    install_type: str | None = None
    module_type: str | None = None


class InfraIn(BaseModel):
    """Infra section of a create request. ``name`` and ``type`` are required."""

    name: str = Field(min_length=1)
    type: PlantType
    address: str = ""
    latitude: float = Field(36.5, ge=-90, le=90)
    longitude: float = Field(127.5, ge=-180, le=180)
    altitude: float | None = None
    capacity: float = Field(1000, gt=0)
    install_date: date | None = None
    carrier_fk: int | None = None
    kpx_cbp_gen_id: str = ""
    inverter: list[InverterIn] = Field(default_factory=list)


class MonitoringIn(BaseModel):
    company: int = 1
    rtu_id: str = ""


class ControlIn(BaseModel):
    company: int = 1
    control_type: int = 1
    priority: int = 1


class ContractIn(BaseModel):
    contract_type: str = "general"
    contract_date: str = ""
    weight: float = 1.0
    fixed_contract_type: str | None = None
    fixed_contract_price: float | None = None
    fixed_contract_agreement_date: datetime | None = None


class PlantCreate(BaseModel):
    """Request body for creating a plant."""

    status: PlantStatus = PlantStatus.NORMAL
    infra: InfraIn
    monitoring: MonitoringIn = Field(default_factory=MonitoringIn)
    control: list[ControlIn] = Field(default_factory=list)
    contract: ContractIn = Field(default_factory=ContractIn)
    substation: int = 1
    dl: int = 1
    fixed_contract_price: float | None = None
    guaranteed_capacity: float = 0


# ---------------------------------------------------------------------------
# Partial-update payload
#
# Every field is optional. Only fields present in the request body are
# applied (``model_dump(exclude_unset=True)``); sections are merged
# independently of each other.
# ---------------------------------------------------------------------------


class InfraPatch(BaseModel):
    name: str | None = Field(None, min_length=1)
    type: PlantType | None = None
    address: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    altitude: float | None = None
    capacity: float | None = Field(None, gt=0)
    install_date: date | None = None
    carrier_fk: int | None = None
    kpx_identifier: KpxIdentifier | None = None
    inverter: list[Inverter] | None = None
    ess: list[dict[str, Any]] | None = None


class MonitoringPatch(BaseModel):
    company: int | None = None
    rtu_id: str | None = None


class ContractPatch(BaseModel):
    contract_type: str | None = None
    contract_date: str | None = None
    weight: float | None = None
    fixed_contract_type: str | None = None
    fixed_contract_price: float | None = None
    fixed_contract_agreement_date: datetime | None = None


class PlantUpdate(BaseModel):
    """Request body for a partial plant update."""

    status: PlantStatus | None = None
    infra: InfraPatch | None = None
    monitoring: MonitoringPatch | None = None
    contract: ContractPatch | None = None
    control: list[ControlChannel] | None = None
    substation: int | None = None
    dl: int | None = None
    fixed_contract_price: float | None = None
    guaranteed_capacity: float | None = None
