"""
Pydantic models for remote telemetry units (RTUs).

Defines the stored ``Rtu`` record, the closed-set enums for device status
and communication protocol, and the create / partial-update payloads.

CHANGELOG:
- 2026-10-14: Drop plant_name from request bodies (STORY-021)
- 2026-10-05: Add RtuUpdate with explicit-null clearing semantics (STORY-007)
- 2026-10-02: Initial creation (STORY-003)

TODO:
- None
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RtuStatus(str, Enum):
    """Administrative status of an RTU."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    ERROR = "error"


class CommunicationProtocol(str, Enum):
    """Field protocol an RTU speaks."""

    MODBUS = "Modbus"
    DNP3 = "DNP3"
    IEC_61850 = "IEC 61850"
    MQTT = "MQTT"
    HTTP_REST = "HTTP/REST"
    LORAWAN = "LoRaWAN"
    ZIGBEE = "Zigbee"
    CUSTOM = "Custom"


class Rtu(BaseModel):
    """A remote telemetry/control device as held by the RtuStore.

    Attributes:
        id: Zero-padded sequence (seeded) or short hex token (created).
        plant_id: Linked plant, or None when the device is unlinked.
        plant_name: Denormalised name of the linked plant.
        data_interval: Data-collection interval in seconds.
        battery_level: Battery charge in percent, when reported.
        signal_strength: Radio signal strength in dBm (never positive).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(min_length=1)
    type: str
    model: str = Field(min_length=1)
    manufacturer: str = Field(min_length=1)
    firmware_version: str
    serial_number: str
    installation_date: date
    last_maintenance_date: date | None = None
    communication_protocol: CommunicationProtocol
    ip_address: str | None = None
    port: int | None = Field(None, ge=1, le=65535)
    status: RtuStatus
    plant_id: int | None = None
    plant_name: str | None = None
    location: str = ""
    description: str | None = None
    last_connection: datetime | None = None
    data_interval: int = Field(gt=0)
    battery_level: int | None = Field(None, ge=0, le=100)
    signal_strength: int | None = Field(None, le=0)
    notes: str | None = None


class RtuCreate(BaseModel):
    """Request body for registering an RTU.

    ``name``, ``model`` and ``manufacturer`` are required; every other field
    falls back to a default when omitted. The plant name is not accepted;
    it is always read from the linked plant.
    """

    name: str = Field(min_length=1)
    model: str = Field(min_length=1)
    manufacturer: str = Field(min_length=1)
    type: str = "generation monitoring"
    firmware_version: str = "v1.0.0"
    serial_number: str | None = None
    installation_date: date | None = None
    last_maintenance_date: date | None = None
    communication_protocol: CommunicationProtocol = CommunicationProtocol.MODBUS
    ip_address: str | None = None
    port: int | None = Field(None, ge=1, le=65535)
    status: RtuStatus = RtuStatus.ACTIVE
    plant_id: int | None = None
    location: str = ""
    description: str | None = None
    last_connection: datetime | None = None
    data_interval: int = Field(60, gt=0)
    battery_level: int | None = Field(None, ge=0, le=100)
    signal_strength: int | None = Field(None, le=0)
    notes: str | None = None


class RtuUpdate(BaseModel):
    """Request body for a partial RTU update.

    An omitted field keeps its value; an explicit ``null`` clears the field
    when the stored record allows None and is ignored otherwise. Changing
    ``plant_id`` is the only way to change the stored plant name.
    """

    name: str | None = Field(None, min_length=1)
    type: str | None = None
    model: str | None = Field(None, min_length=1)
    manufacturer: str | None = Field(None, min_length=1)
    firmware_version: str | None = None
    serial_number: str | None = None
    installation_date: date | None = None
    last_maintenance_date: date | None = None
    communication_protocol: CommunicationProtocol | None = None
    ip_address: str | None = None
    port: int | None = Field(None, ge=1, le=65535)
    status: RtuStatus | None = None
    plant_id: int | None = None
    location: str | None = None
    description: str | None = None
    last_connection: datetime | None = None
    data_interval: int | None = Field(None, gt=0)
    battery_level: int | None = Field(None, ge=0, le=100)
    signal_strength: int | None = Field(None, le=0)
    notes: str | None = None
