"""
Pydantic model for a simulated RTU telemetry snapshot.

CHANGELOG:
- 2026-10-03: Initial creation (STORY-010)

TODO:
- None
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class TelemetryStatus(str, Enum):
    """Link status reported with each snapshot."""

    ONLINE = "online"
    OFFLINE = "offline"
    WARNING = "warning"
    ERROR = "error"


class TelemetrySnapshot(BaseModel):
    """One complete reading-set for a device at a point in time.

    Snapshots are immutable; the feed replaces a device's snapshot wholesale
    on every refresh, so a reader never observes a half-written one.

    Attributes:
        id: Device identifier.
        timestamp: When the snapshot was generated (UTC).
        status: Link status.
        battery_level: Battery percent, None exactly when offline.
        signal_strength: Signal in dBm, None exactly when offline.
        values: Named measurements (temperature, humidity, power, voltage, current).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    status: TelemetryStatus
    battery_level: int | None
    signal_strength: int | None
    values: dict[str, float]
