"""
Domain models package.

Exports the record models, closed-set enums and request payloads for
plants, RTUs, telemetry snapshots, change-history entries and mail.

CHANGELOG:
- 2026-10-14: Export mail models (STORY-022)
- 2026-10-07: Export history models (STORY-012)
- 2026-10-02: Initial creation (STORY-003)

TODO:
- None
"""

from plantops.models.history import (
    ChangeAction,
    ChangeEntity,
    ChangeRecord,
    ChangeRecordIn,
)
from plantops.models.mail import (
    Contact,
    ContactIn,
    Mail,
    MailStatus,
    RecipientType,
    SendMailRequest,
)
from plantops.models.plant import (
    Plant,
    PlantCreate,
    PlantStatus,
    PlantType,
    PlantUpdate,
)
from plantops.models.rtu import (
    CommunicationProtocol,
    Rtu,
    RtuCreate,
    RtuStatus,
    RtuUpdate,
)
from plantops.models.telemetry import TelemetrySnapshot, TelemetryStatus

__all__ = [
    "ChangeAction",
    "ChangeEntity",
    "ChangeRecord",
    "ChangeRecordIn",
    "CommunicationProtocol",
    "Contact",
    "ContactIn",
    "Mail",
    "MailStatus",
    "Plant",
    "PlantCreate",
    "PlantStatus",
    "PlantType",
    "PlantUpdate",
    "RecipientType",
    "Rtu",
    "RtuCreate",
    "RtuStatus",
    "RtuUpdate",
    "SendMailRequest",
    "TelemetrySnapshot",
    "TelemetryStatus",
]
