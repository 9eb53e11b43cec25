"""
Error taxonomy shared by the stores, the query engine and the HTTP layer.

Two caller-facing classes exist: ``InvalidInputError`` for malformed or
out-of-domain input, and ``RecordNotFoundError`` for lookups that match
nothing. The API maps them to 400 and 404 respectively.
``MailDeliveryError`` is raised by mail transports and reported as 502.

CHANGELOG:
- 2026-10-14: Add MailDeliveryError (STORY-022)
- 2026-10-02: Initial creation (STORY-002)

TODO:
- None
"""


class PlantOpsError(Exception):
    """Base class for all application errors."""


class InvalidInputError(PlantOpsError):
    """Input is malformed or outside its domain. Never partially applied."""


class RecordNotFoundError(PlantOpsError):
    """A lookup by id found no matching record.

    Attributes:
        entity: Kind of record looked up (``plant`` or ``rtu``).
        record_id: The id that was not found.
    """

    def __init__(self, entity: str, record_id: object) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"No {entity} found with id '{record_id}'.")


class MailDeliveryError(PlantOpsError):
    """A mail transport could not hand a message over for delivery."""
