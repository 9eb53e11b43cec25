"""
Pydantic models for operator mail: contacts, send requests and sent mail.

A send request must carry a non-blank subject and body and at least one
recipient, and every recipient address must contain ``@``. Sent mail is
kept whether or not the transport delivered it; ``status`` tells which.

CHANGELOG:
- 2026-10-14: Initial creation (STORY-022)

TODO:
- None
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecipientType(str, Enum):
    TO = "to"
    CC = "cc"
    BCC = "bcc"


class MailStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


def _new_id() -> str:
    return str(uuid.uuid4())


def _check_address(value: str) -> str:
    value = value.strip()
    if "@" not in value:
        raise ValueError("email address must contain '@'")
    return value


class RecipientIn(BaseModel):
    email: str
    name: str | None = None
    type: RecipientType = RecipientType.TO

    @field_validator("email")
    @classmethod
    def email_must_have_at(cls, v: str) -> str:
        return _check_address(v)


class SendMailRequest(BaseModel):
    """Request body for POST /api/mail."""

    subject: str
    content: str
    recipients: list[RecipientIn] = Field(min_length=1)

    @field_validator("subject", "content")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class Recipient(BaseModel):
    """A stored recipient; ``name`` falls back to the address's local part."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    email: str
    name: str
    type: RecipientType


class Mail(BaseModel):
    """A sent (or attempted) message.

    Attributes:
        sender_id: Authenticated user that sent the message.
        error: Transport failure reason when ``status`` is ``failed``.
        sent_at: Delivery time; None when delivery failed.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    subject: str
    content: str
    sender_id: str
    sender_email: str
    recipients: list[Recipient]
    status: MailStatus
    error: str | None = None
    sent_at: datetime | None = None
    created_at: datetime


class ContactIn(BaseModel):
    """Request body for POST /api/mail/contacts."""

    name: str = Field(min_length=1)
    email: str
    group_id: str | None = None

    @field_validator("email")
    @classmethod
    def email_must_have_at(cls, v: str) -> str:
        return _check_address(v)


class Contact(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str
    email: str
    group_id: str | None = None
    created_at: datetime
    updated_at: datetime
