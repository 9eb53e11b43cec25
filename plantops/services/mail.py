"""
Operator mail: per-user contact directories and a sent-mail log.

``MailService`` validates nothing itself; request bodies arrive already
validated by the models in ``plantops.models.mail``. It builds the stored
``Mail``, hands it to a ``MailTransport`` and keeps it in the sender's
sent list. A transport failure does not raise: the mail is stored with
``status=failed`` and the reason, and the caller decides how to report it.

The default transport only logs. Real delivery (SMTP or an HTTP relay) is
a different ``MailTransport`` passed in at startup.

Operations:
- contacts(user): The user's contacts in insertion order.
- add_contact(user, payload): Append a contact.
- send(user, request): Build, deliver and log a message.
- sent(user): The user's sent mail, oldest first.
- get(user, mail_id): One sent message.

CHANGELOG:
- 2026-10-14: Initial creation (STORY-022)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from plantops.errors import MailDeliveryError, RecordNotFoundError
from plantops.models.mail import (
    Contact,
    ContactIn,
    Mail,
    MailStatus,
    Recipient,
    SendMailRequest,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------


class MailTransport:
    """Delivery backend interface.

    ``deliver`` returns on success and raises MailDeliveryError (or an
    OSError from the network layer) on failure.
    """

    async def deliver(self, mail: Mail) -> None:
        raise NotImplementedError


class LoggingTransport(MailTransport):
    """Transport that records the message in the log and delivers nothing."""

    async def deliver(self, mail: Mail) -> None:
        logger.info(
            "Mail %s from %s to %s: %s",
            mail.id,
            mail.sender_email,
            ", ".join(f"{r.type.value}:{r.email}" for r in mail.recipients),
            mail.subject,
        )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class MailService:
    """In-memory contacts and sent mail, keyed by user name.

    Args:
        transport: Delivery backend.
        sender_domain: Domain appended to the user name for the sender address.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        transport: MailTransport,
        sender_domain: str = "localhost",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._sender_domain = sender_domain
        self._clock = clock
        self._contacts: dict[str, list[Contact]] = {}
        self._sent: dict[str, list[Mail]] = {}

    def contacts(self, user: str) -> list[Contact]:
        return list(self._contacts.get(user, ()))

    def add_contact(self, user: str, payload: ContactIn) -> Contact:
        now = self._clock()
        contact = Contact(
            name=payload.name,
            email=payload.email,
            group_id=payload.group_id,
            created_at=now,
            updated_at=now,
        )
        self._contacts.setdefault(user, []).append(contact)
        logger.info("Contact added: user=%s id=%s", user, contact.id)
        return contact

    async def send(self, user: str, request: SendMailRequest) -> Mail:
        """Deliver *request* and store the result in *user*'s sent list.

        Returns:
            Mail: The stored message, ``sent`` or ``failed``.
        """
        now = self._clock()
        recipients = [
            Recipient(email=r.email, name=r.name or r.email.split("@")[0], type=r.type)
            for r in request.recipients
        ]
        mail = Mail(
            subject=request.subject,
            content=request.content,
            sender_id=user,
            sender_email=f"{user}@{self._sender_domain}",
            recipients=recipients,
            status=MailStatus.SENT,
            sent_at=now,
            created_at=now,
        )
        try:
            await self._transport.deliver(mail)
        except (MailDeliveryError, OSError) as exc:
            logger.warning("Mail %s delivery failed: %s", mail.id, exc)
            mail = mail.model_copy(
                update={"status": MailStatus.FAILED, "error": str(exc), "sent_at": None}
            )
        self._sent.setdefault(user, []).append(mail)
        return mail

    def sent(self, user: str) -> list[Mail]:
        return list(self._sent.get(user, ()))

    def get(self, user: str, mail_id: str) -> Mail:
        """Return one of *user*'s sent messages.

        Raises:
            RecordNotFoundError: If *user* sent no message with *mail_id*.
        """
        for mail in self._sent.get(user, ()):
            if mail.id == mail_id:
                return mail
        raise RecordNotFoundError("mail", mail_id)
