"""
Tests for the mail models and MailService (STORY-022).

CHANGELOG:
- 2026-10-14: Initial creation (STORY-022)

TODO:
- None
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from plantops.errors import MailDeliveryError, RecordNotFoundError
from plantops.models.mail import ContactIn, Mail, MailStatus, RecipientType, SendMailRequest
from plantops.services.mail import LoggingTransport, MailService, MailTransport

FIXED_NOW = datetime(2026, 10, 14, 9, 0, tzinfo=UTC)


class _RecordingTransport(MailTransport):
    def __init__(self, error: Exception | None = None) -> None:
        self.delivered: list[Mail] = []
        self.error = error

    async def deliver(self, mail: Mail) -> None:
        if self.error is not None:
            raise self.error
        self.delivered.append(mail)


def _request(**overrides) -> SendMailRequest:
    body = {
        "subject": "Inverter fault",
        "content": "Plant 3 inverter 2 tripped.",
        "recipients": [{"email": "ops@example.com"}, {"email": "lead@example.com", "type": "cc"}],
        **overrides,
    }
    return SendMailRequest.model_validate(body)


class TestSendMailRequest:
    """Validation of the send payload."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"subject": "   "},
            {"content": ""},
            {"recipients": []},
            {"recipients": [{"email": "no-at-sign"}]},
            {"recipients": [{"email": "ok@example.com"}, {"email": ""}]},
        ],
    )
    def test_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            _request(**overrides)

    def test_recipient_type_defaults_to_to(self) -> None:
        assert _request().recipients[0].type is RecipientType.TO

    def test_contact_requires_name_and_address(self) -> None:
        with pytest.raises(ValidationError):
            ContactIn.model_validate({"name": "", "email": "a@b"})
        with pytest.raises(ValidationError):
            ContactIn.model_validate({"name": "Kim"})


class TestMailService:
    """Sending, sent-mail lookup and contacts."""

    @pytest.mark.asyncio
    async def test_send_delivers_and_stores(self) -> None:
        transport = _RecordingTransport()
        service = MailService(transport, "grid.example", clock=lambda: FIXED_NOW)
        mail = await service.send("alice", _request())

        assert mail.status is MailStatus.SENT
        assert mail.sent_at == FIXED_NOW
        assert mail.sender_email == "alice@grid.example"
        assert [r.name for r in mail.recipients] == ["ops", "lead"]
        assert transport.delivered == [mail]
        assert service.sent("alice") == [mail]
        assert service.get("alice", mail.id) == mail

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [MailDeliveryError("relay down"), OSError("refused")])
    async def test_transport_failure_stored_as_failed(self, error: Exception) -> None:
        service = MailService(_RecordingTransport(error))
        mail = await service.send("alice", _request())

        assert mail.status is MailStatus.FAILED
        assert mail.error == str(error)
        assert mail.sent_at is None
        assert service.sent("alice") == [mail]

    @pytest.mark.asyncio
    async def test_sent_mail_is_per_user(self) -> None:
        service = MailService(LoggingTransport())
        mail = await service.send("alice", _request())
        assert service.sent("bob") == []
        with pytest.raises(RecordNotFoundError):
            service.get("bob", mail.id)

    def test_contacts_per_user_in_order(self) -> None:
        service = MailService(LoggingTransport(), clock=lambda: FIXED_NOW)
        first = service.add_contact("alice", ContactIn(name="Hong", email="hong@example.com"))
        second = service.add_contact("alice", ContactIn(name="Kim", email="kim@example.com"))

        assert service.contacts("alice") == [first, second]
        assert service.contacts("bob") == []
        assert first.created_at == FIXED_NOW
        assert first.id != second.id

    def test_contacts_returns_copy(self) -> None:
        service = MailService(LoggingTransport())
        service.add_contact("alice", ContactIn(name="Hong", email="hong@example.com"))
        service.contacts("alice").clear()
        assert len(service.contacts("alice")) == 1
