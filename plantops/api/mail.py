"""
Mail endpoints: send, sent-mail list and the contact directory.

Every route acts for the authenticated user: contacts and sent mail are
per user, and the sender of a message is the token's user. A message the
transport failed to deliver is still stored (``status: failed``) and the
send request answers 502.

CHANGELOG:
- 2026-10-14: Initial creation (STORY-022)

TODO:
- None
"""

from fastapi import APIRouter

from plantops.api.deps import CurrentUser, MailServiceDep
from plantops.api.responses import dump, success
from plantops.errors import MailDeliveryError
from plantops.models.mail import ContactIn, MailStatus, SendMailRequest

router = APIRouter(prefix="/api/mail", tags=["mail"])


@router.get("")
async def list_sent_mail(mail: MailServiceDep, user: CurrentUser) -> dict:
    """The caller's sent mail, oldest first."""
    sent = mail.sent(user)
    return success([dump(m) for m in sent], {"total": len(sent)})


@router.post("", status_code=201)
async def send_mail(body: SendMailRequest, mail: MailServiceDep, user: CurrentUser) -> dict:
    """Send a message to one or more recipients.

    Raises:
        MailDeliveryError: If the transport failed; the message is kept
            in the sent list as ``failed``.
    """
    sent = await mail.send(user, body)
    if sent.status is MailStatus.FAILED:
        raise MailDeliveryError(f"Mail {sent.id} could not be delivered. Try again later.")
    return success(dump(sent))


@router.get("/contacts")
async def list_contacts(mail: MailServiceDep, user: CurrentUser) -> dict:
    contacts = mail.contacts(user)
    return success([dump(c) for c in contacts], {"total": len(contacts)})


@router.post("/contacts", status_code=201)
async def add_contact(body: ContactIn, mail: MailServiceDep, user: CurrentUser) -> dict:
    """Add a contact; ``name`` and ``email`` are required."""
    return success(dump(mail.add_contact(user, body)))


@router.get("/{mail_id}")
async def get_mail(mail_id: str, mail: MailServiceDep, user: CurrentUser) -> dict:
    """One of the caller's sent messages, or 404."""
    return success(dump(mail.get(user, mail_id)))
