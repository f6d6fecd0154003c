"""
salespath_admin/features/email/service.py

Ad-hoc email broadcast to users or business owners.

Handles:
- Recipient lookup (users with their business names, or businesses with owner + subscription)
- Placeholder personalization ({{name}}, {{businessNames}}, {{businessName}}, {{status}})
- Wrapping the body in the SalesPath signature frame

Delivery is delegated to an EmailSender. The default sender only logs; a
transport-backed sender can be supplied through the get_email_sender
dependency.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from salespath_admin.core.config import settings
from salespath_admin.core.database import businesses, subscriptions, users
from salespath_admin.core.errors import EmailDeliveryError
from salespath_admin.models.email import EmailBroadcastRequest, EmailBroadcastResult

logger = logging.getLogger("salespath.email")

NAME_FALLBACK = "there"
BUSINESS_NAMES_FALLBACK = "your business"
STATUS_FALLBACK = "no subscription"

_FRAME = (
    '<div style="font-family: Arial, sans-serif; color: #333; line-height: 1.6;">'
    "{content}"
    '<p style="margin-top: 20px; color: #666; font-size: 14px;">'
    "Best regards,<br>The SalesPath Team"
    "</p>"
    "</div>"
)


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html: str
    from_address: str


class EmailSender(Protocol):
    def send(self, message: OutgoingEmail) -> None:
        ...


class LoggingEmailSender:
    """Records outgoing mail in the log instead of delivering it."""

    def __init__(self):
        self.sent: List[OutgoingEmail] = []

    def send(self, message: OutgoingEmail) -> None:
        self.sent.append(message)
        logger.info(f"[email] would send '{message.subject}' to {message.to}")


def get_email_sender() -> EmailSender:
    """FastAPI dependency; override to plug in a real transport."""
    return LoggingEmailSender()


def render_template(template: str, values: Dict[str, str]) -> str:
    rendered = template
    for key, value in values.items():
        rendered = rendered.replace("{{" + key + "}}", value)
    return rendered


def wrap_html(content: str) -> str:
    return _FRAME.format(content=content)


def _user_messages(session: Session, req: EmailBroadcastRequest) -> List[Optional[tuple]]:
    user_rows = session.execute(
        select(users.c.id, users.c.email, users.c.name).where(users.c.id.in_(req.recipient_ids))
    ).all()
    business_rows = session.execute(
        select(businesses.c.owner_id, businesses.c.name)
        .where(businesses.c.owner_id.in_([row.id for row in user_rows]))
        .order_by(businesses.c.created_at.asc(), businesses.c.id.asc())
    ).all()

    names_by_owner: Dict[str, List[str]] = defaultdict(list)
    for row in business_rows:
        names_by_owner[row.owner_id].append(row.name)

    messages = []
    for row in user_rows:
        if not row.email:
            messages.append(None)
            continue
        values = {
            "name": row.name or NAME_FALLBACK,
            "businessNames": ", ".join(names_by_owner.get(row.id, [])) or BUSINESS_NAMES_FALLBACK,
        }
        messages.append((row.email, req.subject, render_template(req.body, values)))
    return messages


def _business_messages(session: Session, req: EmailBroadcastRequest) -> List[Optional[tuple]]:
    rows = session.execute(
        select(
            businesses.c.name,
            users.c.email.label("owner_email"),
            users.c.name.label("owner_name"),
            subscriptions.c.status.label("subscription_status"),
        )
        .select_from(
            businesses
            .outerjoin(users, users.c.id == businesses.c.owner_id)
            .outerjoin(subscriptions, subscriptions.c.business_id == businesses.c.id)
        )
        .where(businesses.c.id.in_(req.recipient_ids))
    ).all()

    messages = []
    for row in rows:
        if not row.owner_email:
            messages.append(None)
            continue
        values = {
            "name": row.owner_name or NAME_FALLBACK,
            "businessName": row.name,
            "status": row.subscription_status or STATUS_FALLBACK,
        }
        messages.append(
            (row.owner_email, render_template(req.subject, values), render_template(req.body, values))
        )
    return messages


def send_broadcast(
    session: Session,
    req: EmailBroadcastRequest,
    sender: EmailSender,
    from_address: Optional[str] = None,
) -> EmailBroadcastResult:
    """
    Personalize and send one email per recipient.

    Recipients without an email address are skipped. The first delivery
    failure aborts the broadcast with EmailDeliveryError; earlier messages
    have already gone out.
    """
    if not req.recipient_ids:
        return EmailBroadcastResult(sent=0, skipped=0)

    if req.type == "users":
        messages = _user_messages(session, req)
    else:
        messages = _business_messages(session, req)

    sent = 0
    skipped = 0
    for message in messages:
        if message is None:
            skipped += 1
            continue
        to, subject, body = message
        try:
            sender.send(
                OutgoingEmail(
                    to=to,
                    subject=subject,
                    html=wrap_html(body),
                    from_address=from_address or settings.EMAIL_FROM,
                )
            )
        except Exception as e:
            logger.error(f"[email] delivery to {to} failed: {e}", exc_info=True)
            raise EmailDeliveryError("Failed to send emails") from e
        sent += 1

    logger.info(f"[email] broadcast ({req.type}) sent={sent} skipped={skipped}")
    return EmailBroadcastResult(sent=sent, skipped=skipped)
