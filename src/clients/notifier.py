"""Booking notifications for customers and professionals."""

import logging
from typing import Optional, Protocol

from src.clients.outbox import NotificationOutbox
from src.schemas.booking_schema import Booking, BookingStatus
from src.schemas.notification_schema import EmailContact, EmailMessage
from src.schemas.professional_schema import Professional
from src.templates.email_templates import (
    build_customer_outcome_email,
    build_professional_assignment_email,
    build_status_update_email,
)

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    """Best-effort, non-blocking notification contract."""

    def notify_booking_outcome(
        self,
        booking: Booking,
        outcome: BookingStatus,
        professional: Optional[Professional] = None,
    ) -> None: ...

    def notify_status_change(
        self, booking: Booking, old_status: BookingStatus, new_status: BookingStatus
    ) -> None: ...


class EmailNotifier:
    """Renders booking emails and hands them to the outbox."""

    def __init__(
        self,
        outbox: NotificationOutbox,
        sender_email: str,
        sender_name: str,
        timezone_name: str,
    ) -> None:
        self._outbox = outbox
        self._sender = EmailContact(email=sender_email, name=sender_name)
        self._timezone = timezone_name

    def notify_booking_outcome(
        self,
        booking: Booking,
        outcome: BookingStatus,
        professional: Optional[Professional] = None,
    ) -> None:
        """Queue the customer email, plus the professional email on assignment."""
        if booking.customer_email:
            subject, html, text = build_customer_outcome_email(
                booking, outcome, self._timezone, professional
            )
            self._publish(
                EmailContact(email=booking.customer_email, name=booking.customer_name or "Customer"),
                subject, html, text, tag=f"booking-{outcome.value}",
            )
        else:
            logger.warning("Booking %s has no customer email; skipping notification",
                           booking.booking_id)

        if outcome == BookingStatus.ASSIGNED and professional is not None:
            if not professional.email:
                logger.warning("Professional %s has no email; skipping assignment notice",
                               professional.professional_id)
                return
            subject, html, text = build_professional_assignment_email(
                booking, professional, self._timezone
            )
            self._publish(
                EmailContact(email=professional.email, name=professional.full_name),
                subject, html, text, tag="professional-assignment",
            )

    def notify_status_change(
        self, booking: Booking, old_status: BookingStatus, new_status: BookingStatus
    ) -> None:
        if not booking.customer_email:
            return
        subject, html, text = build_status_update_email(
            booking, old_status, new_status, self._timezone
        )
        self._publish(
            EmailContact(email=booking.customer_email, name=booking.customer_name or "Customer"),
            subject, html, text, tag="status-update",
        )

    def _publish(self, to: EmailContact, subject: str, html: str, text: str, tag: str) -> None:
        message = EmailMessage(
            sender=self._sender,
            to=[to],
            subject=subject,
            html_content=html,
            text_content=text,
            tags=[tag],
        )
        if self._outbox.publish(message):
            logger.debug("Queued %r for %s", subject, to.email)
