"""Subject lines and bodies for booking notification emails."""

import html as html_lib
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from src.schemas.booking_schema import Booking, BookingStatus
from src.schemas.professional_schema import Professional

STATUS_MESSAGES: dict[str, dict[str, str]] = {
    "pending": {
        "title": "Booking Pending",
        "message": "Your booking is pending confirmation.",
    },
    "assigned": {
        "title": "Professional Assigned",
        "message": "A professional has been assigned to your booking.",
    },
    "confirmed": {
        "title": "Booking Confirmed",
        "message": "Your booking has been confirmed. Our professional will arrive at the scheduled time.",
    },
    "in_progress": {
        "title": "Service In Progress",
        "message": "Our professional has started working on your car.",
    },
    "completed": {
        "title": "Service Completed",
        "message": "Your car wash service has been completed. Thank you for choosing us!",
    },
    "cancelled": {
        "title": "Booking Cancelled",
        "message": "Your booking has been cancelled. If you have any questions, please contact us.",
    },
}


def format_scheduled_time(value: datetime, timezone_name: str) -> str:
    """Render a booking time in the customer-facing timezone."""
    local = value.astimezone(ZoneInfo(timezone_name))
    return local.strftime("%A, %d %B %Y at %I:%M %p")


def _detail_rows(rows: list[tuple[str, str]]) -> tuple[str, str]:
    html = "\n".join(
        f"<p><strong>{label}:</strong> {html_lib.escape(value)}</p>" for label, value in rows
    )
    text = "\n".join(f"{label}: {value}" for label, value in rows)
    return html, text


def _booking_rows(booking: Booking, timezone_name: str) -> list[tuple[str, str]]:
    return [
        ("Booking ID", booking.booking_id),
        ("Service", booking.service_name or f"Service #{booking.service_id}"),
        ("Scheduled Time", format_scheduled_time(booking.scheduled_time, timezone_name)),
        ("Duration", f"{booking.duration_minutes} minutes"),
        ("Location", booking.location_address or "N/A"),
    ]


def build_customer_outcome_email(
    booking: Booking,
    outcome: BookingStatus,
    timezone_name: str,
    professional: Optional[Professional] = None,
) -> tuple[str, str, str]:
    """Build (subject, html, text) telling the customer how allocation ended."""
    name = booking.customer_name or "Customer"
    rows = _booking_rows(booking, timezone_name)

    if outcome == BookingStatus.ASSIGNED:
        subject = f"Booking Confirmation - CarWash Service #{booking.booking_id}"
        lead = "Your car wash service has been successfully booked."
        if professional is not None:
            rows.append(("Professional", professional.full_name))
            if professional.phone:
                rows.append(("Professional Phone", professional.phone))
    elif outcome == BookingStatus.NO_PROFESSIONALS_AVAILABLE:
        subject = (
            "Booking Cancelled - Professionals Unavailable - "
            f"CarWash Service #{booking.booking_id}"
        )
        lead = (
            "Unfortunately, we had to cancel your booking request because no "
            "professional is available at the requested time. Please try a different time slot."
        )
    elif outcome == BookingStatus.NOT_SERVICEABLE:
        subject = (
            "Booking Cancelled - Location Not Serviced - "
            f"CarWash Service #{booking.booking_id}"
        )
        lead = (
            "Unfortunately, we do not yet have professionals serving your location, "
            "so we could not accept this booking."
        )
    else:
        raise ValueError(f"Not an allocation outcome: {outcome.value}")

    html_rows, text_rows = _detail_rows(rows)
    html = (
        f"<h1>{html_lib.escape(subject)}</h1>\n<p>Dear <strong>{html_lib.escape(name)}</strong>,</p>\n"
        f"<p>{lead}</p>\n{html_rows}"
    )
    text = f"Dear {name},\n\n{lead}\n\n{text_rows}"
    return subject, html, text


def build_professional_assignment_email(
    booking: Booking, professional: Professional, timezone_name: str
) -> tuple[str, str, str]:
    """Build (subject, html, text) announcing a new job to a professional."""
    subject = f"New Assignment - Booking #{booking.booking_id}"
    rows = [("Customer", booking.customer_name or "N/A")] + _booking_rows(booking, timezone_name)
    html_rows, text_rows = _detail_rows(rows)
    closing = "Please ensure you arrive on time and complete the service professionally."
    html = (
        f"<h1>New Job Assignment</h1>\n<p>Dear <strong>{html_lib.escape(professional.full_name)}</strong>,</p>\n"
        f"<p>You have been assigned a new car wash service:</p>\n{html_rows}\n<p>{closing}</p>"
    )
    text = f"Dear {professional.full_name},\n\nYou have been assigned a new car wash service:\n\n{text_rows}\n\n{closing}"
    return subject, html, text


def build_status_update_email(
    booking: Booking, old_status: BookingStatus, new_status: BookingStatus, timezone_name: str
) -> tuple[str, str, str]:
    """Build (subject, html, text) for a booking status change."""
    subject = f"Booking Status Updated - #{booking.booking_id}"
    info = STATUS_MESSAGES.get(new_status.value, {
        "title": "Status Updated",
        "message": f"Your booking status has been updated to: {new_status.value}",
    })
    name = booking.customer_name or "Customer"
    rows = _booking_rows(booking, timezone_name)
    rows.append(("Status", f"{old_status.value} -> {new_status.value}"))
    html_rows, text_rows = _detail_rows(rows)
    html = (
        f"<h1>{info['title']}</h1>\n<p>Dear <strong>{html_lib.escape(name)}</strong>,</p>\n"
        f"<p>{info['message']}</p>\n{html_rows}"
    )
    text = f"Dear {name},\n\n{info['message']}\n\n{text_rows}"
    return subject, html, text
