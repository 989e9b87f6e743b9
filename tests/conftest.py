"""Shared test fixtures and helpers."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import pytest

from src.allocation.orchestrator import ProfessionalAllocator
from src.clients.booking_store import InMemoryBookingStore
from src.clients.directory import InMemoryProfessionalDirectory
from src.clients.email_transport import RecordingEmailTransport
from src.clients.notifier import EmailNotifier
from src.clients.outbox import NotificationOutbox
from src.config import AllocationConfig
from src.schemas.allocation_schema import Allocation, AllocationStatus
from src.schemas.booking_schema import Booking, BookingStatus, Service
from src.schemas.professional_schema import Professional

# 14:00 UTC on a fixed future day; the requested window is [14:00, 14:45).
START = datetime(2031, 3, 14, 14, 0, tzinfo=timezone.utc)

SERVICES = [
    Service(service_id=1, name="Exterior Wash", duration_minutes=45, base_price=499.0),
    Service(service_id=2, name="Full Detailing", duration_minutes=120, base_price=2499.0),
]


def make_professional(
    professional_id: str,
    coverage: Iterable[int] = (3,),
    email: Optional[str] = "auto",
) -> Professional:
    """Helper to create a Professional with sensible defaults."""
    if email == "auto":
        email = f"{professional_id.lower()}@example.com"
    return Professional(
        professional_id=professional_id,
        full_name=f"Professional {professional_id}",
        phone="+91 98765 43210",
        email=email,
        coverage=frozenset(coverage),
    )


def make_booking(
    booking_id: str = "BK-NEW",
    start: datetime = START,
    duration: int = 45,
    area_id: Optional[int] = 3,
    status: BookingStatus = BookingStatus.PENDING,
    service_id: int = 1,
    customer_email: Optional[str] = "customer@example.com",
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    return Booking(
        booking_id=booking_id,
        customer_id="C1",
        service_id=service_id,
        area_id=area_id,
        scheduled_time=start,
        duration_minutes=duration,
        status=status,
        location_address="12 MG Road, Bengaluru",
        customer_name="Asha Rao",
        customer_email=customer_email,
        service_name="Exterior Wash",
    )


def seed_job(
    store: InMemoryBookingStore,
    professional_id: str,
    start: datetime,
    duration: int = 45,
    allocation_status: AllocationStatus = AllocationStatus.ASSIGNED,
    booking_status: BookingStatus = BookingStatus.ASSIGNED,
) -> Allocation:
    """Give a professional an existing job occupying [start, start + duration)."""
    suffix = uuid.uuid4().hex[:6].upper()
    booking_id = f"BK-SEED-{suffix}"
    store.add_booking(make_booking(
        booking_id=booking_id, start=start, duration=duration, status=booking_status,
    ))
    return store.add_allocation(Allocation(
        allocation_id=f"AL-SEED-{suffix}",
        booking_id=booking_id,
        professional_id=professional_id,
        status=allocation_status,
    ))


def seed_open_jobs(store: InMemoryBookingStore, professional_id: str, count: int) -> None:
    """Add ``count`` open jobs on later days, so they never clash with START."""
    for n in range(count):
        seed_job(store, professional_id, START + timedelta(days=n + 1))


@pytest.fixture
def store():
    return InMemoryBookingStore(SERVICES)


@pytest.fixture
def transport():
    return RecordingEmailTransport()


@pytest.fixture
def outbox(transport):
    return NotificationOutbox(transport, max_size=50)


@pytest.fixture
def notifier(outbox):
    return EmailNotifier(
        outbox,
        sender_email="bookings@carwash.example.com",
        sender_name="CarWash Booking App",
        timezone_name="Asia/Kolkata",
    )


@pytest.fixture
def directory():
    return InMemoryProfessionalDirectory([make_professional("P1"), make_professional("P2")])


@pytest.fixture
def allocation_config():
    return AllocationConfig(
        collaborator_timeout_sec=1.0,
        closed_allocation_statuses=("completed", "rejected"),
    )


@pytest.fixture
def allocator(directory, store, notifier, allocation_config):
    return ProfessionalAllocator(directory, store, notifier, allocation_config)
