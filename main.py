"""
Car-wash allocator entry point.

Runs the professional allocator against a seeded in-memory directory and
booking store, printing each booking's final status and the emails that
would be sent. Useful for checking configuration and behaviour without a
database or Brevo account.

Usage:
    python main.py demo
    python main.py demo --area 5 --start 2031-03-14T14:00:00+05:30
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta

from src.allocation.assignments import list_assignments
from src.allocation.errors import AllocationError
from src.clients.booking_store import InMemoryBookingStore
from src.clients.directory import InMemoryProfessionalDirectory
from src.clients.email_transport import RecordingEmailTransport
from src.config import settings
from src.runtime import AllocatorRuntime
from src.schemas.booking_schema import BookingRequest, Service
from src.utils import utc_now

logger = logging.getLogger(__name__)

DEMO_SERVICES = [
    Service(service_id=1, name="Exterior Wash", duration_minutes=45, base_price=499.0,
            service_type="wash"),
    Service(service_id=2, name="Full Detailing", duration_minutes=120, base_price=2499.0,
            service_type="detailing"),
]

DEMO_PROFESSIONALS = [
    {"professional_id": "P1", "full_name": "Ravi Kumar", "phone": "+91 98765 43210",
     "email": "ravi.kumar@example.com", "coverage": [1, 3]},
    {"professional_id": "P2", "full_name": "Anita Sharma", "phone": "+91 91234 56789",
     "email": "anita.sharma@example.com", "coverage": [3, 4]},
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Car-wash professional allocator.")
    sub = parser.add_subparsers(dest="command", required=True)
    demo = sub.add_parser("demo", help="Allocate a few bookings against seeded data.")
    demo.add_argument("--area", type=int, default=3, help="Service area id (default: 3).")
    demo.add_argument(
        "--start",
        type=datetime.fromisoformat,
        default=None,
        help="Timezone-aware ISO start time (default: tomorrow 14:00 UTC).",
    )
    demo.add_argument("--service", type=int, default=1, help="Service id (default: 1).")
    demo.add_argument("--bookings", type=int, default=3,
                      help="Number of identical bookings to allocate (default: 3).")
    return parser


async def _run_demo(args: argparse.Namespace) -> int:
    start = args.start or (utc_now() + timedelta(days=1)).replace(
        hour=14, minute=0, second=0, microsecond=0
    )
    transport = RecordingEmailTransport()
    runtime = AllocatorRuntime.from_config(
        settings,
        store=InMemoryBookingStore(DEMO_SERVICES),
        directory=InMemoryProfessionalDirectory(DEMO_PROFESSIONALS),
        transport=transport,
    )

    async with runtime:
        for n in range(1, args.bookings + 1):
            request = BookingRequest(
                customer_id=f"C{n}",
                service_id=args.service,
                area_id=args.area,
                scheduled_time=start,
                location_address=f"{n} MG Road, Bengaluru",
                customer_name=f"Customer {n}",
                customer_email=f"customer{n}@example.com",
            )
            booking = await runtime.store.create_booking(request)
            try:
                status = await runtime.allocator.allocate_professional(booking)
            except AllocationError as exc:
                print(f"{booking.booking_id}: error - {exc}")
                return 1
            print(f"{booking.booking_id}: {status.value}")
        await runtime.outbox.drain()

        for professional in DEMO_PROFESSIONALS:
            jobs = await list_assignments(runtime.store, professional["professional_id"])
            print(f"{professional['full_name']}: {len(jobs)} assignment(s)")

    print(f"\n{len(transport.sent)} email(s) queued:")
    for message in transport.sent:
        print(f"  -> {message.to[0].email}: {message.subject}")
    return 0


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "demo":
        return asyncio.run(_run_demo(args))
    return 2


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
