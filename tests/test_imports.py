"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_booking_schema(self):
        from src.schemas.booking_schema import Booking, BookingRequest, BookingStatus
        assert BookingStatus.NO_PROFESSIONALS_AVAILABLE == "no_professionals_available"
        assert Booking is not None and BookingRequest is not None

    def test_import_allocation_schema(self):
        from src.schemas.allocation_schema import ACTIVE_ALLOCATION_STATUSES, AllocationStatus
        assert AllocationStatus.REJECTED not in ACTIVE_ALLOCATION_STATUSES

    def test_import_professional_schema(self):
        from src.schemas.professional_schema import Professional
        assert Professional(professional_id="P1", full_name="Ravi").coverage == frozenset()


class TestAllocationPackage:
    def test_package_reexports(self):
        from src.allocation import (
            AllocationStateMachine,
            AssignmentCommitter,
            AvailabilityChecker,
            CandidateResolver,
            ProfessionalAllocator,
            WorkloadRanker,
            intervals_overlap,
            list_assignments,
            update_assignment_status,
        )
        assert callable(intervals_overlap)
        assert AllocationStateMachine().current_state.value == "resolving"
        for obj in (AssignmentCommitter, AvailabilityChecker, CandidateResolver,
                    ProfessionalAllocator, WorkloadRanker,
                    list_assignments, update_assignment_status):
            assert obj is not None

    def test_errors_share_a_base(self):
        from src.allocation.errors import (
            AllocationConflictError,
            AllocationError,
            DirectoryUnavailableError,
            StoreUnavailableError,
            TransientCollaboratorError,
        )
        assert issubclass(DirectoryUnavailableError, TransientCollaboratorError)
        assert issubclass(StoreUnavailableError, TransientCollaboratorError)
        assert issubclass(AllocationConflictError, AllocationError)
        assert not issubclass(AllocationConflictError, TransientCollaboratorError)


class TestClientImports:
    def test_import_clients(self):
        from src.clients.booking_store import InMemoryBookingStore
        from src.clients.directory import HttpProfessionalDirectory, InMemoryProfessionalDirectory
        from src.clients.email_transport import BrevoEmailTransport, LoggingEmailTransport
        from src.clients.notifier import EmailNotifier
        from src.clients.outbox import NotificationOutbox
        assert InMemoryBookingStore().__class__.__name__ == "InMemoryBookingStore"
        for obj in (HttpProfessionalDirectory, InMemoryProfessionalDirectory,
                    BrevoEmailTransport, LoggingEmailTransport,
                    EmailNotifier, NotificationOutbox):
            assert obj is not None


class TestConfigImport:
    def test_import_config(self):
        from src.config import settings
        assert settings.allocation.collaborator_timeout_sec > 0
        assert settings.notifications.outbox_max_size >= 1
        assert settings.service_name


class TestDemoEntryPoint:
    def test_main_imports(self):
        from main import build_parser
        args = build_parser().parse_args(["demo", "--bookings", "2"])
        assert args.bookings == 2
