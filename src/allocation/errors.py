"""Typed failures raised by the allocator and its collaborators.

Only the orchestrator decides whether a failure is retried against the
next candidate, propagated to the caller, or turned into a terminal
booking status.
"""


class AllocationError(Exception):
    """Base class for every allocation failure."""


class BookingInputError(AllocationError):
    """The booking cannot be allocated as submitted. Never retried."""


class TransientCollaboratorError(AllocationError):
    """A collaborator was unreachable or timed out. Safe to retry."""


class DirectoryUnavailableError(TransientCollaboratorError):
    """The identity directory could not be queried."""


class StoreUnavailableError(TransientCollaboratorError):
    """The booking store could not be queried."""


class DirectoryContractError(AllocationError):
    """The identity directory answered with a payload of the wrong shape."""


class AllocationConflictError(AllocationError):
    """The store rejected an allocation that overlaps an active one."""

    def __init__(self, professional_id: str, booking_id: str, message: str = "") -> None:
        self.professional_id = professional_id
        self.booking_id = booking_id
        super().__init__(
            message
            or f"Professional {professional_id} already has an overlapping "
               f"active allocation for booking {booking_id}"
        )


class AllocationPersistenceError(AllocationError):
    """Writing the allocation or the booking status failed."""


class InvalidAllocationTransitionError(AllocationError):
    """An allocation status change is not allowed from its current status."""
