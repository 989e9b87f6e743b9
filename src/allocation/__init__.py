from src.allocation.assignments import list_assignments, update_assignment_status
from src.allocation.availability import AvailabilityChecker, intervals_overlap
from src.allocation.candidate_resolver import CandidateResolver
from src.allocation.committer import AssignmentCommitter
from src.allocation.orchestrator import ProfessionalAllocator
from src.allocation.state_machine import (
    AllocationState,
    AllocationStateMachine,
    AllocationTrigger,
)
from src.allocation.workload_ranker import WorkloadRanker

__all__ = [
    "ProfessionalAllocator",
    "CandidateResolver",
    "WorkloadRanker",
    "AvailabilityChecker",
    "AssignmentCommitter",
    "AllocationStateMachine",
    "AllocationState",
    "AllocationTrigger",
    "intervals_overlap",
    "list_assignments",
    "update_assignment_status",
]
