from staffboard.allocation.errors import (
    AllocationError,
    AllocationRejected,
    DuplicateAssignment,
    InvalidProposal,
    InvalidRange,
    NotFound,
)
from staffboard.allocation.interval import CalendarInterval
from staffboard.allocation.ledger import AssignmentLedger
from staffboard.allocation.models import Assignment, LockType, Proposal
from staffboard.allocation.resolver import ConflictResolver, Finding, Outcome, Reason, Verdict
from staffboard.allocation.service import AllocationEvent, AllocationService, EventKind
from staffboard.allocation.utilization import (
    LoadSegment,
    UtilizationTotals,
    accumulate,
    load_profile,
    utilization_band,
)

__all__ = [
    "AllocationError", "AllocationRejected", "DuplicateAssignment", "InvalidProposal",
    "InvalidRange", "NotFound", "CalendarInterval", "AssignmentLedger", "Assignment",
    "LockType", "Proposal", "ConflictResolver", "Finding", "Outcome", "Reason", "Verdict",
    "AllocationEvent", "AllocationService", "EventKind", "LoadSegment", "UtilizationTotals",
    "accumulate", "load_profile", "utilization_band",
]
