from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from staffboard.allocation.resolver import Verdict


class AllocationError(Exception):
    """Base class for every recoverable condition raised by the allocation engine."""


class InvalidRange(AllocationError, ValueError):
    def __init__(self, start, end):
        super().__init__(f"Interval start {start} is after end {end}")
        self.start = start
        self.end = end


class InvalidProposal(AllocationError, ValueError):
    pass


class DuplicateAssignment(AllocationError):
    def __init__(self, assignment_id):
        super().__init__(f"Assignment {assignment_id} already exists")
        self.assignment_id = assignment_id


class NotFound(AllocationError, LookupError):
    def __init__(self, kind: str, identifier):
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class AllocationRejected(AllocationError):
    """
    Raised by mutating service calls when the resolver rejects the change.
    The verdict is kept so callers can echo the reason and projected totals.
    """

    def __init__(self, verdict: "Verdict"):
        super().__init__(verdict.message)
        self.verdict = verdict

    @property
    def reason(self):
        return self.verdict.rejection_reason
