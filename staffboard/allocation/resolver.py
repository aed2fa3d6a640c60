from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from staffboard.allocation.interval import CalendarInterval
from staffboard.allocation.models import MAX_UTILIZATION, Proposal
from staffboard.allocation.utilization import UtilizationTotals, accumulate


class Outcome(str, Enum):
    ACCEPTED = "accepted"
    ACCEPTED_WITH_WARNING = "accepted_with_warning"
    REJECTED = "rejected"


class Reason(str, Enum):
    CAPACITY_EXCEEDED = "capacity_exceeded"
    SOFT_OVERCOMMIT = "soft_overcommit"
    OUTSIDE_PROJECT_WINDOW = "outside_project_window"


@dataclass(frozen=True)
class Finding:
    reason: Reason
    message: str


@dataclass(frozen=True)
class Verdict:
    outcome: Outcome
    findings: tuple[Finding, ...] = ()
    projected: UtilizationTotals = field(default_factory=UtilizationTotals)

    @property
    def accepted(self) -> bool:
        return self.outcome is not Outcome.REJECTED

    @property
    def rejection_reason(self) -> Reason | None:
        if self.outcome is not Outcome.REJECTED:
            return None
        return self.findings[0].reason

    @property
    def warnings(self) -> tuple[Finding, ...]:
        if self.outcome is Outcome.REJECTED:
            return ()
        return self.findings

    @property
    def message(self) -> str:
        if not self.findings:
            return "Accepted"
        return "; ".join(f.message for f in self.findings)


class ConflictResolver:
    """
    Decides whether a proposed assignment fits next to an employee's existing ones.

    Hard-locked load is capacity: it may never exceed the limit on any day. Soft-locked
    load is advisory and only produces warnings when the combined load goes over.
    """

    def __init__(self, capacity: int = MAX_UTILIZATION):
        self.capacity = capacity

    def evaluate(
        self,
        proposal: Proposal,
        existing_overlaps: Iterable[Proposal],
        project_window: CalendarInterval | None = None,
    ) -> Verdict:
        existing = accumulate(existing_overlaps, proposal.interval)
        projected = existing.plus(proposal)

        if proposal.is_hard:
            if projected.hard_total > self.capacity:
                return self._reject(
                    projected,
                    f"Hard-locked utilization would reach {projected.hard_total}% "
                    f"(existing {existing.hard_total}% + {proposal.utilization}%)",
                )
        elif existing.hard_total > self.capacity:
            return self._reject(
                projected,
                f"Existing hard-locked utilization is already {existing.hard_total}%",
            )

        findings = []
        if projected.combined_total > self.capacity:
            findings.append(Finding(
                Reason.SOFT_OVERCOMMIT,
                f"Combined utilization would reach {projected.combined_total}% "
                f"including soft-locked assignments",
            ))
        if project_window is not None and not project_window.contains(proposal.interval):
            findings.append(Finding(
                Reason.OUTSIDE_PROJECT_WINDOW,
                f"Assignment {proposal.interval} extends outside project window {project_window}",
            ))

        if findings:
            return Verdict(Outcome.ACCEPTED_WITH_WARNING, tuple(findings), projected)
        return Verdict(Outcome.ACCEPTED, (), projected)

    @staticmethod
    def _reject(projected: UtilizationTotals, message: str) -> Verdict:
        return Verdict(Outcome.REJECTED, (Finding(Reason.CAPACITY_EXCEEDED, message),), projected)
