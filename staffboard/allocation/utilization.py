from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from staffboard.allocation.interval import CalendarInterval
from staffboard.allocation.models import Proposal

HIGH_UTILIZATION = 90
ELEVATED_UTILIZATION = 70


@dataclass(frozen=True)
class LoadSegment:
    """A stretch of consecutive days over which an employee's load is constant."""

    interval: CalendarInterval
    hard: int
    soft: int

    @property
    def combined(self) -> int:
        return self.hard + self.soft


@dataclass(frozen=True)
class UtilizationTotals:
    hard_total: int = 0
    soft_total: int = 0
    combined_total: int = 0

    def plus(self, proposal: Proposal) -> "UtilizationTotals":
        """Totals after stacking a uniform proposal on top of these peaks."""
        if proposal.is_hard:
            return UtilizationTotals(
                self.hard_total + proposal.utilization,
                self.soft_total,
                self.combined_total + proposal.utilization,
            )
        return UtilizationTotals(
            self.hard_total,
            self.soft_total + proposal.utilization,
            self.combined_total + proposal.utilization,
        )


def load_profile(assignments: Iterable[Proposal], window: CalendarInterval) -> list[LoadSegment]:
    """
    Sweep the window and return the maximal segments of constant load.

    Each assignment contributes its utilization on every day of its interval that falls
    inside the window. Segments are contiguous and cover the whole window, including
    stretches with no load at all.
    """
    deltas: dict[date, list[int]] = defaultdict(lambda: [0, 0])
    for a in assignments:
        clipped = a.interval.intersection(window)
        if clipped is None:
            continue
        lane = 0 if a.is_hard else 1
        deltas[clipped.start][lane] += a.utilization
        deltas[clipped.end + timedelta(days=1)][lane] -= a.utilization

    boundaries = sorted(d for d in deltas if d <= window.end)
    if not boundaries or boundaries[0] != window.start:
        boundaries.insert(0, window.start)

    segments: list[LoadSegment] = []
    hard = soft = 0
    for i, day in enumerate(boundaries):
        change = deltas.get(day)
        if change:
            hard += change[0]
            soft += change[1]
        last = boundaries[i + 1] - timedelta(days=1) if i + 1 < len(boundaries) else window.end
        if segments and segments[-1].hard == hard and segments[-1].soft == soft:
            prev = segments.pop()
            segments.append(LoadSegment(CalendarInterval(prev.interval.start, last), hard, soft))
        else:
            segments.append(LoadSegment(CalendarInterval(day, last), hard, soft))
    return segments


def accumulate(assignments: Iterable[Proposal], window: CalendarInterval) -> UtilizationTotals:
    """
    Peak day-level load inside the window, per lock type and combined.

    Each figure is the maximum over the window on its own, so the hard peak and the
    combined peak may come from different days.
    """
    segments = load_profile(assignments, window)
    return UtilizationTotals(
        hard_total=max(s.hard for s in segments),
        soft_total=max(s.soft for s in segments),
        combined_total=max(s.combined for s in segments),
    )


def utilization_band(percentage: int | float | None) -> str:
    if percentage is None:
        return "normal"
    if percentage >= HIGH_UTILIZATION:
        return "high"
    if percentage >= ELEVATED_UTILIZATION:
        return "elevated"
    return "normal"
