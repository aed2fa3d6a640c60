from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from enum import Enum

from staffboard.allocation.errors import InvalidProposal
from staffboard.allocation.interval import CalendarInterval

MAX_UTILIZATION = 100


class LockType(str, Enum):
    HARD = "hard"
    SOFT = "soft"


def _check_utilization(utilization: int) -> None:
    if isinstance(utilization, bool) or not isinstance(utilization, int):
        raise InvalidProposal(f"Utilization must be an integer percentage, got {utilization!r}")
    if not 0 <= utilization <= MAX_UTILIZATION:
        raise InvalidProposal(f"Utilization must be between 0 and {MAX_UTILIZATION}, got {utilization}")


@dataclass(frozen=True)
class Proposal:
    """An assignment the caller would like to make, before it has an identifier."""

    employee_id: uuid.UUID
    project_id: uuid.UUID
    role_id: uuid.UUID | None
    interval: CalendarInterval
    utilization: int
    lock_type: LockType = LockType.SOFT

    def __post_init__(self):
        _check_utilization(self.utilization)
        # accept plain strings ("hard"/"soft") from callers
        try:
            lock_type = LockType(self.lock_type)
        except ValueError:
            raise InvalidProposal(f"Unknown lock type {self.lock_type!r}") from None
        object.__setattr__(self, "lock_type", lock_type)

    @property
    def is_hard(self) -> bool:
        return self.lock_type is LockType.HARD


@dataclass(frozen=True)
class Assignment(Proposal):
    id: uuid.UUID = None  # type: ignore[assignment]

    def __post_init__(self):
        super().__post_init__()
        if self.id is None:
            raise InvalidProposal("Assignment requires an identifier")

    @classmethod
    def from_proposal(cls, proposal: Proposal, assignment_id: uuid.UUID | None = None) -> "Assignment":
        return cls(
            employee_id=proposal.employee_id,
            project_id=proposal.project_id,
            role_id=proposal.role_id,
            interval=proposal.interval,
            utilization=proposal.utilization,
            lock_type=proposal.lock_type,
            id=assignment_id or uuid.uuid4(),
        )

    def as_proposal(self, **changes) -> Proposal:
        fields = {
            "employee_id": self.employee_id,
            "project_id": self.project_id,
            "role_id": self.role_id,
            "interval": self.interval,
            "utilization": self.utilization,
            "lock_type": self.lock_type,
        }
        fields.update(changes)
        return Proposal(**fields)

    def evolve(self, **changes) -> "Assignment":
        return replace(self, **changes)
