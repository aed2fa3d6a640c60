from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Iterable

from staffboard.allocation.errors import AllocationRejected, DuplicateAssignment, NotFound
from staffboard.allocation.interval import CalendarInterval
from staffboard.allocation.ledger import AssignmentLedger
from staffboard.allocation.models import Assignment, LockType, Proposal
from staffboard.allocation.resolver import ConflictResolver, Verdict
from staffboard.allocation.utilization import LoadSegment, load_profile
from staffboard.core.logging import get_logger

logger = get_logger(__name__)

_UNSET = object()


class EventKind(str, Enum):
    COMMITTED = "committed"
    RELEASED = "released"
    LOCK_CHANGED = "lock_changed"
    AMENDED = "amended"


@dataclass(frozen=True)
class AllocationEvent:
    kind: EventKind
    assignment: Assignment
    verdict: Verdict | None = None
    previous: Assignment | None = None

    @property
    def assignment_id(self) -> uuid.UUID:
        return self.assignment.id


class _EmployeeLock:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


CommitHook = Callable[[Assignment, Verdict], None]
ReleaseHook = Callable[[Assignment], None]
Listener = Callable[[AllocationEvent], None]


class AllocationService:
    """
    Validation gate in front of every assignment write.

    Mutations for one employee are serialized with a per-employee lock so that two
    commits cannot both be evaluated against the same stale load. Each mutating call
    accepts a persistence hook that runs under that lock before the ledger changes;
    if the hook raises, the ledger is left exactly as it was.

    Subscribed listeners are notified after the ledger has changed. They cannot veto
    a change; a failing listener is logged and the others still run.
    """

    def __init__(self, ledger: AssignmentLedger | None = None, resolver: ConflictResolver | None = None):
        self.ledger = ledger or AssignmentLedger()
        self.resolver = resolver or ConflictResolver()
        self._projects: dict[uuid.UUID, CalendarInterval] = {}
        self._projects_lock = threading.Lock()
        self._employee_locks: dict[uuid.UUID, _EmployeeLock] = {}
        self._registry_lock = threading.Lock()
        self._listeners: list[Listener] = []

    # ---- project calendar ----

    def register_project(self, project_id: uuid.UUID, interval: CalendarInterval) -> None:
        with self._projects_lock:
            self._projects[project_id] = interval

    def unregister_project(self, project_id: uuid.UUID) -> None:
        with self._projects_lock:
            self._projects.pop(project_id, None)

    def project_window(self, project_id: uuid.UUID) -> CalendarInterval:
        with self._projects_lock:
            window = self._projects.get(project_id)
        if window is None:
            raise NotFound("Project", project_id)
        return window

    # ---- events ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: AllocationEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("allocation_listener_failed", kind=event.kind.value, assignment_id=str(event.assignment_id))

    # ---- reads ----

    def get(self, assignment_id: uuid.UUID) -> Assignment:
        return self.ledger.get(assignment_id)

    def assignments_for(self, employee_id: uuid.UUID) -> tuple[Assignment, ...]:
        return self.ledger.assignments_for(employee_id)

    def load_profile(self, employee_id: uuid.UUID, window: CalendarInterval) -> list[LoadSegment]:
        return load_profile(self.ledger.overlapping(employee_id, window), window)

    def evaluate(self, proposal: Proposal, exclude: uuid.UUID | None = None) -> Verdict:
        window = self.project_window(proposal.project_id)
        overlaps = [
            a for a in self.ledger.overlapping(proposal.employee_id, proposal.interval)
            if a.id != exclude
        ]
        return self.resolver.evaluate(proposal, overlaps, window)

    def propose(
        self,
        employee_id: uuid.UUID,
        project_id: uuid.UUID,
        role_id: uuid.UUID | None,
        interval: CalendarInterval,
        utilization: int,
        lock_type: LockType | str,
    ) -> Verdict:
        """Evaluate a prospective assignment. Never touches the ledger."""
        proposal = Proposal(employee_id, project_id, role_id, interval, utilization, lock_type)
        return self.evaluate(proposal)

    # ---- writes ----

    @contextmanager
    def _employee_scope(self, employee_id: uuid.UUID):
        # entries live only while a caller holds or waits for them
        with self._registry_lock:
            entry = self._employee_locks.get(employee_id)
            if entry is None:
                entry = self._employee_locks[employee_id] = _EmployeeLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._registry_lock:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._employee_locks[employee_id]

    def commit(self, proposal: Proposal, on_commit: CommitHook | None = None) -> uuid.UUID:
        with self._employee_scope(proposal.employee_id):
            verdict = self.evaluate(proposal)
            if not verdict.accepted:
                logger.info(
                    "allocation_rejected",
                    employee_id=str(proposal.employee_id),
                    project_id=str(proposal.project_id),
                    reason=verdict.rejection_reason.value,
                )
                raise AllocationRejected(verdict)

            assignment = Assignment.from_proposal(proposal)
            if assignment.id in self.ledger:
                raise DuplicateAssignment(assignment.id)
            if on_commit is not None:
                on_commit(assignment, verdict)
            self.ledger.insert(assignment)

        logger.info(
            "allocation_committed",
            assignment_id=str(assignment.id),
            employee_id=str(assignment.employee_id),
            outcome=verdict.outcome.value,
        )
        self._emit(AllocationEvent(EventKind.COMMITTED, assignment, verdict))
        return assignment.id

    def release(self, assignment_id: uuid.UUID, on_release: ReleaseHook | None = None) -> Assignment:
        employee_id = self.ledger.get(assignment_id).employee_id
        with self._employee_scope(employee_id):
            # re-read under the lock; a concurrent release may have won
            assignment = self.ledger.get(assignment_id)
            if on_release is not None:
                on_release(assignment)
            self.ledger.remove(assignment_id)

        logger.info("assignment_released", assignment_id=str(assignment_id), employee_id=str(employee_id))
        self._emit(AllocationEvent(EventKind.RELEASED, assignment))
        return assignment

    def change_lock_type(
        self,
        assignment_id: uuid.UUID,
        new_lock_type: LockType | str,
        on_change: CommitHook | None = None,
    ) -> Verdict:
        return self._revise(assignment_id, EventKind.LOCK_CHANGED, on_change, lock_type=new_lock_type)

    def amend(
        self,
        assignment_id: uuid.UUID,
        *,
        interval: CalendarInterval | None = None,
        utilization: int | None = None,
        role_id=_UNSET,
        on_change: CommitHook | None = None,
    ) -> Verdict:
        changes = {}
        if interval is not None:
            changes["interval"] = interval
        if utilization is not None:
            changes["utilization"] = utilization
        if role_id is not _UNSET:
            changes["role_id"] = role_id
        return self._revise(assignment_id, EventKind.AMENDED, on_change, **changes)

    def _revise(self, assignment_id: uuid.UUID, kind: EventKind, hook: CommitHook | None, **changes) -> Verdict:
        employee_id = self.ledger.get(assignment_id).employee_id
        with self._employee_scope(employee_id):
            current = self.ledger.get(assignment_id)
            # the assignment is judged against its siblings only, never against itself
            verdict = self.evaluate(current.as_proposal(**changes), exclude=assignment_id)
            if not verdict.accepted:
                logger.info(
                    "allocation_revision_rejected",
                    assignment_id=str(assignment_id),
                    kind=kind.value,
                    reason=verdict.rejection_reason.value,
                )
                raise AllocationRejected(verdict)

            updated = current.evolve(**changes)
            if hook is not None:
                hook(updated, verdict)
            self.ledger.replace(updated)

        logger.info("allocation_revised", assignment_id=str(assignment_id), kind=kind.value, outcome=verdict.outcome.value)
        self._emit(AllocationEvent(kind, updated, verdict, previous=current))
        return verdict

    def load(self, assignments: Iterable[Assignment]) -> int:
        """
        Index assignments that were validated and persisted earlier (startup hydration).

        All or nothing: an identifier repeated in the batch or already in the ledger
        raises DuplicateAssignment before anything is indexed.
        """
        batch = list(assignments)
        seen = set()
        for assignment in batch:
            if assignment.id in seen or assignment.id in self.ledger:
                raise DuplicateAssignment(assignment.id)
            seen.add(assignment.id)
        for assignment in batch:
            self.ledger.insert(assignment)
        return len(batch)

    def available_on(self, employee_id: uuid.UUID, day: date) -> int:
        """Capacity left for an employee on a given day, counting hard and soft load."""
        segments = self.load_profile(employee_id, CalendarInterval.single(day))
        return max(0, self.resolver.capacity - segments[0].combined)
