from __future__ import annotations

import bisect
import itertools
import threading
import uuid
from collections import defaultdict

from staffboard.allocation.errors import DuplicateAssignment, NotFound
from staffboard.allocation.interval import CalendarInterval
from staffboard.allocation.models import Assignment


class AssignmentLedger:
    """
    In-memory index of committed assignments, keyed by employee.

    Each employee slot is kept sorted by (interval start, insertion sequence), so
    assignments_for() never has to sort. All reads hand back tuples copied under the
    lock: callers get a consistent snapshot they can iterate as often as they like.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._seq = itertools.count()
        # employee_id -> sorted list of (start, seq, assignment)
        self._slots: dict[uuid.UUID, list[tuple]] = defaultdict(list)
        # assignment_id -> (employee_id, start, seq)
        self._by_id: dict[uuid.UUID, tuple] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)

    def __contains__(self, assignment_id) -> bool:
        with self._lock:
            return assignment_id in self._by_id

    def employees(self) -> tuple[uuid.UUID, ...]:
        with self._lock:
            return tuple(emp for emp, slot in self._slots.items() if slot)

    def all(self) -> tuple[Assignment, ...]:
        with self._lock:
            return tuple(entry[2] for slot in self._slots.values() for entry in slot)

    def get(self, assignment_id: uuid.UUID) -> Assignment:
        with self._lock:
            key = self._by_id.get(assignment_id)
            if key is None:
                raise NotFound("Assignment", assignment_id)
            return self._find(key)[1]

    def assignments_for(self, employee_id: uuid.UUID) -> tuple[Assignment, ...]:
        with self._lock:
            slot = self._slots.get(employee_id, ())
            return tuple(entry[2] for entry in slot)

    def overlapping(self, employee_id: uuid.UUID, interval: CalendarInterval) -> tuple[Assignment, ...]:
        with self._lock:
            slot = self._slots.get(employee_id, ())
            out = []
            for start, _, assignment in slot:
                # slot is ordered by start; nothing after this can overlap
                if start > interval.end:
                    break
                if assignment.interval.overlaps(interval):
                    out.append(assignment)
            return tuple(out)

    def insert(self, assignment: Assignment) -> None:
        with self._lock:
            if assignment.id in self._by_id:
                raise DuplicateAssignment(assignment.id)
            self._place(assignment, next(self._seq))

    def remove(self, assignment_id: uuid.UUID) -> Assignment:
        with self._lock:
            key = self._by_id.get(assignment_id)
            if key is None:
                raise NotFound("Assignment", assignment_id)
            slot = self._slots[key[0]]
            idx, assignment = self._find(key)
            del slot[idx]
            if not slot:
                del self._slots[key[0]]
            del self._by_id[assignment_id]
            return assignment

    def replace(self, assignment: Assignment) -> Assignment:
        """Swap in an updated copy of an assignment, keeping its insertion sequence."""
        with self._lock:
            key = self._by_id.get(assignment.id)
            if key is None:
                raise NotFound("Assignment", assignment.id)
            previous = self.remove(assignment.id)
            self._place(assignment, key[2])
            return previous

    def _place(self, assignment: Assignment, seq: int) -> None:
        start = assignment.interval.start
        bisect.insort(self._slots[assignment.employee_id], (start, seq, assignment))
        self._by_id[assignment.id] = (assignment.employee_id, start, seq)

    def _find(self, key: tuple) -> tuple[int, Assignment]:
        employee_id, start, seq = key
        slot = self._slots[employee_id]
        idx = bisect.bisect_left(slot, (start, seq))
        return idx, slot[idx][2]
