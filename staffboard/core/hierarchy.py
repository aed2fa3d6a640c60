from __future__ import annotations

import uuid
from typing import Callable


class CyclicHierarchy(ValueError):
    def __init__(self, employee_id, manager_id, chain: list):
        super().__init__(
            f"Setting {manager_id} as manager of {employee_id} would create a reporting cycle"
        )
        self.employee_id = employee_id
        self.manager_id = manager_id
        self.chain = chain


def check_reporting_line(
    employee_id: uuid.UUID,
    new_manager_id: uuid.UUID | None,
    manager_of: Callable[[uuid.UUID], uuid.UUID | None],
) -> None:
    """
    Walk the proposed manager's chain upwards and fail if it reaches the employee.

    manager_of returns the current manager of an employee (or None at the top).
    The walk stops at the first repeated id, so bad data that already loops
    elsewhere cannot hang the check.
    """
    if new_manager_id is None:
        return

    chain = [new_manager_id]
    seen = {new_manager_id}
    current = new_manager_id
    while current is not None:
        if current == employee_id:
            raise CyclicHierarchy(employee_id, new_manager_id, chain)
        current = manager_of(current)
        if current in seen:
            break
        if current is not None:
            chain.append(current)
            seen.add(current)
