import uuid

import pytest

from staffboard.allocation import AllocationError
from staffboard.core.hierarchy import CyclicHierarchy, check_reporting_line


def ids(n):
    return [uuid.uuid4() for _ in range(n)]


def test_clearing_manager_is_always_allowed():
    a, = ids(1)
    check_reporting_line(a, None, {}.get)


def test_self_management_is_a_cycle():
    a, = ids(1)
    with pytest.raises(CyclicHierarchy):
        check_reporting_line(a, a, {}.get)


def test_indirect_cycle_reports_chain():
    ceo, vp, lead = ids(3)
    managers = {vp: ceo, lead: vp}

    with pytest.raises(CyclicHierarchy) as exc:
        # ceo -> lead would close ceo <- vp <- lead
        check_reporting_line(ceo, lead, managers.get)

    assert exc.value.chain == [lead, vp, ceo]


def test_valid_reassignment_passes():
    ceo, vp, lead, dev = ids(4)
    managers = {vp: ceo, lead: vp, dev: lead}
    check_reporting_line(dev, vp, managers.get)


def test_existing_loop_elsewhere_terminates():
    a, b, c = ids(3)
    # a and b already point at each other; c is outside the loop
    managers = {a: b, b: a}
    check_reporting_line(c, a, managers.get)


def test_cycle_error_is_outside_allocation_errors():
    a, = ids(1)
    with pytest.raises(ValueError) as exc:
        check_reporting_line(a, a, {}.get)
    assert not isinstance(exc.value, AllocationError)
