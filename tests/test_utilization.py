import uuid
from datetime import date

from staffboard.allocation import Assignment, CalendarInterval, accumulate, load_profile, utilization_band

EMP = uuid.uuid4()


def make(start, end, utilization, lock_type="hard"):
    return Assignment(
        id=uuid.uuid4(),
        employee_id=EMP,
        project_id=uuid.uuid4(),
        role_id=None,
        interval=CalendarInterval(start, end),
        utilization=utilization,
        lock_type=lock_type,
    )


def test_empty_window_has_zero_load():
    window = CalendarInterval(date(2026, 1, 1), date(2026, 1, 31))
    totals = accumulate([], window)
    assert (totals.hard_total, totals.soft_total, totals.combined_total) == (0, 0, 0)
    assert load_profile([], window)[0].interval == window


def test_disjoint_assignments_are_not_summed():
    # two 60% assignments that never share a day peak at 60, not 120
    first = make(date(2026, 1, 1), date(2026, 1, 15), 60)
    second = make(date(2026, 1, 16), date(2026, 1, 31), 60)
    window = CalendarInterval(date(2026, 1, 1), date(2026, 1, 31))

    assert accumulate([first, second], window).hard_total == 60


def test_peak_is_taken_per_day():
    a = make(date(2026, 1, 1), date(2026, 1, 20), 40)
    b = make(date(2026, 1, 10), date(2026, 1, 31), 30)
    c = make(date(2026, 1, 25), date(2026, 2, 10), 50, lock_type="soft")
    window = CalendarInterval(date(2026, 1, 1), date(2026, 1, 31))

    totals = accumulate([a, b, c], window)
    assert totals.hard_total == 70  # Jan 10-20
    assert totals.soft_total == 50
    assert totals.combined_total == 80  # Jan 25-31: 30 hard + 50 soft


def test_profile_segments_cover_window_contiguously():
    a = make(date(2026, 1, 5), date(2026, 1, 10), 40)
    b = make(date(2026, 1, 8), date(2026, 1, 12), 20, lock_type="soft")
    window = CalendarInterval(date(2026, 1, 1), date(2026, 1, 15))

    segments = load_profile([a, b], window)
    shape = [(s.interval.start.day, s.interval.end.day, s.hard, s.soft) for s in segments]
    assert shape == [
        (1, 4, 0, 0),
        (5, 7, 40, 0),
        (8, 10, 40, 20),
        (11, 12, 0, 20),
        (13, 15, 0, 0),
    ]


def test_adjacent_equal_load_segments_merge():
    a = make(date(2026, 1, 1), date(2026, 1, 10), 50)
    b = make(date(2026, 1, 11), date(2026, 1, 20), 50)
    window = CalendarInterval(date(2026, 1, 1), date(2026, 1, 20))

    segments = load_profile([a, b], window)
    assert len(segments) == 1
    assert segments[0].hard == 50


def test_assignments_outside_window_are_clipped():
    a = make(date(2025, 12, 1), date(2026, 1, 3), 70)
    window = CalendarInterval(date(2026, 1, 1), date(2026, 1, 5))

    segments = load_profile([a], window)
    assert segments[0].interval == CalendarInterval(date(2026, 1, 1), date(2026, 1, 3))
    assert segments[-1].interval == CalendarInterval(date(2026, 1, 4), date(2026, 1, 5))
    assert segments[-1].combined == 0


def test_utilization_band_thresholds():
    assert utilization_band(95) == "high"
    assert utilization_band(90) == "high"
    assert utilization_band(70) == "elevated"
    assert utilization_band(69) == "normal"
    assert utilization_band(None) == "normal"
