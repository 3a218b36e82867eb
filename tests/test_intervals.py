# tests/test_intervals.py
import itertools
from datetime import date

from teamsched.domain.states import HalfDaySlot
from teamsched.engine.intervals import (
    EndOrder,
    TaskInterval,
    compare_end,
    earliest_end,
    next_half_day,
    overlaps,
    slots_conflict,
)

AM = HalfDaySlot.MORNING
PM = HalfDaySlot.AFTERNOON


def iv(start: str, s_slot, end: str, e_slot) -> TaskInterval:
    return TaskInterval(date.fromisoformat(start), s_slot, date.fromisoformat(end), e_slot)


def _all_intervals():
    days = ["2024-01-09", "2024-01-10", "2024-01-11"]
    points = [(d, s) for d in days for s in (AM, PM)]
    for (sd, ss), (ed, es) in itertools.combinations_with_replacement(points, 2):
        yield iv(sd, ss, ed, es)


def test_slot_order():
    assert AM.ordinal < PM.ordinal


def test_overlaps_is_symmetric():
    intervals = list(_all_intervals())
    for a, b in itertools.product(intervals, repeat=2):
        assert overlaps(a, b) == overlaps(b, a)
        assert slots_conflict(a, b) == slots_conflict(b, a)


def test_overlaps_uses_half_day_keys():
    morning = iv("2024-01-10", AM, "2024-01-10", AM)
    afternoon = iv("2024-01-10", PM, "2024-01-10", PM)
    assert not overlaps(morning, afternoon)
    assert overlaps(iv("2024-01-09", AM, "2024-01-10", AM), morning)
    assert not overlaps(iv("2024-01-08", AM, "2024-01-09", PM), morning)


def test_single_day_slot_rule():
    morning = iv("2024-01-10", AM, "2024-01-10", AM)
    afternoon = iv("2024-01-10", PM, "2024-01-10", PM)
    full = iv("2024-01-10", AM, "2024-01-10", PM)

    assert slots_conflict(morning, morning)
    assert slots_conflict(afternoon, afternoon)
    assert not slots_conflict(morning, afternoon)
    assert slots_conflict(full, morning)
    assert slots_conflict(full, afternoon)


def test_multi_day_tasks_conflict_on_any_date_overlap():
    # ends Wednesday morning; the afternoon is free but still counts as taken
    multi = iv("2024-01-09", AM, "2024-01-10", AM)
    afternoon = iv("2024-01-10", PM, "2024-01-10", PM)
    assert not overlaps(multi, afternoon)
    assert slots_conflict(multi, afternoon)


def test_disjoint_dates_never_conflict():
    assert not slots_conflict(
        iv("2024-01-09", AM, "2024-01-09", PM),
        iv("2024-01-10", AM, "2024-01-12", PM),
    )


def test_compare_end():
    a = iv("2024-01-09", AM, "2024-01-10", AM)
    b = iv("2024-01-10", AM, "2024-01-10", PM)
    assert compare_end(a, b) is EndOrder.A_EARLIER
    assert compare_end(b, a) is EndOrder.B_EARLIER
    assert compare_end(a, iv("2024-01-10", AM, "2024-01-10", AM)) is EndOrder.EQUAL


def test_earliest_end_picks_smallest_end_key_first_on_ties():
    first = iv("2024-01-08", AM, "2024-01-10", AM)
    tie = iv("2024-01-09", AM, "2024-01-10", AM)
    later = iv("2024-01-08", AM, "2024-01-10", PM)
    assert earliest_end(later, first, tie) is first
    assert earliest_end(later) is later


def test_next_half_day():
    assert next_half_day(date(2024, 1, 10), AM) == (date(2024, 1, 10), PM)
    assert next_half_day(date(2024, 1, 10), PM) == (date(2024, 1, 11), AM)


def test_well_ordered():
    assert iv("2024-01-10", AM, "2024-01-10", AM).is_well_ordered()
    assert not iv("2024-01-10", PM, "2024-01-10", AM).is_well_ordered()
    assert not iv("2024-01-11", AM, "2024-01-10", PM).is_well_ordered()
