# tests/test_containment.py
from datetime import date

from teamsched.engine.containment import (
    DatedRecord,
    first_child_outside,
    first_overlapping_sibling,
    within_parent,
)
from teamsched.engine.intervals import DateRange


def dr(start: str, end: str) -> DateRange:
    return DateRange(date.fromisoformat(start), date.fromisoformat(end))


JANUARY = dr("2024-01-01", "2024-01-31")


def test_missing_parent_range_places_no_constraint():
    assert within_parent(dr("1999-01-01", "2099-12-31"), None)


def test_child_must_lie_within_parent():
    assert within_parent(dr("2024-01-05", "2024-01-20"), JANUARY)
    assert within_parent(JANUARY, JANUARY)
    assert not within_parent(dr("2024-01-05", "2024-02-01"), JANUARY)
    assert not within_parent(dr("2023-12-31", "2024-01-10"), JANUARY)


def test_first_overlapping_sibling_returns_first_conflict():
    siblings = [
        DatedRecord("r0", "undated", None),
        DatedRecord("r1", "early", dr("2024-01-01", "2024-01-04")),
        DatedRecord("r2", "middle", dr("2024-01-10", "2024-01-15")),
        DatedRecord("r3", "late", dr("2024-01-14", "2024-01-20")),
    ]
    hit = first_overlapping_sibling(dr("2024-01-12", "2024-01-16"), siblings)
    assert hit is not None and hit.id == "r2"


def test_sibling_ranges_sharing_a_day_overlap():
    siblings = [DatedRecord("r1", "early", dr("2024-01-01", "2024-01-04"))]
    assert first_overlapping_sibling(dr("2024-01-04", "2024-01-08"), siblings) is not None
    assert first_overlapping_sibling(dr("2024-01-05", "2024-01-08"), siblings) is None


def test_first_child_outside_new_range():
    children = [
        DatedRecord("t1", "inside", dr("2024-01-05", "2024-01-06")),
        DatedRecord("t2", "undated", None),
        DatedRecord("t3", "spills over", dr("2024-01-25", "2024-02-02")),
    ]
    hit = first_child_outside(JANUARY, children)
    assert hit is not None and hit.id == "t3"
    assert first_child_outside(dr("2024-01-01", "2024-02-29"), children) is None
