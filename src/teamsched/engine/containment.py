# src/teamsched/engine/containment.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .intervals import DateRange


@dataclass(frozen=True)
class DatedRecord:
    """
    Engine view of a requirement, project or task: enough to name it in an
    error message. `range` is None when the record has no dates yet.
    """
    id: str
    title: str
    range: Optional[DateRange]


def within_parent(child: DateRange, parent: Optional[DateRange]) -> bool:
    """A missing parent range places no constraint on the child."""
    if parent is None:
        return True
    return child.start >= parent.start and child.end <= parent.end


def ranges_overlap(a: DateRange, b: DateRange) -> bool:
    return not (a.end < b.start or a.start > b.end)


def first_overlapping_sibling(
    proposed: DateRange,
    siblings: Iterable[DatedRecord],
) -> Optional[DatedRecord]:
    for sibling in siblings:
        if sibling.range is not None and ranges_overlap(proposed, sibling.range):
            return sibling
    return None


def first_child_outside(
    proposed: DateRange,
    children: Iterable[DatedRecord],
) -> Optional[DatedRecord]:
    """First existing child that would no longer fit inside `proposed`."""
    for child in children:
        if child.range is not None and not within_parent(child.range, proposed):
            return child
    return None
