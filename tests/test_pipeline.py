# tests/test_pipeline.py
from datetime import date

import pytest

from teamsched.domain.errors import (
    CapacityExceededError,
    ContainmentViolationError,
    InvalidPriorityError,
    PriorityCollisionError,
    SiblingOverlapError,
    TimeSlotConflictError,
    ValidationError,
)
from teamsched.domain.states import HalfDaySlot
from teamsched.engine.admission import ScheduledTask
from teamsched.engine.containment import DatedRecord
from teamsched.engine.intervals import DateRange, TaskInterval
from teamsched.engine.pipeline import (
    TaskWriteRequest,
    TaskWriteSnapshot,
    check_priority,
    resolve_task_interval,
    validate_project_write,
    validate_requirement_write,
    validate_task_write,
)

AM = HalfDaySlot.MORNING
PM = HalfDaySlot.AFTERNOON

MARCH_SPRINT = DateRange(date(2024, 3, 1), date(2024, 3, 15))


def dr(start: str, end: str) -> DateRange:
    return DateRange(date.fromisoformat(start), date.fromisoformat(end))


def scheduled(task_id, priority, start, end, requirement_id=None, user_id="alice"):
    return ScheduledTask(
        id=task_id,
        user_id=user_id,
        priority=priority,
        interval=TaskInterval(date.fromisoformat(start), AM, date.fromisoformat(end), PM),
        requirement_id=requirement_id,
    )


def request(**overrides) -> TaskWriteRequest:
    fields = dict(
        user_id="alice",
        priority=1,
        plan_start_date=date(2024, 3, 5),
        duration_workdays=3,
        requirement_id="req-1",
    )
    fields.update(overrides)
    return TaskWriteRequest(**fields)


def test_new_task_in_empty_requirement_resolves_end_date(weekdays):
    interval = validate_task_write(
        weekdays, request(), TaskWriteSnapshot(requirement_range=MARCH_SPRINT)
    )
    assert interval == TaskInterval(date(2024, 3, 5), AM, date(2024, 3, 7), PM)


def test_task_running_past_requirement_end_is_rejected(weekdays):
    # Tue 12th + 5 workdays ends Monday the 18th
    with pytest.raises(ContainmentViolationError) as err:
        validate_task_write(
            weekdays,
            request(plan_start_date=date(2024, 3, 12), duration_workdays=5),
            TaskWriteSnapshot(requirement_range=MARCH_SPRINT),
        )
    assert err.value.details["child_range"] == {"start": "2024-03-12", "end": "2024-03-18"}
    assert err.value.details["parent_range"] == {"start": "2024-03-01", "end": "2024-03-15"}


def test_requirement_without_dates_does_not_constrain(weekdays):
    interval = validate_task_write(
        weekdays, request(duration_workdays=30), TaskWriteSnapshot(requirement_range=None)
    )
    assert interval.end_date == date(2024, 4, 15)


@pytest.mark.parametrize("priority", [-1, 6, 100])
def test_priority_out_of_range(weekdays, priority):
    with pytest.raises(InvalidPriorityError):
        validate_task_write(weekdays, request(priority=priority), TaskWriteSnapshot())


def test_priority_bounds_are_inclusive():
    check_priority(0)
    check_priority(5)


def test_end_before_start_is_invalid(weekdays):
    with pytest.raises(ValidationError) as err:
        resolve_task_interval(weekdays, date(2024, 3, 5), PM, 1, AM)
    assert err.value.code == "INVALID_INTERVAL"


def test_same_requirement_collision_rejected_even_with_distinct_priorities(weekdays):
    snapshot = TaskWriteSnapshot(
        requirement_range=MARCH_SPRINT,
        person_tasks=[scheduled("t1", 4, "2024-03-06", "2024-03-06", requirement_id="req-1")],
    )
    with pytest.raises(TimeSlotConflictError) as err:
        validate_task_write(weekdays, request(), snapshot)
    assert err.value.details["conflicting_id"] == "t1"


def test_collision_in_another_requirement_goes_to_admission(weekdays):
    snapshot = TaskWriteSnapshot(
        requirement_range=MARCH_SPRINT,
        person_tasks=[scheduled("t1", 4, "2024-03-06", "2024-03-06", requirement_id="req-2")],
    )
    validate_task_write(weekdays, request(), snapshot)

    with pytest.raises(PriorityCollisionError) as err:
        validate_task_write(weekdays, request(priority=4), snapshot)
    assert err.value.details == {"conflicting_id": "t1", "priority": 4}


def test_capacity_rejection_carries_suggestion(weekdays):
    snapshot = TaskWriteSnapshot(
        person_tasks=[
            scheduled("t1", 1, "2024-03-04", "2024-03-05"),
            scheduled("t2", 2, "2024-03-05", "2024-03-08"),
        ],
    )
    with pytest.raises(CapacityExceededError) as err:
        validate_task_write(weekdays, request(requirement_id=None, priority=3), snapshot)
    assert err.value.details["suggested_date"] == "2024-03-06"
    assert err.value.details["suggested_slot"] == "MORNING"
    assert sorted(err.value.details["conflicting_ids"]) == ["t1", "t2"]


def test_updating_a_task_ignores_its_previous_version(weekdays):
    snapshot = TaskWriteSnapshot(
        requirement_range=MARCH_SPRINT,
        person_tasks=[scheduled("t1", 1, "2024-03-05", "2024-03-07", requirement_id="req-1")],
    )
    validate_task_write(weekdays, request(task_id="t1"), snapshot)


def test_requirement_must_fit_its_project():
    with pytest.raises(ContainmentViolationError):
        validate_requirement_write(
            dr("2024-01-05", "2024-02-01"), 1, project_range=dr("2024-01-01", "2024-01-31")
        )
    validate_requirement_write(
        dr("2024-01-05", "2024-01-31"), 1, project_range=dr("2024-01-01", "2024-01-31")
    )


def test_requirement_siblings_must_not_overlap():
    siblings = [DatedRecord("r1", "Login flow", dr("2024-01-01", "2024-01-10"))]
    with pytest.raises(SiblingOverlapError) as err:
        validate_requirement_write(dr("2024-01-10", "2024-01-20"), 1, siblings=siblings)
    assert err.value.details["conflicting_id"] == "r1"
    assert err.value.details["conflicting_title"] == "Login flow"


def test_requirement_dates_must_keep_existing_tasks_inside():
    tasks = [DatedRecord("t1", "API design", dr("2024-01-15", "2024-01-18"))]
    with pytest.raises(ContainmentViolationError) as err:
        validate_requirement_write(dr("2024-01-01", "2024-01-16"), 1, child_tasks=tasks)
    assert err.value.details["child_id"] == "t1"


def test_undated_requirement_skips_date_checks():
    validate_requirement_write(
        None,
        2,
        project_range=dr("2024-01-01", "2024-01-31"),
        siblings=[DatedRecord("r1", "x", dr("2024-01-01", "2024-01-31"))],
    )


def test_project_dates_must_keep_requirements_inside():
    reqs = [DatedRecord("r1", "Checkout", dr("2024-02-01", "2024-02-10"))]
    with pytest.raises(ContainmentViolationError):
        validate_project_write(dr("2024-01-01", "2024-01-31"), 0, child_requirements=reqs)
    validate_project_write(dr("2024-01-01", "2024-02-29"), 0, child_requirements=reqs)
    with pytest.raises(InvalidPriorityError):
        validate_project_write(None, 9)
