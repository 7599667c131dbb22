import asyncio
from datetime import date, datetime

import pytest
from sqlmodel import Session

from core.db import build_engine
from core.errors import StoreError, ValidationError
from core.listings import get_listing, run_listing
from core.models import Assignment, AssignmentStatus, EntityKind, ScheduleEntry, ScheduleKind, Student, Weekday
from core.predicates import Comparison, Condition
from core.projections import select_projection
from core.store import Ordering, SqlModelExecutor


def _execute(engine, entity, predicate, view, ordering=(), limit=None, default_limit=None):
    with Session(engine) as session:
        executor = SqlModelExecutor(session, default_limit=default_limit)
        return asyncio.run(
            executor.execute(entity, predicate, select_projection(entity, view), ordering, limit)
        )


def _listing(engine, name, params, view=None):
    with Session(engine) as session:
        executor = SqlModelExecutor(session)
        return asyncio.run(
            run_listing(get_listing(name), params, executor, view=view, now=datetime(2024, 4, 8))
        )


def test_rows_hold_exactly_the_projected_fields(seeded):
    rows = _execute(
        seeded,
        EntityKind.course,
        (Condition("student_id", Comparison.equals, "S1"),),
        "past",
        ordering=(Ordering("course_code"),),
    )
    assert [r["course_code"] for r in rows] == ["CS100", "CS101", "MATH201"]
    assert set(rows[0]) == {"course_code", "course_name", "credits", "grade", "semester"}


def test_one_of_and_descending_order(seeded):
    rows = _execute(
        seeded,
        EntityKind.assignment,
        (
            Condition("student_id", Comparison.equals, "S1"),
            Condition("status", Comparison.one_of, (AssignmentStatus.graded,)),
        ),
        "past",
        ordering=(Ordering("due_date", descending=True),),
    )
    assert [r["title"] for r in rows] == ["Midterm", "Problem Set 1"]
    assert rows[1]["grade"] is None


def test_range_bounds_are_inclusive(seeded):
    rows = _listing(seeded, "assignments", {"studentId": "S1", "dueFrom": "2024-04-10", "dueTo": "2024-04-20"})
    assert [r["title"] for r in rows] == ["Lab", "Quiz"]

    courses = _listing(seeded, "courses", {"minCredits": "4", "maxCredits": "4"})
    assert [r["course_code"] for r in courses] == ["CS101", "MATH201"]

    events = _listing(seeded, "future-schedule", {"studentId": "S1", "fromDate": "2024-04-28", "toDate": "2024-05-10"})
    assert [e["title"] for e in events] == ["Guest Lecture", "Career Fair"]
    assert events[0]["date"] == "2024-04-28"


def test_contains_is_case_insensitive_and_literal(seeded):
    rows = _listing(seeded, "courses", {"courseName": "PROGRAM"})
    assert [r["course_code"] for r in rows] == ["CS101"]
    assert _listing(seeded, "courses", {"courseName": "%"}) == []
    assert _listing(seeded, "assignments", {"title": "_"}) == []


def test_weekly_schedule_follows_calendar_order(seeded):
    rows = _listing(seeded, "schedule-current", {"studentId": "S1"})
    assert [(r["day"], r["start_time"]) for r in rows] == [
        ("monday", "09:00"),
        ("monday", "13:00"),
        ("wednesday", "09:00"),
    ]


def test_empty_predicate_returns_all_rows(seeded):
    rows = _execute(seeded, EntityKind.student, (), "personal", ordering=(Ordering("id"),))
    assert [r["id"] for r in rows] == ["S1", "S2"]


def test_limit_caps_rows(seeded):
    assert len(_execute(seeded, EntityKind.assignment, (), "listing", limit=2)) == 2
    assert len(_execute(seeded, EntityKind.assignment, (), "listing", default_limit=3)) == 3
    assert len(_execute(seeded, EntityKind.assignment, (), "listing")) == 6


def test_missing_student_yields_empty_list(seeded):
    assert _listing(seeded, "course-current", {"studentId": "S404"}) == []


def test_database_failure_is_a_store_error():
    engine = build_engine("sqlite://")
    try:
        with pytest.raises(StoreError) as excinfo:
            _execute(engine, EntityKind.course, (), "listing")
        assert excinfo.value.__cause__ is not None
    finally:
        engine.dispose()


def test_statement_uses_projection_columns_only():
    with Session(build_engine("sqlite://")) as session:
        executor = SqlModelExecutor(session, default_limit=50)
        statement = executor.build_statement(
            EntityKind.schedule,
            (Condition("date", Comparison.gte, date(2024, 1, 1)),),
            select_projection(EntityKind.schedule, "events"),
            (Ordering("date"),),
        )
    sql = str(statement)
    assert "schedule_entry.title" in sql
    assert "schedule_entry.course_code" not in sql
    assert "LIMIT" in sql


def test_due_dates_are_stored_naive(engine):
    assert Assignment.__table__.c.due_date.type.timezone is False
    with Session(engine) as session:
        session.add(Student(id="S9"))
        session.add(Assignment(
            student_id="S9", course_code="CS101", title="Report",
            due_date=datetime(2024, 4, 10, 9, 30), status=AssignmentStatus.pending,
        ))
        session.commit()
    rows = _listing(engine, "assignments", {"dueFrom": "2024-04-10", "dueTo": "2024-04-10"})
    assert [(r["title"], r["due_date"]) for r in rows] == [("Report", "2024-04-10T09:30:00+00:00")]


def test_row_cap_keeps_earliest_weekdays(engine):
    with Session(engine) as session:
        session.add(Student(id="S9"))
        for day in (Weekday.monday, Weekday.friday, Weekday.tuesday):
            session.add(ScheduleEntry(
                student_id="S9", kind=ScheduleKind.weekly, day=day,
                course_code="CS101", start_time="09:00", end_time="10:00",
            ))
        session.commit()
    with Session(engine) as session:
        executor = SqlModelExecutor(session, default_limit=2)
        rows = asyncio.run(run_listing(get_listing("schedule-current"), {"studentId": "S9"}, executor))
    assert [r["day"] for r in rows] == ["monday", "tuesday"]


@pytest.mark.parametrize("descending, expected", [(False, ["A", "A", "B+"]), (True, ["B+", "A", "A"])])
def test_row_cap_sorts_missing_values_last(seeded, descending, expected):
    rows = _execute(
        seeded,
        EntityKind.course,
        (),
        "listing",
        ordering=(Ordering("grade", descending=descending),),
        limit=3,
    )
    assert [r["grade"] for r in rows] == expected


def test_oversized_count_is_rejected_before_the_store(seeded):
    with pytest.raises(ValidationError):
        _listing(seeded, "courses", {"minCredits": str(10**30)})
