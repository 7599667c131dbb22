import os

# the app module builds its engine at import time
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date, datetime

import pytest
from sqlmodel import Session

from core.db import build_engine, get_session, init_db
from core.models import (
    AcademicProfile,
    Assignment,
    AssignmentStatus,
    Course,
    CourseTerm,
    ScheduleEntry,
    ScheduleKind,
    Student,
    Weekday,
)
from core.predicates import Comparison


def _matches(row, condition):
    value = row.get(condition.field)
    if condition.comparison is Comparison.equals:
        return value == condition.value
    if value is None:
        return False
    if condition.comparison is Comparison.contains:
        return condition.value.lower() in value.lower()
    if condition.comparison is Comparison.gte:
        return value >= condition.value
    if condition.comparison is Comparison.lte:
        return value <= condition.value
    if condition.comparison is Comparison.one_of:
        return value in condition.value
    raise AssertionError(condition)


class FakeExecutor:
    """In-memory stand-in for the store; records every call."""

    def __init__(self, rows=(), error=None):
        self.rows = list(rows)
        self.error = error
        self.calls = []

    async def execute(self, entity, predicate, projection, ordering, limit=None):
        self.calls.append((entity, predicate, projection, tuple(ordering), limit))
        if self.error is not None:
            raise self.error
        matched = [row for row in self.rows if all(_matches(row, c) for c in predicate)]
        return [{name: row.get(name) for name in projection.fields} for row in matched]


@pytest.fixture
def fake_executor():
    return FakeExecutor


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded(engine):
    with Session(engine) as session:
        session.add(Student(id="S1", name="Ada Park", email="ada@example.edu", department="Computer Science"))
        session.add(Student(id="S2", name="Ben Cho"))
        session.add(AcademicProfile(
            student_id="S1",
            program="B.Sc. Computer Science",
            academic_status="Good Standing",
            enrollment_status="Full-time",
            academic_advisor="Dr. Emily Brown",
            advisor_email="emily.brown@example.edu",
            expected_graduation=date(2026, 5, 15),
        ))
        session.add(Course(
            student_id="S1", course_code="MATH201", course_name="Calculus II", credits=4,
            grade="B+", attendance_percentage=88, instructor="Dr. Garcia", term=CourseTerm.current,
        ))
        session.add(Course(
            student_id="S1", course_code="CS101", course_name="Introduction to Programming", credits=4,
            grade="A", attendance_percentage=95, instructor="Dr. Smith", term=CourseTerm.current,
        ))
        session.add(Course(
            student_id="S1", course_code="CS100", course_name="Computing Basics", credits=3,
            grade="A", attendance_percentage=100, semester="Fall 2022", term=CourseTerm.past,
        ))
        session.add(Course(
            student_id="S2", course_code="BIO110", course_name="General Biology", credits=3,
            attendance_percentage=70, term=CourseTerm.current,
        ))
        for title, due, state, grade in (
            ("Essay", datetime(2024, 5, 1), AssignmentStatus.pending, None),
            ("Lab", datetime(2024, 4, 10), AssignmentStatus.submitted, None),
            ("Quiz", datetime(2024, 4, 20), AssignmentStatus.pending, None),
            ("Midterm", datetime(2024, 3, 1), AssignmentStatus.graded, "A"),
            ("Problem Set 1", datetime(2024, 2, 15), AssignmentStatus.graded, None),
        ):
            session.add(Assignment(
                student_id="S1", course_code="CS101", course_name="Introduction to Programming",
                title=title, due_date=due, status=state, grade=grade,
            ))
        session.add(Assignment(
            student_id="S2", course_code="BIO110", title="Cell Diagram",
            due_date=datetime(2024, 4, 1), status=AssignmentStatus.pending,
        ))
        for day, code, start in (
            (Weekday.wednesday, "CS101", "09:00"),
            (Weekday.monday, "MATH201", "13:00"),
            (Weekday.monday, "CS101", "09:00"),
        ):
            session.add(ScheduleEntry(
                student_id="S1", kind=ScheduleKind.weekly, day=day, course_code=code,
                start_time=start, end_time="10:30", location="Room 1",
            ))
        session.add(ScheduleEntry(
            student_id="S1", kind=ScheduleKind.event, date=date(2024, 5, 10),
            title="Career Fair", start_time="10:00", end_time="15:00", location="Student Center",
        ))
        session.add(ScheduleEntry(
            student_id="S1", kind=ScheduleKind.event, date=date(2024, 4, 28),
            title="Guest Lecture", start_time="14:00", end_time="16:00", location="Auditorium",
        ))
        session.commit()
    return engine


@pytest.fixture
def client(seeded):
    from fastapi.testclient import TestClient
    from main import app

    def _session():
        with Session(seeded) as session:
            yield session

    app.dependency_overrides[get_session] = _session
    yield TestClient(app)
    app.dependency_overrides.clear()
