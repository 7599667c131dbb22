from datetime import datetime

import pytest

from core.summary import grade_points, summarize

NOW = datetime(2024, 4, 8, 12, 0)


def _course(credits, grade, attendance=None):
    return {"credits": credits, "grade": grade, "attendance_percentage": attendance}


@pytest.mark.parametrize(
    "grade, points",
    [("A", 4.0), ("b+", 3.3), (" C- ", 1.7), ("F", 0.0), ("88/100", None), ("", None), (None, None)],
)
def test_grade_points(grade, points):
    assert grade_points(grade) == points


def test_gpa_is_credit_weighted():
    summary = summarize([_course(4, "B+", 88), _course(4, "A", 95)], [], now=NOW)
    assert summary["gpa"] == 3.65
    assert summary["total_credits"] == 8
    assert summary["average_attendance"] == 92
    assert summary["course_count"] == 2


def test_failing_grade_counts_and_ungraded_courses_do_not():
    summary = summarize([_course(3, "A"), _course(3, "F"), _course(4, None)], [], now=NOW)
    assert summary["gpa"] == 2.0
    assert summary["total_credits"] == 10


def test_empty_inputs():
    assert summarize([], [], now=NOW) == {
        "gpa": 0.0,
        "total_credits": 0,
        "average_attendance": 0,
        "upcoming_assignments": 0,
        "course_count": 0,
        "assignment_count": 0,
    }


def test_upcoming_counts_pending_work_inside_window():
    assignments = [
        {"status": "pending", "due_date": "2024-04-10T00:00:00+00:00"},
        {"status": "pending", "due_date": "2024-04-15T12:00:00+00:00"},
        {"status": "pending", "due_date": "2024-04-16T00:00:00+00:00"},
        {"status": "pending", "due_date": "2024-04-01T00:00:00+00:00"},
        {"status": "submitted", "due_date": "2024-04-09T00:00:00+00:00"},
        {"status": "pending", "due_date": None},
    ]
    summary = summarize([], assignments, now=NOW)
    assert summary["upcoming_assignments"] == 2
    assert summary["assignment_count"] == 6
    assert summarize([], assignments, now=NOW, window_days=30)["upcoming_assignments"] == 3
