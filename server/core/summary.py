from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from core.formatting import utc_now

GRADE_POINTS = {
    "A": 4.0, "A-": 3.7,
    "B+": 3.3, "B": 3.0, "B-": 2.7,
    "C+": 2.3, "C": 2.0, "C-": 1.7,
    "D+": 1.3, "D": 1.0, "D-": 0.7,
    "F": 0.0,
}


def grade_points(grade: Optional[str]) -> Optional[float]:
    if not grade:
        return None
    return GRADE_POINTS.get(grade.strip().upper())


def _parse_due(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    due = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if due.tzinfo is not None:
        due = due.astimezone(timezone.utc).replace(tzinfo=None)
    return due


def summarize(
    courses: Iterable[dict],
    assignments: Iterable[dict],
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> dict[str, Any]:
    """Dashboard metrics over formatted current-course and ongoing-assignment rows.

    GPA is credit-weighted over courses with a recognized letter grade; courses
    without one are left out rather than counted as zero.
    """
    courses = list(courses)
    assignments = list(assignments)
    now = now or utc_now()

    weighted = 0.0
    graded_credits = 0
    for course in courses:
        points = grade_points(course.get("grade"))
        if points is not None:
            weighted += points * (course.get("credits") or 0)
            graded_credits += course.get("credits") or 0

    attendance = [c["attendance_percentage"] for c in courses if c.get("attendance_percentage") is not None]

    window_end = now + timedelta(days=window_days)
    upcoming = 0
    for assignment in assignments:
        due = _parse_due(assignment.get("due_date"))
        if assignment.get("status") == "pending" and due is not None and now <= due <= window_end:
            upcoming += 1

    return {
        "gpa": round(weighted / graded_credits, 2) if graded_credits else 0.0,
        "total_credits": sum(c.get("credits") or 0 for c in courses),
        "average_attendance": round(sum(attendance) / len(attendance)) if attendance else 0,
        "upcoming_assignments": upcoming,
        "course_count": len(courses),
        "assignment_count": len(assignments),
    }
