#!/usr/bin/env python3
"""
Seed a demo student with courses, assignments and schedule entries.
Usage: python create_test_data.py
"""
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

# make core importable when run as a script
server_root = Path(__file__).resolve().parent
sys.path.insert(0, str(server_root))

from sqlmodel import Session, select

from core.db import engine, init_db
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

DEMO_STUDENT_ID = "S1001"

CURRENT_COURSES = [
    ("CS101", "Introduction to Programming", 4, "A", 95, "Dr. Alan Smith", "Programming fundamentals in Python"),
    ("MATH201", "Calculus II", 4, "B+", 88, "Dr. Maria Garcia", "Integration techniques and series"),
    ("ENG102", "Academic Writing", 3, "A-", 92, "Prof. James Wilson", "Research essays and argumentation"),
    ("PHYS101", "Physics I", 4, None, 85, "Dr. Robert Chen", "Mechanics and waves"),
]

PAST_COURSES = [
    ("CS100", "Computing Basics", 3, "A", "Fall 2022"),
    ("MATH101", "Calculus I", 4, "B+", "Fall 2022"),
    ("ENG101", "Composition", 3, "A-", "Spring 2023"),
]

WEEKLY = [
    (Weekday.monday, "CS101", "Introduction to Programming", "Dr. Alan Smith", "09:00", "10:30", "Tech Building 101"),
    (Weekday.monday, "MATH201", "Calculus II", "Dr. Maria Garcia", "13:00", "14:30", "Science Hall 305"),
    (Weekday.tuesday, "ENG102", "Academic Writing", "Prof. James Wilson", "11:00", "12:30", "Humanities 210"),
    (Weekday.wednesday, "CS101", "Introduction to Programming", "Dr. Alan Smith", "09:00", "10:30", "Tech Building 101"),
    (Weekday.thursday, "PHYS101", "Physics I", "Dr. Robert Chen", "14:00", "15:30", "Science Hall 120"),
]


def create_test_data(bind=None, today: date = None) -> str:
    """Insert the demo rows once; returns the demo student id."""
    bind = bind or engine
    init_db(bind)
    today = today or date.today()
    noon = datetime.combine(today, datetime.min.time()) + timedelta(hours=12)

    with Session(bind) as session:
        student = session.get(Student, DEMO_STUDENT_ID)
        if student:
            print(f"ℹ️ Demo student already exists: {DEMO_STUDENT_ID}")
            return DEMO_STUDENT_ID

        session.add(Student(
            id=DEMO_STUDENT_ID,
            name="Jordan Lee",
            email="jordan.lee@example.edu",
            phone="555-0100",
            address="12 College Ave",
            department="Computer Science",
            bio="Second-year computer science student.",
        ))
        session.add(AcademicProfile(
            student_id=DEMO_STUDENT_ID,
            program="B.Sc. Computer Science",
            academic_status="Good Standing",
            enrollment_status="Full-time",
            academic_advisor="Dr. Emily Brown",
            advisor_email="emily.brown@example.edu",
            expected_graduation=date(today.year + 2, 5, 15),
        ))

        for code, name, credits, grade, attendance, instructor, description in CURRENT_COURSES:
            session.add(Course(
                student_id=DEMO_STUDENT_ID,
                course_code=code,
                course_name=name,
                credits=credits,
                grade=grade,
                attendance_percentage=attendance,
                instructor=instructor,
                description=description,
                semester="Fall 2023",
                term=CourseTerm.current,
            ))
        for code, name, credits, grade, semester in PAST_COURSES:
            session.add(Course(
                student_id=DEMO_STUDENT_ID,
                course_code=code,
                course_name=name,
                credits=credits,
                grade=grade,
                attendance_percentage=100,
                semester=semester,
                term=CourseTerm.past,
            ))

        assignments = [
            ("CS101", "Introduction to Programming", "Programming Assignment 3", 3, AssignmentStatus.pending, None),
            ("MATH201", "Calculus II", "Problem Set 5", 6, AssignmentStatus.pending, None),
            ("ENG102", "Academic Writing", "Research Essay Draft", 10, AssignmentStatus.submitted, None),
            ("CS101", "Introduction to Programming", "Programming Assignment 2", -14, AssignmentStatus.graded, "88/100"),
            ("MATH201", "Calculus II", "Problem Set 4", -7, AssignmentStatus.graded, "92/100"),
            ("PHYS101", "Physics I", "Lab Report 1", -3, AssignmentStatus.graded, None),
        ]
        for code, course_name, title, offset, state, grade in assignments:
            session.add(Assignment(
                student_id=DEMO_STUDENT_ID,
                course_code=code,
                course_name=course_name,
                title=title,
                due_date=noon + timedelta(days=offset),
                status=state,
                grade=grade,
            ))

        for day, code, name, instructor, start, end, room in WEEKLY:
            session.add(ScheduleEntry(
                student_id=DEMO_STUDENT_ID,
                kind=ScheduleKind.weekly,
                day=day,
                course_code=code,
                course_name=name,
                title=name,
                instructor=instructor,
                start_time=start,
                end_time=end,
                location=room,
            ))
        events = [
            ("Guest Lecture: AI Ethics", 5, "14:00", "16:00", "Auditorium"),
            ("Study Group - MATH201", 6, "15:00", "17:00", "Library Study Room 3"),
            ("Career Fair", 14, "10:00", "15:00", "Student Center"),
        ]
        for title, offset, start, end, location in events:
            session.add(ScheduleEntry(
                student_id=DEMO_STUDENT_ID,
                kind=ScheduleKind.event,
                date=today + timedelta(days=offset),
                title=title,
                start_time=start,
                end_time=end,
                location=location,
            ))
        session.commit()

        courses = session.exec(select(Course).where(Course.student_id == DEMO_STUDENT_ID)).all()
        print(f"✅ Demo student created: {DEMO_STUDENT_ID} ({len(courses)} courses)")

    return DEMO_STUDENT_ID


if __name__ == "__main__":
    try:
        student_id = create_test_data()
        print(f"\nTry: http://localhost:8000/api/dashboard?studentId={student_id}")
    except Exception as e:
        print(f"❌ Seeding failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
