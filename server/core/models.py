import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel


class CourseTerm(str, Enum):
    current = "current"
    past = "past"


class AssignmentStatus(str, Enum):
    """pending -> submitted -> graded; graded is terminal."""
    pending = "pending"
    submitted = "submitted"
    graded = "graded"


class ScheduleKind(str, Enum):
    weekly = "weekly"
    event = "event"


class Weekday(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"

    @property
    def position(self) -> int:
        return list(Weekday).index(self)


class EntityKind(str, Enum):
    student = "student"
    academic_profile = "academic_profile"
    course = "course"
    assignment = "assignment"
    schedule = "schedule"


class Student(SQLModel, table=True):
    id: str = Field(primary_key=True, index=True)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    department: Optional[str] = None
    bio: Optional[str] = None

    academic_profile: Optional["AcademicProfile"] = Relationship(
        back_populates="student", sa_relationship_kwargs={"uselist": False}
    )
    courses: list["Course"] = Relationship(back_populates="student")
    assignments: list["Assignment"] = Relationship(back_populates="student")
    schedule: list["ScheduleEntry"] = Relationship(back_populates="student")


class AcademicProfile(SQLModel, table=True):
    __tablename__ = "academic_profile"

    student_id: str = Field(foreign_key="student.id", primary_key=True)
    program: Optional[str] = None
    academic_status: Optional[str] = None
    enrollment_status: Optional[str] = None
    academic_advisor: Optional[str] = None
    advisor_email: Optional[str] = None
    expected_graduation: Optional[date] = None

    student: Student = Relationship(back_populates="academic_profile")


class Course(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: str = Field(foreign_key="student.id", index=True)
    course_code: str = Field(index=True)
    course_name: str
    credits: int = Field(default=3, gt=0)
    grade: Optional[str] = Field(default=None, description="Letter grade, null until assigned")
    attendance_percentage: float = Field(default=0, ge=0, le=100)
    instructor: Optional[str] = None
    description: Optional[str] = None
    semester: Optional[str] = Field(default=None, description="e.g. Fall 2023")
    term: CourseTerm = Field(default=CourseTerm.current, index=True)

    student: Student = Relationship(back_populates="courses")


class Assignment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: str = Field(foreign_key="student.id", index=True)
    course_code: str = Field(index=True)
    course_name: Optional[str] = None
    title: str
    due_date: datetime = Field(sa_type=DateTime(timezone=False), description="Naive UTC")
    status: AssignmentStatus = Field(default=AssignmentStatus.pending, index=True)
    grade: Optional[str] = Field(default=None, description="Present only once graded")
    description: Optional[str] = None
    feedback: Optional[str] = None

    student: Student = Relationship(back_populates="assignments")


class ScheduleEntry(SQLModel, table=True):
    __tablename__ = "schedule_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: str = Field(foreign_key="student.id", index=True)
    kind: ScheduleKind = Field(default=ScheduleKind.weekly, index=True)
    day: Optional[Weekday] = Field(default=None, description="Weekly rows")
    date: Optional[dt.date] = Field(default=None, description="Event rows")
    course_code: Optional[str] = None
    course_name: Optional[str] = None
    title: Optional[str] = None
    instructor: Optional[str] = None
    start_time: Optional[str] = Field(default=None, description="HH:MM")
    end_time: Optional[str] = Field(default=None, description="HH:MM")
    location: Optional[str] = None

    student: Student = Relationship(back_populates="schedule")


ENTITY_MODELS: dict[EntityKind, type[SQLModel]] = {
    EntityKind.student: Student,
    EntityKind.academic_profile: AcademicProfile,
    EntityKind.course: Course,
    EntityKind.assignment: Assignment,
    EntityKind.schedule: ScheduleEntry,
}


def entity_columns(entity: EntityKind) -> tuple[str, ...]:
    """Column names of the table behind an entity kind, in table order."""
    return tuple(ENTITY_MODELS[entity].__table__.columns.keys())
