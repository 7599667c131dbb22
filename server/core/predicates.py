"""
Predicate compiler: Criteria -> ordered tuple of field conditions.
Pure; condition order follows PRIORITY so equal criteria compile to equal predicates.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from core.criteria import Criteria
from core.errors import ConfigurationError
from core.models import EntityKind


class Comparison(str, Enum):
    equals = "equals"
    contains = "contains"
    gte = "gte"
    lte = "lte"
    one_of = "one_of"


@dataclass(frozen=True)
class Condition:
    field: str
    comparison: Comparison
    value: Any

    @property
    def key(self) -> tuple[str, Comparison]:
        return (self.field, self.comparison)


Predicate = tuple[Condition, ...]

# criteria attribute -> comparison, in compile order
PRIORITY: tuple[tuple[str, Comparison], ...] = (
    ("student_id", Comparison.equals),
    ("course_code", Comparison.equals),
    ("status", Comparison.equals),
    ("day", Comparison.equals),
    ("instructor", Comparison.equals),
    ("grade", Comparison.equals),
    ("semester", Comparison.equals),
    ("name", Comparison.contains),
    ("min_credits", Comparison.gte),
    ("max_credits", Comparison.lte),
    ("min_attendance", Comparison.gte),
    ("max_attendance", Comparison.lte),
    ("due_from", Comparison.gte),
    ("due_to", Comparison.lte),
    ("date_from", Comparison.gte),
    ("date_to", Comparison.lte),
)

# criteria attribute -> entity column
COLUMNS: dict[EntityKind, dict[str, str]] = {
    EntityKind.student: {
        "student_id": "id",
    },
    EntityKind.academic_profile: {
        "student_id": "student_id",
    },
    EntityKind.course: {
        "student_id": "student_id",
        "course_code": "course_code",
        "instructor": "instructor",
        "grade": "grade",
        "semester": "semester",
        "name": "course_name",
        "min_credits": "credits",
        "max_credits": "credits",
        "min_attendance": "attendance_percentage",
        "max_attendance": "attendance_percentage",
    },
    EntityKind.assignment: {
        "student_id": "student_id",
        "course_code": "course_code",
        "status": "status",
        "name": "title",
        "due_from": "due_date",
        "due_to": "due_date",
    },
    EntityKind.schedule: {
        "student_id": "student_id",
        "course_code": "course_code",
        "day": "day",
        "name": "title",
        "date_from": "date",
        "date_to": "date",
    },
}


def column_for(entity: EntityKind, attr: str) -> str:
    try:
        return COLUMNS[entity][attr]
    except KeyError:
        raise ConfigurationError(f"{entity.value} has no column for filter '{attr}'") from None


def compile_predicate(criteria: Criteria) -> Predicate:
    """Compile present criteria into conditions; all-absent criteria compile to ()."""
    present = criteria.present()
    conditions = []
    for attr, comparison in PRIORITY:
        if attr in present:
            column = column_for(criteria.entity, attr)
            conditions.append(Condition(column, comparison, present[attr]))
    return tuple(conditions)


def scoped(predicate: Predicate, scope: Iterable[Condition]) -> Predicate:
    """AND the fixed scope conditions onto a predicate; exact repeats are dropped."""
    taken = set(predicate)
    extra = []
    for condition in scope:
        if condition not in taken:
            taken.add(condition)
            extra.append(condition)
    return predicate + tuple(extra)
