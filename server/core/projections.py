"""
Projection registry: the exact field set each (entity, view) pair returns.
Registration validates against the table columns so a drifting view fails at import.
"""
from dataclasses import dataclass

from core.errors import ConfigurationError
from core.models import EntityKind, entity_columns


@dataclass(frozen=True)
class Projection:
    entity: EntityKind
    view: str
    fields: tuple[str, ...]

    def __contains__(self, field_name: str) -> bool:
        return field_name in self.fields


class ProjectionRegistry:
    def __init__(self):
        self._views: dict[tuple[EntityKind, str], Projection] = {}

    def register(self, entity: EntityKind, view: str, fields) -> Projection:
        fields = tuple(fields)
        if not fields:
            raise ConfigurationError(f"view '{view}' of {entity.value} has no fields")
        duplicates = sorted({f for f in fields if fields.count(f) > 1})
        if duplicates:
            raise ConfigurationError(
                f"view '{view}' of {entity.value} repeats fields: {', '.join(duplicates)}"
            )
        columns = entity_columns(entity)
        unknown = [f for f in fields if f not in columns]
        if unknown:
            raise ConfigurationError(
                f"view '{view}' of {entity.value} names unknown columns: {', '.join(unknown)}"
            )
        key = (entity, view)
        if key in self._views:
            raise ConfigurationError(f"view '{view}' of {entity.value} is already registered")
        projection = Projection(entity=entity, view=view, fields=fields)
        self._views[key] = projection
        return projection

    def select(self, entity: EntityKind, view: str) -> Projection:
        try:
            return self._views[(entity, view)]
        except KeyError:
            raise ConfigurationError(f"no view '{view}' registered for {entity.value}") from None

    def views(self, entity: EntityKind) -> list[str]:
        return [view for (kind, view) in self._views if kind == entity]

    def __iter__(self):
        return iter(self._views.values())


registry = ProjectionRegistry()

registry.register(
    EntityKind.student,
    "personal",
    ("id", "name", "email", "phone", "address", "department", "bio"),
)
registry.register(
    EntityKind.academic_profile,
    "academic",
    (
        "program",
        "academic_status",
        "enrollment_status",
        "academic_advisor",
        "advisor_email",
        "expected_graduation",
    ),
)

registry.register(
    EntityKind.course,
    "listing",
    (
        "course_code",
        "course_name",
        "credits",
        "grade",
        "attendance_percentage",
        "instructor",
        "description",
    ),
)
registry.register(
    EntityKind.course,
    "past",
    ("course_code", "course_name", "credits", "grade", "semester"),
)
registry.register(EntityKind.course, "detail", entity_columns(EntityKind.course))

registry.register(
    EntityKind.assignment,
    "listing",
    ("id", "title", "course_code", "course_name", "due_date", "status", "description"),
)
registry.register(
    EntityKind.assignment,
    "past",
    ("id", "title", "course_code", "course_name", "due_date", "status", "grade", "feedback"),
)
registry.register(EntityKind.assignment, "detail", entity_columns(EntityKind.assignment))

registry.register(
    EntityKind.schedule,
    "weekly",
    ("day", "course_code", "course_name", "instructor", "location", "start_time", "end_time"),
)
registry.register(
    EntityKind.schedule,
    "events",
    ("id", "title", "date", "start_time", "end_time", "location"),
)


def select_projection(entity: EntityKind, view: str) -> Projection:
    return registry.select(entity, view)
