"""
Listing declarations and the request pipeline
normalize -> compile -> scope -> project -> execute -> format.
Declaring a listing resolves its projections, so wiring errors surface at import.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from core.criteria import FILTER_PARAMS, normalize_criteria
from core.errors import ConfigurationError, ValidationError
from core.formatting import assignment_due_fields, format_rows
from core.models import AssignmentStatus, CourseTerm, EntityKind, ScheduleKind, entity_columns
from core.predicates import Comparison, Condition, column_for, compile_predicate, scoped
from core.projections import Projection, registry
from core.store import Ordering, QueryExecutor

logger = logging.getLogger(__name__)

# fields a derive function reads from the raw row
DERIVED_INPUTS = {
    assignment_due_fields: ("due_date", "status"),
}


@dataclass
class Listing:
    name: str
    entity: EntityKind
    views: tuple[str, ...]
    params: tuple[str, ...]
    required: tuple[str, ...] = ()
    scope: tuple[Condition, ...] = ()
    statuses: tuple[AssignmentStatus, ...] = ()
    ordering: tuple[Ordering, ...] = ()
    derive: Optional[Callable[[dict, datetime, int], dict]] = None
    projections: dict[str, Projection] = field(init=False, default_factory=dict)

    def __post_init__(self):
        if not self.views:
            raise ConfigurationError(f"listing '{self.name}' declares no views")
        for param in self.params:
            if param not in FILTER_PARAMS:
                raise ConfigurationError(f"listing '{self.name}' accepts unknown parameter '{param}'")
            column_for(self.entity, FILTER_PARAMS[param].attr)
        for param in self.required:
            if param not in self.params:
                raise ConfigurationError(f"listing '{self.name}' requires '{param}' but does not accept it")
        columns = entity_columns(self.entity)
        for condition in self.scope:
            if condition.field not in columns:
                raise ConfigurationError(f"listing '{self.name}' scopes unknown column '{condition.field}'")

        needed = [order.field for order in self.ordering]
        needed += list(DERIVED_INPUTS.get(self.derive, ()))
        for view in self.views:
            projection = registry.select(self.entity, view)
            missing = [name for name in needed if name not in projection]
            if missing:
                raise ConfigurationError(
                    f"listing '{self.name}' view '{view}' lacks fields: {', '.join(missing)}"
                )
            self.projections[view] = projection

    @property
    def default_view(self) -> str:
        return self.views[0]

    def projection(self, view: Optional[str] = None) -> Projection:
        view = view or self.default_view
        try:
            return self.projections[view]
        except KeyError:
            allowed = ", ".join(self.views)
            raise ValidationError("view", f"must be one of: {allowed}") from None


LISTINGS: dict[str, Listing] = {}


def register_listing(listing: Listing) -> Listing:
    if listing.name in LISTINGS:
        raise ConfigurationError(f"listing '{listing.name}' is already registered")
    LISTINGS[listing.name] = listing
    return listing


def get_listing(name: str) -> Listing:
    try:
        return LISTINGS[name]
    except KeyError:
        raise ConfigurationError(f"no listing named '{name}'") from None


async def run_listing(
    listing: Listing,
    params: Mapping[str, Any],
    executor: QueryExecutor,
    view: Optional[str] = None,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
    window_days: int = 7,
) -> list[dict[str, Any]]:
    """Run one listing query end to end. Store failures propagate unchanged."""
    criteria = normalize_criteria(listing, params)
    projection = listing.projection(view)
    predicate = scoped(compile_predicate(criteria), listing.scope)
    logger.debug(
        f"Listing {listing.name} view={projection.view} conditions={len(predicate)}"
    )
    rows = await executor.execute(listing.entity, predicate, projection, listing.ordering, limit)
    return format_rows(rows, listing, projection, now=now, window_days=window_days)


_ONGOING = (AssignmentStatus.pending, AssignmentStatus.submitted)
_PAST = (AssignmentStatus.graded,)

register_listing(Listing(
    name="courses",
    entity=EntityKind.course,
    views=("listing", "detail"),
    params=(
        "studentId", "courseCode", "courseName", "instructor",
        "minCredits", "maxCredits", "minAttendance", "maxAttendance", "grade",
    ),
    scope=(Condition("term", Comparison.equals, CourseTerm.current),),
    ordering=(Ordering("course_code"),),
))

register_listing(Listing(
    name="course-current",
    entity=EntityKind.course,
    views=("listing", "detail"),
    params=("studentId", "courseCode", "courseName", "instructor"),
    required=("studentId",),
    scope=(Condition("term", Comparison.equals, CourseTerm.current),),
    ordering=(Ordering("course_code"),),
))

register_listing(Listing(
    name="past-course",
    entity=EntityKind.course,
    views=("past", "detail"),
    params=("studentId", "courseCode", "courseName", "semester", "grade", "minCredits", "maxCredits"),
    required=("studentId",),
    scope=(Condition("term", Comparison.equals, CourseTerm.past),),
    ordering=(Ordering("course_code"),),
))

register_listing(Listing(
    name="assignments",
    entity=EntityKind.assignment,
    views=("listing", "detail"),
    params=("studentId", "courseCode", "status", "title", "dueFrom", "dueTo"),
    ordering=(Ordering("due_date"),),
))

register_listing(Listing(
    name="assignments-ongoing",
    entity=EntityKind.assignment,
    views=("listing", "detail"),
    params=("studentId", "courseCode", "status", "dueFrom", "dueTo"),
    required=("studentId",),
    scope=(Condition("status", Comparison.one_of, _ONGOING),),
    statuses=_ONGOING,
    ordering=(Ordering("due_date"),),
    derive=assignment_due_fields,
))

register_listing(Listing(
    name="assignments-past",
    entity=EntityKind.assignment,
    views=("past", "detail"),
    params=("studentId", "courseCode", "dueFrom", "dueTo"),
    required=("studentId",),
    scope=(Condition("status", Comparison.one_of, _PAST),),
    statuses=_PAST,
    ordering=(Ordering("due_date", descending=True),),
))

register_listing(Listing(
    name="schedule-current",
    entity=EntityKind.schedule,
    views=("weekly",),
    params=("studentId", "day", "courseCode"),
    required=("studentId",),
    scope=(Condition("kind", Comparison.equals, ScheduleKind.weekly),),
    ordering=(Ordering("day"), Ordering("start_time")),
))

register_listing(Listing(
    name="future-schedule",
    entity=EntityKind.schedule,
    views=("events",),
    params=("studentId", "fromDate", "toDate"),
    required=("studentId",),
    scope=(Condition("kind", Comparison.equals, ScheduleKind.event),),
    ordering=(Ordering("date"), Ordering("start_time")),
))

register_listing(Listing(
    name="profile-personal",
    entity=EntityKind.student,
    views=("personal",),
    params=("studentId",),
    required=("studentId",),
))

register_listing(Listing(
    name="profile-academic",
    entity=EntityKind.academic_profile,
    views=("academic",),
    params=("studentId",),
    required=("studentId",),
))
