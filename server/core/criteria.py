"""
Criteria normalizer
- raw request parameters (strings, camelCase names) -> typed Criteria record
- absent/blank values stay None, anything unusable raises ValidationError
"""
import re
from dataclasses import dataclass, fields, replace
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from core.errors import ValidationError
from core.models import AssignmentStatus, EntityKind, Weekday

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# largest value a 64-bit INTEGER column can bind
MAX_COUNT = 2**63 - 1


@dataclass(frozen=True)
class Criteria:
    entity: EntityKind
    student_id: Optional[str] = None
    course_code: Optional[str] = None
    status: Optional[AssignmentStatus] = None
    day: Optional[Weekday] = None
    instructor: Optional[str] = None
    grade: Optional[str] = None
    semester: Optional[str] = None
    name: Optional[str] = None
    min_credits: Optional[int] = None
    max_credits: Optional[int] = None
    min_attendance: Optional[float] = None
    max_attendance: Optional[float] = None
    due_from: Optional[datetime] = None
    due_to: Optional[datetime] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def present(self) -> dict[str, Any]:
        """Criteria attributes that carry a value."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "entity" and getattr(self, f.name) is not None
        }


def _identifier(param: str, value: Any) -> str:
    text = str(value).strip()
    if not text:
        raise ValidationError(param, "must be a non-empty identifier")
    return text


def _text(param: str, value: Any) -> str:
    return str(value).strip()


def _count(param: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(param, "must be a whole number")
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            raise ValidationError(param, f"must be a whole number, got '{value}'") from None
    if number < 0:
        raise ValidationError(param, "must not be negative")
    if number > MAX_COUNT:
        raise ValidationError(param, f"must not be greater than {MAX_COUNT}")
    return number


def _percentage(param: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(param, "must be a number between 0 and 100")
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except ValueError:
        raise ValidationError(param, f"must be a number, got '{value}'") from None
    if not 0 <= number <= 100:
        raise ValidationError(param, "must be between 0 and 100")
    return number


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _timestamp(param: str, value: Any, end_of_day: bool = False) -> datetime:
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    text = str(value).strip()
    try:
        if _DATE_ONLY.match(text):
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end_of_day else time.min)
        return _to_naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        raise ValidationError(param, f"must be an ISO 8601 date-time, got '{value}'") from None


def _calendar_day(param: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(param, f"must be a date (YYYY-MM-DD), got '{value}'") from None


def _choice(enum_type: type[Enum]) -> Callable[[str, Any], Enum]:
    def parse(param: str, value: Any) -> Enum:
        if isinstance(value, enum_type):
            return value
        try:
            return enum_type(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            raise ValidationError(param, f"must be one of: {allowed}") from None

    return parse


@dataclass(frozen=True)
class FilterParam:
    param: str
    attr: str
    parse: Callable[[str, Any], Any]


FILTER_PARAMS: dict[str, FilterParam] = {
    spec.param: spec
    for spec in (
        FilterParam("studentId", "student_id", _identifier),
        FilterParam("courseCode", "course_code", _identifier),
        FilterParam("status", "status", _choice(AssignmentStatus)),
        FilterParam("day", "day", _choice(Weekday)),
        FilterParam("instructor", "instructor", _text),
        FilterParam("grade", "grade", _text),
        FilterParam("semester", "semester", _text),
        FilterParam("courseName", "name", _text),
        FilterParam("title", "name", _text),
        FilterParam("minCredits", "min_credits", _count),
        FilterParam("maxCredits", "max_credits", _count),
        FilterParam("minAttendance", "min_attendance", _percentage),
        FilterParam("maxAttendance", "max_attendance", _percentage),
        FilterParam("dueFrom", "due_from", _timestamp),
        FilterParam("dueTo", "due_to", lambda param, value: _timestamp(param, value, end_of_day=True)),
        FilterParam("fromDate", "date_from", _calendar_day),
        FilterParam("toDate", "date_to", _calendar_day),
    )
}

# (lower attr, upper attr, lower param, upper param)
RANGES = (
    ("min_credits", "max_credits", "minCredits", "maxCredits"),
    ("min_attendance", "max_attendance", "minAttendance", "maxAttendance"),
    ("due_from", "due_to", "dueFrom", "dueTo"),
    ("date_from", "date_to", "fromDate", "toDate"),
)


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_criteria(listing, raw: Mapping[str, Any]) -> Criteria:
    """Validate raw parameters against a listing and build its Criteria.

    Every supplied parameter must be one the listing accepts; required
    parameters must be present; ranges must satisfy min <= max.
    """
    values: dict[str, Any] = {}
    for param, value in raw.items():
        if _is_absent(value):
            continue
        if param not in listing.params or param not in FILTER_PARAMS:
            raise ValidationError(param, f"is not a supported filter for {listing.name}")
        spec = FILTER_PARAMS[param]
        values[spec.attr] = spec.parse(param, value)

    for param in listing.required:
        if FILTER_PARAMS[param].attr not in values:
            raise ValidationError(param, "is required")

    status = values.get("status")
    if status is not None and listing.statuses and status not in listing.statuses:
        allowed = ", ".join(s.value for s in listing.statuses)
        raise ValidationError("status", f"must be one of: {allowed}")

    for lower, upper, lower_param, upper_param in RANGES:
        low, high = values.get(lower), values.get(upper)
        if low is not None and high is not None and low > high:
            raise ValidationError(lower_param, f"must not be greater than {upper_param}")

    return replace(Criteria(entity=listing.entity), **values)
