"""
Result formatter: ordering, value normalization and derived display fields.
Pure over the rows it is given; `now` is injected.
"""
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from core.models import AssignmentStatus, Weekday
from core.projections import Projection
from core.store import Ordering


def utc_now() -> datetime:
    """UTC now as naive datetime, matching stored columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Serialize datetime to ISO string (UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="seconds")


def normalize_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return serialize_datetime(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _sort_value(value: Any) -> Any:
    if isinstance(value, Weekday):
        return value.position
    if isinstance(value, Enum):
        return value.value
    return value


def sort_rows(rows: Iterable[dict], ordering: Sequence[Ordering]) -> list[dict]:
    """Stable multi-key sort; rows missing a key sort last in either direction."""
    ordered = list(rows)
    for order in reversed(ordering):
        if order.descending:
            ordered.sort(
                key=lambda row: (row.get(order.field) is not None, _sort_value(row.get(order.field))),
                reverse=True,
            )
        else:
            ordered.sort(
                key=lambda row: (row.get(order.field) is None, _sort_value(row.get(order.field)))
            )
    return ordered


def assignment_due_fields(row: dict, now: datetime, window_days: int) -> dict[str, Any]:
    """Days until due and a due-soon flag; display estimates only, not stored data."""
    due = row.get("due_date")
    if isinstance(due, str):
        due = datetime.fromisoformat(due.replace("Z", "+00:00"))
    if due is None:
        return {"due_in_days": None, "due_soon": False}
    if due.tzinfo is not None:
        due = due.astimezone(timezone.utc).replace(tzinfo=None)
    status = row.get("status")
    pending = status is not None and AssignmentStatus(status) is AssignmentStatus.pending
    return {
        "due_in_days": (due.date() - now.date()).days,
        "due_soon": pending and now <= due <= now + timedelta(days=window_days),
    }


def format_rows(
    rows: Iterable[dict],
    listing,
    projection: Projection,
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> list[dict[str, Any]]:
    """Order rows per the listing, keep projected fields only and add derived fields."""
    now = now or utc_now()
    formatted = []
    for row in sort_rows(rows, listing.ordering):
        record = {name: normalize_value(row.get(name)) for name in projection.fields}
        if listing.derive is not None:
            record.update(listing.derive(row, now, window_days))
        formatted.append(record)
    return formatted
