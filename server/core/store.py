"""
Query executor adapter: the only place the listing layer touches the relational store.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from sqlalchemy import case, select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from core.errors import StoreError
from core.models import ENTITY_MODELS, EntityKind, Weekday
from core.predicates import Comparison, Condition, Predicate
from core.projections import Projection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ordering:
    field: str
    descending: bool = False


class QueryExecutor(Protocol):
    async def execute(
        self,
        entity: EntityKind,
        predicate: Predicate,
        projection: Projection,
        ordering: Sequence[Ordering],
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Return raw rows holding exactly the projected fields; raise StoreError on failure."""
        ...


def _clause(model, condition: Condition):
    column = getattr(model, condition.field)
    if condition.comparison is Comparison.equals:
        return column == condition.value
    if condition.comparison is Comparison.contains:
        return column.icontains(condition.value, autoescape=True)
    if condition.comparison is Comparison.gte:
        return column >= condition.value
    if condition.comparison is Comparison.lte:
        return column <= condition.value
    if condition.comparison is Comparison.one_of:
        return column.in_(list(condition.value))
    raise ValueError(f"Unsupported comparison: {condition.comparison}")


def _order_clause(model, order: Ordering):
    """Order the way the formatter does: weekdays by calendar position, NULLs last."""
    column = getattr(model, order.field)
    if getattr(column.type, "enum_class", None) is Weekday:
        column = case({day.name: day.position for day in Weekday}, value=column)
    clause = column.desc() if order.descending else column.asc()
    return clause.nulls_last()


class SqlModelExecutor:
    """Runs listing queries through a SQLModel session on the thread pool. Never retries."""

    def __init__(self, session: Session, default_limit: Optional[int] = None):
        self.session = session
        self.default_limit = default_limit

    def build_statement(self, entity, predicate, projection, ordering, limit=None):
        model = ENTITY_MODELS[entity]
        statement = select(*(getattr(model, name) for name in projection.fields))
        for condition in predicate:
            statement = statement.where(_clause(model, condition))
        for order in ordering:
            statement = statement.order_by(_order_clause(model, order))
        limit = limit or self.default_limit
        if limit:
            statement = statement.limit(limit)
        return statement

    def _run(self, statement) -> list[dict[str, Any]]:
        try:
            result = self.session.exec(statement)
            rows = [dict(row._mapping) for row in result]
        except (SQLAlchemyError, OverflowError) as e:
            raise StoreError("listing query failed") from e
        logger.debug(f"Fetched {len(rows)} rows")
        return rows

    async def execute(self, entity, predicate, projection, ordering, limit=None):
        statement = self.build_statement(entity, predicate, projection, ordering, limit)
        return await run_in_threadpool(self._run, statement)
