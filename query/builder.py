"""
Query Builder

Composes a table's base projection with predicates, an allow-listed ORDER BY
and LIMIT/OFFSET into a parameterized statement. All values are bound
through dialect placeholders ($1, $2, ... or ?); never interpolated.

Plans are immutable: every clause-adding call returns a new QueryPlan, so a
base plan can be branched into several queries. Building never touches the
datastore.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from .errors import BuildError, ValidationError
from .predicates import Compare, Eq, Predicate, contains_text
from .tables import DIRECTIONS, TABLES, TableConfig, get_table_config
from .validators import SearchFilters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dialect:
    """Placeholder style of the target datastore."""
    name: str
    numbered: bool  # $1, $2, ... when True; positional ? otherwise

    def placeholder(self, index: int) -> str:
        return f"${index}" if self.numbered else "?"


POSTGRES = Dialect(name="postgres", numbered=True)
SQLITE = Dialect(name="sqlite", numbered=False)

DIALECTS = {d.name: d for d in (POSTGRES, SQLITE)}


def get_dialect(name: str) -> Dialect:
    try:
        return DIALECTS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown SQL dialect '{name}'. Valid dialects: {list(DIALECTS)}") from None


def _check_field(table: TableConfig, predicate: Predicate):
    # Dry render resolves every field without binding anything
    predicate.render(table, lambda value: "?")


def _check_ordering(table: TableConfig, field_name: str, direction: str):
    if field_name not in table.order_fields:
        raise ValidationError(
            f"Cannot order '{table.name}' by '{field_name}'. Valid fields: {list(table.order_fields)}"
        )
    if direction not in DIRECTIONS:
        raise ValidationError(f"Invalid order direction '{direction}'")


@dataclass(frozen=True)
class QueryPlan:
    """Immutable intermediate form of a SELECT statement."""
    table: TableConfig
    columns: tuple[str, ...]
    predicates: tuple[Predicate, ...] = ()
    ordering: Optional[tuple[str, str]] = None  # (field, direction)
    row_limit: Optional[int] = None
    row_offset: Optional[int] = None
    joins: tuple[str, ...] = ()
    grouping: tuple[str, ...] = ()  # Resolved GROUP BY columns

    def where(self, *predicates: Predicate) -> "QueryPlan":
        """AND the given predicates onto the plan, in order."""
        for predicate in predicates:
            if not isinstance(predicate, Predicate):
                raise BuildError(f"Not a predicate: {predicate!r}")
            _check_field(self.table, predicate)
        return dataclasses.replace(self, predicates=self.predicates + tuple(predicates))

    def order_by(self, field_name: str, direction: str) -> "QueryPlan":
        _check_ordering(self.table, field_name, direction)
        return dataclasses.replace(self, ordering=(field_name, direction))

    def limit(self, count: int) -> "QueryPlan":
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise BuildError(f"LIMIT must be a positive integer, got {count!r}")
        return dataclasses.replace(self, row_limit=count)

    def offset(self, count: int) -> "QueryPlan":
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise BuildError(f"OFFSET must be a non-negative integer, got {count!r}")
        return dataclasses.replace(self, row_offset=count)

    def group_by(self, *field_names: str) -> "QueryPlan":
        columns = []
        for field_name in field_names:
            column = self.table.resolve(field_name)
            if column is None:
                raise BuildError(f"Unknown field '{field_name}' for table '{self.table.name}'")
            columns.append(column)
        return dataclasses.replace(self, grouping=self.grouping + tuple(columns))

    def paginate(self, limit: int, offset: int = 0) -> "QueryPlan":
        return self.limit(limit).offset(offset)

    @property
    def params(self) -> tuple:
        """Bound values in the order they appear in the rendered SQL."""
        values = tuple(v for p in self.predicates for v in p.values)
        if self.row_limit is not None:
            values += (self.row_limit,)
        if self.row_offset is not None:
            values += (self.row_offset,)
        return values


class QueryBuilder:
    """Builds parameterized SQL from normalized search filters."""

    def __init__(self, dialect: Union[Dialect, str] = POSTGRES):
        self.dialect = get_dialect(dialect) if isinstance(dialect, str) else dialect

    def base(self, table: Union[str, TableConfig]) -> QueryPlan:
        """Plan selecting the table's declared projection, with no clauses."""
        if isinstance(table, str):
            config = get_table_config(table)
            if config is None:
                raise BuildError(f"Unknown table '{table}'. Valid tables: {list(TABLES)}")
            table = config
        return QueryPlan(table=table, columns=table.columns, joins=table.joins, grouping=table.group_by)

    def apply_filters(self, plan: QueryPlan, filters: SearchFilters) -> QueryPlan:
        """
        Append one predicate per present filter, in a fixed order:
        text OR-group, user_id, published, minimum word count.
        """
        if filters.query:
            plan = plan.where(contains_text(plan.table.text_fields, filters.query))
        if filters.user_id is not None:
            plan = plan.where(Eq("user_id", filters.user_id))
        if filters.published is not None:
            plan = plan.where(Eq("published", filters.published))
        if filters.min_word_count is not None:
            plan = plan.where(Compare("word_count", ">=", filters.min_word_count))
        return plan

    def build_search(self, table: Union[str, TableConfig], filters: SearchFilters) -> QueryPlan:
        """Filtered, ordered and paginated plan for a search."""
        plan = self.apply_filters(self.base(table), filters)
        if filters.order_by:
            plan = plan.order_by(filters.order_by, filters.order_dir)
        return plan.paginate(filters.limit, filters.offset)

    def render(self, plan: QueryPlan) -> tuple[str, list[Any]]:
        """
        Render a plan to SQL text for this builder's dialect.
        Returns (sql, params).
        """
        table = plan.table
        params: list[Any] = []

        def bind(value: Any) -> str:
            params.append(value)
            return self.dialect.placeholder(len(params))

        if not plan.columns:
            raise BuildError(f"Plan for '{table.name}' projects no columns")

        parts = [f"SELECT {', '.join(plan.columns)} FROM {table.source}"]
        parts.extend(plan.joins)

        if plan.predicates:
            conditions = [p.render(table, bind) for p in plan.predicates]
            parts.append(f"WHERE {' AND '.join(conditions)}")

        if plan.grouping:
            parts.append(f"GROUP BY {', '.join(plan.grouping)}")

        if plan.ordering:
            field_name, direction = plan.ordering
            _check_ordering(table, field_name, direction)
            parts.append(f"ORDER BY {table.resolve(field_name)} {direction}")

        if plan.row_limit is not None:
            parts.append(f"LIMIT {bind(plan.row_limit)}")
        if plan.row_offset is not None:
            parts.append(f"OFFSET {bind(plan.row_offset)}")

        sql = " ".join(parts)
        logger.debug(f"Rendered {table.name} query: {sql} -- params: {params}")
        return sql, params
