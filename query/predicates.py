"""
Predicate Set

Bounded vocabulary of filter clauses. Each predicate names domain fields
(resolved against a TableConfig at render time) and carries its own bound
values; rendering emits placeholders only, never values.
"""

from dataclasses import dataclass
from typing import Any, Callable

from .errors import BuildError
from .tables import TableConfig

# Returns the placeholder text for a value after appending it to the params
Binder = Callable[[Any], str]

COMPARISON_OPERATORS = {"=", "!=", ">", ">=", "<", "<="}


def _column(table: TableConfig, field_name: str) -> str:
    column = table.resolve(field_name)
    if column is None:
        raise BuildError(f"Unknown field '{field_name}' for table '{table.name}'")
    return column


class Predicate:
    """A single bound condition."""

    def render(self, table: TableConfig, bind: Binder) -> str:
        raise NotImplementedError

    @property
    def values(self) -> tuple:
        """Bound values in the order they are rendered."""
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Predicate):
    field: str
    value: Any

    def render(self, table: TableConfig, bind: Binder) -> str:
        return f"{_column(table, self.field)} = {bind(self.value)}"

    @property
    def values(self) -> tuple:
        return (self.value,)


@dataclass(frozen=True)
class Like(Predicate):
    field: str
    pattern: str

    def render(self, table: TableConfig, bind: Binder) -> str:
        return f"{_column(table, self.field)} LIKE {bind(self.pattern)}"

    @property
    def values(self) -> tuple:
        return (self.pattern,)


@dataclass(frozen=True)
class Compare(Predicate):
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in COMPARISON_OPERATORS:
            raise BuildError(f"Invalid comparison operator '{self.op}'")

    def render(self, table: TableConfig, bind: Binder) -> str:
        return f"{_column(table, self.field)} {self.op} {bind(self.value)}"

    @property
    def values(self) -> tuple:
        return (self.value,)


@dataclass(frozen=True, init=False)
class AnyOf(Predicate):
    """OR-group, always parenthesized so later AND clauses stay outside it."""
    predicates: tuple[Predicate, ...]

    def __init__(self, *predicates: Predicate):
        if not predicates:
            raise BuildError("AnyOf requires at least one predicate")
        object.__setattr__(self, "predicates", tuple(predicates))

    def render(self, table: TableConfig, bind: Binder) -> str:
        parts = [p.render(table, bind) for p in self.predicates]
        return f"({' OR '.join(parts)})"

    @property
    def values(self) -> tuple:
        return tuple(v for p in self.predicates for v in p.values)


def contains_text(fields: tuple[str, ...], text: str) -> AnyOf:
    """OR-group of LIKE '%text%' over every given field."""
    if not fields:
        raise BuildError("Text search requires at least one field")
    pattern = f"%{text}%"
    return AnyOf(*(Like(f, pattern) for f in fields))
