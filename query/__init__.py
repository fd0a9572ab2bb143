"""
Dynamic query layer for the blog search service

Normalizes optional filters, composes them into parameterized SQL through
immutable plans, executes the statements and maps rows to typed records.
"""

from .tables import TABLES, TableConfig, get_table_config
from .predicates import AnyOf, Compare, Eq, Like, Predicate, contains_text
from .validators import SearchFilters, normalize_filters, filters_from_params
from .builder import POSTGRES, SQLITE, Dialect, QueryBuilder, QueryPlan, get_dialect
from .executor import StatementExecutor
from .errors import (
    QueryError,
    BuildError,
    ValidationError,
    NotFoundError,
    ExecutionError,
    CancellationError,
    StatementTimeoutError,
    TaskCancelledError,
    MappingError,
)

__all__ = [
    'TABLES',
    'TableConfig',
    'get_table_config',
    'Predicate',
    'Eq',
    'Like',
    'Compare',
    'AnyOf',
    'contains_text',
    'SearchFilters',
    'normalize_filters',
    'filters_from_params',
    'Dialect',
    'POSTGRES',
    'SQLITE',
    'get_dialect',
    'QueryBuilder',
    'QueryPlan',
    'StatementExecutor',
    'QueryError',
    'BuildError',
    'ValidationError',
    'NotFoundError',
    'ExecutionError',
    'CancellationError',
    'StatementTimeoutError',
    'TaskCancelledError',
    'MappingError',
]
