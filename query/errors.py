"""
Query Errors

Typed failures raised by the query layer. Callers decide what each kind means
for them (e.g. NotFoundError -> empty result vs. 404).
"""

import asyncio


class QueryError(Exception):
    """Base class for every error raised by the query layer."""


class BuildError(QueryError):
    """A plan or predicate is malformed (programmer error, not caller error)."""


class ValidationError(BuildError):
    """An unvalidated value (e.g. an unlisted ORDER BY column) reached the builder."""


class NotFoundError(QueryError):
    """A single-row lookup returned zero rows."""


class ExecutionError(QueryError):
    """The datastore rejected or failed the statement."""


class CancellationError(QueryError):
    """The statement did not run to completion."""


class StatementTimeoutError(CancellationError):
    """
    The statement hit a client or server-side timeout.
    Raised as an ordinary exception, never as an asyncio.CancelledError.
    """


class TaskCancelledError(CancellationError, asyncio.CancelledError):
    """The awaiting task was cancelled; cancellation keeps propagating."""


class MappingError(QueryError):
    """A result row did not match the expected record shape."""
