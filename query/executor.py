"""
Statement Executor

Runs rendered plans (or raw repository SQL) against an injected connection
and decodes rows with a mapper. Datastore failures come back typed:

- zero rows on a keyed lookup      -> NotFoundError
- task cancellation                -> TaskCancelledError (an asyncio.CancelledError)
- client or server-side timeout    -> StatementTimeoutError
- anything else from the datastore -> ExecutionError
- decode failures                  -> MappingError

The connection collaborator needs `fetch`, `fetchrow` and `execute`
(and `iterate` for streaming), each accepting `timeout=`. DatabaseConnection
provides all of them. Nothing is retried here.
"""

import asyncio
import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Callable, Optional, Sequence, TypeVar

import asyncpg

from utils.error_messages import enhance_error_message
from .builder import QueryBuilder, QueryPlan
from .errors import (
    ExecutionError,
    MappingError,
    NotFoundError,
    QueryError,
    StatementTimeoutError,
    TaskCancelledError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TIMED_OUT = (asyncio.TimeoutError, asyncpg.exceptions.QueryCanceledError)


def _translate(error: BaseException, sql: str) -> QueryError:
    """Map a collaborator failure onto the query error kinds."""
    if isinstance(error, asyncio.CancelledError):
        logger.warning(f"Task cancelled while running statement: {sql[:120]}")
        return TaskCancelledError("Task cancelled before the statement completed")
    if isinstance(error, _TIMED_OUT):
        logger.error(f"Statement timed out ({type(error).__name__}): {sql[:120]}")
        return StatementTimeoutError(f"Statement timed out before completion ({type(error).__name__})")
    logger.error(f"Statement failed: {error} -- SQL: {sql[:120]}", exc_info=True)
    return ExecutionError(enhance_error_message(error))


def _decode(decode: Callable[[Any], T], row: Any) -> T:
    try:
        return decode(row)
    except QueryError:
        raise
    except (TypeError, ValueError, KeyError, IndexError) as e:
        raise MappingError(f"Failed to decode row: {e}") from e


class StatementExecutor:
    """Executes statements for one call at a time; holds no per-call state."""

    def __init__(self, db, builder: Optional[QueryBuilder] = None, timeout: Optional[float] = None):
        self.db = db
        self.builder = builder or QueryBuilder()
        self.timeout = timeout

    async def _run(self, method: str, sql: str, params: Sequence[Any], timeout: Optional[float]):
        call = getattr(self.db, method)
        effective_timeout = self.timeout if timeout is None else timeout
        logger.debug(f"{method}: {sql}")
        try:
            return await call(sql, *params, timeout=effective_timeout)
        except QueryError:
            raise
        except (asyncio.CancelledError, Exception) as e:
            raise _translate(e, sql) from e

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    async def fetch_all(
        self, plan: QueryPlan, decode: Callable[[Any], T], *, timeout: Optional[float] = None
    ) -> list[T]:
        """All rows, decoded, in the order the datastore returned them."""
        sql, params = self.builder.render(plan)
        return await self.fetch_all_sql(sql, params, decode, timeout=timeout)

    async def fetch_one(
        self, plan: QueryPlan, decode: Callable[[Any], T], *, timeout: Optional[float] = None
    ) -> T:
        """Exactly one row; NotFoundError when there is none."""
        sql, params = self.builder.render(plan)
        return await self.fetch_one_sql(sql, params, decode, timeout=timeout)

    async def fetch_aggregate(
        self,
        plan: QueryPlan,
        decode: Callable[[Any], T],
        default: Callable[[], T],
        *,
        timeout: Optional[float] = None,
    ) -> T:
        """Single aggregate row; zero rows yields `default()` instead of an error."""
        sql, params = self.builder.render(plan)
        row = await self._run("fetchrow", sql, params, timeout)
        if row is None:
            return default()
        return _decode(decode, row)

    async def stream(
        self, plan: QueryPlan, decode: Callable[[Any], T], *, timeout: Optional[float] = None
    ) -> AsyncIterator[T]:
        """
        Decode rows as they arrive from a cursor.

        The cursor is closed on every exit path: exhaustion, a decode or
        datastore error, or the consumer stopping early. Consumers that break
        out of the loop should wrap the stream in contextlib.aclosing.
        """
        sql, params = self.builder.render(plan)
        effective_timeout = self.timeout if timeout is None else timeout
        rows = self.db.iterate(sql, *params, timeout=effective_timeout)
        try:
            async with aclosing(rows):
                async for row in rows:
                    yield _decode(decode, row)
        except QueryError:
            raise
        except (asyncio.CancelledError, Exception) as e:
            raise _translate(e, sql) from e

    # ------------------------------------------------------------------
    # Raw SQL (repositories)
    # ------------------------------------------------------------------

    async def fetch_all_sql(
        self, sql: str, params: Sequence[Any], decode: Callable[[Any], T], *, timeout: Optional[float] = None
    ) -> list[T]:
        rows = await self._run("fetch", sql, params, timeout)
        return [_decode(decode, row) for row in rows]

    async def fetch_one_sql(
        self, sql: str, params: Sequence[Any], decode: Callable[[Any], T], *, timeout: Optional[float] = None
    ) -> T:
        row = await self._run("fetchrow", sql, params, timeout)
        if row is None:
            raise NotFoundError("No row matched the lookup")
        return _decode(decode, row)

    async def execute_sql(self, sql: str, params: Sequence[Any], *, timeout: Optional[float] = None) -> str:
        """Run a statement without a result set; returns the status string."""
        return await self._run("execute", sql, params, timeout)
