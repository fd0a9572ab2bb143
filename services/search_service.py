import logging
from typing import Any, Optional

from config import SearchConfig
from models import Post, PostStats, User, UserWithStats
from query.builder import QueryBuilder, QueryPlan
from query.executor import StatementExecutor
from query.mappers import decode_post, decode_post_stats, decode_user, decode_user_with_stats
from query.tables import TABLES
from query.validators import SearchFilters, normalize_filters, normalize_limit

logger = logging.getLogger(__name__)


class SearchService:
    """
    Dynamic post/user search and aggregate statistics.

    Every call normalizes its own filters, builds a fresh plan and borrows a
    pooled connection for a single statement; nothing is shared between calls.
    """

    def __init__(self, db, config: Optional[SearchConfig] = None, builder: Optional[QueryBuilder] = None):
        self.config = config or SearchConfig.from_environment()
        self.builder = builder or QueryBuilder(self.config.dialect)
        self.executor = StatementExecutor(db, self.builder, timeout=self.config.query_timeout)

    def _filters(self, table: str, filters: Optional[SearchFilters], raw: dict[str, Any]) -> SearchFilters:
        if filters is not None:
            if raw:
                raise TypeError("Pass either normalized filters or raw filter values, not both")
            return filters
        return normalize_filters(table, config=self.config, **raw)

    def build_dynamic_query(self, plan: QueryPlan, filters: SearchFilters) -> QueryPlan:
        """Apply the optional predicates of `filters` to an existing plan."""
        return self.builder.apply_filters(plan, filters)

    async def search_posts(self, filters: Optional[SearchFilters] = None, **raw) -> list[Post]:
        """
        Search posts by text (title/content), author, published flag and
        minimum word count.

        Args:
            filters: Already normalized filters, or
            **raw: Raw values for normalize_filters (query, user_id, published,
                min_word_count, order_by, order_dir, limit, offset)
        """
        filters = self._filters("posts", filters, raw)
        plan = self.builder.build_search("posts", filters)
        logger.info(
            f"search_posts: query={filters.query!r} order={filters.order_by} {filters.order_dir} "
            f"limit={filters.limit} offset={filters.offset}"
        )
        return await self.executor.fetch_all(plan, decode_post)

    async def search_users(self, filters: Optional[SearchFilters] = None, **raw) -> list[User]:
        """Search users by name/email text, ordered by name unless told otherwise."""
        filters = self._filters("users", filters, raw)
        plan = self.builder.build_search("users", filters)
        logger.info(f"search_users: query={filters.query!r} limit={filters.limit} offset={filters.offset}")
        return await self.executor.fetch_all(plan, decode_user)

    async def get_post_stats(self, filters: Optional[SearchFilters] = None, **raw) -> PostStats:
        """
        Totals over posts joined to their authors. Optional predicates narrow
        the posts counted; ordering and pagination do not apply.
        """
        filters = self._filters("post_stats", filters, raw)
        plan = self.builder.apply_filters(self.builder.base("post_stats"), filters)
        return await self.executor.fetch_aggregate(plan, decode_post_stats, PostStats)

    async def get_top_users(self, limit: Optional[int] = None) -> list[UserWithStats]:
        """Users ranked by number of posts, including users without posts."""
        table = TABLES["top_users"]
        plan = (
            self.builder.base(table)
            .order_by(table.default_order_by, table.default_order_dir)
            .limit(normalize_limit(limit, self.config))
        )
        return await self.executor.fetch_all(plan, decode_user_with_stats)
