"""
Repository Container - Centralized dependency injection container

Single source of truth for repository and service initialization.
"""

from typing import Optional

from config import SearchConfig
from query.builder import QueryBuilder
from repositories import PostRepository, UserRepository
from services.search_service import SearchService


class RepositoryContainer:
    """
    Container for repository instances with attribute access.

    All members share one QueryBuilder so they agree on the SQL dialect.
    """
    def __init__(self, db, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig.from_environment()
        self.builder = QueryBuilder(self.config.dialect)
        timeout = self.config.query_timeout

        self.posts = PostRepository(db, self.builder, timeout=timeout)
        self.users = UserRepository(db, self.builder, timeout=timeout)
        self.search = SearchService(db, self.config, self.builder)
