"""
Repository layer for database operations
Provides CRUD operations for posts and users
"""

from typing import Any, List, Optional

from models import Post, PostCreate, PostUpdate, User, UserCreate, UserUpdate
from query.builder import QueryBuilder
from query.errors import NotFoundError
from query.executor import StatementExecutor
from query.mappers import POST_FIELDS, USER_FIELDS, decode_count, decode_post, decode_user
from query.predicates import Eq
from query.tables import ASC, DESC

POST_RETURNING = ", ".join(POST_FIELDS)
USER_RETURNING = ", ".join(USER_FIELDS)


class BaseRepository:
    """Base repository with common operations"""

    table: str = ""
    returning: str = ""

    def __init__(self, db, builder: Optional[QueryBuilder] = None, timeout: Optional[float] = None):
        self.db = db
        self.builder = builder or QueryBuilder()
        self.executor = StatementExecutor(db, self.builder, timeout=timeout)

    def _placeholders(self, count: int, start: int = 1) -> list[str]:
        return [self.builder.dialect.placeholder(i) for i in range(start, start + count)]

    @staticmethod
    def _affected_rows(status: Any) -> int:
        """Row count from a command status ("DELETE 1") or a plain integer."""
        if isinstance(status, int):
            return status
        try:
            return int(str(status).split()[-1])
        except (ValueError, IndexError):
            return 0

    async def _update(self, record_id: int, changes: dict[str, Any], decode):
        """UPDATE the given columns plus updated_at, returning the fresh row."""
        columns = list(changes)
        placeholders = self._placeholders(len(columns) + 1)
        set_clauses = [f"{col} = {ph}" for col, ph in zip(columns, placeholders)]
        set_clauses.append("updated_at = CURRENT_TIMESTAMP")
        sql = (
            f"UPDATE {self.table} SET {', '.join(set_clauses)} "
            f"WHERE id = {placeholders[-1]} RETURNING {self.returning}"
        )
        try:
            return await self.executor.fetch_one_sql(sql, [*changes.values(), record_id], decode)
        except NotFoundError:
            raise NotFoundError(f"No {self.table} row with id {record_id}") from None

    async def delete(self, record_id: int) -> None:
        """Delete by id; NotFoundError if nothing was deleted."""
        (ph,) = self._placeholders(1)
        status = await self.executor.execute_sql(f"DELETE FROM {self.table} WHERE id = {ph}", [record_id])
        if self._affected_rows(status) == 0:
            raise NotFoundError(f"No {self.table} row with id {record_id}")

    async def count(self) -> int:
        return await self.executor.fetch_one_sql(f"SELECT COUNT(*) FROM {self.table}", [], decode_count)


class PostRepository(BaseRepository):
    """Repository for post operations"""

    table = "posts"
    returning = POST_RETURNING

    async def create(self, post: PostCreate) -> Post:
        placeholders = ", ".join(self._placeholders(4))
        sql = f"""
            INSERT INTO posts (user_id, title, content, published, created_at, updated_at)
            VALUES ({placeholders}, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
            RETURNING {POST_RETURNING}
        """
        return await self.executor.fetch_one_sql(
            sql, [post.user_id, post.title, post.content, post.published], decode_post
        )

    async def get_by_id(self, post_id: int) -> Post:
        plan = self.builder.base("posts").where(Eq("id", post_id))
        try:
            return await self.executor.fetch_one(plan, decode_post)
        except NotFoundError:
            raise NotFoundError(f"No post with id {post_id}") from None

    async def get_by_user_id(self, user_id: int) -> List[Post]:
        plan = self.builder.base("posts").where(Eq("user_id", user_id)).order_by("created_at", DESC)
        return await self.executor.fetch_all(plan, decode_post)

    async def get_published(self) -> List[Post]:
        plan = self.builder.base("posts").where(Eq("published", True)).order_by("created_at", DESC)
        return await self.executor.fetch_all(plan, decode_post)

    async def get_all(self) -> List[Post]:
        plan = self.builder.base("posts").order_by("created_at", DESC)
        return await self.executor.fetch_all(plan, decode_post)

    async def update(self, post_id: int, updates: PostUpdate) -> Post:
        """Apply the fields set on `updates`; with none set, return the post unchanged."""
        changes = updates.model_dump(exclude_none=True)
        if not changes:
            return await self.get_by_id(post_id)
        return await self._update(post_id, changes, decode_post)

    async def count_by_user_id(self, user_id: int) -> int:
        (ph,) = self._placeholders(1)
        return await self.executor.fetch_one_sql(
            f"SELECT COUNT(*) FROM posts WHERE user_id = {ph}", [user_id], decode_count
        )


class UserRepository(BaseRepository):
    """Repository for user operations"""

    table = "users"
    returning = USER_RETURNING

    async def create(self, user: UserCreate) -> User:
        placeholders = ", ".join(self._placeholders(2))
        sql = f"""
            INSERT INTO users (name, email, created_at, updated_at)
            VALUES ({placeholders}, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
            RETURNING {USER_RETURNING}
        """
        return await self.executor.fetch_one_sql(sql, [user.name, user.email], decode_user)

    async def get_by_id(self, user_id: int) -> User:
        plan = self.builder.base("users").where(Eq("id", user_id))
        try:
            return await self.executor.fetch_one(plan, decode_user)
        except NotFoundError:
            raise NotFoundError(f"No user with id {user_id}") from None

    async def get_by_email(self, email: str) -> User:
        plan = self.builder.base("users").where(Eq("email", email))
        try:
            return await self.executor.fetch_one(plan, decode_user)
        except NotFoundError:
            raise NotFoundError(f"No user with email {email!r}") from None

    async def get_all(self) -> List[User]:
        plan = self.builder.base("users").order_by("created_at", ASC)
        return await self.executor.fetch_all(plan, decode_user)

    async def update(self, user_id: int, updates: UserUpdate) -> User:
        """Apply the fields set on `updates`; with none set, return the user unchanged."""
        changes = updates.model_dump(exclude_none=True)
        if not changes:
            return await self.get_by_id(user_id)
        return await self._update(user_id, changes, decode_user)
