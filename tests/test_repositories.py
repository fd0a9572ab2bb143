"""
Tests for PostRepository and UserRepository against FakeDatabase
"""

import pytest

from models import PostCreate, PostUpdate, UserCreate, UserUpdate
from query.errors import ExecutionError, NotFoundError
from repositories import BaseRepository, PostRepository, UserRepository
from tests.db_test_utils import post_row, user_row


@pytest.fixture
def posts(fake_db):
    return PostRepository(fake_db)


@pytest.fixture
def users(fake_db):
    return UserRepository(fake_db)


def normalize_sql(sql: str) -> str:
    return " ".join(sql.split())


class TestPostRepository:

    @pytest.mark.asyncio
    async def test_create(self, posts, fake_db):
        fake_db.row = post_row(1, title="First post", content="body")
        post = await posts.create(PostCreate(user_id=1, title="First post", content="body", published=True))

        assert post.id == 1
        sql = normalize_sql(fake_db.last_sql)
        assert sql.startswith("INSERT INTO posts (user_id, title, content, published, created_at, updated_at)")
        assert "VALUES ($1, $2, $3, $4, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)" in sql
        assert sql.endswith("RETURNING id, user_id, title, content, published, created_at, updated_at")
        assert fake_db.last_args == (1, "First post", "body", True)

    @pytest.mark.asyncio
    async def test_get_by_id(self, posts, fake_db):
        fake_db.row = post_row(9)
        post = await posts.get_by_id(9)

        assert post.id == 9
        assert fake_db.last_sql.endswith("FROM posts WHERE id = $1")
        assert fake_db.last_args == (9,)

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, posts, fake_db):
        with pytest.raises(NotFoundError, match="No post with id 404"):
            await posts.get_by_id(404)

    @pytest.mark.asyncio
    async def test_get_by_user_id(self, posts, fake_db):
        fake_db.rows = [post_row(2, user_id=5), post_row(1, user_id=5)]
        result = await posts.get_by_user_id(5)

        assert [p.id for p in result] == [2, 1]
        assert fake_db.last_sql.endswith("WHERE user_id = $1 ORDER BY created_at DESC")

    @pytest.mark.asyncio
    async def test_get_by_user_id_without_posts(self, posts, fake_db):
        assert await posts.get_by_user_id(5) == []

    @pytest.mark.asyncio
    async def test_get_published(self, posts, fake_db):
        await posts.get_published()
        assert fake_db.last_sql.endswith("WHERE published = $1 ORDER BY created_at DESC")
        assert fake_db.last_args == (True,)

    @pytest.mark.asyncio
    async def test_get_all(self, posts, fake_db):
        await posts.get_all()
        assert fake_db.last_sql.endswith("FROM posts ORDER BY created_at DESC")

    @pytest.mark.asyncio
    async def test_update(self, posts, fake_db):
        fake_db.row = post_row(3, title="Updated title")
        post = await posts.update(3, PostUpdate(title="Updated title", published=False))

        assert post.title == "Updated title"
        sql = normalize_sql(fake_db.last_sql)
        assert sql.startswith(
            "UPDATE posts SET title = $1, published = $2, updated_at = CURRENT_TIMESTAMP WHERE id = $3"
        )
        assert fake_db.last_args == ("Updated title", False, 3)

    @pytest.mark.asyncio
    async def test_update_missing(self, posts, fake_db):
        with pytest.raises(NotFoundError, match="id 3"):
            await posts.update(3, PostUpdate(content="new"))

    @pytest.mark.asyncio
    async def test_empty_update_returns_current_row(self, posts, fake_db):
        fake_db.row = post_row(3)
        post = await posts.update(3, PostUpdate())

        assert post.id == 3
        assert fake_db.last_sql.startswith("SELECT")

    @pytest.mark.asyncio
    async def test_delete(self, posts, fake_db):
        fake_db.status = "DELETE 1"
        await posts.delete(3)
        assert fake_db.last_sql == "DELETE FROM posts WHERE id = $1"

    @pytest.mark.asyncio
    async def test_delete_missing(self, posts, fake_db):
        fake_db.status = "DELETE 0"
        with pytest.raises(NotFoundError):
            await posts.delete(3)

    @pytest.mark.asyncio
    async def test_count(self, posts, fake_db):
        fake_db.row = (4,)
        assert await posts.count() == 4
        assert fake_db.last_sql == "SELECT COUNT(*) FROM posts"

    @pytest.mark.asyncio
    async def test_count_by_user_id(self, posts, fake_db):
        fake_db.row = (2,)
        assert await posts.count_by_user_id(7) == 2
        assert fake_db.last_args == (7,)

    @pytest.mark.asyncio
    async def test_foreign_key_failure(self, posts, fake_db):
        fake_db.error = RuntimeError(
            'insert or update on table "posts" violates foreign key constraint "posts_user_id_fkey"'
        )
        with pytest.raises(ExecutionError, match="author does not exist"):
            await posts.create(PostCreate(user_id=99, title="Orphan post"))


class TestUserRepository:

    @pytest.mark.asyncio
    async def test_create(self, users, fake_db):
        fake_db.row = user_row(1)
        user = await users.create(UserCreate(name="Alice", email="alice@example.com"))

        assert user.email == "alice@example.com"
        assert fake_db.last_args == ("Alice", "alice@example.com")

    @pytest.mark.asyncio
    async def test_get_by_email(self, users, fake_db):
        fake_db.row = user_row(1)
        await users.get_by_email("alice@example.com")
        assert fake_db.last_sql.endswith("FROM users WHERE email = $1")

    @pytest.mark.asyncio
    async def test_get_by_email_missing(self, users, fake_db):
        with pytest.raises(NotFoundError, match="nobody@example.com"):
            await users.get_by_email("nobody@example.com")

    @pytest.mark.asyncio
    async def test_get_all(self, users, fake_db):
        fake_db.rows = [user_row(1), user_row(2, name="Bob", email="bob@example.com")]
        result = await users.get_all()

        assert [u.id for u in result] == [1, 2]
        assert fake_db.last_sql.endswith("ORDER BY created_at ASC")

    @pytest.mark.asyncio
    async def test_update(self, users, fake_db):
        fake_db.row = user_row(1, name="Alicia")
        user = await users.update(1, UserUpdate(name="Alicia"))

        assert user.name == "Alicia"
        assert fake_db.last_args == ("Alicia", 1)

    @pytest.mark.asyncio
    async def test_duplicate_email(self, users, fake_db):
        fake_db.error = RuntimeError('duplicate key value violates unique constraint "users_email_key"')
        with pytest.raises(ExecutionError, match="email already exists"):
            await users.create(UserCreate(name="Alice", email="alice@example.com"))


class TestAffectedRows:

    @pytest.mark.parametrize("status,expected", [
        ("DELETE 1", 1), ("UPDATE 3", 3), ("DELETE 0", 0), (2, 2), ("", 0), (None, 0),
    ])
    def test_affected_rows(self, status, expected):
        assert BaseRepository._affected_rows(status) == expected
