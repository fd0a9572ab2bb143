"""
Tests for positional row mappers
"""

from datetime import datetime
from decimal import Decimal

import pytest

from models import Post, PostStats, User, UserWithStats
from query.errors import MappingError
from query.mappers import (
    decode_count,
    decode_post,
    decode_post_stats,
    decode_user,
    decode_user_with_stats,
    POST_FIELDS,
    USER_FIELDS,
)
from query.tables import TABLES
from tests.db_test_utils import BASE_TIME, post_row, user_row


class TestEntities:

    def test_decode_post(self):
        post = decode_post(post_row(5, user_id=2, title="Decoding rows", published=False))

        assert isinstance(post, Post)
        assert (post.id, post.user_id, post.title, post.published) == (5, 2, "Decoding rows", False)
        assert post.created_at == BASE_TIME

    def test_decode_user(self):
        user = decode_user(user_row(3, name="Bob", email="bob@example.com"))

        assert isinstance(user, User)
        assert (user.id, user.name, user.email) == (3, "Bob", "bob@example.com")

    def test_mapper_field_order_matches_projection(self):
        """Positional decoding relies on the projection listing columns in model order."""
        assert TABLES["posts"].columns == POST_FIELDS
        assert TABLES["users"].columns == USER_FIELDS

    @pytest.mark.parametrize("row", [
        (1, 1, "Hello World"),
        post_row(1) + ("extra",),
        (),
    ])
    def test_column_count_mismatch(self, row):
        with pytest.raises(MappingError, match="expects 7 columns"):
            decode_post(row)

    def test_none_row(self):
        with pytest.raises(MappingError):
            decode_user(None)

    def test_non_iterable_row(self):
        with pytest.raises(MappingError):
            decode_user(42)

    def test_value_of_wrong_type(self):
        with pytest.raises(MappingError, match="Post"):
            decode_post((1, "someone", "Hello World", "text", True, BASE_TIME, BASE_TIME))


class TestUserWithStats:

    def test_decode_with_last_post(self):
        last = datetime(2025, 3, 4, 5, 6, 7)
        user = decode_user_with_stats(user_row(1) + (4, 3, last))

        assert isinstance(user, UserWithStats)
        assert (user.post_count, user.published_count) == (4, 3)
        assert user.last_post_date == "2025-03-04T05:06:07"

    def test_user_without_posts(self):
        user = decode_user_with_stats(user_row(2) + (0, 0, None))

        assert user.post_count == 0
        assert user.last_post_date is None

    def test_column_count_matches_projection(self):
        assert len(TABLES["top_users"].columns) == 8
        with pytest.raises(MappingError):
            decode_user_with_stats(user_row(1))


class TestPostStats:

    def test_decode_stats(self):
        stats = decode_post_stats((10, 7, 3, Decimal("123.5")))

        assert stats == PostStats(total_posts=10, published_posts=7, active_users=3, avg_content_length=123.5)
        assert isinstance(stats.avg_content_length, float)

    def test_empty_table_aggregates_are_zero(self):
        """AVG over no rows is NULL."""
        assert decode_post_stats((0, 0, 0, None)) == PostStats()
        assert decode_post_stats((None, None, None, None)) == PostStats()

    def test_column_count_matches_projection(self):
        assert len(TABLES["post_stats"].columns) == 4


class TestCount:

    def test_count(self):
        assert decode_count((12,)) == 12

    def test_null_count(self):
        assert decode_count((None,)) == 0

    def test_non_integer_count(self):
        with pytest.raises(MappingError):
            decode_count(("12",))

    def test_count_needs_exactly_one_column(self):
        with pytest.raises(MappingError):
            decode_count((1, 2))
