"""
Row Mappers

One decode routine per result shape. Columns are assigned positionally and
must match the projection's declared order exactly; a column-count mismatch
is a MappingError, never a silent truncation.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

from models import Post, PostStats, User, UserWithStats
from .errors import MappingError


POST_FIELDS = ("id", "user_id", "title", "content", "published", "created_at", "updated_at")
USER_FIELDS = ("id", "name", "email", "created_at", "updated_at")
USER_WITH_STATS_FIELDS = USER_FIELDS + ("post_count", "published_count", "last_post_date")
POST_STATS_FIELDS = ("total_posts", "published_posts", "active_users", "avg_content_length")


def _unpack(row: Any, record: str, fields: tuple[str, ...]) -> dict[str, Any]:
    """Zip a row's values (in column order) onto the record's field names."""
    if row is None:
        raise MappingError(f"Cannot decode {record} from an empty row")
    try:
        values = tuple(row)
    except TypeError as e:
        raise MappingError(f"Cannot decode {record} from {type(row).__name__}") from e
    if len(values) != len(fields):
        raise MappingError(
            f"{record} expects {len(fields)} columns {list(fields)}, got {len(values)}"
        )
    return dict(zip(fields, values))


def _build(model: type[BaseModel], data: dict[str, Any]):
    try:
        return model(**data)
    except PydanticValidationError as e:
        raise MappingError(f"Row does not fit {model.__name__}: {e}") from e


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _as_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, Decimal):
        return float(value)
    return value


def decode_post(row: Any) -> Post:
    return _build(Post, _unpack(row, "Post", POST_FIELDS))


def decode_user(row: Any) -> User:
    return _build(User, _unpack(row, "User", USER_FIELDS))


def decode_user_with_stats(row: Any) -> UserWithStats:
    data = _unpack(row, "UserWithStats", USER_WITH_STATS_FIELDS)
    data["last_post_date"] = _as_text(data["last_post_date"])
    return _build(UserWithStats, data)


def decode_post_stats(row: Any) -> PostStats:
    """Aggregates over an empty table come back as NULL; those decode to zero."""
    data = _unpack(row, "PostStats", POST_STATS_FIELDS)
    for key in ("total_posts", "published_posts", "active_users"):
        if data[key] is None:
            data[key] = 0
    data["avg_content_length"] = _as_float(data["avg_content_length"])
    return _build(PostStats, data)


def decode_count(row: Any) -> int:
    (count,) = _unpack(row, "count", ("count",)).values()
    if count is None:
        return 0
    if isinstance(count, bool) or not isinstance(count, int):
        raise MappingError(f"count must be an integer, got {type(count).__name__}")
    return count
