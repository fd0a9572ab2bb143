"""
Table Vocabulary Registry

Maps domain field names to columns or fixed SQL expressions, and declares,
per queryable projection, which fields are text-searchable and which may
appear in ORDER BY. Nothing outside this vocabulary can reach the SQL text.
"""

from dataclasses import dataclass, field
from typing import Optional

ASC = "ASC"
DESC = "DESC"
DIRECTIONS = (ASC, DESC)


def _word_count(column: str) -> str:
    return f"LENGTH({column}) - LENGTH(REPLACE({column}, ' ', '')) + 1"


@dataclass(frozen=True)
class TableConfig:
    """Complete configuration for a queryable projection."""
    name: str
    source: str  # FROM clause, optionally aliased ("posts p")
    columns: tuple[str, ...]  # Projected columns, in decode order
    fields: dict[str, str]  # Domain field -> column reference or expression
    text_fields: tuple[str, ...] = ()
    order_fields: tuple[str, ...] = ()  # ORDER BY allow-list
    default_order_by: Optional[str] = None
    default_order_dir: str = DESC
    joins: tuple[str, ...] = ()
    group_by: tuple[str, ...] = ()

    def __post_init__(self):
        if self.default_order_by and self.default_order_by not in self.order_fields:
            raise ValueError(
                f"Default order field '{self.default_order_by}' of '{self.name}' is not in its allow-list"
            )
        unknown = [f for f in (*self.text_fields, *self.order_fields) if f not in self.fields]
        if unknown:
            raise ValueError(f"Unknown fields {unknown} in table '{self.name}'")

    def resolve(self, field_name: str) -> Optional[str]:
        """Column reference or expression for a domain field, or None if unknown."""
        return self.fields.get(field_name)


_POST_COLUMNS = ("id", "user_id", "title", "content", "published", "created_at", "updated_at")
_USER_COLUMNS = ("id", "name", "email", "created_at", "updated_at")


# =============================================================================
# Table Registry
# =============================================================================

TABLES: dict[str, TableConfig] = {
    "posts": TableConfig(
        name="posts",
        source="posts",
        columns=_POST_COLUMNS,
        fields={
            **{c: c for c in _POST_COLUMNS},
            "word_count": _word_count("content"),
        },
        text_fields=("title", "content"),
        order_fields=("title", "created_at", "updated_at"),
        default_order_by="created_at",
        default_order_dir=DESC,
    ),
    "users": TableConfig(
        name="users",
        source="users",
        columns=_USER_COLUMNS,
        fields={c: c for c in _USER_COLUMNS},
        text_fields=("name", "email"),
        order_fields=("name", "email", "created_at", "updated_at"),
        default_order_by="name",
        default_order_dir=ASC,
    ),
    # Single-row aggregate over posts joined to their authors
    "post_stats": TableConfig(
        name="post_stats",
        source="posts p",
        columns=(
            "COUNT(p.id) AS total_posts",
            "COUNT(CASE WHEN p.published = TRUE THEN 1 END) AS published_posts",
            "COUNT(DISTINCT p.user_id) AS active_users",
            "AVG(LENGTH(p.content)) AS avg_content_length",
        ),
        fields={
            "title": "p.title",
            "content": "p.content",
            "user_id": "p.user_id",
            "published": "p.published",
            "word_count": _word_count("p.content"),
        },
        text_fields=("title", "content"),
        joins=("JOIN users u ON p.user_id = u.id",),
    ),
    # Users with their post activity
    "top_users": TableConfig(
        name="top_users",
        source="users u",
        columns=(
            "u.id",
            "u.name",
            "u.email",
            "u.created_at",
            "u.updated_at",
            "COUNT(p.id) AS post_count",
            "COUNT(CASE WHEN p.published = TRUE THEN 1 END) AS published_count",
            "MAX(p.created_at) AS last_post_date",
        ),
        fields={
            "name": "u.name",
            "email": "u.email",
            "post_count": "post_count",
            "published_count": "published_count",
            "last_post_date": "last_post_date",
        },
        text_fields=("name", "email"),
        order_fields=("post_count", "published_count", "last_post_date", "name"),
        default_order_by="post_count",
        default_order_dir=DESC,
        joins=("LEFT JOIN posts p ON u.id = p.user_id",),
        group_by=("u.id", "u.name", "u.email", "u.created_at", "u.updated_at"),
    ),
}


def get_table_config(name: str) -> Optional[TableConfig]:
    """Get config for a table by name."""
    return TABLES.get(name)
