"""
Filter Validation & Defaults

Normalizes raw caller input into a SearchFilters value. Never raises:
anything invalid degrades to the table's safe default.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from config import SearchConfig
from .tables import ASC, DESC, TableConfig, TABLES

_TRUE = {"true", "1", "yes", "t", "y"}
_FALSE = {"false", "0", "no", "f", "n"}


@dataclass(frozen=True)
class SearchFilters:
    """Normalized, immutable set of optional search constraints."""
    order_by: Optional[str]  # None only for tables without an ORDER BY allow-list
    order_dir: str
    limit: int
    offset: int = 0
    query: str = ""  # Empty means no text predicate
    user_id: Optional[int] = None
    published: Optional[bool] = None
    min_word_count: Optional[int] = None


def _table(table: Union[str, TableConfig]) -> TableConfig:
    return TABLES[table] if isinstance(table, str) else table


def normalize_order_by(table: TableConfig, order_by: Any) -> Optional[str]:
    """Allow-listed field, or the table default."""
    if isinstance(order_by, str) and order_by in table.order_fields:
        return order_by
    return table.default_order_by


def normalize_order_dir(table: TableConfig, order_dir: Any) -> str:
    if isinstance(order_dir, str):
        direction = order_dir.strip().upper()
        if direction in (ASC, DESC):
            return direction
    return table.default_order_dir


def normalize_limit(limit: Any, config: Optional[SearchConfig] = None) -> int:
    """Clamp to (0, max_limit]; absent or non-positive becomes the default."""
    config = config or SearchConfig()
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        return config.default_limit
    return min(limit, config.max_limit)


def normalize_offset(offset: Any) -> int:
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        return 0
    return offset


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def normalize_filters(
    table: Union[str, TableConfig],
    *,
    query: Optional[str] = None,
    user_id: Optional[int] = None,
    published: Optional[bool] = None,
    min_word_count: Optional[int] = None,
    order_by: Optional[str] = None,
    order_dir: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    config: Optional[SearchConfig] = None,
) -> SearchFilters:
    """
    Build a SearchFilters for `table` from raw, possibly invalid values.

    - query: empty or blank -> no text predicate; otherwise matched as given
    - order_by: outside the table allow-list -> table default
    - order_dir: anything but asc/desc (any case) -> table default
    - limit: absent or <= 0 -> default; above max -> max
    - offset: absent or negative -> 0

    Filters the table has no field for are dropped.
    """
    table_config = _table(table)
    text = query if isinstance(query, str) and table_config.text_fields and query.strip() else ""
    if "published" not in table_config.fields or not isinstance(published, bool):
        published = None

    return SearchFilters(
        query=text,
        user_id=_optional_int(user_id) if "user_id" in table_config.fields else None,
        published=published,
        min_word_count=_optional_int(min_word_count) if "word_count" in table_config.fields else None,
        order_by=normalize_order_by(table_config, order_by),
        order_dir=normalize_order_dir(table_config, order_dir),
        limit=normalize_limit(limit, config),
        offset=normalize_offset(offset),
    )


def _parse_int(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return None
    return None


def _parse_bool(raw: Any) -> Optional[bool]:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
    return None


def _first(params: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in params:
            return params[name]
    return None


def filters_from_params(
    table: Union[str, TableConfig],
    params: Mapping[str, Any],
    config: Optional[SearchConfig] = None,
) -> SearchFilters:
    """
    Decode string query parameters (e.g. from an HTTP query string) into
    normalized filters. Accepts camelCase and snake_case names.
    """
    return normalize_filters(
        table,
        query=_first(params, "query", "q"),
        user_id=_parse_int(_first(params, "userId", "user_id")),
        published=_parse_bool(_first(params, "published")),
        min_word_count=_parse_int(_first(params, "minWordCount", "min_word_count")),
        order_by=_first(params, "orderBy", "order_by"),
        order_dir=_first(params, "orderDir", "order_dir"),
        limit=_parse_int(_first(params, "limit")),
        offset=_parse_int(_first(params, "offset")),
        config=config,
    )
