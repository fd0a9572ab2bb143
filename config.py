"""
Configuration for the blog search service
Supports local development, testing, and production
Environment-aware configuration based on APP_ENV
"""

import os
from dataclasses import dataclass
from typing import Optional, Literal
from urllib.parse import quote
from pathlib import Path
from dotenv import load_dotenv

# Environment modes
EnvironmentMode = Literal["development", "test", "production"]

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def load_app_environment(mode: Optional[str] = None) -> str:
    """
    Load environment variables from the appropriate .env file.

    Priority:
    1. Explicit 'mode' argument
    2. APP_ENV environment variable
    3. Default to 'development'

    Loads .env.{mode} if it exists. Host environment variables take precedence.
    """
    if not mode:
        mode = get_environment_mode()

    env_file = Path(__file__).parent / f'.env.{mode}'
    if env_file.exists():
        load_dotenv(env_file, override=False)

    return mode


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class DatabaseConfig:
    """PostgreSQL database configuration"""

    host: str
    port: int
    database: str
    user: str
    password: str

    # Connection pool settings
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: int = 60  # seconds

    ssl_mode: str = "prefer"

    @property
    def asyncpg_dsn(self) -> str:
        """Get asyncpg DSN format"""
        return (
            f"postgresql://{quote(self.user, safe='')}:{quote(self.password, safe='')}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    @classmethod
    def from_environment(cls, mode: Optional[EnvironmentMode] = None) -> 'DatabaseConfig':
        """
        Load configuration from environment variables

        Environment variables:
        - APP_ENV: Environment mode (development, test, production)
        - DB_HOST: Database host (default: localhost)
        - DB_PORT: Database port (default: 5432)
        - DB_NAME: Database name (default: blog_db)
        - DB_USER: Database user
        - DB_PASSWORD: Database password
        - DB_SSL_MODE: SSL mode (default: prefer in development, require elsewhere)
        """
        mode = load_app_environment(mode)

        config = cls(
            host=os.getenv('DB_HOST', 'localhost'),
            port=_int_env('DB_PORT', 5432),
            database=os.getenv('DB_NAME', 'blog_test' if mode == 'test' else 'blog_db'),
            user=os.getenv('DB_USER', 'postgres'),
            password=os.getenv('DB_PASSWORD', ''),
            ssl_mode=os.getenv('DB_SSL_MODE', 'require' if mode == 'production' else 'prefer'),
            min_pool_size=_int_env('DB_MIN_POOL_SIZE', 2),
            max_pool_size=_int_env('DB_MAX_POOL_SIZE', 10),
            command_timeout=_int_env('DB_COMMAND_TIMEOUT', 60),
        )

        config.validate_safety(mode)
        return config

    def validate_safety(self, mode: str):
        """Ensure configuration is safe for the requested mode"""
        if mode == 'test':
            if 'test' not in self.database:
                raise ValueError(f"SAFETY ERROR: Test mode requested but database is '{self.database}'. Test database must contain 'test'.")
            if 'prod' in self.database:
                raise ValueError(f"SAFETY ERROR: Test mode requested but database '{self.database}' appears to be production.")

    @classmethod
    def for_local_development(cls) -> 'DatabaseConfig':
        """Configuration for local PostgreSQL instance"""
        return cls(
            host='localhost',
            port=5432,
            database='blog_db',
            user='postgres',
            password='postgres',
            ssl_mode='prefer',
            min_pool_size=2,
            max_pool_size=5,
        )

    @classmethod
    def for_testing(cls) -> 'DatabaseConfig':
        """Configuration for test PostgreSQL database"""
        return cls(
            host='localhost',
            port=5432,
            database='blog_test',
            user='postgres',
            password='postgres',
            ssl_mode='prefer',
            min_pool_size=1,
            max_pool_size=5,
        )


@dataclass
class SearchConfig:
    """
    Paging defaults and SQL dialect for the query layer.

    Environment Variables:
    - SEARCH_DEFAULT_LIMIT: Page size when the caller gives none (default: 50)
    - SEARCH_MAX_LIMIT: Larger page sizes are clamped to this (default: 200)
    - SQL_DIALECT: Placeholder style, 'postgres' ($1) or 'sqlite' (?) (default: postgres)
    - QUERY_TIMEOUT: Per-statement timeout in seconds, unset for none
    """
    default_limit: int = DEFAULT_LIMIT
    max_limit: int = MAX_LIMIT
    dialect: str = "postgres"
    query_timeout: Optional[float] = None

    def __post_init__(self):
        if self.max_limit < 1:
            self.max_limit = MAX_LIMIT
        if self.default_limit < 1:
            self.default_limit = DEFAULT_LIMIT
        if self.default_limit > self.max_limit:
            self.default_limit = self.max_limit

    @classmethod
    def from_environment(cls) -> "SearchConfig":
        load_app_environment()
        timeout = os.getenv("QUERY_TIMEOUT")
        try:
            query_timeout = float(timeout) if timeout else None
        except ValueError:
            query_timeout = None
        return cls(
            default_limit=_int_env("SEARCH_DEFAULT_LIMIT", DEFAULT_LIMIT),
            max_limit=_int_env("SEARCH_MAX_LIMIT", MAX_LIMIT),
            dialect=os.getenv("SQL_DIALECT", "postgres").lower(),
            query_timeout=query_timeout,
        )


def get_environment_mode() -> EnvironmentMode:
    """Get current environment mode from APP_ENV variable"""
    mode = os.getenv('APP_ENV', 'development').lower()
    if mode not in ('development', 'test', 'production'):
        mode = 'development'
    return mode  # type: ignore
