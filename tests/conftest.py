"""
Pytest configuration and shared fixtures for the blog search service tests

Unit tests run against FakeDatabase (tests/db_test_utils.py).
Integration tests (RUN_DB_TESTS=1) get a fresh PostgreSQL database per test.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from query.builder import QueryBuilder
from tests.db_test_utils import FakeDatabase


def pytest_configure(config):
    """
    Pytest hook called before test collection.
    """
    os.environ['PYTEST_RUNNING'] = '1'
    config.addinivalue_line("markers", "integration: needs a live PostgreSQL database (RUN_DB_TESTS=1)")


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def builder():
    return QueryBuilder()


# ============================================================================
# Integration fixtures (live PostgreSQL)
# ============================================================================

SCHEMA_FILE = project_root / "schema.sql"


@pytest.fixture(scope="function")
async def db_connection():
    """
    DatabaseConnection against a freshly created test database.
    Skipped unless RUN_DB_TESTS=1.
    """
    if os.getenv("RUN_DB_TESTS") != "1":
        pytest.skip("Set RUN_DB_TESTS=1 to run PostgreSQL integration tests")

    import asyncpg
    from config import DatabaseConfig
    from database import DatabaseConnection
    from tests.test_config import TEST_DB_CONFIG

    sys_conn = await asyncpg.connect(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        database='postgres',
        ssl='prefer'
    )
    try:
        await sys_conn.execute(f'DROP DATABASE IF EXISTS {TEST_DB_CONFIG["database"]}')
        await sys_conn.execute(f'CREATE DATABASE {TEST_DB_CONFIG["database"]}')
    finally:
        await sys_conn.close()

    config = DatabaseConfig(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        database=TEST_DB_CONFIG['database'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        ssl_mode='prefer',
        min_pool_size=1,
        max_pool_size=5,
    )
    config.validate_safety('test')
    db = DatabaseConnection(config)
    await db.connect()
    await db.execute(SCHEMA_FILE.read_text(encoding='utf-8'))

    yield db

    await db.disconnect()
    sys_conn = await asyncpg.connect(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        database='postgres',
        ssl='prefer'
    )
    try:
        await sys_conn.execute(f'DROP DATABASE IF EXISTS {TEST_DB_CONFIG["database"]}')
    finally:
        await sys_conn.close()


@pytest.fixture(scope="function")
async def repos(db_connection):
    """RepositoryContainer initialized with the test database."""
    from container import RepositoryContainer
    return RepositoryContainer(db_connection)
