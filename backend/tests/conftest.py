"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- An in-memory SQLite engine per test
- A users table and a repository bound to it
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_ECHO"] = "false"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_JSON"] = "true"

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from sqlalchemy import Column, Integer, MetaData, String, Table, text  # noqa: E402


metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=True, unique=True),
    Column("active", Integer, nullable=False, server_default=text("1")),
    Column("team", String, nullable=True),
)


@pytest.fixture
def anyio_backend():
    """
    Configure anyio backend for async tests.

    Returns:
        str: Backend name ("asyncio")
    """
    return "asyncio"


@pytest.fixture
async def engine():
    """
    Provide an in-memory SQLite engine with the test schema.

    Tables are created before the test and the engine is disposed after.
    """
    from tablerepo.core.database import get_async_engine

    engine = get_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def users_repo(engine):
    """TableRepository bound to the users table."""
    from tablerepo.repositories.table import TableRepository

    return TableRepository("users", engine)


@pytest.fixture
async def seeded_users(users_repo):
    """
    Insert three users.

    Returns:
        List of inserted user dicts
    """
    rows = [
        {"id": "u1", "name": "Ann", "email": "ann@example.com", "team": "red"},
        {"id": "u2", "name": "Bob", "email": "bob@example.com", "team": "blue"},
        {"id": "u3", "name": "Cid", "email": None, "team": "red", "active": 0},
    ]
    return [await users_repo.insert(row) for row in rows]
