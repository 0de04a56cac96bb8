#!/usr/bin/env python3
"""
Create (or drop) the PostgreSQL database used when the test suite runs with
TEST_DATABASE_URL pointing at a real server instead of in-memory SQLite.

Connection details come from DATABASE_URL; the test database lives next to
it under the name TEST_DB_NAME.

    python scripts/setup_test_db.py            # create fresh database + tables
    python scripts/setup_test_db.py cleanup    # drop it again
"""

import asyncio
import os
import sys

import asyncpg
import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine

from app import models  # noqa: F401  registers every table on Base.metadata
from app.core.config import settings
from app.core.database import Base
from app.core.logging import setup_logging

logger = structlog.get_logger(__name__)

TEST_DB_NAME = os.getenv("TEST_DB_NAME", "test_salon_crm")

SERVER_URL = make_url(settings.DATABASE_URL)
TEST_DB_URL = SERVER_URL.set(database=TEST_DB_NAME)


async def _connect_maintenance_db() -> asyncpg.Connection:
    return await asyncpg.connect(
        host=SERVER_URL.host,
        port=SERVER_URL.port or 5432,
        user=SERVER_URL.username,
        password=SERVER_URL.password,
        database=SERVER_URL.database,
    )


async def setup_test_database() -> bool:
    """Drop and recreate the test database, then create all tables."""
    try:
        conn = await _connect_maintenance_db()
        await conn.execute(f'DROP DATABASE IF EXISTS "{TEST_DB_NAME}"')
        await conn.execute(f'CREATE DATABASE "{TEST_DB_NAME}"')
        await conn.close()

        engine = create_async_engine(TEST_DB_URL, echo=False)
        async with engine.begin() as db_conn:
            await db_conn.run_sync(Base.metadata.create_all)
        await engine.dispose()
    except (OSError, asyncpg.PostgresError) as e:
        logger.error(
            "Failed to set up test database",
            database=TEST_DB_NAME,
            host=SERVER_URL.host,
            error=str(e),
        )
        return False

    logger.info(
        "Test database ready",
        database=TEST_DB_NAME,
        tables=sorted(Base.metadata.tables),
        url=TEST_DB_URL.render_as_string(hide_password=True),
    )
    return True


async def cleanup_test_database() -> bool:
    try:
        conn = await _connect_maintenance_db()
        await conn.execute(f'DROP DATABASE IF EXISTS "{TEST_DB_NAME}"')
        await conn.close()
    except (OSError, asyncpg.PostgresError) as e:
        logger.error("Failed to drop test database", database=TEST_DB_NAME, error=str(e))
        return False

    logger.info("Test database dropped", database=TEST_DB_NAME)
    return True


if __name__ == "__main__":
    setup_logging()
    if len(sys.argv) > 1 and sys.argv[1] == "cleanup":
        ok = asyncio.run(cleanup_test_database())
    else:
        ok = asyncio.run(setup_test_database())
    sys.exit(0 if ok else 1)
