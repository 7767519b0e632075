"""
Test Configuration and Fixtures

This module provides:
- Test environment variables set before any application import
- Database setup (schema from SQLAlchemy metadata) and per-test cleanup
- Automatic `unit` / `integration` markers based on the test path

Architecture:
- Unit tests (test/**/unit/): Override fixtures with mocks in their own conftest.py
- Integration tests: Use a real PostgreSQL database, skipped when it is unreachable
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# This ensures POSTGRES_DB is set before settings are read at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    if worker_id == 'master':
        os.environ['POSTGRES_DB'] = 'seat_checkout_test_db'
    else:
        os.environ['POSTGRES_DB'] = f'seat_checkout_test_db_{worker_id}'

    # Create test log directory
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Pool size settings for tests (the race test needs two connections at once)
    os.environ.setdefault('DB_POOL_SIZE', '4')
    os.environ.setdefault('DB_POOL_MAX_OVERFLOW', '4')


# Call immediately to set env vars before any imports
_early_setup_test_environment()

import asyncio  # noqa: E402
from collections.abc import AsyncGenerator  # noqa: E402

from dotenv import load_dotenv  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402


# =============================================================================
# Pytest Hooks: Detect test type and setup accordingly
# =============================================================================
_database_available = False
_database_error = ''


def _is_unit_test_only_run(config: pytest.Config) -> bool:
    markexpr = config.getoption('markexpr', default='')
    if markexpr and 'unit' in str(markexpr) and 'not unit' not in str(markexpr):
        return True

    args = config.args or []
    test_paths = [arg for arg in args if arg and not arg.startswith('-')]
    return bool(test_paths and all('/unit' in path or '\\unit' in path for path in test_paths))


def pytest_sessionstart(session: pytest.Session) -> None:
    global _database_available, _database_error
    if _is_unit_test_only_run(session.config):
        return

    try:
        asyncio.run(_setup_test_database())
        _database_available = True
    except Exception as e:  # any connection failure means "skip integration tests"
        _database_error = f'{type(e).__name__}: {e}'


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        is_unit = '/unit/' in item.path.as_posix()
        item.add_marker(pytest.mark.unit if is_unit else pytest.mark.integration)
        if is_unit:
            continue

        item.fixturenames.append('clean_database')
        if not _database_available:
            item.add_marker(
                pytest.mark.skip(reason=f'PostgreSQL unavailable ({_database_error or "not set up"})')
            )


# =============================================================================
# Database Configuration
# =============================================================================
def _get_db_config() -> dict[str, str]:
    env_file = '.env' if Path('.env').exists() else '.env.example'
    load_dotenv(env_file)

    return {
        'user': os.getenv('POSTGRES_USER', 'postgres'),
        'password': os.getenv('POSTGRES_PASSWORD', 'postgres'),
        'host': os.getenv('POSTGRES_SERVER', 'localhost'),
        'port': os.getenv('POSTGRES_PORT', '5432'),
        'test_db': os.getenv('POSTGRES_DB', 'seat_checkout_test_db'),
    }


def _get_test_database_url() -> str:
    """Get test database URL"""
    cfg = _get_db_config()
    return (
        f'postgresql+asyncpg://{cfg["user"]}:{cfg["password"]}'
        f'@{cfg["host"]}:{cfg["port"]}/{cfg["test_db"]}'
    )


_cached_tables: list[str] | None = None


# =============================================================================
# Database Setup and Cleanup
# =============================================================================
async def _setup_test_database() -> None:
    from src.platform.database.orm_db_setting import Base
    import src.service.checkout.driven_adapter.model  # noqa: F401

    db_url = _get_test_database_url()
    cfg = _get_db_config()

    # Create database if not exists
    postgres_url = db_url.replace(f'/{cfg["test_db"]}', '/postgres')
    engine = create_async_engine(postgres_url, isolation_level='AUTOCOMMIT')
    try:
        async with engine.begin() as conn:
            result = await conn.execute(
                text('SELECT 1 FROM pg_database WHERE datname = :name'), {'name': cfg['test_db']}
            )
            if not result.fetchone():
                await conn.execute(text(f'CREATE DATABASE {cfg["test_db"]}'))
    finally:
        await engine.dispose()

    # Reset schema and create tables from the models
    reset_engine = create_async_engine(db_url)
    try:
        async with reset_engine.begin() as conn:
            await conn.execute(text('DROP SCHEMA public CASCADE'))
            await conn.execute(text('CREATE SCHEMA public'))
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await reset_engine.dispose()


async def _clean_all_tables() -> None:
    global _cached_tables
    engine = create_async_engine(_get_test_database_url())
    try:
        async with engine.begin() as conn:
            if _cached_tables is None:
                result = await conn.execute(
                    text("SELECT tablename FROM pg_tables WHERE schemaname = 'public'")
                )
                _cached_tables = [row[0] for row in result]

            if _cached_tables:
                quoted = [f'"{t}"' for t in _cached_tables]
                await conn.execute(text(f'TRUNCATE {", ".join(quoted)} CASCADE'))
    finally:
        await engine.dispose()


# =============================================================================
# Integration Test Fixtures
# =============================================================================
@pytest.fixture(scope='function')
async def clean_database() -> AsyncGenerator[None, None]:
    from src.platform.database.orm_db_setting import dispose_engine

    await _clean_all_tables()
    yield

    # Engines are bound to the test's event loop
    await dispose_engine()
