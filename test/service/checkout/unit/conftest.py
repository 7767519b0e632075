"""
Unit test configuration for the checkout service.

Overrides the database fixture from the parent conftest so unit tests run
without PostgreSQL.
"""

from collections.abc import AsyncGenerator

import pytest


@pytest.fixture(autouse=True, scope='function')
async def clean_database() -> AsyncGenerator[None, None]:
    """No-op override for unit tests - no real database needed"""
    yield
