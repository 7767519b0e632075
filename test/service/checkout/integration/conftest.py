"""
Fixtures for checkout repository integration tests.

Repositories are backed by the real session factory; every test starts from a
truncated database with one seeded venue.
"""

import pytest

from src.platform.database.orm_db_setting import Database
from src.service.checkout.driven_adapter.repo.checkout_command_repo_impl import (
    CheckoutCommandRepoImpl,
)
from src.service.checkout.driven_adapter.repo.checkout_query_repo_impl import (
    CheckoutQueryRepoImpl,
)
from test.service.checkout.integration.checkout_venue import Venue, seed_venue


@pytest.fixture
async def venue(clean_database) -> Venue:
    # Depends on clean_database so truncation runs before seeding
    return await seed_venue()


@pytest.fixture
def command_repo() -> CheckoutCommandRepoImpl:
    return CheckoutCommandRepoImpl(session_factory=Database().session)


@pytest.fixture
def query_repo() -> CheckoutQueryRepoImpl:
    return CheckoutQueryRepoImpl(session_factory=Database().session)
