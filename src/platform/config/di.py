"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.service.checkout.driven_adapter.payment.vnpay_gateway_impl import VnpayGatewayImpl
from src.service.checkout.driven_adapter.repo.checkout_command_repo_impl import (
    CheckoutCommandRepoImpl,
)
from src.service.checkout.driven_adapter.repo.checkout_query_repo_impl import (
    CheckoutQueryRepoImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager with settings from config_service)
    database = providers.Singleton(Database)

    # Repositories (stateless - open a session per operation)
    checkout_query_repo = providers.Singleton(
        CheckoutQueryRepoImpl, session_factory=database.provided.session
    )
    checkout_command_repo = providers.Singleton(
        CheckoutCommandRepoImpl, session_factory=database.provided.session
    )

    # Payment gateway
    payment_gateway = providers.Singleton(VnpayGatewayImpl)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
