"""
Checkout Service - Main Application
Handles seat status, seat reservation and VNPay payment confirmation.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan: startup and shutdown"""
    # Startup
    Logger.base.info('🚀 [Checkout Service] Starting up...')

    tracing = TracingConfig(service_name='checkout-service')
    tracing.setup()
    Logger.base.info('📊 [Checkout Service] OpenTelemetry tracing configured')

    setup()
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Checkout Service] Dependency injection wired')

    if settings.DEBUG:
        # Deployments migrate with alembic
        await create_db_and_tables()

    tracing.instrument_sqlalchemy(engine=get_engine())
    Logger.base.info('🗄️  [Checkout Service] Database engine ready + instrumented')

    Logger.base.info('✅ [Checkout Service] Startup complete')

    yield

    # Shutdown
    Logger.base.info('🛑 [Checkout Service] Shutting down...')

    await dispose_engine()
    Logger.base.info('🗄️ [Checkout Service] Database engine disposed')

    container.unwire()
    cleanup()
    tracing.shutdown()

    Logger.base.info('👋 [Checkout Service] Shutdown complete')


app = create_app(lifespan=lifespan)
