"""
Production FastAPI Application

Single HTTP service: catalogue, auctions, payments, orders, wallet,
enterprise quotes and admin. No background workers; expired auctions are
settled lazily on read or through the admin sweep endpoint.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.db_setting import dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


SERVICE_NAME = 'voltbay-service'


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [VoltBay] Starting up...')

    tracing = TracingConfig(service_name=SERVICE_NAME)
    tracing.setup()
    Logger.base.info('📊 [VoltBay] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [VoltBay] Dependency injection wired')

    tracing.instrument_sqlalchemy(engine=get_engine())
    Logger.base.info('🗄️  [VoltBay] Database engine ready + instrumented')

    Logger.base.info('✅ [VoltBay] Ready to serve requests')

    yield

    Logger.base.info('🛑 [VoltBay] Shutting down...')

    await dispose_engine()
    Logger.base.info('🗄️  [VoltBay] Database engine disposed')

    # Flush remaining spans
    tracing.shutdown()

    container.unwire()

    Logger.base.info('👋 [VoltBay] Shutdown complete')


app = create_app(lifespan=lifespan, service_name=SERVICE_NAME)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
