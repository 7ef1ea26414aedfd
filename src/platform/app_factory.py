"""
Shared FastAPI App Factory

Provides common app setup for production and test environments.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.platform.config.core_setting import settings
from src.platform.constant import route_constant as routes
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.observability.tracing import TracingConfig
from src.service.marketplace.driving_adapter.http_controller.admin_controller import (
    router as admin_router,
)
from src.service.marketplace.driving_adapter.http_controller.bid_controller import (
    router as bid_router,
)
from src.service.marketplace.driving_adapter.http_controller.enterprise_controller import (
    router as enterprise_router,
)
from src.service.marketplace.driving_adapter.http_controller.order_controller import (
    router as order_router,
)
from src.service.marketplace.driving_adapter.http_controller.payment_controller import (
    router as payment_router,
)
from src.service.marketplace.driving_adapter.http_controller.product_controller import (
    router as product_router,
)
from src.service.marketplace.driving_adapter.http_controller.user_controller import (
    router as auth_router,
)
from src.service.marketplace.driving_adapter.http_controller.wallet_controller import (
    router as wallet_router,
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'VoltBay solar equipment marketplace',
    service_name: str = 'voltbay-service',
) -> FastAPI:
    """
    Create a configured FastAPI application.

    Args:
        lifespan: Async context manager for app lifespan (startup/shutdown)
        title_suffix: Optional suffix for app title (e.g., " (Test)")
        description: App description
        service_name: Service name for tracing

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Auto-instrument FastAPI (must be done before mounting routes)
    TracingConfig(service_name=service_name).instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    register_exception_handlers(app)

    app.include_router(auth_router, prefix=routes.USER_BASE, tags=['user'])
    app.include_router(product_router, prefix=routes.PRODUCT_BASE, tags=['product'])
    app.include_router(bid_router, prefix=routes.BID_BASE, tags=['bid'])
    app.include_router(payment_router, prefix=routes.PAYMENT_BASE, tags=['payment'])
    app.include_router(order_router, prefix=routes.ORDER_BASE, tags=['order'])
    app.include_router(wallet_router, prefix=routes.WALLET_BASE, tags=['wallet'])
    app.include_router(enterprise_router, prefix=routes.ENTERPRISE_BASE, tags=['enterprise'])
    app.include_router(admin_router, prefix=routes.ADMIN_BASE, tags=['admin'])

    _register_common_endpoints(app)

    return app


def _register_common_endpoints(app: FastAPI) -> None:
    """Register health and metrics endpoints."""

    @app.get('/health')
    async def health_check() -> dict[str, str]:
        """Health check endpoint for container orchestration."""
        return {'status': 'healthy', 'service': settings.PROJECT_NAME}

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        """Prometheus metrics endpoint."""
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
