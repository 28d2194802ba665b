# authguard/main.py

"""
authguard - FastAPI application factory.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Optional

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from authguard.adapters.configuration.config import Settings, get_settings
from authguard.adapters.configuration.container import build_container
from authguard.adapters.inbound.api.v1.router import api_router
from authguard.application.ports.outbound.revocation_gate_port import IRevocationGate
from authguard.domain.exceptions import DatabaseOperationException
from authguard.shared.middleware import (
    AsyncRequestLoggingMiddleware,
    AsyncSecurityHeadersMiddleware,
    ErrorHandlerMiddleware,
    register_exception_handlers,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("authguard").setLevel(level)


async def revocation_cleanup_loop(gate: IRevocationGate, interval_seconds: float) -> None:
    """Periodically remove expired entries from the revocation store."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = await run_in_threadpool(gate.cleanup_expired)
        except DatabaseOperationException:
            logger.exception("Error cleaning up revoked tokens")
            continue
        if removed > 0:
            logger.info(f"Cleaned up {removed} expired revocation entries")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    container = app.state.security
    cleanup_task = asyncio.create_task(revocation_cleanup_loop(
        container.revocation_gate, container.settings.REVOCATION_CLEANUP_INTERVAL_SECONDS
    ))
    app.state.revocation_cleanup_task = cleanup_task

    yield

    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        pass
    logger.info("Revocation cleanup stopped")


def create_app(
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
        revocation_gate: Optional[IRevocationGate] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Raises:
        ConfigurationError: Missing or invalid JWT_SECRET.
    """
    if settings is None:
        settings = get_settings()

    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.state.security = build_container(settings, clock=clock, revocation_gate=revocation_gate)

    register_exception_handlers(app)

    # Ordem LIFO: o último adicionado é o mais externo
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(AsyncSecurityHeadersMiddleware)
    app.add_middleware(AsyncRequestLoggingMiddleware, environment=settings.ENVIRONMENT)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "version": settings.VERSION}

    logger.info(
        f"{settings.PROJECT_NAME} v{settings.VERSION} started "
        f"(environment={settings.ENVIRONMENT}, revocation={settings.REVOCATION_BACKEND.value})"
    )
    return app
