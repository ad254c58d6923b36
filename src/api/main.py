"""FastAPI application initialization and configuration module.

This module builds the Brain Agro API application. It handles:
- Application lifecycle management (startup/shutdown)
- The database handle shared by every request
- Middleware registration in the correct order
- Exception handler registration
- Health check and info endpoints

Middleware are executed in reverse order of registration, so the last one
added is the first to process a request.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.api.constants import CORRELATION_ID_HEADER, REQUEST_ID_HEADER
from src.api.dependencies import AppSettings
from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.routers import producers
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.error_context import configure_sensitive_fields
from src.core.logging import setup_logging
from src.infrastructure.database.dependencies import DatabaseHandle
from src.infrastructure.database.session import Database


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.

    Raises:
        RuntimeError: If database connection fails during startup.
    """
    database: Database = app_instance.state.database

    is_healthy, error_msg = await database.check_connection()

    if is_healthy:
        logger.info("Database connection successful")
    else:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown initiated")
    await database.dispose()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    # Setup logging first
    setup_logging(settings)
    configure_sensitive_fields(settings.log_config.sensitive_fields)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Rural producer registry with CPF/CNPJ validation and dashboards",
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    application.state.settings = settings
    application.state.database = Database.from_config(
        settings.database_config, settings.log_config
    )

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    # 3. Request logging middleware (logs requests/responses)
    application.add_middleware(
        RequestLoggingMiddleware,
        log_config=settings.log_config,
        trust_proxy_headers=settings.environment == "production",
    )

    # 2. Request context middleware (creates correlation and request IDs)
    application.add_middleware(RequestContextMiddleware)

    # 1. CORS (answers preflight requests before anything else runs)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[CORRELATION_ID_HEADER, REQUEST_ID_HEADER],
    )

    application.include_router(producers.router)

    @application.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning a hello world message.

        Returns:
            dict[str, str]: A dictionary containing a welcome message.
        """
        return {"message": "Hello, World!"}

    @application.get("/health")
    async def health(database: DatabaseHandle) -> dict[str, object]:
        """Health check endpoint for monitoring and container orchestration.

        Returns:
            dict[str, object]: A dictionary with status and database connectivity.
        """
        is_healthy, error_msg = await database.check_connection()

        if not is_healthy:
            # Report "degraded" rather than failing the probe outright
            logger.warning("Database health check failed: {}", error_msg)

        return {"status": "ok" if is_healthy else "degraded", "database": is_healthy}

    @application.get("/info")
    async def info(app_settings: AppSettings) -> dict[str, Any]:
        """Get application information.

        Args:
            app_settings: Application settings injected via dependency.

        Returns:
            dict[str, Any]: Application information including name, version,
                and environment.
        """
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
        }

    return application


app = create_app()
