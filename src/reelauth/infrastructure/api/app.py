"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
exception handlers and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reelauth.core.config import Settings, get_settings
from reelauth.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from reelauth.domain.exceptions import (
    AlreadyVerifiedError,
    AuthError,
    DuplicateEmailError,
    TokenError,
    TooManyRequestsError,
    UserNotFoundError,
    ValidationError,
)
from reelauth.infrastructure.api.schemas import ErrorResponse, ValidationErrorDetail
from reelauth.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)
from reelauth.infrastructure.services.email_dispatcher import EmailDispatcher

logger = get_logger(__name__)

# Checked in order, so subclasses must come before their bases.
ERROR_STATUS_CODES: list[tuple[type[AuthError], int]] = [
    (ValidationError, 422),
    (DuplicateEmailError, 409),
    (UserNotFoundError, 404),
    (AlreadyVerifiedError, 400),
    (TooManyRequestsError, 429),
    (TokenError, 401),
]


def status_code_for(exc: AuthError) -> int:
    """Map a domain error to its HTTP status code."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes the database and runs the email worker for the lifetime of
    the application.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "Starting ReelAuth",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    dispatcher: EmailDispatcher = app.state.email_dispatcher
    dispatcher.start()

    yield

    logger.info("Shutting down ReelAuth")
    await dispatcher.stop()
    await close_database()
    logger.info("Database connection closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Defaults to the cached process settings.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Email/password authentication with email verification",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.state.email_dispatcher = EmailDispatcher.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_health_check(app, settings)
    register_routes(app, settings)
    register_exception_handlers(app, settings)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI, settings: Settings) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint.

        Returns 200 if the service is running. Does not check
        database connectivity.
        """
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check including database connectivity."""
        db_healthy = await get_db_manager().check_connection()
        if db_healthy:
            return {
                "status": "ready",
                "service": settings.app_name,
                "version": settings.app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": settings.app_name,
                "database": "disconnected",
            },
        )


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
    """
    from reelauth.infrastructure.api.routes import auth_router

    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
    """

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        """Render domain errors as ``ErrorResponse`` bodies."""
        status_code = status_code_for(exc)
        body = ErrorResponse(error=exc.code, message=exc.message)
        headers = None

        if isinstance(exc, ValidationError):
            body.details = [
                ValidationErrorDetail(field=issue.field, message=issue.message, code=issue.code)
                for issue in exc.issues
            ]
        if isinstance(exc, TooManyRequestsError):
            body.remaining_seconds = exc.remaining_seconds
            headers = {"Retry-After": str(exc.remaining_seconds)}

        logger.info(
            "Request rejected",
            path=request.url.path,
            error=exc.code,
            status_code=status_code,
        )
        return JSONResponse(
            status_code=status_code,
            content=body.model_dump(exclude_none=True),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Render malformed request bodies in the same shape as domain validation errors."""
        details = []
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part != "body"]
            details.append(
                ValidationErrorDetail(
                    field=".".join(loc) or "body",
                    message=error.get("msg", "Invalid value"),
                    code=error.get("type", "invalid"),
                )
            )
        body = ErrorResponse(error="validation_error", message="Validation error", details=details)
        return JSONResponse(status_code=422, content=body.model_dump(exclude_none=True))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": str(exc) if settings.debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log every request and propagate a correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()
