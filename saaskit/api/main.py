"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance.
It handles:
1. Application initialization
2. Router registration
3. Middleware configuration (audit, security headers, CORS)
4. Exception handlers
5. Startup/shutdown events

Run with: uvicorn saaskit.api.main:app --reload
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from saaskit import __version__
from saaskit.api.routes import (
    chat_router,
    conversations_router,
    health_router,
    payments_router,
    personas_router,
    users_router,
)
from saaskit.core.audit import AuditMiddleware, SecurityHeadersMiddleware
from saaskit.core.config import get_settings
from saaskit.core.exceptions import RateLimitExceeded, RequestValidationFailed, SaasKitException
from saaskit.core.logging_config import get_logger, setup_logging
from saaskit.core.validators import flatten_errors


# Initialize logging before anything else
settings = get_settings()
setup_logging(settings.log_level, settings.log_dir)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: create missing tables (when AUTO_CREATE_TABLES is on)
    - Shutdown: dispose of the database engine
    """
    logger.info(f"Starting {settings.app_name} {__version__} in {settings.app_env} mode")
    logger.info(f"Chat model: {settings.chat_model}")
    logger.info(
        f"Fallback model: {settings.fallback_model if settings.has_fallback_provider else 'disabled'}"
    )
    logger.info(f"Rate Limit: {settings.rate_limit_per_minute} req/min")
    logger.info(f"Audit Logging: {settings.enable_audit_logging}")

    if settings.auto_create_tables:
        from saaskit.database.init_db import init_tables
        init_tables()
        logger.info("Checked/Initialized database tables.")

    yield  # Application runs here

    logger.info(f"Shutting down {settings.app_name}")

    from saaskit.database.connection import get_database
    try:
        get_database().close()
        logger.info("Closed database connections")
    except Exception as e:
        logger.error(f"Error closing database connections: {e}")


app = FastAPI(
    title="SaasKit Chat API",
    description="""
    Backend of the SaasKit dashboard.

    ## Features

    - **Persona chat**: streamed answers in the UI message stream format
    - **Persistent history**: conversations and messages stored per user
    - **RPC procedures**: conversations, personas, profile, plans and payments
    - **Provider fallback**: Gemini first, Groq when Gemini fails before streaming
    - **Rate limiting**: chat requests per user and minute
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ============================================================
# Middleware Configuration (Order matters!)
# ============================================================

app.add_middleware(SecurityHeadersMiddleware)

if settings.enable_audit_logging:
    app.add_middleware(AuditMiddleware)
    logger.info("Audit logging middleware enabled")

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
elif settings.is_development():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.warning("CORS configured for development (all origins allowed)")


# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={"Retry-After": str(exc.retry_after)}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report query and body schema errors as 400 with flattened errors."""
    failed: RequestValidationFailed = flatten_errors(exc.errors())
    logger.info(f"Rejected request to {request.url.path}: {failed.flatten()}")
    return JSONResponse(
        status_code=failed.status_code,
        content=failed.to_dict()
    )


@app.exception_handler(SaasKitException)
async def saaskit_exception_handler(request: Request, exc: SaasKitException):
    """Handle all application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions globally.

    The exception text is only included in development mode.
    """
    logger.exception(f"Unhandled exception: {exc}")

    development = settings.is_development()
    return JSONResponse(
        status_code=500,
        content={
            "error": str(exc) if development else "An unexpected error occurred",
            "code": "internal_error",
            "details": type(exc).__name__ if development else None,
        }
    )


# ============================================================
# Routers
# ============================================================

app.include_router(health_router)
app.include_router(chat_router)
app.include_router(conversations_router)
app.include_router(personas_router)
app.include_router(users_router)
app.include_router(payments_router)


# ============================================================
# Root Endpoint
# ============================================================

@app.get("/", include_in_schema=False)
async def root():
    return {
        "message": "SaasKit Chat API",
        "version": __version__,
        "documentation": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "saaskit.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development()
    )
