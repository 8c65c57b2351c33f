"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
import math
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool

from authflow import __version__
from authflow.adapters.repository.memory import InMemoryUserRepository
from authflow.adapters.repository.postgres import PostgresUserRepository, run_migrations
from authflow.adapters.smtp.console import ConsoleEmailSender
from authflow.adapters.smtp.smtp import SmtpEmailSender
from authflow.api.v1 import router as v1_router
from authflow.config.settings import Settings, get_settings
from authflow.domain.exceptions import EmailDeliveryError, InternalFailure
from authflow.domain.ports import EmailSender

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Account API v1 - Register, verify email and log in",
    },
]


def build_email_sender(settings: Settings) -> EmailSender:
    """Create the email sender selected by ``email_backend``."""
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=settings.smtp_sender,
            sender_name=settings.smtp_sender_name,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout_seconds,
            code_ttl_minutes=math.ceil(settings.code_ttl_seconds / 60),
        )
    return ConsoleEmailSender()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the account repository (and database pool + migrations for postgres)
    - Creates the email sender and checks SMTP configuration
    - Closes the connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.repository = PostgresUserRepository(pool)
    else:
        logger.warning("Using in-memory account storage; data is lost on restart")
        app.state.repository = InMemoryUserRepository()

    email_sender = build_email_sender(settings)
    if isinstance(email_sender, SmtpEmailSender):
        try:
            email_sender.verify_connection()
        except EmailDeliveryError as e:
            # Registrations will roll back until the relay is reachable
            logger.error("Email configuration error: %s", e)
    app.state.email_sender = email_sender

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="authflow",
    description="Account registration with one-time email verification codes",
    version=__version__,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
    allow_credentials=True,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1/auth")


INVALID_BODY_MESSAGE = "Invalid request body"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unparseable bodies as a plain 400 without echoing the input."""
    logger.info("Rejected malformed request body on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=400, content={"detail": INVALID_BODY_MESSAGE})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected faults in full; return only a generic message."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": InternalFailure.default_message})


@app.get("/")
async def root() -> dict[str, str]:
    """Service greeting."""
    return {"message": "authflow account service"}


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with storage validation.

    Returns 200 OK if application and account store are healthy.
    Raises exception if the store is unreachable.
    """
    request.app.state.repository.ping()
    return {"status": "healthy"}
