"""
Logging middleware and configuration.
"""
import logging
import time
from typing import Callable
from fastapi import FastAPI, Request, Response

from ontology_manager.config import settings

QUIET_LOGGERS = [
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "sqlalchemy.pool",
    "sqlalchemy.dialects",
    "sqlalchemy.orm",
    "aiosqlite",
    "neo4j",
]


def setup_logging(app: FastAPI) -> None:
    """
    Configure logging for the application.

    Args:
        app: FastAPI application instance
    """
    loggers_to_configure = [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "fastapi",
        "ontology_manager",
    ]

    for logger_name in loggers_to_configure:
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Driver loggers only report warnings and above regardless of LOG_LEVEL
    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    # Add request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        """Log HTTP requests and responses."""
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time

        # Only log errors, slow requests, or in development mode
        logger = logging.getLogger("ontology_manager.requests")
        should_log = (
            response.status_code >= 400 or
            duration > 2.0 or
            settings.ENVIRONMENT == "development"
        )

        if should_log:
            log_level = logging.ERROR if response.status_code >= 500 else logging.INFO
            logger.log(
                log_level,
                f"{response.status_code} {request.method} {request.url.path} ({duration:.3f}s)"
            )

        return response

    # Add security headers middleware
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next: Callable) -> Response:
        """Add security headers to responses."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class EndpointFilter(logging.Filter):
    """Filter to exclude certain endpoints from logging."""

    def __init__(self, paths_to_exclude: list = None):
        super().__init__()
        self.paths_to_exclude = paths_to_exclude or ["/health", "/docs", "/redoc", "/openapi.json"]

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter log records."""
        if isinstance(record.args, tuple) and len(record.args) >= 3:
            path = record.args[2]
            return path not in self.paths_to_exclude
        return True


def configure_uvicorn_logging():
    """Configure uvicorn logging to reduce noise."""
    logging.getLogger("uvicorn.access").addFilter(EndpointFilter())
