"""
CORS middleware setup for the application.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ontology_manager.config import settings


def setup_cors(app: FastAPI) -> None:
    """
    Configure CORS middleware for the application.

    Args:
        app: FastAPI application instance
    """
    # Local development accepts any origin; deployed instances use the configured list
    if settings.ENVIRONMENT in ["development", "local"]:
        allowed_origins = ["*"]
        allow_credentials = False
    else:
        allowed_origins = settings.CORS_ORIGINS
        allow_credentials = True

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Origin",
            "X-Requested-With",
            "Content-Type",
            "Accept",
            "Authorization",
        ],
        max_age=3600,
    )
