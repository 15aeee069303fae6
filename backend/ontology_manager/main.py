"""
FastAPI main application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

# Configure logging first
from ontology_manager.config import settings
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format=settings.LOG_FORMAT,
    handlers=[logging.StreamHandler()]
)

from ontology_manager.api.v1.router import api_router
from ontology_manager.core.database import init_db, close_db
from ontology_manager.services.graph_service import graph_service
from ontology_manager.errors import OntologyManagerError
from ontology_manager.middleware.cors import setup_cors
from ontology_manager.middleware.logging import setup_logging, configure_uvicorn_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting up Ontology Manager API...")
    await init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down Ontology Manager API...")
    await graph_service.disconnect()
    await close_db()


def create_application() -> FastAPI:
    """Create FastAPI application with all configurations."""

    app = FastAPI(
        title="Ontology Manager API",
        description="Create, browse, edit and delete ontology records",
        version="1.0.0",
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan
    )

    # Setup middleware
    setup_cors(app)
    setup_logging(app)
    configure_uvicorn_logging()

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.exception_handler(OntologyManagerError)
    async def ontology_error_handler(request: Request, exc: OntologyManagerError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_envelope()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": problems}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "environment": settings.ENVIRONMENT}

    return app


app = create_application()

if __name__ == "__main__":
    uvicorn.run(
        "ontology_manager.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development"
    )
