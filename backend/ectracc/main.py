"""
FastAPI application entry point for the ECTRACC API.

This module initializes the FastAPI app with middleware, CORS, logging,
wires the catalog and footprint stores, and registers all API routers.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from slowapi.errors import RateLimitExceeded

from ectracc.config import settings
from ectracc.core.errors import ServiceError
from ectracc.core.rate_limit import limiter
from ectracc.database import init_db
from ectracc.routers import footprints, health, products
from ectracc.services.catalog_service import CatalogService
from ectracc.services.document_store import connect_document_store

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Initializing footprint database...")
    init_db()
    logger.info("Footprint database initialized successfully")

    mongo_client, store = await connect_document_store(settings)
    app.state.catalog_service = CatalogService(store) if store is not None else None
    if store is None:
        logger.warning("Catalog running in degraded mode: product endpoints return 503")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if mongo_client is not None:
        mongo_client.close()


# Create FastAPI app
app = FastAPI(
    title="ECTRACC API",
    description="Product carbon footprint lookup and personal footprint tracking",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)
app.state.limiter = limiter
app.state.catalog_service = None


@app.exception_handler(RateLimitExceeded)
async def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"success": False, "error": "Too many requests, please try again later"},
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} error in {exc.operation}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "operation": exc.operation},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    detail = "Internal server error" if settings.ENVIRONMENT == "production" else str(exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": detail},
    )


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Add GZip compression
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Register routers
app.include_router(products.router, prefix=f"{settings.API_PREFIX}/products", tags=["products"])
app.include_router(footprints.router, prefix=f"{settings.API_PREFIX}/footprints", tags=["footprints"])
app.include_router(health.router, prefix=settings.API_PREFIX, tags=["health"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"success": True, "message": "ECTRACC Backend API", "version": settings.APP_VERSION}


@app.get("/health")
async def health_status():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ectracc.main:app",
        host="0.0.0.0",
        port=5000,
        reload=True,
        log_level="info",
    )
