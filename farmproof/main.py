"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from farmproof.config import settings
from farmproof.middleware.error_handler import ErrorHandlerMiddleware
from farmproof.api.rate_limit import limiter
from farmproof.api.v1.routers import batches, farms, trees

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Logs the effective configuration on startup and closes the shared
    storage client on shutdown.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Geofence buffer: {settings.geofence_buffer_meters}m, "
                f"months per cycle: {settings.months_per_cycle}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from farmproof.infrastructure.storage_client import get_storage_client
    logger.info("Shutting down application...")
    client = get_storage_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Batch Certification API for Smallholder Coffee Farms

    This API turns a farm's boundaries, trees and photo-documented process
    steps into the evidence needed to certify a production batch.

    ## Features

    - **Geofencing**: Accept photo locations only inside farm boundaries plus
      a 20 m tolerance, and report the distance to the boundary otherwise
    - **Farm Sizing**: Compute boundary area in hectares
    - **Batch Progress**: Order process steps, group them into batches and
      track which production months each tree has documented
    - **Certificate Readiness**: Check that every tree, the drying system and
      the final bag have photo evidence, and derive the certified work period
    - **Robust Error Handling**: Automatic retries with exponential backoff for
      storage API calls
    - **Rate Limiting**: Protects the API from abuse

    ## Readiness Rules

    A batch is ready for certification when:
    1. The farm has at least one tree
    2. Every tree has a completed monthly update with a photo
    3. A completed drying step with a photo exists
    4. A completed final bag step with a photo exists
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(farms.router, prefix="/api/v1")
app.include_router(batches.router, prefix="/api/v1")
app.include_router(trees.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
