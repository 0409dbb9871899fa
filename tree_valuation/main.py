"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tree_valuation.config import settings
from tree_valuation.api.rate_limit import limiter
from tree_valuation.api.v1.routers import species, valuations
from tree_valuation.middleware.error_handler import ErrorHandlerMiddleware
from tree_valuation.services.application.engine_context import get_engine_context

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

    Resolves the catalog and factor tables once, before serving requests.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Factor source: {settings.factor_source_url} "
                f"(timeout={settings.factor_fetch_timeout}s, fallback={settings.factor_snapshot_path})")
    logger.info(f"Evaluation tier bounds: {settings.evaluation_tier_upper_bounds}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    await get_engine_context().initialize()

    yield

    # Shutdown
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Municipal Tree Inventory Valuation API

    This API values surveyed trees and classifies them for inventory reports.

    ## Features

    - **Tree Valuation**: Monetary value per tree from species factors, health,
      location and trunk geometry (height for palms)
    - **Classification**: Canopy rate, composite score, clonability and
      evaluation tier for every tree
    - **Summary Tables**: Tier counts per species, tier totals and percentages
    - **Resilient Factor Source**: Official calculator page with a bundled
      snapshot fallback
    - **Rate Limiting**: Protects the API from abuse

    ## Valuation Formulas

    - Standard trees: 20 x factor x location x health x trunk area (cm²)
    - Palms: 1500 x palm factor x height x health x location

    Health and location are survey rates divided by 5.
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
app.include_router(valuations.router, prefix="/api/v1")
app.include_router(species.router, prefix="/api/v1")


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
    """
    Health check endpoint.

    Reports whether the factor tables are resolved and where from.

    Returns:
        Health status
    """
    context = get_engine_context()
    factors = {"status": "pending"}

    if context.is_initialized:
        resolution = context.state.factors
        factors = {
            "status": resolution.status.value,
            "source": resolution.standard.source.value,
            "tree_factors": len(resolution.standard),
            "palm_factors": len(resolution.palm),
        }

    return {
        "status": "healthy",
        "service": settings.app_name,
        "factors": factors,
    }
