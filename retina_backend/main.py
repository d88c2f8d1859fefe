# Standard library imports
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Optional
import logging
import asyncio

# External package imports
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Local application imports
from .api.v1 import analysis_router
from .core.config import get_settings
from .di.container import get_container, reset_container
from .infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from .infrastructure.external.health_prober import HealthProber
from .infrastructure.http_client_factory import close_shared_http_client

logger = logging.getLogger(__name__)


async def run_startup_connection_test(
    diagnostics: ConnectionDiagnostics,
    prober: HealthProber,
) -> None:
    """
    Background task testing the inference service once at startup.

    If no endpoint answers, simulation mode is switched on right away so the
    first analyses do not wait for a full probe cycle.
    """
    try:
        result = await diagnostics.run_full_test()
    except asyncio.CancelledError:
        logger.info("Startup inference connection test cancelled")
        raise
    except Exception as e:
        logger.error(f"Startup inference connection test failed: {e}", exc_info=True)
        return

    logger.info(f"Initial inference API connection test: {'succeeded' if result.get('success') else 'failed'}")
    if not result.get("success"):
        logger.warning("Connection to inference API failed. Make sure the inference service is running and reachable.")
        prober.mark_unavailable("Initial connection test failed", kind=result.get("code"))
        logger.warning("Simulation mode enabled automatically because the inference API is unavailable")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.

    Starts the initial inference connection test in the background and
    closes the shared HTTP client on shutdown.
    """
    startup_task: Optional[asyncio.Task] = None

    try:
        container = get_container()
        startup_task = asyncio.create_task(
            run_startup_connection_test(
                container.get(ConnectionDiagnostics),
                container.get(HealthProber),
            )
        )
        logger.info("Startup inference connection test scheduled")
    except Exception as e:
        logger.error(f"Failed to schedule startup connection test: {e}", exc_info=True)

    yield

    # Shutdown: Stop background tasks and services
    if startup_task and not startup_task.done():
        startup_task.cancel()
        try:
            await startup_task
        except asyncio.CancelledError:
            pass
        logger.info("Startup connection test task stopped")

    try:
        await close_shared_http_client()
    except Exception as e:
        logger.error(f"Error closing shared HTTP client: {e}", exc_info=True)
    reset_container()

    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    This function sets up the FastAPI application with:
    - Environment variable loading
    - CORS middleware configuration
    - API route registration
    - Static serving of uploaded images

    Returns:
        Configured FastAPI application instance
    """
    # Load environment variables from .env file
    env_path = Path(__file__).resolve().parent.parent / ".env"
    load_dotenv(env_path)

    settings = get_settings()

    # Create FastAPI app
    application = FastAPI(
        title="RetinaScan Backend API",
        version="1.0.0",
        description="Diabetic retinopathy screening backend with inference failover",
        lifespan=lifespan
    )

    # Add CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    application.include_router(analysis_router, prefix="/api/v1/analysis")

    application.mount(
        "/uploads",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @application.get("/health", tags=["health"])
    async def health() -> dict:
        """Liveness probe"""
        return {"status": "ok"}

    return application


# Create application instance
app = create_application()
