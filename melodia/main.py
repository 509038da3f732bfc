"""
Melodia - Personalised Song Generation Backend
FastAPI backend tracking Suno generation jobs and serving song status
"""

from contextlib import asynccontextmanager
from typing import Dict, Any

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from .api.routes import song_status, songs
from .core.config import get_settings
from .core.logging import setup_logging
from .database.connection import database_manager
from .services.rate_limiter import create_rate_limiter
from .services.song_generation_service import SongGenerationService
from .services.song_status_service import SongStatusService
from .services.suno_client import SunoClient

# Global settings
settings = get_settings()

# Setup logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events"""

    # Startup
    logger.info("Starting Melodia backend server...")

    try:
        use_redis = settings.RATE_LIMIT_ENABLED and settings.RATE_LIMIT_BACKEND == "redis"
        await database_manager.initialize(use_redis=use_redis)
        logger.info("Database connections initialized")

        suno_client = SunoClient()
        app.state.suno_client = suno_client
        app.state.song_status_service = SongStatusService.build(
            database_manager.session_factory,
            suno_client
        )
        app.state.song_generation_service = SongGenerationService(
            database_manager.session_factory,
            suno_client
        )
        logger.info(f"Suno client ready (demo mode: {suno_client.demo_mode})")

        if settings.RATE_LIMIT_ENABLED:
            limit, window_seconds = settings.parse_rate_limit()
            app.state.rate_limiter = create_rate_limiter(
                limit,
                window_seconds,
                backend=settings.RATE_LIMIT_BACKEND,
                redis_client=database_manager.get_redis() if use_redis else None
            )
            logger.info(f"Rate limiting enabled: {settings.API_RATE_LIMIT} ({settings.RATE_LIMIT_BACKEND})")

        logger.info("Melodia backend started successfully")

    except Exception as e:
        logger.error(f"Failed to start Melodia backend: {e}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down Melodia backend...")

    try:
        # Let in-flight background refreshes finish before the pool goes away
        await app.state.song_status_service.shutdown()
        logger.info("Background refreshes drained")

        await app.state.suno_client.close()

        await database_manager.close()
        logger.info("Database connections closed")

        logger.info("Melodia backend shutdown complete")

    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


# Create FastAPI application
app = FastAPI(
    title="Melodia API",
    description="Personalised song generation with Suno status tracking",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


# Health check endpoint
@app.get("/health")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint"""
    try:
        db_status = await database_manager.check_health()
        suno_client = getattr(app.state, "suno_client", None)

        return {
            "status": "healthy" if db_status else "degraded",
            "version": settings.APP_VERSION,
            "services": {
                "database": "healthy" if db_status else "unhealthy",
                "suno": "demo" if suno_client is not None and suno_client.demo_mode else "live"
            }
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "error": str(e)
            }
        )


# API Routes
app.include_router(songs.router, prefix="/api/songs", tags=["Songs"])
app.include_router(song_status.router, prefix="/api/song-status", tags=["Song Status"])


# Application info
@app.get("/api/info")
async def app_info() -> Dict[str, Any]:
    """Get application information"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "Personalised song generation backend",
        "features": [
            "Suno song generation",
            "Database-first song status",
            "Background status refresh",
            "Demo mode simulation"
        ],
        "demo_mode": settings.DEMO_MODE,
        "tech_stack": {
            "backend": "FastAPI + Python",
            "database": "PostgreSQL + Redis",
            "music_generation": "Suno API"
        }
    }


if __name__ == "__main__":
    # Development server
    uvicorn.run(
        "melodia.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info"
    )
