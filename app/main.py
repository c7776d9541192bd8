"""
Muslim App Backend API - Main Application
"""
import logging
import os
import sys
import traceback
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from app.config import settings
from app.api.v1 import api_router
from app.database import init_db

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Quran text, prayer times, Islamic events and push notifications for the mobile app",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    redirect_slashes=False
)

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# Global exception handler for unhandled exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler that:
    - In DEBUG mode: returns detailed error info for development
    - In PRODUCTION mode: returns generic error message, logs details server-side
    """
    # Generate a unique error ID for tracking
    error_id = str(uuid.uuid4())[:8]

    # Always log the full error on the server
    logger.error(
        f"[ERROR_ID: {error_id}] Unhandled exception on {request.method} {request.url.path}",
        exc_info=True
    )

    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc),
                "error_id": error_id,
                "type": type(exc).__name__,
                "path": str(request.url.path),
                "traceback": traceback.format_exc()
            }
        )
    else:
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later.",
                "error_id": error_id
            }
        )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize database, caches and scheduler on startup"""
    logger.info("🚀 Starting Muslim App Backend...")

    if not settings.PUBLIC_API_KEY:
        logger.warning("PUBLIC_API_KEY is empty - every /api request will be rejected")
    if not os.path.exists(settings.FCM_CREDENTIALS_PATH):
        logger.warning(
            f"FCM credentials not found at {settings.FCM_CREDENTIALS_PATH} - notifications will be logged only"
        )

    # Initialize database tables
    try:
        init_db()
        logger.info("✅ Database connected")
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        sys.exit(1)

    if settings.INIT_QURAN_CACHE_ON_STARTUP:
        from app.database import SessionLocal
        from app.services.quran_service import QuranService

        db = SessionLocal()
        try:
            QuranService(db).initialize_quran_cache()
            logger.info("✅ Quran cache ready")
        except Exception as e:
            # Not critical, the cache can be filled later with recache_quran.py
            logger.warning(f"Quran cache initialization failed: {e}")
        finally:
            db.close()

    if settings.SCHEDULER_ENABLED:
        from app.scheduler import start_scheduler
        start_scheduler()

    logger.info(f"📡 Ready at http://{settings.HOST}:{settings.PORT}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("🛑 Shutting down gracefully...")

    if settings.SCHEDULER_ENABLED:
        from app.scheduler import stop_scheduler
        stop_scheduler()


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "muslim-app-api",
        "version": "1.0.0"
    }


# Include API routes
app.include_router(api_router, prefix=settings.API_PREFIX)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Muslim App API is running",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "features": [
            "Quran text with transliteration and translation",
            "Daily prayer times",
            "Scheduled prayer reminders",
            "Islamic events calendar",
            "Push notifications (FCM)"
        ]
    }


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Muslim App Backend API")
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload on file changes"
    )
    args = parser.parse_args()

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=not args.no_reload
    )
