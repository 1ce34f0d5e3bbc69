"""Main FastAPI application for the Pulse weather service."""

import logging
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_cache import FastAPICache
from fastapi_cache.backends.redis import RedisBackend

from pulse_weather.api.endpoints import router as weather_router
from pulse_weather.config import (
    HOST, PORT, DEBUG, LOG_LEVEL, REDIS_URL, CACHE_PREFIX, RATE_LIMIT_ENABLED
)
from pulse_weather.logging_config import configure_logging
from pulse_weather.middleware.rate_limit import RateLimitMiddleware

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    redis_client = None
    try:
        logger.info(f"Connecting to Redis at {REDIS_URL}")
        redis_client = redis.from_url(REDIS_URL)
        FastAPICache.init(RedisBackend(redis_client), prefix=CACHE_PREFIX)
        logger.info("Cache initialized with Redis backend")

        logger.info("Starting Pulse Weather Service")
        yield
    except Exception as e:
        logger.error(f"Startup error: {e}")
        logger.error(traceback.format_exc())
        raise
    finally:
        logger.info("Shutting down Pulse Weather Service")
        if redis_client is not None:
            await redis_client.aclose()


def create_app(rate_limit_enabled: bool = RATE_LIMIT_ENABLED) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        rate_limit_enabled: Whether to enforce per-client rate limits

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Pulse Weather Service",
        description="Current weather, daily forecasts and place names backed by OpenWeatherMap",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RateLimitMiddleware, enabled=rate_limit_enabled)

    app.include_router(weather_router)

    @app.get("/", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint.

        Returns:
            Basic service information
        """
        return {
            "message": "Pulse Weather Service",
            "docs": "/docs",
            "redoc": "/redoc",
            "weather": "/weather",
            "forecast": "/weather/forecast",
            "location": "/weather/location",
            "tiles": "/weather/tiles/{layer}/{z}/{x}/{y}.png",
            "health": "/weather/health"
        }

    return app


# Create app instance for uvicorn
app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "pulse_weather.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level=LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
