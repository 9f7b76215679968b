"""
API package.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from omegaconf import DictConfig
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..analytics.presentation.api.routes import collector
from ..pulse.application.builder import PulseApplicationBuilder
from ..pulse.presentation.api.routes import readings
from ..common.database import configure_database, init_db
from ..common.rate_limit import SlidingWindowRateLimiter
from ..common.schemas import HealthStatus
from ..common.utils import iso_timestamp, utc_now

logger = logging.getLogger(__name__)

RATE_LIMITED_PREFIX = "/api/"


def create_app(config: DictConfig) -> FastAPI:
    """
    Assembles the collector and pulse APIs from the validated config.
    """
    server_cfg = config.server

    app = FastAPI(title="Noise Pulse API")

    limiter = SlidingWindowRateLimiter(
        max_requests=server_cfg.rate_limit_max,
        window_seconds=server_cfg.rate_limit_window_seconds
    )
    app.state.rate_limiter = limiter

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if not request.url.path.startswith(RATE_LIMITED_PREFIX):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        if not limiter.allow(client):
            logger.warning(f"Rate limit reached for {client}")
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests",
                    "message": "Too many requests from this IP, please try again later."
                },
                headers={"RateLimit-Limit": str(limiter.max_requests), "RateLimit-Remaining": "0"}
            )
        response = await call_next(request)
        response.headers["RateLimit-Limit"] = str(limiter.max_requests)
        response.headers["RateLimit-Remaining"] = str(limiter.remaining(client))
        return response

    # Configure CORS (outermost, so 429 responses carry the headers too)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(server_cfg.cors_origins),
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={"error": "Not found", "message": "The requested endpoint does not exist"}
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": "An unexpected error occurred"}
        )

    @app.get("/health", response_model=HealthStatus)
    async def health():
        return HealthStatus(timestamp=iso_timestamp(utc_now()), service=server_cfg.service_name)

    # Persistence
    configure_database(server_cfg.database_url)
    init_db()

    # Include routers
    app.include_router(collector.app.router, tags=["analytics"])
    app.include_router(readings.app.router, tags=["pulse"])

    # Initialize shared components
    collector.init_collector(server_cfg.max_events)
    readings.init_pulse(PulseApplicationBuilder(config))

    logger.info(f"{server_cfg.service_name} ready")
    return app
