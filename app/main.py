"""
Barbershop availability API

Weekly hours, bookable slots and appointment booking per business.
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from app.api.dependencies import to_http_exception
from app.api.v1.router import api_v1_router
from app.config.settings import get_settings
from app.core.exceptions import SchedulingError
from app.core.middleware import correlation_id_middleware, request_logging_middleware
from app.core.monitoring import health_router
from app.utils.my_logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    if settings.AUTO_CREATE_TABLES:
        from app.config.database import create_tables
        create_tables()
        logger.info("Database tables ensured")

    logger.info(
        f"{settings.APP_NAME} ready: timezone={settings.DEFAULT_TIMEZONE}, "
        f"hours={settings.DEFAULT_OPEN_TIME}-{settings.DEFAULT_CLOSE_TIME}, "
        f"granularity={settings.DEFAULT_SLOT_GRANULARITY_MINUTES}min, "
        f"change cutoff={settings.BOOKING_CHANGE_CUTOFF_MINUTES}min"
    )
    for route in sorted(
            (r for r in app.routes if isinstance(r, APIRoute)), key=lambda r: r.path
    ):
        logger.debug(f"  {','.join(sorted(route.methods)):10} {route.path}")

    yield

    logger.info(f"{settings.APP_NAME} stopped")


async def scheduling_error_handler(request: Request, exc: SchedulingError):
    """Errors that escape a route (e.g. a corrupted stored schedule)"""
    http_exc = to_http_exception(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Working hours, bookable slots and appointment booking for barbershops",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )

    # correlation id is registered last so it wraps request logging
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.add_exception_handler(SchedulingError, scheduling_error_handler)

    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": API_VERSION,
            "availability": "/api/v1/public/businesses/{business_id}/availability?date=YYYY-MM-DD",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
