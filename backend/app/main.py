import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.v1 import auth, events, orders, reports, waiting_list
from app.core.logging import RequestLoggingMiddleware, setup_logging
from app.models.database import get_engine, get_session_factory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    logger.info("%s starting (%s)", settings.app_name, settings.environment)
    yield
    await get_engine().dispose()


def create_app() -> FastAPI:
    setup_logging(json_format=settings.log_json, level=logging.DEBUG if settings.debug else logging.INFO)

    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    application.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    application.include_router(events.router, prefix="/api/v1/events", tags=["events"])
    application.include_router(orders.router, prefix="/api/v1/orders", tags=["orders"])
    application.include_router(
        waiting_list.router, prefix="/api/v1/waiting-list", tags=["waiting-list"]
    )
    application.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])

    @application.get("/health")
    async def health_check() -> dict:
        result: dict = {"status": "ok", "services": {}}

        try:
            async with get_session_factory()() as session:
                await session.execute(text("SELECT 1"))
            result["services"]["database"] = "ok"
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Health check: database unavailable: %s", e)
            result["services"]["database"] = f"error: {e}"
            result["status"] = "degraded"

        return result

    return application


app = create_app()
