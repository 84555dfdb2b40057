"""Sleep Log API application.

Builds the FastAPI app: request ids, problem+json error handlers,
the /api/v1 sleep log routes, /metrics and /health.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config import settings
from shared.database import engine
from shared.exceptions import ProblemDetailError
from shared.logging import configure_logging
from shared.metrics import create_metrics_app
from shared.middleware import (
    RequestIdMiddleware,
    http_exception_handler,
    problem_detail_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from sleeplog.api import router as sleep_log_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Credentials precede '@' in the DSN
    logger.info(
        "app_starting",
        api_version=settings.api_version,
        database=settings.database_url.rsplit("@", 1)[-1],
    )
    yield
    await engine.dispose()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    application = FastAPI(
        title="Sleep Log API",
        description=(
            "Records nightly sleep sessions per user and reports the most recent "
            "session and rolling 30-day statistics."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    application.add_middleware(RequestIdMiddleware)

    application.add_exception_handler(ProblemDetailError, problem_detail_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)

    application.include_router(sleep_log_router)
    application.mount("/metrics", create_metrics_app())

    @application.get("/health", tags=["ops"])
    async def health():
        return {"status": "ok"}

    return application


app = create_app()
