from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI
from starlette.requests import Request

from career_pages.api.router import api_router
from career_pages.core.config import get_settings
from career_pages.core.telemetry import configure_api_logging, setup_api_telemetry, shutdown_api_telemetry
from career_pages.services.editor import get_session_manager
from career_pages.services.repository import get_repository

settings = get_settings()
configure_api_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("career pages api starting environment=%s", settings.environment)
    try:
        yield
    finally:
        shutdown_api_telemetry(app, app.state.telemetry)
        dropped = get_session_manager().clear()
        logger.info("editing sessions discarded count=%s", dropped)
        await get_repository().close()
        get_repository.cache_clear()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.state.telemetry = setup_api_telemetry(app, settings)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    started_at = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "http request method=%s path=%s status=%s duration_ms=%.2f",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started_at) * 1000.0,
    )
    return response


app.include_router(api_router)
