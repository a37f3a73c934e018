from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api import health, jobs
from app.config import Settings, load_settings
from app.database import build_session_factory, create_db_engine, init_db
from app.errors import JobMarketError
from app.logger import configure_logging, get_logger
from app.services.job_fetcher import JobFetchService
from app.services.jsearch_client import JSearchClient

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_db(app.state.engine)
    logger.info(f"[LIFESPAN] Database ready ({app.state.engine.url.render_as_string(hide_password=True)}).")

    yield  # App runs while we're in this context

    # Shutdown
    app.state.engine.dispose()
    logger.info("[LIFESPAN] Database connections closed.")


async def job_market_error_handler(request: Request, exc: JobMarketError):
    if exc.status_code >= 500:
        logger.error(f"[{exc.code}] {request.method} {request.url.path}: {exc.message} ({exc.details})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "code": "ValidationError",
            "error": "Invalid request",
            "details": [err.get("msg") for err in exc.errors()],
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"[UNHANDLED] {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "code": "InternalError",
            "error": "Internal server error",
            "details": str(exc),
        },
    )


def create_app(settings: Optional[Settings] = None, jsearch_client: Optional[JSearchClient] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Job Market API", lifespan=lifespan)

    engine = create_db_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.job_service = JobFetchService(jsearch_client or JSearchClient(settings))

    app.add_exception_handler(JobMarketError, job_market_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include routes
    app.include_router(health.router)
    app.include_router(jobs.router)
    return app


app = create_app()
