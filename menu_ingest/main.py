import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from menu_ingest.api.routes import health, ocr
from menu_ingest.config import settings
from menu_ingest.dependencies import build_orchestrator
from menu_ingest.logging import configure_logging
from menu_ingest.metrics import IngestionMetrics
from menu_ingest.store import build_engine

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the engine, the metrics and the orchestrator for this process."""
    engine = build_engine(settings.database_url)
    app.state.engine = engine
    app.state.orchestrator = build_orchestrator(settings, engine, IngestionMetrics())
    logger.info(
        "menu_ingest_started",
        environment=settings.environment,
        ocr_provider=settings.ocr_provider,
    )
    try:
        yield
    finally:
        await engine.dispose()


app = FastAPI(
    title="Menu Ingest API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url=None,
    lifespan=lifespan,
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Bind a request ID into the structlog context and echo it as X-Request-ID."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


def _with_request_id(request: Request, response: JSONResponse) -> JSONResponse:
    response.headers["X-Request-ID"] = getattr(
        request.state, "request_id", request.headers.get("X-Request-ID", "")
    )
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render FastAPI's 422 in the ErrorResponse shape."""
    messages = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    ]
    return _with_request_id(
        request,
        JSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "message": "; ".join(messages),
                "retryable": False,
            },
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return _with_request_id(
        request,
        JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "An unexpected error occurred",
                "retryable": True,
            },
        ),
    )


app.include_router(health.router)
app.include_router(ocr.router, prefix="/api")
