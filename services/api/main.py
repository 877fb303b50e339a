"""
StreetVoice FastAPI service: city-problem reports scraped from Reddit,
classified heuristically and served to the dashboard.

Entrypoint: uvicorn services.api.main:app --host 0.0.0.0 --port 8000
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from services.api.config import settings
from services.api.middleware.cors import setup_cors
from services.api.middleware.sentry import setup_sentry
from services.api.reports.service import OperationInProgressError, ReportService
from services.api.reports.transfer import ImportValidationError
from services.api.routers import classify, health, reports, solutions
from services.api.scrapers.reddit import RedditClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    setup_sentry()

    app.state.settings = settings

    # Tests may pre-populate state with their own service/client
    if getattr(app.state, "report_service", None) is None:
        service = ReportService.from_settings(settings)
        loaded = service.load()
        logger.info("Report service ready with %d stored reports", loaded)
        app.state.report_service = service

    own_client = getattr(app.state, "reddit_client", None) is None
    if own_client:
        app.state.reddit_client = RedditClient(settings)

    yield

    if own_client:
        await app.state.reddit_client.aclose()
        app.state.reddit_client = None


app = FastAPI(
    title="StreetVoice API",
    version=settings.app_version,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)

# -- Middleware (order matters: last added = outermost in Starlette) --

# Routers first (innermost)
app.include_router(health.router)
app.include_router(reports.router)
app.include_router(classify.router)
app.include_router(solutions.router)

# CORS (needs to be outermost to handle preflight)
setup_cors(app)


# Request ID injection
@app.middleware("http")
async def request_envelope_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# -- Exception Handlers --

def _error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


@app.exception_handler(ImportValidationError)
async def invalid_import_handler(request: Request, exc: ImportValidationError) -> JSONResponse:
    logger.warning("Rejected import: %s", exc)
    return _error_response(request, 400, "INVALID_IMPORT", str(exc))


@app.exception_handler(OperationInProgressError)
async def in_progress_handler(request: Request, exc: OperationInProgressError) -> JSONResponse:
    return _error_response(
        request, 409, "OPERATION_IN_PROGRESS",
        f"{exc.operation.capitalize()} is already in progress.",
    )


@app.exception_handler(404)
async def not_found_handler(request: Request, exc) -> JSONResponse:
    message = getattr(exc, "detail", None) or "Resource not found."
    return _error_response(request, 404, "NOT_FOUND", str(message))


@app.exception_handler(413)
async def payload_too_large_handler(request: Request, exc) -> JSONResponse:
    message = getattr(exc, "detail", None) or "Request body too large."
    return _error_response(request, 413, "PAYLOAD_TOO_LARGE", str(message))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid value')}" if location else "Validation error."
    return _error_response(request, 422, "VALIDATION_ERROR", message)


@app.exception_handler(422)
async def validation_error_handler(request: Request, exc) -> JSONResponse:
    return _error_response(
        request, 422, "VALIDATION_ERROR",
        str(exc.detail) if hasattr(exc, "detail") else "Validation error.",
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc) -> JSONResponse:
    return _error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred.")
