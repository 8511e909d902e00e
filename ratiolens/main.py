"""
FastAPI application entry point.

Configures the application with routes, middleware, and settings.
"""
import traceback
from datetime import datetime, timezone

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from ratiolens.api.routes import analyze
from ratiolens.config import get_settings
from ratiolens.exceptions import RatioLensError
from ratiolens.logging_config import configure_logging
from ratiolens.middleware.logging import (
    CORRELATION_HEADER,
    CorrelationIdMiddleware,
    RequestLoggingMiddleware,
    redact_sensitive_data,
)
from ratiolens.schemas.analysis import HealthResponse

settings = get_settings()


def _filter_sensitive_data(event: dict, hint: dict) -> dict:
    """Filter sensitive data from Sentry events before sending."""
    if "request" in event and "data" in event["request"]:
        event["request"]["data"] = redact_sensitive_data(event["request"]["data"])
    if "extra" in event:
        event["extra"] = redact_sensitive_data(event["extra"])
    return event


if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=settings.app_version,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(level=None, event_level="ERROR"),
        ],
        send_default_pii=False,
        before_send=_filter_sensitive_data,
    )

configure_logging()

logger = structlog.get_logger(__name__)

app = FastAPI(
    title="RatioLens API",
    description="""
## Financial Statement Ratio Analysis API

RatioLens reads Russian accounting statements (balance sheet form 0710001 and
the income statement) and turns them into financial ratios with a credit report.

### Supported formats

Excel (.xlsx, .xls), CSV, Word (.docx), PDF with a text layer and plain text.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Analysis", "description": "Statement upload, ratios and credit report"},
        {"name": "Health", "description": "Health checks"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_HEADER],
)

# Order matters: correlation ID first
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(analyze.router, prefix="/api/v1", tags=["Analysis"])


@app.exception_handler(RatioLensError)
async def ratiolens_exception_handler(request: Request, exc: RatioLensError):
    """Handle all RatioLens custom exceptions."""
    logger.warning(
        "ratiolens_error",
        error_code=exc.error_code,
        message=exc.message,
        path=str(request.url.path),
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with consistent format."""
    sentry_sdk.capture_exception(exc)

    logger.error(
        "unhandled_error",
        error_type=type(exc).__name__,
        message=str(exc),
        path=str(request.url.path),
        traceback=traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "error_code": "RL-999",
            "message": "Произошла непредвиденная ошибка. Попробуйте еще раз.",
            "details": {"error_type": type(exc).__name__} if settings.debug else {},
        },
    )


@app.on_event("startup")
async def startup_event() -> None:
    logger.info("Starting RatioLens API", debug=settings.debug, llm_configured=settings.llm_configured)
    if not settings.sentry_dsn:
        logger.warning("Sentry error tracking not configured (SENTRY_DSN not set)")


@app.get("/health", tags=["Health"], response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        timestamp=datetime.now(timezone.utc),
        llm_configured=settings.llm_configured,
    )
