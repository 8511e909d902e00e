"""
Request logging middleware and structlog processors.

Every request gets a correlation ID (taken from X-Correlation-ID or freshly
generated) that is echoed in the response and attached to every log entry.
"""
import time
import uuid
from contextvars import ContextVar
from typing import Any, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Key fragments whose values never reach the logs
SENSITIVE_FIELDS = {"api_key", "authorization", "token", "secret", "password", "dsn"}

REDACTED = "[REDACTED]"


def get_correlation_id() -> str:
    """Correlation ID of the current request ("" outside a request)."""
    return correlation_id.get()


def redact_sensitive_data(data: Any, depth: int = 0) -> Any:
    """Replace values of sensitive keys in nested dicts and lists."""
    if depth > 5:
        return data
    if isinstance(data, dict):
        return {
            key: REDACTED
            if isinstance(key, str) and any(s in key.lower() for s in SENSITIVE_FIELDS)
            else redact_sensitive_data(value, depth + 1)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_sensitive_data(item, depth + 1) for item in data]
    return data


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to the request context and response headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        token = correlation_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id.reset(token)
        response.headers[CORRELATION_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its status and duration."""

    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}
    SLOW_REQUEST_MS = 5000

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "content_length": request.headers.get("Content-Length"),
        }
        logger.info("request_started", **request_info)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                **request_info,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info("request_completed", **request_info, status_code=response.status_code, duration_ms=duration_ms)
        if duration_ms > self.SLOW_REQUEST_MS:
            logger.warning("slow_request", **request_info, duration_ms=duration_ms)
        return response


def add_correlation_id_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Structlog processor adding the correlation ID to every entry."""
    request_id = get_correlation_id()
    if request_id:
        event_dict["correlation_id"] = request_id
    return event_dict


def redact_sensitive_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Structlog processor redacting sensitive values."""
    return redact_sensitive_data(event_dict)
