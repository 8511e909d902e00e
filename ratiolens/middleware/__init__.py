"""
HTTP middleware: correlation IDs, request logging and log redaction.
"""
from ratiolens.middleware.logging import (
    CORRELATION_HEADER,
    CorrelationIdMiddleware,
    RequestLoggingMiddleware,
    add_correlation_id_processor,
    get_correlation_id,
    redact_sensitive_data,
    redact_sensitive_processor,
)

__all__ = [
    "CORRELATION_HEADER",
    "CorrelationIdMiddleware",
    "RequestLoggingMiddleware",
    "add_correlation_id_processor",
    "get_correlation_id",
    "redact_sensitive_data",
    "redact_sensitive_processor",
]
