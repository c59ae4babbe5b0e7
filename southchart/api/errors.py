"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Ce module traduit les erreurs du domaine (`ChartError`) et les HTTPException en enveloppes
`{code, message, trace_id, details?}` cohérentes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from southchart.core.http_constants import (
    HTTP_BAD_GATEWAY,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_PRECONDITION_FAILED,
    HTTP_SERVICE_UNAVAILABLE,
)
from southchart.domain.errors import (
    ChartError,
    ConsultationError,
    MalformedResponse,
    NetworkError,
    NotConfigured,
    PersistenceError,
    UpstreamError,
)

log = structlog.get_logger(__name__)

# Ordre significatif: sous-classes avant classes parentes.
STATUS_BY_ERROR: tuple[tuple[type[ChartError], int], ...] = (
    (NotConfigured, HTTP_PRECONDITION_FAILED),
    (UpstreamError, HTTP_BAD_GATEWAY),
    (MalformedResponse, HTTP_BAD_GATEWAY),
    (ConsultationError, HTTP_BAD_GATEWAY),
    (NetworkError, HTTP_SERVICE_UNAVAILABLE),
    (PersistenceError, HTTP_INTERNAL_SERVER_ERROR),
)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None


def status_for(exc: ChartError) -> int:
    for cls, status in STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return HTTP_INTERNAL_SERVER_ERROR


def create_error_response(status_code: int, envelope: ErrorEnvelope) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "code": envelope.code,
            "message": envelope.message,
            "trace_id": envelope.trace_id,
            **({"details": envelope.details} if envelope.details else {}),
        },
    )


def extract_trace_id(request: Request) -> str | None:
    """Extract trace ID from request headers or request state."""
    trace_id = request.headers.get("X-Request-ID")
    if trace_id:
        return trace_id
    return getattr(request.state, "request_id", None)


def handle_chart_error(request: Request, exc: ChartError) -> JSONResponse:
    """Handle domain errors with standard envelope."""
    status = status_for(exc)
    trace_id = extract_trace_id(request)
    log.error(
        "chart_error",
        code=exc.code,
        error_message=exc.message,
        status_code=status,
        trace_id=trace_id,
    )
    return create_error_response(
        status, ErrorEnvelope(exc.code, exc.message, trace_id, exc.details)
    )


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException with standard envelope."""
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return create_error_response(
        exc.status_code, ErrorEnvelope(code, str(exc.detail), extract_trace_id(request))
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChartError, handle_chart_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
