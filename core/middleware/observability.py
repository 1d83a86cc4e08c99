"""
Observability middleware.

Tags every request with a correlation id (taken from X-Correlation-ID when
the caller sends one), writes one structured log line when the response is
ready and echoes the ids back in response headers.
"""

import logging
import time
import uuid
from typing import Callable, Dict, Optional

from django.http import HttpRequest, HttpResponse
from opentelemetry import trace
from opentelemetry.trace import format_span_id, format_trace_id

logger = logging.getLogger(__name__)


def current_trace_ids() -> Dict[str, str]:
    """Return trace and span ids of the active span, or nothing outside a trace."""
    context = trace.get_current_span().get_span_context()
    if not context.is_valid:
        return {}
    return {
        "trace_id": format_trace_id(context.trace_id),
        "span_id": format_span_id(context.span_id),
    }


def outcome(status_code: int) -> str:
    """Classify a response status for logs and headers."""
    if status_code >= 500:
        return "server_error"
    if status_code >= 400:
        return "client_error"
    return "success"


class ObservabilityMiddleware:
    """Correlation ids, request logging and trace headers."""

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore
        trace_ids = current_trace_ids()
        started = time.perf_counter()

        try:
            response = self.get_response(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    **self._context(request, correlation_id, trace_ids, started),
                    "request_status": "exception",
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise

        status = outcome(response.status_code)
        context = self._context(request, correlation_id, trace_ids, started)
        context.update(request_status=status, status_code=response.status_code)
        log = {"server_error": logger.error, "client_error": logger.warning}.get(status, logger.info)
        log("%s %s -> %s", request.method, request.path, response.status_code, extra=context)

        response["X-Correlation-ID"] = correlation_id
        response["X-Request-Status"] = status
        response["X-Request-Duration"] = f"{context['duration_ms'] / 1000:.3f}"
        if trace_ids:
            response["X-Trace-ID"] = trace_ids["trace_id"]
        return response

    @staticmethod
    def _context(
        request: HttpRequest,
        correlation_id: str,
        trace_ids: Dict[str, str],
        started: float,
    ) -> Dict[str, Optional[object]]:
        match = getattr(request, "resolver_match", None)
        context = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.path,
            "remote_addr": request.META.get("REMOTE_ADDR"),
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "is_admin": getattr(request, "is_admin", False),
            **trace_ids,
        }
        if match is not None and "order_id" in match.kwargs:
            context["order_id"] = match.kwargs["order_id"]
        return context
