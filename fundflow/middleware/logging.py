"""
Structured request logging with trace correlation
"""
import time
from fastapi import Request
from opentelemetry import trace
import structlog

logger = structlog.get_logger(__name__)


def current_trace_id() -> str:
    span = trace.get_current_span()
    if span and span.get_span_context().is_valid:
        return format(span.get_span_context().trace_id, "032x")
    return ""


async def logging_middleware(request: Request, call_next):
    """Log every HTTP request and its outcome"""
    start_time = time.time()

    # Extract trace ID from OpenTelemetry context
    trace_id = current_trace_id()

    # Log request
    logger.info(
        "Request started",
        trace_id=trace_id,
        method=request.method,
        path=request.url.path,
        query=str(request.query_params) if request.query_params else "",
        client_ip=request.client.host if request.client else "",
    )

    # Process request
    response = await call_next(request)

    # Log response
    logger.info(
        "Request completed",
        trace_id=trace_id,
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        latency_seconds=round(time.time() - start_time, 3),
    )
    return response
