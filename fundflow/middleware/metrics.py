"""
Prometheus metrics for the HTTP surface and the donation ledger
"""
import time
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"]
)

# Ledger metrics
donations_recorded_total = Counter(
    "donations_recorded_total",
    "Total number of donations recorded",
    ["source"]
)

donated_amount_total = Counter(
    "donated_amount_total",
    "Sum of recorded donation amounts in currency units"
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect request count and latency per route template"""

    async def dispatch(self, request: Request, call_next):
        # Skip metrics endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        # Process the request and time it
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        # The matched route is only in scope once routing has run
        endpoint = request.url.path
        route = request.scope.get("route")
        if route is not None and hasattr(route, "path"):
            endpoint = route.path

        # Record metrics
        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status=str(response.status_code)
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(duration)

        return response


async def metrics_endpoint(request: Request):
    """Expose metrics in the Prometheus text format"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
