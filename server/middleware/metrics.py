"""
Prometheus metrics middleware for API requests

Instruments all API requests with:
- Request count (by endpoint, method, status_code)
- Request duration (by endpoint, method)

Usage:
    from server.middleware.metrics import metrics_middleware
    app.middleware("http")(metrics_middleware)
"""

import time
from fastapi import Request

from server.metrics import metrics

# Path segments that are always literal; anything else after "cycles" or
# "invite" is an identifier.
_STATIC_SEGMENTS = {
    "api", "cycles", "winners", "history", "voters", "report", "official-winners",
    "announce-winner", "check-employee", "cast", "send-invites", "invite",
    "notify-winners", "notify-location-winner", "health", "metrics",
}


async def metrics_middleware(request: Request, call_next):
    """Record Prometheus metrics for all API requests"""
    start_time = time.time()

    endpoint = _normalize_endpoint(request.url.path)
    method = request.method

    try:
        response = await call_next(request)
        duration = time.time() - start_time

        metrics.api_requests.labels(
            endpoint=endpoint,
            method=method,
            status_code=response.status_code
        ).inc()

        metrics.api_request_duration.labels(
            endpoint=endpoint,
            method=method
        ).observe(duration)

        return response

    except Exception:
        duration = time.time() - start_time

        # Record error as 500
        metrics.api_requests.labels(
            endpoint=endpoint,
            method=method,
            status_code=500
        ).inc()

        metrics.api_request_duration.labels(
            endpoint=endpoint,
            method=method
        ).observe(duration)

        raise


def _normalize_endpoint(path: str) -> str:
    """Normalize endpoint path for metrics cardinality control

    Converts:
        /api/cycles/cyc_Xk3v9QpL2m/report -> /api/cycles/:cycle_id/report
        /api/cycles/cyc_Xk3v/invite/abc123/cast -> /api/cycles/:cycle_id/invite/:token/cast
        /api/cycles/winners/history -> unchanged
    """
    normalized_parts = []
    previous = None

    for part in path.split('/'):
        if not part:
            continue

        if part in _STATIC_SEGMENTS:
            normalized_parts.append(part)
        elif previous == 'cycles':
            normalized_parts.append(':cycle_id')
        elif previous == 'invite':
            normalized_parts.append(':token')
        else:
            normalized_parts.append(':id')
        previous = part

    return '/' + '/'.join(normalized_parts)
