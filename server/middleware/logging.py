"""
Request/response logging middleware
"""


import time
from fastapi import Request

from config import get_logger

logger = get_logger(__name__).bind(component="api")


async def log_requests(request: Request, call_next):
    """Log one line per request"""
    # Skip logging for metrics endpoint (Prometheus scraping noise)
    if request.url.path == "/metrics":
        return await call_next(request)

    start_time = time.time()
    path_info = f"{request.method} {request.url.path}"

    try:
        response = await call_next(request)
        duration = time.time() - start_time

        logger.info(
            f"{path_info} → {response.status_code} ({duration:.3f}s)",
            status_code=response.status_code,
        )
        return response

    except Exception as e:
        duration = time.time() - start_time
        logger.error(f"{path_info} → ERROR ({duration:.3f}s): {str(e)}")
        raise
