import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.metrics import REQUEST_LATENCY

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            elapsed = time.perf_counter() - start
            route = request.scope.get("route")
            route_path = getattr(route, "path", request.url.path)
            REQUEST_LATENCY.labels(
                method=request.method, route=route_path, status=str(status_code)
            ).observe(elapsed)
            logger.info(
                "%s %s -> %d (%.1fms) request_id=%s",
                request.method,
                request.url.path,
                status_code,
                elapsed * 1000,
                request_id,
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
