import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from statebook.common.logging import get_logger

logger = get_logger("middleware")

# Asset requests are logged at debug so page loads do not flood the log
QUIET_PREFIXES = ("/static/", "/storage/")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        path = request.url.path
        if response.status_code >= 500:
            log = logger.warning
        elif path.startswith(QUIET_PREFIXES):
            log = logger.debug
        else:
            log = logger.info
        log("%s %s %d %.1fms", request.method, path, response.status_code, duration_ms)

        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        return response
