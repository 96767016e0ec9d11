# pavilion/middleware/request_logger.py
import logging
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("pavilion.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s failed", request.method, request.url.path)
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        user = getattr(request.state, "user", None)
        logger.info(
            "%s %s -> %s (%.1f ms) user=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            getattr(user, "email", "-"),
        )
        return response
