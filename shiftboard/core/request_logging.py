# shiftboard/core/request_logging.py
"""
Request logging middleware for tracking all HTTP requests.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shiftboard.core.logging_config import get_logger

logger = get_logger(__name__)

QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its status, duration and a request id.

    The id is stored on request.state and returned as X-Request-ID.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"{request.method} {request.url.path} - 500 ({duration_ms:.2f}ms)",
                extra={"extra_fields": self._log_data(request, request_id, 500, duration_ms)},
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code
        message = f"{request.method} {request.url.path} - {status_code} ({duration_ms:.2f}ms)"
        extra = {"extra_fields": self._log_data(request, request_id, status_code, duration_ms)}

        if status_code >= 500:
            logger.error(message, extra=extra)
        elif status_code >= 400:
            logger.warning(message, extra=extra)
        elif request.url.path in QUIET_PATHS:
            logger.debug(message, extra=extra)
        else:
            logger.info(message, extra=extra)

        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _log_data(request: Request, request_id: str, status_code: int, duration_ms: float) -> dict:
        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
        }
        employee = getattr(request.state, "employee", None)
        if employee is not None:
            log_data["employee_id"] = employee.employee_id
        return log_data
