"""LoggingMiddleware -- 请求级日志

每个请求一个 request_id（ULID），与调用方标识一起绑定到 structlog contextvars；
请求结束时记录状态码与耗时，并通过 X-Request-ID 响应头回传 request_id。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

from ..deps import CALLER_ID_HEADER

REQUEST_ID_HEADER = "X-Request-ID"

log = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        caller_id = request.headers.get(CALLER_ID_HEADER)
        if caller_id:
            structlog.contextvars.bind_contextvars(caller_id=caller_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            await log.aexception(
                "request_failed",
                duration_ms=_elapsed_ms(started),
            )
            raise

        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
