"""TaskContextMiddleware -- 单任务操作的日志上下文

对 /api/tasks/{task_id}（含 /toggle 子路由）请求，把 task_id 绑定到 structlog contextvars，
使服务层的 task_* 日志与请求日志可以按任务关联。
"""

import re

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ULID: 26 位 Crockford Base32
_TASK_PATH = re.compile(r"^/api/tasks/(?P<task_id>[0-9A-HJKMNP-TV-Z]{26})(?:/|$)")


class TaskContextMiddleware(BaseHTTPMiddleware):
    """任务级上下文中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        match = _TASK_PATH.match(request.url.path)
        if match:
            structlog.contextvars.bind_contextvars(task_id=match.group("task_id"))

        return await call_next(request)
