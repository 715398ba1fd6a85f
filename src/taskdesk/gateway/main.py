"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 中间件 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse
from taskdesk.core.config import get_db_path
from taskdesk.core.store import create_store_group

from .deps import CALLER_ID_HEADER, CallerRequiredError
from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.task_context_mw import TaskContextMiddleware
from .routes import health, tasks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB，关闭时清理连接"""
    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group
    log.info("store_initialized", db_path=db_path)

    yield

    # 关闭：清理数据库连接
    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.conn.close()


async def _caller_required_handler(request: Request, exc: CallerRequiredError) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={
            "error": {
                "code": "CALLER_REQUIRED",
                "message": f"Missing {CALLER_ID_HEADER} header",
            }
        },
    )


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskDesk Gateway",
        version="0.1.0",
        description="多用户任务清单 API：归属过滤、分页查询与统计",
        lifespan=lifespan,
    )

    # 注册中间件（后添加的在外层：Logging 先清空并绑定上下文，TaskContext 再追加 task_id）
    app.add_middleware(TaskContextMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(CallerRequiredError, _caller_required_handler)

    # 初始化日志
    setup_logging()

    # 注册路由
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
