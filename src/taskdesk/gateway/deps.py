"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store 实例与调用方上下文

Store 实例通过 app.state 管理，在 lifespan 中初始化/清理。
调用方身份由上游身份提供方通过请求头传入，此处原样信任。
"""

from fastapi import Header, Request
from taskdesk.core.config import get_privileged_roles
from taskdesk.core.models import CallerContext
from taskdesk.core.store import StoreGroup

CALLER_ID_HEADER = "X-Caller-Id"
CALLER_ROLE_HEADER = "X-Caller-Role"


class CallerRequiredError(Exception):
    """请求缺少调用方标识"""


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_caller(
    caller_id_header: str | None = Header(default=None, alias=CALLER_ID_HEADER),
    caller_role_header: str | None = Header(default=None, alias=CALLER_ROLE_HEADER),
) -> CallerContext:
    """从请求头构造 CallerContext

    X-Caller-Role 属于特权角色集合（TASKDESK_PRIVILEGED_ROLES）时视为特权调用方。
    """
    caller_id = (caller_id_header or "").strip()
    if not caller_id:
        raise CallerRequiredError()

    role = (caller_role_header or "").strip().lower()
    return CallerContext(
        caller_id=caller_id,
        is_privileged=role in get_privileged_roles(),
    )
