"""core 测试配置 -- Store / Service fixture"""

import aiosqlite
import pytest
import pytest_asyncio
from taskdesk.core.models import CallerContext
from taskdesk.core.service import TaskService
from taskdesk.core.store import StoreGroup


@pytest_asyncio.fixture
async def store_group(db_conn: aiosqlite.Connection) -> StoreGroup:
    """共享临时数据库连接的 StoreGroup"""
    return StoreGroup(conn=db_conn)


@pytest_asyncio.fixture
async def service(store_group: StoreGroup, clock) -> TaskService:
    """使用可控时钟的 TaskService"""
    return TaskService(store_group, clock=clock)


@pytest.fixture
def alice() -> CallerContext:
    return CallerContext(caller_id="alice")


@pytest.fixture
def bob() -> CallerContext:
    return CallerContext(caller_id="bob")


@pytest.fixture
def admin() -> CallerContext:
    return CallerContext(caller_id="admin", is_privileged=True)
