"""gateway 测试配置 -- FastAPI app + httpx AsyncClient"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskdesk.core.store import create_store_group


@pytest_asyncio.fixture
async def app(tmp_path: Path, monkeypatch):
    """创建测试用 FastAPI app 实例（手动初始化 StoreGroup，绕过 lifespan）"""
    db_path = tmp_path / "sqlite" / "test.db"
    monkeypatch.setenv("TASKDESK_DB_PATH", str(db_path))
    monkeypatch.setenv("TASKDESK_PRIVILEGED_ROLES", "admin")

    from taskdesk.gateway.main import create_app

    application = create_app()
    store_group = await create_store_group(db_path)
    application.state.store_group = store_group

    yield application

    await store_group.conn.close()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
