"""全局 pytest 配置 -- 临时 SQLite 数据库 fixture + 可控时钟"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio


class ManualClock:
    """可手动推进的时钟，每次读取后自动前进 1 毫秒，保证 created_at 严格递增"""

    def __init__(self, start: datetime | None = None, tick: timedelta | None = None) -> None:
        self._now = start or datetime.now(UTC)
        self._tick = tick if tick is not None else timedelta(milliseconds=1)

    def __call__(self) -> datetime:
        current = self._now
        self._now = self._now + self._tick
        return current

    def peek(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> None:
        self._now = self._now + delta


@pytest.fixture
def clock() -> ManualClock:
    """提供从当前真实时间开始的可控时钟"""
    return ManualClock()


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from taskdesk.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()
