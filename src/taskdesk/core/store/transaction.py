"""写事务封装

在同一 SQLite 事务内提交任务写入；失败时回滚并原样抛出，不做重试。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite


@asynccontextmanager
async def atomic(conn: aiosqlite.Connection) -> AsyncIterator[aiosqlite.Connection]:
    """事务上下文：正常退出时提交，异常时回滚后重新抛出

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）

    Raises:
        Exception: 块内任意异常，回滚后原样抛出
    """
    try:
        yield conn
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise
