"""SQLite 数据库初始化

PRAGMA 配置 + tasks 表 DDL + 索引创建 + SQL 函数注册。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL
# completed_at 非空当且仅当 is_completed = 1，由 CHECK 约束兜底
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id       TEXT PRIMARY KEY,
    title         TEXT NOT NULL,
    description   TEXT,
    is_completed  INTEGER NOT NULL DEFAULT 0,
    created_at    TEXT NOT NULL,
    updated_at    TEXT NOT NULL,
    completed_at  TEXT,
    due_date      TEXT,
    owner_id      TEXT NOT NULL,

    CHECK ((is_completed = 1) = (completed_at IS NOT NULL))
);
"""

_TASKS_INDEXES = [
    # 归属范围 + 默认排序
    "CREATE INDEX IF NOT EXISTS idx_tasks_owner_created ON tasks(owner_id, created_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at DESC);",
    # 逾期统计 / 截止时间区间筛选
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date) WHERE due_date IS NOT NULL;",
]


def _casefold(value: str | None) -> str | None:
    """SQL 函数 casefold(text)：Unicode 大小写折叠（SQLite 内置 lower 仅处理 ASCII）"""
    if value is None:
        return None
    return str(value).casefold()


async def register_functions(conn: aiosqlite.Connection) -> None:
    """在连接上注册自定义 SQL 函数（每个连接都需要注册）"""
    await conn.create_function("casefold", 1, _casefold, deterministic=True)


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 注册函数 + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    await register_functions(conn)

    # 创建表
    await conn.execute(_TASKS_DDL)

    # 创建索引
    for idx_sql in _TASKS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
