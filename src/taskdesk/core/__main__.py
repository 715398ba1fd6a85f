"""CLI 入口模块 -- python -m taskdesk.core <command>

支持的命令：
  init-db                   按当前配置创建/升级数据库结构
  stats <caller_id> [--all] 输出某个用户（或 --all 全部用户）的任务统计
"""

import asyncio
import sys

from .config import get_db_path

_USAGE = """用法: python -m taskdesk.core <command>
命令:
  init-db                   按当前配置创建/升级数据库结构
  stats <caller_id> [--all] 输出任务统计（--all 统计全部用户）"""


def main(argv: list[str] | None = None) -> None:
    """CLI 主入口"""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(_USAGE)
        sys.exit(1)

    command = args[0]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "stats":
        if len(args) < 2:
            print("用法: python -m taskdesk.core stats <caller_id> [--all]")
            sys.exit(1)
        asyncio.run(print_stats(args[1], unrestricted="--all" in args[2:]))
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, stats")
        sys.exit(1)


async def init_database() -> None:
    """初始化数据库结构"""
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    await store_group.conn.close()
    print("数据库初始化完成")


async def print_stats(caller_id: str, unrestricted: bool = False) -> None:
    """输出任务统计"""
    from .models import CallerContext
    from .service import TaskService
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        service = TaskService(store_group)
        caller = CallerContext(caller_id=caller_id, is_privileged=unrestricted)
        stats = await service.get_stats(caller)
    finally:
        await store_group.conn.close()

    scope = "全部用户" if unrestricted else caller_id
    print(f"统计范围: {scope}")
    print(f"total={stats.total}")
    print(f"completed={stats.completed}")
    print(f"pending={stats.pending}")
    print(f"overdue={stats.overdue}")
    print(f"completion_rate={stats.completion_rate}")


if __name__ == "__main__":
    main()
