"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、分页默认值、特权角色、输入长度限制等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKDESK_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKDESK_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskdesk.db"),
    )


def get_privileged_roles() -> frozenset[str]:
    """获取视为特权（可跨用户访问）的角色集合，大小写不敏感"""
    raw = os.environ.get("TASKDESK_PRIVILEGED_ROLES", "admin")
    return frozenset(role.strip().lower() for role in raw.split(",") if role.strip())


# 分页默认每页条数（页码/页大小非法或缺省时使用）
DEFAULT_PAGE_SIZE: int = max(1, int(os.environ.get("TASKDESK_DEFAULT_PAGE_SIZE", "10")))

# 每页条数上限（超出时截断到此值）
MAX_PAGE_SIZE: int = max(
    DEFAULT_PAGE_SIZE,
    int(os.environ.get("TASKDESK_MAX_PAGE_SIZE", "100")),
)

# 输入长度限制（gateway 请求体校验）
TITLE_MAX_LENGTH: int = 200
DESCRIPTION_MAX_LENGTH: int = 1000
