"""TaskDesk Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .caller import CallerContext, OwnerScope
from .enums import (
    CompletionFilter,
    CompletionTransition,
    SortDirection,
    SortField,
    resolve_completion_transition,
)
from .filter import TaskFilter
from .inputs import TaskCreateInput, TaskUpdateInput
from .query import TaskQuery
from .results import PagedResult, TaskCounts, TaskStats
from .task import Task, ensure_utc, utc_now

__all__ = [
    # 枚举
    "CompletionFilter",
    "SortField",
    "SortDirection",
    # 完成状态流转
    "CompletionTransition",
    "resolve_completion_transition",
    # Task
    "Task",
    "TaskCreateInput",
    "TaskUpdateInput",
    "utc_now",
    "ensure_utc",
    # 调用方
    "CallerContext",
    "OwnerScope",
    # 查询
    "TaskFilter",
    "TaskQuery",
    "PagedResult",
    "TaskCounts",
    "TaskStats",
]
