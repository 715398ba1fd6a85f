"""枚举定义 -- 完成状态筛选、排序字段、完成状态流转

包含 CompletionFilter、SortField、SortDirection、CompletionTransition 枚举，
以及 resolve_completion_transition 完成状态流转判定函数。
"""

from enum import StrEnum


class CompletionFilter(StrEnum):
    """完成状态筛选（三态）"""

    ALL = "all"  # 未设置：不按完成状态筛选
    COMPLETED = "completed"
    PENDING = "pending"


class SortField(StrEnum):
    """排序字段"""

    CREATED_AT = "created_at"
    DUE_DATE = "due_date"
    TITLE = "title"
    IS_COMPLETED = "is_completed"


class SortDirection(StrEnum):
    """排序方向"""

    ASC = "asc"
    DESC = "desc"


class CompletionTransition(StrEnum):
    """完成状态流转

    任务只有 Pending / Completed 两个状态，流转只能由调用方通过更新触发，
    不存在定时或自动流转。
    """

    NONE = "none"  # 状态不变，completed_at 保持原值
    COMPLETE = "complete"  # Pending -> Completed，completed_at 置为当前时间
    REOPEN = "reopen"  # Completed -> Pending，completed_at 清空


def resolve_completion_transition(previous: bool, requested: bool) -> CompletionTransition:
    """根据已存储的完成状态和请求的完成状态判定流转

    Args:
        previous: 数据库中已存储的 is_completed
        requested: 本次更新请求的 is_completed

    Returns:
        对应的 CompletionTransition
    """
    if previous == requested:
        return CompletionTransition.NONE
    if requested:
        return CompletionTransition.COMPLETE
    return CompletionTransition.REOPEN
