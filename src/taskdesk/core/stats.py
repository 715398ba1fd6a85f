"""统计聚合 -- 归属范围内的 total / completed / pending / overdue / completion_rate

只应用归属范围条件，不应用其他筛选；范围条件与查询引擎共用 scope_query。
"""

from collections.abc import Callable
from datetime import datetime

from .models.caller import OwnerScope
from .models.results import TaskCounts, TaskStats
from .models.task import utc_now
from .query import scope_query
from .store.protocols import TaskStore


def completion_rate(completed: int, total: int) -> float:
    """完成率（百分比，保留一位小数）；total 为 0 时定义为 0"""
    if total == 0:
        return 0.0
    return round(completed / total * 100, 1)


def stats_from_counts(counts: TaskCounts) -> TaskStats:
    """由原始计数推导统计结果"""
    return TaskStats(
        total=counts.total,
        completed=counts.completed,
        pending=counts.total - counts.completed,
        overdue=counts.overdue,
        completion_rate=completion_rate(counts.completed, counts.total),
    )


class TaskStatsAggregator:
    """任务统计聚合器"""

    def __init__(
        self,
        task_store: TaskStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_store = task_store
        self._clock = clock

    async def stats(self, scope: OwnerScope) -> TaskStats:
        """统计归属范围内的任务"""
        counts = await self._task_store.summarize_tasks(scope_query(scope), self._clock())
        return stats_from_counts(counts)
