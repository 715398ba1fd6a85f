"""查询引擎 -- 归属范围 + 筛选条件 + 分页

把 OwnerScope 与 TaskFilter 编译为存储层可执行的 TaskQuery，
返回当前页任务及分页前总数。

查询引擎信任传入的 OwnerScope：授权判断在服务层完成，不在此处。
查询无副作用，is_overdue 只在读取时计算，不回写存储。
"""

from collections.abc import Callable
from datetime import datetime

import structlog

from .models.caller import OwnerScope
from .models.enums import CompletionFilter
from .models.filter import TaskFilter
from .models.query import TaskQuery
from .models.results import PagedResult
from .models.task import utc_now
from .store.protocols import TaskStore

log = structlog.get_logger()

_COMPLETION_PREDICATES: dict[CompletionFilter, bool | None] = {
    CompletionFilter.ALL: None,
    CompletionFilter.COMPLETED: True,
    CompletionFilter.PENDING: False,
}


def scope_query(scope: OwnerScope) -> TaskQuery:
    """仅包含归属范围条件的查询

    查询引擎与统计聚合共用此函数，保证两者对"范围内"的判定一致。
    """
    return TaskQuery(owner_id=scope.owner_id)


def build_task_query(scope: OwnerScope, task_filter: TaskFilter, now: datetime) -> TaskQuery:
    """编译完整查询：归属范围 AND 完成状态 AND 搜索 AND 逾期 AND 截止区间 + 排序 + 分页

    Args:
        scope: 已由服务层确定的归属范围
        task_filter: 已规范化的筛选条件
        now: 逾期判定的参考时间

    Returns:
        TaskQuery 实例
    """
    search_term = task_filter.search_term.casefold() if task_filter.search_term else None
    return scope_query(scope).model_copy(
        update={
            "is_completed": _COMPLETION_PREDICATES[task_filter.completion],
            "search_term": search_term,
            "overdue_before": now if task_filter.overdue_only else None,
            "due_from": task_filter.due_from,
            "due_to": task_filter.due_to,
            "sort_by": task_filter.sort_by,
            "sort_direction": task_filter.sort_direction,
            "offset": task_filter.offset,
            "limit": task_filter.page_size,
        }
    )


class TaskQueryEngine:
    """任务查询引擎"""

    def __init__(
        self,
        task_store: TaskStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._task_store = task_store
        self._clock = clock

    async def query(self, scope: OwnerScope, task_filter: TaskFilter) -> PagedResult:
        """执行查询

        空结果是正常的空页，不是错误；页码超出范围时同样返回空页，
        total_count 仍为分页前匹配总数。
        """
        compiled = build_task_query(scope, task_filter, self._clock())
        items, total = await self._task_store.query_tasks(compiled)

        log.debug(
            "task_query_executed",
            owner_scope=scope.owner_id or "*",
            completion=task_filter.completion.value,
            page_number=task_filter.page_number,
            page_size=task_filter.page_size,
            returned=len(items),
            total_count=total,
        )

        return PagedResult(
            items=items,
            total_count=total,
            page_number=task_filter.page_number,
            page_size=task_filter.page_size,
        )
