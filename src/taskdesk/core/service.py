"""TaskService -- 任务读写与授权

服务层负责：
1. 根据 CallerContext 确定归属范围（特权调用方不受限）
2. 单条记录操作（读取/更新/删除）的归属与特权校验
3. 完成状态流转时维护 completed_at / updated_at
4. 批量读取委托给查询引擎和统计聚合器

调用方身份总是作为显式参数传入，服务层不读取任何全局/环境状态。
"""

from collections.abc import Callable
from datetime import datetime

import structlog
from ulid import ULID

from .exceptions import TaskAccessDeniedError, TaskNotFoundError
from .models import (
    CallerContext,
    CompletionTransition,
    OwnerScope,
    PagedResult,
    Task,
    TaskCreateInput,
    TaskFilter,
    TaskStats,
    TaskUpdateInput,
    ensure_utc,
    resolve_completion_transition,
    utc_now,
)
from .query import TaskQueryEngine
from .stats import TaskStatsAggregator
from .store import StoreGroup, atomic

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._stores = store_group
        self._clock = clock
        self._query_engine = TaskQueryEngine(store_group.task_store, clock)
        self._stats_aggregator = TaskStatsAggregator(store_group.task_store, clock)

    @staticmethod
    def resolve_scope(caller: CallerContext, owner_id: str | None = None) -> OwnerScope:
        """确定归属范围

        - 特权调用方：不受限；指定 owner_id 时收窄到该用户
        - 普通调用方：只能是自己，owner_id 参数被忽略
        """
        if caller.is_privileged:
            if owner_id:
                return OwnerScope.for_owner(owner_id)
            return OwnerScope.unrestricted()
        return OwnerScope.for_owner(caller.caller_id)

    async def list_tasks(
        self,
        caller: CallerContext,
        task_filter: TaskFilter | None = None,
    ) -> PagedResult:
        """分页查询任务列表（空结果同样是成功）"""
        task_filter = task_filter or TaskFilter()
        scope = self.resolve_scope(caller, task_filter.owner_id)
        return await self._query_engine.query(scope, task_filter)

    async def get_stats(
        self,
        caller: CallerContext,
        owner_id: str | None = None,
    ) -> TaskStats:
        """统计调用方范围内的任务，范围解析规则与 list_tasks 相同"""
        scope = self.resolve_scope(caller, owner_id)
        return await self._stats_aggregator.stats(scope)

    async def get_task(self, caller: CallerContext, task_id: str) -> Task:
        """查询单个任务

        Raises:
            TaskNotFoundError: 任务不存在
            TaskAccessDeniedError: 任务不属于调用方且调用方无特权
        """
        return await self._load_authorized(caller, task_id)

    async def create_task(self, caller: CallerContext, data: TaskCreateInput) -> Task:
        """创建任务，归属者为调用方"""
        now = self._clock()
        task = Task(
            task_id=str(ULID()),
            title=data.title,
            description=data.description,
            is_completed=False,
            created_at=now,
            updated_at=now,
            completed_at=None,
            due_date=data.due_date,
            owner_id=caller.caller_id,
        )

        async with atomic(self._stores.conn):
            await self._stores.task_store.insert_task(task)

        log.info("task_created", task_id=task.task_id, owner_id=task.owner_id)
        return task

    async def update_task(
        self,
        caller: CallerContext,
        task_id: str,
        data: TaskUpdateInput,
    ) -> Task:
        """更新任务

        title / description / due_date 整体覆盖；完成状态流转以已存储状态为准：
        - False -> True: completed_at = now
        - True -> False: completed_at = None
        - 不变: completed_at 保持原值

        Raises:
            TaskNotFoundError: 任务不存在
            TaskAccessDeniedError: 任务不属于调用方且调用方无特权
        """
        current = await self._load_authorized(caller, task_id)
        return await self._write_update(current, data)

    async def toggle_completion(self, caller: CallerContext, task_id: str) -> Task:
        """切换完成状态，其余字段保持不变"""
        current = await self._load_authorized(caller, task_id)
        data = TaskUpdateInput(
            title=current.title,
            description=current.description,
            due_date=current.due_date,
            is_completed=not current.is_completed,
        )
        return await self._write_update(current, data)

    async def delete_task(self, caller: CallerContext, task_id: str) -> None:
        """永久删除任务；重复删除同一 ID 时第二次抛出 TaskNotFoundError

        Raises:
            TaskNotFoundError: 任务不存在
            TaskAccessDeniedError: 任务不属于调用方且调用方无特权
        """
        await self._load_authorized(caller, task_id)

        async with atomic(self._stores.conn):
            deleted = await self._stores.task_store.delete_task(task_id)

        if not deleted:
            # 校验通过后被并发删除
            raise TaskNotFoundError(task_id)

        log.info("task_deleted", task_id=task_id, caller_id=caller.caller_id)

    async def _load_authorized(self, caller: CallerContext, task_id: str) -> Task:
        """加载任务并校验归属/特权"""
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        if not caller.is_privileged and not task.is_owned_by(caller.caller_id):
            log.warning(
                "task_access_denied",
                task_id=task_id,
                caller_id=caller.caller_id,
            )
            raise TaskAccessDeniedError(task_id, caller.caller_id)

        return task

    async def _write_update(self, current: Task, data: TaskUpdateInput) -> Task:
        """应用更新输入并整行写回"""
        now = self._clock()
        transition = resolve_completion_transition(current.is_completed, data.is_completed)

        completed_at = current.completed_at
        if transition == CompletionTransition.COMPLETE:
            completed_at = now
        elif transition == CompletionTransition.REOPEN:
            completed_at = None

        updated = current.model_copy(
            update={
                "title": data.title,
                "description": data.description,
                "due_date": ensure_utc(data.due_date),
                "is_completed": data.is_completed,
                "completed_at": ensure_utc(completed_at),
                "updated_at": ensure_utc(now),
            }
        )

        async with atomic(self._stores.conn):
            found = await self._stores.task_store.update_task(updated)

        if not found:
            raise TaskNotFoundError(current.task_id)

        log.info(
            "task_updated",
            task_id=updated.task_id,
            transition=transition.value,
        )
        return updated
