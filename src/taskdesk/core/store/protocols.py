"""Store Protocol 接口定义

定义 TaskStore 的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing）。
存储层只执行编译好的 TaskQuery，不做任何归属或权限判断。
"""

from datetime import datetime
from typing import Protocol

from ..models.query import TaskQuery
from ..models.results import TaskCounts
from ..models.task import Task


class TaskStore(Protocol):
    """Task 存储接口"""

    async def insert_task(self, task: Task) -> None:
        """插入任务记录"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def update_task(self, task: Task) -> bool:
        """整行写入可变字段，返回是否命中记录"""
        ...

    async def delete_task(self, task_id: str) -> bool:
        """永久删除任务，返回是否命中记录"""
        ...

    async def query_tasks(self, query: TaskQuery) -> tuple[list[Task], int]:
        """按谓词查询，返回 (当前页任务, 分页前总数)"""
        ...

    async def summarize_tasks(self, query: TaskQuery, now: datetime) -> TaskCounts:
        """按谓词聚合计数（total / completed / overdue）"""
        ...
