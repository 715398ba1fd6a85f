"""查询结果模型 -- 分页结果与统计结果"""

import math

from pydantic import BaseModel, Field

from .task import Task


class PagedResult(BaseModel):
    """分页结果

    total_count 是分页前满足全部筛选条件的记录数，用于计算总页数。
    """

    items: list[Task] = Field(default_factory=list, description="当前页任务，按排序规则排列")
    total_count: int = Field(default=0, ge=0, description="分页前匹配总数")
    page_number: int = Field(default=1, ge=1, description="页码")
    page_size: int = Field(ge=1, description="每页条数")

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1


class TaskCounts(BaseModel):
    """存储层单条聚合语句返回的原始计数"""

    total: int = 0
    completed: int = 0
    overdue: int = 0


class TaskStats(BaseModel):
    """任务统计

    pending = total - completed；
    completion_rate 保留一位小数，total 为 0 时定义为 0（产品策略，不是错误）。
    """

    total: int = Field(ge=0)
    completed: int = Field(ge=0)
    pending: int = Field(ge=0)
    overdue: int = Field(ge=0)
    completion_rate: float = Field(ge=0, le=100)
