"""任务写入输入模型

输入在到达服务层前已由外部校验方（gateway 请求体模型）完成格式校验，
服务层不再重复校验长度、必填等约束。
"""

from datetime import datetime

from pydantic import BaseModel, Field


class TaskCreateInput(BaseModel):
    """创建任务输入"""

    title: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    due_date: datetime | None = Field(default=None, description="截止时间")


class TaskUpdateInput(BaseModel):
    """更新任务输入 -- 显式列出全部可变字段

    title、description、due_date 整体覆盖；
    is_completed 与已存储状态比较后决定完成状态流转。
    """

    title: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    due_date: datetime | None = Field(default=None, description="截止时间")
    is_completed: bool = Field(description="是否已完成")
