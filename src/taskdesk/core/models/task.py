"""Task 领域模型 -- 任务记录

is_overdue 是读取时的派生值，不落库：
未完成 且 设置了截止时间 且 截止时间早于当前时间。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    """当前 UTC 时间（服务层默认时钟）"""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """将时间统一为带时区的 UTC；naive 时间按 UTC 解释"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Task(BaseModel):
    """Task 数据模型

    owner_id 与 created_at 创建后不可变；
    completed_at 非空当且仅当 is_completed 为 True。
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(min_length=1, description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    is_completed: bool = Field(default=False, description="是否已完成")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="最近一次修改时间")
    completed_at: datetime | None = Field(default=None, description="完成时间")
    due_date: datetime | None = Field(default=None, description="截止时间")
    owner_id: str = Field(description="创建者（归属者）标识")

    @field_validator("created_at", "updated_at", "completed_at", "due_date")
    @classmethod
    def _normalize_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    def is_overdue_at(self, now: datetime) -> bool:
        """在给定时间点是否逾期"""
        if self.is_completed or self.due_date is None:
            return False
        return self.due_date < ensure_utc(now)

    @property
    def is_overdue(self) -> bool:
        """当前是否逾期（每次读取时计算）"""
        return self.is_overdue_at(utc_now())

    def is_owned_by(self, caller_id: str) -> bool:
        return self.owner_id == caller_id
