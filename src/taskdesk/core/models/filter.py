"""TaskFilter -- 任务筛选条件

纯数据，构造时自我规范化：
- page_number / page_size 缺省、非整数、<= 0 时回落到第 1 页和默认页大小
- page_size 超过上限时截断到 MAX_PAGE_SIZE
- search_term 去除首尾空白，空串视为未设置
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from ..config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .enums import CompletionFilter, SortDirection, SortField
from .task import ensure_utc


def _positive_int_or(value: Any, default: int) -> int:
    """将输入解析为正整数，失败时返回默认值

    非整数的小数（2.7）与字符串 "2.7" 一样视为非法，不做截断。
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, float) and not value.is_integer():
        return default
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if number > 0 else default


class TaskFilter(BaseModel):
    """任务筛选 + 排序 + 分页条件"""

    completion: CompletionFilter = Field(
        default=CompletionFilter.ALL, description="完成状态筛选"
    )
    search_term: str | None = Field(
        default=None, description="标题或描述的子串匹配（大小写不敏感）"
    )
    overdue_only: bool = Field(default=False, description="仅返回逾期任务")
    due_from: datetime | None = Field(default=None, description="截止时间下界（含）")
    due_to: datetime | None = Field(default=None, description="截止时间上界（含）")
    sort_by: SortField = Field(default=SortField.CREATED_AT, description="排序字段")
    sort_direction: SortDirection = Field(default=SortDirection.DESC, description="排序方向")
    owner_id: str | None = Field(
        default=None, description="限定归属者（仅对特权调用方生效）"
    )
    page_number: int = Field(default=1, description="页码，从 1 开始")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, description="每页条数")

    @field_validator("completion", mode="before")
    @classmethod
    def _default_completion(cls, value: Any) -> Any:
        if value is None or value == "":
            return CompletionFilter.ALL
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("sort_by", "sort_direction", mode="before")
    @classmethod
    def _lower_enum(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("search_term", "owner_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("overdue_only", mode="before")
    @classmethod
    def _none_to_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("due_from", "due_to")
    @classmethod
    def _normalize_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @field_validator("page_number", mode="before")
    @classmethod
    def _normalize_page_number(cls, value: Any) -> int:
        return _positive_int_or(value, 1)

    @field_validator("page_size", mode="before")
    @classmethod
    def _normalize_page_size(cls, value: Any) -> int:
        return min(_positive_int_or(value, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        """分页跳过的条数"""
        return (self.page_number - 1) * self.page_size
