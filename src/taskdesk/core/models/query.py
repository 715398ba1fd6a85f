"""TaskQuery -- 存储层可执行的谓词描述

由查询引擎根据 OwnerScope + TaskFilter + 当前时间编译得到，
存储层只负责把它翻译成 SQL，不再关心调用方身份或原始筛选输入。
所有条件以 AND 组合；值为 None 的条件不生效。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import SortDirection, SortField


class TaskQuery(BaseModel):
    """编译后的任务查询"""

    model_config = ConfigDict(frozen=True)

    owner_id: str | None = Field(default=None, description="归属者；None 表示不受限")
    is_completed: bool | None = Field(default=None, description="完成状态")
    search_term: str | None = Field(default=None, description="已 casefold 的搜索子串")
    overdue_before: datetime | None = Field(
        default=None, description="仅未完成且 due_date 早于此时间的任务"
    )
    due_from: datetime | None = Field(default=None)
    due_to: datetime | None = Field(default=None)
    sort_by: SortField = Field(default=SortField.CREATED_AT)
    sort_direction: SortDirection = Field(default=SortDirection.DESC)
    offset: int = Field(default=0, ge=0)
    limit: int | None = Field(default=None, ge=1, description="None 表示不分页")
