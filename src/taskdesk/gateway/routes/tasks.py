"""任务路由

GET    /api/tasks                  任务列表：筛选 + 排序 + 分页
GET    /api/tasks/stats            任务统计
GET    /api/tasks/{task_id}        任务详情
POST   /api/tasks                  创建任务
PUT    /api/tasks/{task_id}        整体更新任务
POST   /api/tasks/{task_id}/toggle 切换完成状态
DELETE /api/tasks/{task_id}        删除任务

- 404: 任务不存在
- 403: 任务不属于调用方
- 401: 缺少调用方标识
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator
from starlette.responses import JSONResponse, Response
from taskdesk.core.config import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from taskdesk.core.exceptions import TaskAccessDeniedError, TaskNotFoundError
from taskdesk.core.models import (
    CallerContext,
    CompletionFilter,
    SortDirection,
    SortField,
    Task,
    TaskCreateInput,
    TaskFilter,
    TaskStats,
    TaskUpdateInput,
    utc_now,
)
from taskdesk.core.service import TaskService

from ..deps import get_caller, get_store_group

router = APIRouter()


class TaskCreateRequest(BaseModel):
    """创建任务请求体"""

    title: str = Field(max_length=TITLE_MAX_LENGTH, description="任务标题")
    description: str | None = Field(
        default=None, max_length=DESCRIPTION_MAX_LENGTH, description="任务描述"
    )
    due_date: datetime | None = Field(default=None, description="截止时间（naive 时间按 UTC）")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class TaskUpdateRequest(TaskCreateRequest):
    """更新任务请求体（整体覆盖）"""

    is_completed: bool = Field(description="是否已完成")


class TaskResponse(BaseModel):
    """任务响应"""

    task_id: str
    title: str
    description: str | None
    is_completed: bool
    is_overdue: bool
    created_at: str
    updated_at: str
    completed_at: str | None
    due_date: str | None
    owner_id: str


class TaskPageResponse(BaseModel):
    """任务分页响应"""

    tasks: list[TaskResponse]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _to_response(task: Task, now: datetime) -> TaskResponse:
    return TaskResponse(
        task_id=task.task_id,
        title=task.title,
        description=task.description,
        is_completed=task.is_completed,
        is_overdue=task.is_overdue_at(now),
        created_at=task.created_at.isoformat(),
        updated_at=task.updated_at.isoformat(),
        completed_at=_isoformat(task.completed_at),
        due_date=_isoformat(task.due_date),
        owner_id=task.owner_id,
    )


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def _domain_error_response(exc: TaskNotFoundError | TaskAccessDeniedError) -> JSONResponse:
    if isinstance(exc, TaskAccessDeniedError):
        return _error_response(403, "TASK_ACCESS_DENIED", str(exc))
    return _error_response(404, "TASK_NOT_FOUND", str(exc))


@router.get("/api/tasks", response_model=TaskPageResponse)
async def list_tasks(
    status: CompletionFilter = Query(default=CompletionFilter.ALL, description="完成状态"),
    search: str | None = Query(default=None, description="标题/描述子串"),
    overdue: bool = Query(default=False, description="仅逾期任务"),
    due_from: datetime | None = Query(default=None, description="截止时间下界"),
    due_to: datetime | None = Query(default=None, description="截止时间上界"),
    sort_by: SortField = Query(default=SortField.CREATED_AT, description="排序字段"),
    sort_dir: SortDirection = Query(default=SortDirection.DESC, description="排序方向"),
    page: str | None = Query(default=None, description="页码，非法值回落到 1"),
    page_size: str | None = Query(default=None, description="每页条数，非法值回落到默认值"),
    owner_id: str | None = Query(default=None, description="限定归属者（仅管理员生效）"),
    caller: CallerContext = Depends(get_caller),
    store_group=Depends(get_store_group),
):
    """查询任务列表，普通用户只能看到自己的任务"""
    task_filter = TaskFilter(
        completion=status,
        search_term=search,
        overdue_only=overdue,
        due_from=due_from,
        due_to=due_to,
        sort_by=sort_by,
        sort_direction=sort_dir,
        page_number=page,
        page_size=page_size,
        owner_id=owner_id,
    )
    service = TaskService(store_group)
    result = await service.list_tasks(caller, task_filter)

    now = utc_now()
    return TaskPageResponse(
        tasks=[_to_response(t, now) for t in result.items],
        total_count=result.total_count,
        page_number=result.page_number,
        page_size=result.page_size,
        total_pages=result.total_pages,
        has_next=result.has_next,
        has_previous=result.has_previous,
    )


@router.get("/api/tasks/stats", response_model=TaskStats)
async def get_task_stats(
    owner_id: str | None = Query(default=None, description="限定归属者（仅管理员生效）"),
    caller: CallerContext = Depends(get_caller),
    store_group=Depends(get_store_group),
):
    """任务统计：total / completed / pending / overdue / completion_rate"""
    service = TaskService(store_group)
    return await service.get_stats(caller, owner_id)


@router.get("/api/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    caller: CallerContext = Depends(get_caller),
    store_group=Depends(get_store_group),
):
    """查询任务详情"""
    service = TaskService(store_group)
    try:
        task = await service.get_task(caller, task_id)
    except (TaskNotFoundError, TaskAccessDeniedError) as e:
        return _domain_error_response(e)
    return _to_response(task, utc_now())


@router.post("/api/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    body: TaskCreateRequest,
    caller: CallerContext = Depends(get_caller),
    store_group=Depends(get_store_group),
):
    """创建任务，归属者为当前调用方"""
    service = TaskService(store_group)
    task = await service.create_task(
        caller,
        TaskCreateInput(
            title=body.title,
            description=body.description,
            due_date=body.due_date,
        ),
    )
    return _to_response(task, utc_now())


@router.put("/api/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    body: TaskUpdateRequest,
    caller: CallerContext = Depends(get_caller),
    store_group=Depends(get_store_group),
):
    """整体更新任务（含完成状态流转）"""
    service = TaskService(store_group)
    try:
        task = await service.update_task(
            caller,
            task_id,
            TaskUpdateInput(
                title=body.title,
                description=body.description,
                due_date=body.due_date,
                is_completed=body.is_completed,
            ),
        )
    except (TaskNotFoundError, TaskAccessDeniedError) as e:
        return _domain_error_response(e)
    return _to_response(task, utc_now())


@router.post("/api/tasks/{task_id}/toggle", response_model=TaskResponse)
async def toggle_task(
    task_id: str,
    caller: CallerContext = Depends(get_caller),
    store_group=Depends(get_store_group),
):
    """切换任务完成状态"""
    service = TaskService(store_group)
    try:
        task = await service.toggle_completion(caller, task_id)
    except (TaskNotFoundError, TaskAccessDeniedError) as e:
        return _domain_error_response(e)
    return _to_response(task, utc_now())


@router.delete("/api/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    caller: CallerContext = Depends(get_caller),
    store_group=Depends(get_store_group),
):
    """永久删除任务"""
    service = TaskService(store_group)
    try:
        await service.delete_task(caller, task_id)
    except (TaskNotFoundError, TaskAccessDeniedError) as e:
        return _domain_error_response(e)
    return Response(status_code=204)
