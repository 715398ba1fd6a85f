"""TaskStore SQLite 实现

时间统一以 UTC ISO 8601（固定微秒精度）文本存储，保证字符串序与时间序一致，
排序与截止时间比较可直接在 SQL 中完成。
"""

from datetime import datetime

import aiosqlite

from ..models.enums import SortDirection, SortField
from ..models.query import TaskQuery
from ..models.results import TaskCounts
from ..models.task import Task, ensure_utc

_COLUMNS = (
    "task_id, title, description, is_completed, created_at, updated_at, "
    "completed_at, due_date, owner_id"
)

_SORT_EXPRESSIONS: dict[SortField, str] = {
    SortField.CREATED_AT: "created_at",
    SortField.DUE_DATE: "due_date",
    SortField.TITLE: "casefold(title)",
    SortField.IS_COMPLETED: "is_completed",
}


def encode_timestamp(value: datetime | None) -> str | None:
    """datetime -> 定长 UTC ISO 文本"""
    value = ensure_utc(value)
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def _decode_timestamp(raw: str | None) -> datetime | None:
    if raw is None:
        return None
    return ensure_utc(datetime.fromisoformat(raw))


def compile_where(query: TaskQuery) -> tuple[str, list]:
    """将 TaskQuery 的筛选条件编译为 WHERE 子句 + 参数（条件以 AND 组合）"""
    clauses: list[str] = []
    params: list = []

    if query.owner_id is not None:
        clauses.append("owner_id = ?")
        params.append(query.owner_id)

    if query.is_completed is not None:
        clauses.append("is_completed = ?")
        params.append(int(query.is_completed))

    if query.search_term:
        # 标题或描述任一包含即匹配
        clauses.append(
            "(instr(casefold(title), ?) > 0 OR instr(casefold(coalesce(description, '')), ?) > 0)"
        )
        params.extend([query.search_term, query.search_term])

    if query.overdue_before is not None:
        clauses.append("(is_completed = 0 AND due_date IS NOT NULL AND due_date < ?)")
        params.append(encode_timestamp(query.overdue_before))

    # 无截止时间的任务与 NULL 比较结果为 NULL，不会命中区间条件
    if query.due_from is not None:
        clauses.append("due_date >= ?")
        params.append(encode_timestamp(query.due_from))

    if query.due_to is not None:
        clauses.append("due_date <= ?")
        params.append(encode_timestamp(query.due_to))

    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def compile_order(query: TaskQuery) -> str:
    """编译 ORDER BY 子句；末尾总以 created_at DESC, task_id DESC 收尾保证稳定分页"""
    direction = "ASC" if query.sort_direction == SortDirection.ASC else "DESC"

    if query.sort_by == SortField.CREATED_AT:
        return f" ORDER BY created_at {direction}, task_id {direction}"

    expression = _SORT_EXPRESSIONS[query.sort_by]
    if query.sort_by == SortField.DUE_DATE:
        # 无截止时间的任务排在最后
        primary = f"(due_date IS NULL) ASC, due_date {direction}"
    else:
        primary = f"{expression} {direction}"
    return f" ORDER BY {primary}, created_at DESC, task_id DESC"


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现

    写操作不自行提交，由调用方通过 transaction.atomic 控制事务边界。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def insert_task(self, task: Task) -> None:
        """插入任务记录"""
        await self._conn.execute(
            f"INSERT INTO tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                task.task_id,
                task.title,
                task.description,
                int(task.is_completed),
                encode_timestamp(task.created_at),
                encode_timestamp(task.updated_at),
                encode_timestamp(task.completed_at),
                encode_timestamp(task.due_date),
                task.owner_id,
            ),
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def update_task(self, task: Task) -> bool:
        """整行写入可变字段

        owner_id 与 created_at 不在 SET 列表中，创建后不可变。
        单条 UPDATE 同时写入 is_completed / completed_at / updated_at，
        并发更新同一记录时最终状态总是自洽的。
        """
        cursor = await self._conn.execute(
            """
            UPDATE tasks
            SET title = ?, description = ?, is_completed = ?,
                updated_at = ?, completed_at = ?, due_date = ?
            WHERE task_id = ?
            """,
            (
                task.title,
                task.description,
                int(task.is_completed),
                encode_timestamp(task.updated_at),
                encode_timestamp(task.completed_at),
                encode_timestamp(task.due_date),
                task.task_id,
            ),
        )
        return cursor.rowcount > 0

    async def delete_task(self, task_id: str) -> bool:
        """永久删除任务（无软删除）"""
        cursor = await self._conn.execute(
            "DELETE FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        return cursor.rowcount > 0

    async def query_tasks(self, query: TaskQuery) -> tuple[list[Task], int]:
        """按谓词查询：先统计分页前总数，再取当前页"""
        where_sql, params = compile_where(query)

        cursor = await self._conn.execute(f"SELECT COUNT(*) FROM tasks{where_sql}", params)
        row = await cursor.fetchone()
        total = row[0] if row else 0

        # 页码超出范围：直接返回空页，offset 可能超出 SQLite INTEGER 范围
        if query.offset >= total:
            return [], total

        sql =f"SELECT {_COLUMNS} FROM tasks{where_sql}{compile_order(query)}"
        page_params = list(params)
        if query.limit is not None:
            sql += " LIMIT ? OFFSET ?"
            page_params.extend([query.limit, query.offset])
        elif query.offset:
            sql += " LIMIT -1 OFFSET ?"
            page_params.append(query.offset)

        cursor = await self._conn.execute(sql, page_params)
        rows = await cursor.fetchall()
        return [self._row_to_task(r) for r in rows], total

    async def summarize_tasks(self, query: TaskQuery, now: datetime) -> TaskCounts:
        """单条聚合语句统计 total / completed / overdue，保证三者来自同一快照"""
        where_sql, params = compile_where(query)
        cursor = await self._conn.execute(
            f"""
            SELECT
                COUNT(*),
                COALESCE(SUM(is_completed), 0),
                COALESCE(SUM(
                    CASE WHEN is_completed = 0 AND due_date IS NOT NULL AND due_date < ?
                    THEN 1 ELSE 0 END
                ), 0)
            FROM tasks{where_sql}
            """,
            [encode_timestamp(now), *params],
        )
        row = await cursor.fetchone()
        if row is None:
            return TaskCounts()
        return TaskCounts(total=row[0], completed=row[1], overdue=row[2])

    @staticmethod
    def _row_to_task(row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row[0],
            title=row[1],
            description=row[2],
            is_completed=bool(row[3]),
            created_at=_decode_timestamp(row[4]),
            updated_at=_decode_timestamp(row[5]),
            completed_at=_decode_timestamp(row[6]),
            due_date=_decode_timestamp(row[7]),
            owner_id=row[8],
        )
