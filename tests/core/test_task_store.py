"""SqliteTaskStore 单元测试

测试内容：
1. 插入 / 读取 / 更新 / 删除
2. completed_at 与 is_completed 一致性约束
3. owner_id / created_at 更新时不可变
4. 大小写不敏感搜索（含非 ASCII）
5. due_date 排序时 NULL 排在最后
6. 单语句聚合计数
7. created_at 相同时的稳定排序与分页
"""

from datetime import UTC, datetime, timedelta

import aiosqlite
import pytest
import pytest_asyncio
from taskdesk.core.models import SortDirection, SortField, Task, TaskQuery
from taskdesk.core.store.sqlite_init import init_db, verify_wal_mode
from taskdesk.core.store.task_store import SqliteTaskStore, compile_order, encode_timestamp

BASE = datetime(2030, 1, 1, 9, 0, tzinfo=UTC)


def make_task(
    task_id: str,
    owner_id: str = "alice",
    title: str = "任务",
    offset_minutes: int = 0,
    **overrides,
) -> Task:
    created = BASE + timedelta(minutes=offset_minutes)
    data = {
        "task_id": task_id,
        "title": title,
        "created_at": created,
        "updated_at": created,
        "owner_id": owner_id,
    }
    data.update(overrides)
    return Task(**data)


@pytest_asyncio.fixture
async def task_store(db_conn: aiosqlite.Connection) -> SqliteTaskStore:
    return SqliteTaskStore(db_conn)


async def _insert(store: SqliteTaskStore, conn: aiosqlite.Connection, *tasks: Task) -> None:
    for task in tasks:
        await store.insert_task(task)
    await conn.commit()


class TestTaskStoreCrud:
    """基础读写"""

    async def test_insert_and_get(self, task_store, db_conn):
        task = make_task(
            "T1",
            description="周五之前",
            due_date=BASE + timedelta(days=2),
        )
        await _insert(task_store, db_conn, task)

        loaded = await task_store.get_task("T1")
        assert loaded is not None
        assert loaded == task
        assert loaded.created_at.tzinfo is not None

    async def test_get_missing_returns_none(self, task_store):
        assert await task_store.get_task("NOPE") is None

    async def test_update_returns_false_for_missing(self, task_store, db_conn):
        ghost = make_task("GHOST")
        assert await task_store.update_task(ghost) is False

    async def test_update_keeps_owner_and_created_at(self, task_store, db_conn):
        task = make_task("T1")
        await _insert(task_store, db_conn, task)

        tampered = task.model_copy(
            update={
                "title": "新标题",
                "owner_id": "mallory",
                "created_at": BASE + timedelta(days=10),
                "updated_at": BASE + timedelta(hours=1),
            }
        )
        assert await task_store.update_task(tampered) is True
        await db_conn.commit()

        loaded = await task_store.get_task("T1")
        assert loaded.title == "新标题"
        assert loaded.owner_id == "alice"
        assert loaded.created_at == BASE
        assert loaded.updated_at == BASE + timedelta(hours=1)

    async def test_delete(self, task_store, db_conn):
        await _insert(task_store, db_conn, make_task("T1"))

        assert await task_store.delete_task("T1") is True
        await db_conn.commit()
        assert await task_store.get_task("T1") is None
        assert await task_store.delete_task("T1") is False


class TestCompletionConstraint:
    """completed_at 非空当且仅当 is_completed"""

    async def test_completed_without_timestamp_rejected(self, task_store, db_conn):
        with pytest.raises(aiosqlite.IntegrityError):
            await task_store.insert_task(make_task("T1", is_completed=True, completed_at=None))
        await db_conn.rollback()

    async def test_pending_with_timestamp_rejected(self, task_store, db_conn):
        with pytest.raises(aiosqlite.IntegrityError):
            await task_store.insert_task(make_task("T1", is_completed=False, completed_at=BASE))
        await db_conn.rollback()


class TestQueryTasks:
    """query_tasks 谓词与排序"""

    async def test_owner_scope_and_total(self, task_store, db_conn):
        await _insert(
            task_store,
            db_conn,
            make_task("A1", "alice", offset_minutes=1),
            make_task("A2", "alice", offset_minutes=2),
            make_task("B1", "bob", offset_minutes=3),
        )

        items, total = await task_store.query_tasks(TaskQuery(owner_id="alice"))
        assert total == 2
        assert [t.task_id for t in items] == ["A2", "A1"]

        items, total = await task_store.query_tasks(TaskQuery())
        assert total == 3

    async def test_search_is_case_insensitive_for_unicode(self, task_store, db_conn):
        await _insert(
            task_store,
            db_conn,
            make_task("T1", title="Straße reparieren", offset_minutes=1),
            make_task("T2", title="Buy milk", description="ÉCOLE run", offset_minutes=2),
            make_task("T3", title="unrelated", offset_minutes=3),
        )

        items, _ = await task_store.query_tasks(TaskQuery(search_term="STRASSE".casefold()))
        assert [t.task_id for t in items] == ["T1"]

        items, _ = await task_store.query_tasks(TaskQuery(search_term="école"))
        assert [t.task_id for t in items] == ["T2"]

    async def test_limit_and_offset(self, task_store, db_conn):
        await _insert(
            task_store,
            db_conn,
            *[make_task(f"T{i}", offset_minutes=i) for i in range(5)],
        )

        items, total = await task_store.query_tasks(TaskQuery(limit=2, offset=2))
        assert total == 5
        assert [t.task_id for t in items] == ["T2", "T1"]

        items, _ = await task_store.query_tasks(TaskQuery(offset=3))
        assert [t.task_id for t in items] == ["T1", "T0"]

    async def test_due_date_sort_puts_nulls_last(self, task_store, db_conn):
        await _insert(
            task_store,
            db_conn,
            make_task("NODUE", offset_minutes=1),
            make_task("LATE", offset_minutes=2, due_date=BASE + timedelta(days=5)),
            make_task("SOON", offset_minutes=3, due_date=BASE + timedelta(days=1)),
        )

        asc = TaskQuery(sort_by=SortField.DUE_DATE, sort_direction=SortDirection.ASC)
        items, _ = await task_store.query_tasks(asc)
        assert [t.task_id for t in items] == ["SOON", "LATE", "NODUE"]

        desc = TaskQuery(sort_by=SortField.DUE_DATE, sort_direction=SortDirection.DESC)
        items, _ = await task_store.query_tasks(desc)
        assert [t.task_id for t in items] == ["LATE", "SOON", "NODUE"]

    async def test_overdue_predicate(self, task_store, db_conn):
        now = BASE + timedelta(days=3)
        await _insert(
            task_store,
            db_conn,
            make_task("PAST", offset_minutes=1, due_date=BASE),
            make_task(
                "DONE",
                offset_minutes=2,
                due_date=BASE,
                is_completed=True,
                completed_at=BASE,
            ),
            make_task("FUTURE", offset_minutes=3, due_date=now + timedelta(days=1)),
            make_task("NODUE", offset_minutes=4),
        )

        items, total = await task_store.query_tasks(TaskQuery(overdue_before=now))
        assert total == 1
        assert items[0].task_id == "PAST"


class TestSummarizeTasks:
    """summarize_tasks 聚合"""

    async def test_empty_scope(self, task_store):
        counts = await task_store.summarize_tasks(TaskQuery(owner_id="nobody"), BASE)
        assert (counts.total, counts.completed, counts.overdue) == (0, 0, 0)

    async def test_counts(self, task_store, db_conn):
        await _insert(
            task_store,
            db_conn,
            make_task("A1", offset_minutes=1, is_completed=True, completed_at=BASE),
            make_task("A2", offset_minutes=2, due_date=BASE - timedelta(days=1)),
            make_task("A3", offset_minutes=3),
            make_task("B1", "bob", offset_minutes=4, due_date=BASE - timedelta(days=1)),
        )

        counts = await task_store.summarize_tasks(TaskQuery(owner_id="alice"), BASE)
        assert (counts.total, counts.completed, counts.overdue) == (3, 1, 1)

        counts = await task_store.summarize_tasks(TaskQuery(), BASE)
        assert (counts.total, counts.completed, counts.overdue) == (4, 1, 2)


class TestEncoding:
    def test_timestamps_sort_lexicographically(self):
        early = encode_timestamp(datetime(2030, 1, 1, 0, 0, 0, tzinfo=UTC))
        late = encode_timestamp(datetime(2030, 1, 1, 0, 0, 0, 1, tzinfo=UTC))
        assert early < late
        assert len(early) == len(late)

    def test_order_clause_ends_with_id_tiebreak(self):
        sql = compile_order(TaskQuery())
        assert "created_at DESC" in sql
        assert "task_id DESC" in sql


class TestStableOrdering:
    """created_at 相同时按 task_id 决定顺序，分页结果确定"""

    async def _seed_ties(self, task_store, db_conn) -> None:
        # 创建时间与标题都相同，插入顺序与 ID 顺序不一致
        await _insert(
            task_store,
            db_conn,
            make_task("T-B"),
            make_task("T-D"),
            make_task("T-A"),
            make_task("T-C"),
        )

    async def test_ties_ordered_by_id(self, task_store, db_conn):
        await self._seed_ties(task_store, db_conn)

        items, _ = await task_store.query_tasks(TaskQuery())
        assert [t.task_id for t in items] == ["T-D", "T-C", "T-B", "T-A"]

        asc = TaskQuery(sort_direction=SortDirection.ASC)
        items, _ = await task_store.query_tasks(asc)
        assert [t.task_id for t in items] == ["T-A", "T-B", "T-C", "T-D"]

    @pytest.mark.parametrize("page_size", [1, 2, 3])
    async def test_pages_partition_ties(self, task_store, db_conn, page_size: int):
        await self._seed_ties(task_store, db_conn)

        seen: list[str] = []
        offset = 0
        while True:
            items, total = await task_store.query_tasks(
                TaskQuery(limit=page_size, offset=offset)
            )
            if not items:
                break
            seen.extend(t.task_id for t in items)
            offset += page_size

        assert total == 4
        assert seen == ["T-D", "T-C", "T-B", "T-A"]

    async def test_ties_under_secondary_sort(self, task_store, db_conn):
        """主排序键相同时回落到 created_at DESC, task_id DESC"""
        await self._seed_ties(task_store, db_conn)

        by_title = TaskQuery(sort_by=SortField.TITLE, sort_direction=SortDirection.ASC)
        first, _ = await task_store.query_tasks(by_title)
        second, _ = await task_store.query_tasks(by_title)
        assert [t.task_id for t in first] == ["T-D", "T-C", "T-B", "T-A"]
        assert [t.task_id for t in first] == [t.task_id for t in second]

    async def test_offset_past_end_is_empty(self, task_store, db_conn):
        await self._seed_ties(task_store, db_conn)

        items, total = await task_store.query_tasks(TaskQuery(limit=10, offset=2**70))
        assert items == []
        assert total == 4


class TestInitDb:
    """数据库初始化"""

    async def test_wal_mode_enabled(self, db_conn):
        assert await verify_wal_mode(db_conn) is True

    async def test_init_is_idempotent(self, db_conn):
        await init_db(db_conn)
        cursor = await db_conn.execute("SELECT COUNT(*) FROM tasks")
        assert (await cursor.fetchone())[0] == 0

    async def test_casefold_function_registered(self, db_conn):
        cursor = await db_conn.execute("SELECT casefold('ÄRGER'), casefold(NULL)")
        row = await cursor.fetchone()
        assert row[0] == "ärger"
        assert row[1] is None
