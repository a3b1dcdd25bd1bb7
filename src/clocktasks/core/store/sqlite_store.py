"""StorageProvider 的 SQLite 实现（本地持久化）

save 在同一事务内整体替换 tasks / events / meta，失败时回滚并抛出原异常。
"""

from pathlib import Path

import aiosqlite
import structlog

from ..clock import Clock, system_clock
from ..config import POLL_INTERVAL_S
from ..models.snapshot import Snapshot
from ..serialization import validate_snapshot
from .listener import PollingListener
from .protocols import SnapshotCallback
from .sqlite_init import init_db

log = structlog.get_logger()


class SqliteStorageProvider:
    """基于 aiosqlite 的 Snapshot 存储"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        clock: Clock = system_clock,
        poll_interval_s: float = POLL_INTERVAL_S,
    ) -> None:
        self._conn = conn
        self._clock = clock
        self._listener = PollingListener(self.load, poll_interval_s, name="sqlite")

    @property
    def conn(self) -> aiosqlite.Connection:
        return self._conn

    async def load(self) -> Snapshot:
        cursor = await self._conn.execute("SELECT task_id, name FROM tasks ORDER BY position ASC")
        task_rows = await cursor.fetchall()
        cursor = await self._conn.execute(
            "SELECT task_id, timestamp FROM events ORDER BY seq ASC"
        )
        event_rows = await cursor.fetchall()
        cursor = await self._conn.execute("SELECT key, value FROM meta")
        meta = {row[0]: row[1] for row in await cursor.fetchall()}

        last_modified = meta.get("last_modified")
        return validate_snapshot(
            {
                "tasks": [{"id": r[0], "name": r[1]} for r in task_rows],
                "events": [{"taskId": r[0], "timestamp": r[1]} for r in event_rows],
                "lastModified": int(last_modified) if last_modified else None,
                "sortMode": meta.get("sort_mode"),
            },
            self._clock,
        )

    async def save(self, snapshot: Snapshot) -> None:
        try:
            await self._conn.execute("DELETE FROM tasks")
            await self._conn.execute("DELETE FROM events")
            await self._conn.execute("DELETE FROM meta")
            await self._conn.executemany(
                "INSERT INTO tasks (task_id, name) VALUES (?, ?)",
                [(t.id, t.name) for t in snapshot.tasks],
            )
            await self._conn.executemany(
                "INSERT INTO events (task_id, timestamp) VALUES (?, ?)",
                [(e.task_id, e.timestamp) for e in snapshot.events],
            )
            meta = [("last_modified", str(snapshot.last_modified))]
            if snapshot.sort_mode is not None:
                meta.append(("sort_mode", snapshot.sort_mode.value))
            await self._conn.executemany("INSERT INTO meta (key, value) VALUES (?, ?)", meta)
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

        self._listener.mark_known(snapshot)
        log.debug(
            "sqlite_store_saved",
            task_count=len(snapshot.tasks),
            event_count=len(snapshot.events),
        )

    async def clear(self) -> None:
        try:
            await self._conn.execute("DELETE FROM tasks")
            await self._conn.execute("DELETE FROM events")
            await self._conn.execute("DELETE FROM meta")
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        log.info("sqlite_store_cleared")

    def start_listening(self, callback: SnapshotCallback) -> None:
        self._listener.start(callback)

    def stop_listening(self) -> None:
        self._listener.stop()

    def is_listening(self) -> bool:
        return self._listener.is_running()

    async def poll_once(self) -> bool:
        """立即执行一次变更检查（测试 / 手动刷新）"""
        return await self._listener.poll_once()

    async def close(self) -> None:
        self.stop_listening()
        await self._conn.close()


async def create_sqlite_provider(
    db_path: str | Path,
    clock: Clock = system_clock,
    poll_interval_s: float = POLL_INTERVAL_S,
) -> SqliteStorageProvider:
    """创建 SQLite 存储：确保目录存在、建立连接并初始化表结构

    Args:
        db_path: SQLite 数据库文件路径
        clock: 时钟（空库 load 时用于 last_modified）
        poll_interval_s: 监听轮询间隔

    Returns:
        SqliteStorageProvider 实例，使用完毕需调用 close()
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(str(db_path))
    await init_db(conn)

    return SqliteStorageProvider(conn, clock=clock, poll_interval_s=poll_interval_s)
