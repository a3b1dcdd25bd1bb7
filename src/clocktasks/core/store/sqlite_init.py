"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL。
tasks / events 表通过自增主键保持插入顺序；不设外键，事件日志允许引用已删除任务和哨兵 ID。
"""

import aiosqlite

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    position  INTEGER PRIMARY KEY,
    task_id   TEXT NOT NULL,
    name      TEXT NOT NULL DEFAULT ''
);
"""

# events 表 DDL
_EVENTS_DDL = """
CREATE TABLE IF NOT EXISTS events (
    seq        INTEGER PRIMARY KEY,
    task_id    TEXT NOT NULL,
    timestamp  INTEGER NOT NULL
);
"""

# meta 表 DDL（last_modified / sort_mode）
_META_DDL = """
CREATE TABLE IF NOT EXISTS meta (
    key    TEXT PRIMARY KEY,
    value  TEXT NOT NULL
);
"""

_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_events_task_id ON events(task_id);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    await conn.execute(_TASKS_DDL)
    await conn.execute(_EVENTS_DDL)
    await conn.execute(_META_DDL)

    for idx_sql in _INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()
