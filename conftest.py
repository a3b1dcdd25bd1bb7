"""全局 pytest 配置 -- 可控时钟、Snapshot 构造与临时存储路径 fixture"""

from pathlib import Path

import pytest
import pytest_asyncio

from clocktasks.core.clock import ManualClock
from clocktasks.core.models import ActivationEvent, Snapshot, SortMode, Task


def _make_snapshot(
    tasks=(),
    events=(),
    last_modified: int = 0,
    sort_mode: SortMode | None = SortMode.TOTAL,
) -> Snapshot:
    return Snapshot(
        tasks=[Task(id=i, name=n) for i, n in tasks],
        events=[ActivationEvent(task_id=t, timestamp=ts) for t, ts in events],
        last_modified=last_modified,
        sort_mode=sort_mode,
    )


@pytest.fixture
def clock() -> ManualClock:
    """从 t=1_000_000ms 开始的手动时钟"""
    return ManualClock(1_000_000)


@pytest.fixture
def make_snapshot():
    """用 (id, name) / (task_id, timestamp) 元组快速构造 Snapshot"""
    return _make_snapshot


@pytest.fixture
def abc_snapshot() -> Snapshot:
    """A@1000 -> B@2000 -> C@3000 -> B@4000"""
    return _make_snapshot(
        tasks=[("1000", "A"), ("2000", "B"), ("3000", "C")],
        events=[("1000", 1000), ("2000", 2000), ("3000", 3000), ("2000", 4000)],
        last_modified=4000,
    )


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest.fixture
def tmp_snapshot_path(tmp_path: Path) -> Path:
    """提供临时 JSON 快照文件路径"""
    return tmp_path / "snapshots" / "clock-tasks.json"
