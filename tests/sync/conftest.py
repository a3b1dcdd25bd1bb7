"""sync 测试配置 -- 可注入故障的内存存储"""

import pytest

from clocktasks.core.clock import Clock, system_clock
from clocktasks.core.models import Snapshot
from clocktasks.core.store import InMemoryStorageProvider, InMemoryStore


class FlakyStorageProvider(InMemoryStorageProvider):
    """按开关模拟 load / save 失败的内存存储"""

    def __init__(self, store: InMemoryStore | None = None, clock: Clock = system_clock) -> None:
        super().__init__(store, clock=clock)
        self.fail_load = False
        self.fail_save = False
        self.save_count = 0

    async def load(self) -> Snapshot:
        if self.fail_load:
            raise OSError("backend unreachable")
        return await super().load()

    async def save(self, snapshot: Snapshot) -> None:
        if self.fail_save:
            raise OSError("backend unreachable")
        self.save_count += 1
        await super().save(snapshot)


@pytest.fixture
def make_provider(clock):
    """创建连接到指定 store 的 FlakyStorageProvider"""

    def _make(store: InMemoryStore | None = None) -> FlakyStorageProvider:
        return FlakyStorageProvider(store, clock=clock)

    return _make
