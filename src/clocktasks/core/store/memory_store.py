"""内存存储实现

InMemoryStore 持有共享数据，多个 InMemoryStorageProvider 作为客户端连接到同一个 store，
模拟多台设备访问同一个远端：一个客户端写入后，其他正在监听的客户端收到推送。
"""

import asyncio

import structlog

from ..clock import Clock, system_clock
from ..models.snapshot import Snapshot
from .listener import fingerprint
from .protocols import SnapshotCallback

log = structlog.get_logger()


class InMemoryStore:
    """共享内存数据 + 推送订阅"""

    def __init__(self, initial: Snapshot | None = None) -> None:
        self.data: Snapshot | None = initial
        self._subscribers: dict[int, SnapshotCallback] = {}
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, client_id: int, callback: SnapshotCallback) -> None:
        self._subscribers[client_id] = callback

    def unsubscribe(self, client_id: int) -> None:
        self._subscribers.pop(client_id, None)

    def is_subscribed(self, client_id: int) -> bool:
        return client_id in self._subscribers

    def write(self, writer_id: int, snapshot: Snapshot | None) -> None:
        """写入并向其他客户端推送（内容未变化时不推送）"""
        changed = (
            self.data is None
            or snapshot is None
            or fingerprint(self.data) != fingerprint(snapshot)
        )
        self.data = snapshot
        if not changed or snapshot is None:
            return

        for client_id, callback in list(self._subscribers.items()):
            if client_id == writer_id:
                continue
            task = asyncio.get_running_loop().create_task(callback(snapshot))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def wait_idle(self) -> None:
        """等待所有已派发的推送回调完成"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class InMemoryStorageProvider:
    """StorageProvider 的内存实现（测试 / 访客模式）"""

    def __init__(self, store: InMemoryStore | None = None, clock: Clock = system_clock) -> None:
        self._store = store if store is not None else InMemoryStore()
        self._clock = clock

    @property
    def store(self) -> InMemoryStore:
        return self._store

    async def load(self) -> Snapshot:
        if self._store.data is None:
            return Snapshot.empty(self._clock())
        # 冻结模型共享安全，但列表需要复制，避免调用方修改影响存储
        return self._store.data.model_copy(deep=True)

    async def save(self, snapshot: Snapshot) -> None:
        self._store.write(id(self), snapshot.model_copy(deep=True))
        log.debug(
            "memory_store_saved",
            task_count=len(snapshot.tasks),
            event_count=len(snapshot.events),
        )

    async def clear(self) -> None:
        self._store.write(id(self), None)
        log.debug("memory_store_cleared")

    def start_listening(self, callback: SnapshotCallback) -> None:
        self._store.subscribe(id(self), callback)

    def stop_listening(self) -> None:
        self._store.unsubscribe(id(self))

    def is_listening(self) -> bool:
        return self._store.is_subscribed(id(self))

    async def close(self) -> None:
        self.stop_listening()
