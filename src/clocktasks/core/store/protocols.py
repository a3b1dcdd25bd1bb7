"""StorageProvider Protocol 接口定义

所有存储后端（内存 / SQLite / JSON 文件）实现同一组能力：
load / save / clear 以及订阅式的变更监听。
核心引擎只依赖此接口，从不依赖具体后端。
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from ..models.snapshot import Snapshot

# 监听回调：收到后端上的新 Snapshot
SnapshotCallback = Callable[[Snapshot], Awaitable[None]]


class StorageProvider(Protocol):
    """Snapshot 存储接口"""

    async def load(self) -> Snapshot:
        """读取 Snapshot；后端为空时返回空 Snapshot"""
        ...

    async def save(self, snapshot: Snapshot) -> None:
        """整体覆盖写入 Snapshot"""
        ...

    async def clear(self) -> None:
        """删除后端上的全部数据"""
        ...

    def start_listening(self, callback: SnapshotCallback) -> None:
        """开始监听后端变更，已有监听时先停止旧监听"""
        ...

    def stop_listening(self) -> None:
        """停止监听（未监听时为 no-op）"""
        ...

    def is_listening(self) -> bool:
        """是否正在监听"""
        ...

    async def close(self) -> None:
        """停止监听并释放连接等资源"""
        ...
