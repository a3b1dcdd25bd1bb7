"""轮询式变更监听

按固定间隔重新 load()，仅在任务 / 事件内容变化时回调。
单次轮询失败只记录日志，不中断监听。
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from ..models.snapshot import Snapshot
from .protocols import SnapshotCallback

log = structlog.get_logger()


def fingerprint(snapshot: Snapshot) -> str:
    """内容指纹：忽略 last_modified（空后端每次 load 都会得到新的时刻）"""
    return snapshot.model_dump_json(by_alias=True, exclude={"last_modified"})


class PollingListener:
    """基于 asyncio.Task 的轮询监听器"""

    def __init__(
        self,
        load: Callable[[], Awaitable[Snapshot]],
        interval_s: float,
        name: str = "storage",
    ) -> None:
        self._load = load
        self._interval_s = interval_s
        self._name = name
        self._callback: SnapshotCallback | None = None
        self._task: asyncio.Task | None = None
        self._last_known: str | None = None

    def start(self, callback: SnapshotCallback) -> None:
        """启动轮询（需要在运行中的事件循环内调用）"""
        self.stop()
        self._callback = callback
        self._last_known = None
        self._task = asyncio.get_running_loop().create_task(self._run())
        log.info("listener_started", provider=self._name, interval_s=self._interval_s)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            log.info("listener_stopped", provider=self._name)
        self._callback = None

    def is_running(self) -> bool:
        return self._task is not None

    def mark_known(self, snapshot: Snapshot) -> None:
        """记录本端刚写入的内容，避免把自己的写入当作外部变更回调"""
        self._last_known = fingerprint(snapshot)

    async def poll_once(self) -> bool:
        """执行一次轮询

        Returns:
            True 如果检测到变更并已回调
        """
        if self._callback is None:
            return False

        snapshot = await self._load()
        content = fingerprint(snapshot)
        if content == self._last_known:
            return False

        self._last_known = content
        log.debug(
            "listener_change_detected",
            provider=self._name,
            task_count=len(snapshot.tasks),
            event_count=len(snapshot.events),
        )
        await self._callback(snapshot)
        return True

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                log.exception("listener_poll_failed", provider=self._name)
            await asyncio.sleep(self._interval_s)
