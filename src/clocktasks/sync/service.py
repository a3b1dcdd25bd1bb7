"""SyncService -- 本地状态 + 远端同步编排

流程：
1. start(): 读取本地与远端，按 baseline 三方合并，写回两端，开始监听远端
2. apply(): 在当前状态上执行纯函数操作，写本地 + 远端；远端已被其他设备修改时先合并再写
3. handle_remote_snapshot(): 远端变化时与本地三方合并

baseline 表示最后一次确认两端一致的 Snapshot；远端写入失败时不推进 baseline，
下一次合并仍以旧 baseline 为参照。
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import structlog

from clocktasks.core.clock import Clock, system_clock
from clocktasks.core.config import EXPORT_FILE_NAME
from clocktasks.core.models import (
    ConflictChoice,
    DerivedTask,
    MergeResult,
    Snapshot,
)
from clocktasks.core.projection import get_all_tasks, sort_tasks
from clocktasks.core.reconciliation import reconcile, resolve_conflicts
from clocktasks.core.serialization import export_snapshot, import_snapshot
from clocktasks.core.store import StorageProvider, fingerprint

from .exceptions import StorageProviderError
from .hub import SnapshotHub

log = structlog.get_logger()


class SyncService:
    """持有当前 Snapshot 并负责本地 / 远端持久化与合并"""

    def __init__(
        self,
        local: StorageProvider,
        remote: StorageProvider | None = None,
        clock: Clock = system_clock,
        hub: SnapshotHub | None = None,
        baseline: Snapshot | None = None,
    ) -> None:
        self._local = local
        self._remote = remote
        self._clock = clock
        self._hub = hub if hub is not None else SnapshotHub()
        self._baseline = baseline
        self._state = Snapshot.empty(clock())
        self._last_result: MergeResult | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> Snapshot:
        return self._state

    @property
    def baseline(self) -> Snapshot | None:
        return self._baseline

    @property
    def local(self) -> StorageProvider:
        return self._local

    @property
    def remote(self) -> StorageProvider | None:
        return self._remote

    @property
    def hub(self) -> SnapshotHub:
        return self._hub

    @property
    def last_result(self) -> MergeResult | None:
        """最近一次合并结果（含未解决冲突）"""
        return self._last_result

    async def start(self) -> Snapshot:
        """加载并完成首次同步

        Raises:
            StorageProviderError: 本地存储读取失败
        """
        async with self._lock:
            try:
                self._state = await self._local.load()
            except Exception as e:
                raise StorageProviderError("local", "load", e) from e
            log.info(
                "sync_local_loaded",
                task_count=len(self._state.tasks),
                event_count=len(self._state.events),
            )

            if self._remote is not None:
                await self._persist()
                self._remote.start_listening(self.handle_remote_snapshot)

            self._hub.broadcast(self._state)
            return self._state

    async def stop(self) -> None:
        """停止监听并关闭本地 / 远端存储"""
        async with self._lock:
            if self._remote is not None:
                await self._remote.close()
            await self._local.close()
        log.info("sync_stopped")

    async def apply(self, operation: Callable[..., Snapshot], *args) -> Snapshot:
        """执行纯函数操作并持久化

        Args:
            operation: clocktasks.core.operations 中的操作，签名 (*args, state, clock)
            *args: 操作在 state 之前的参数

        Returns:
            新的 Snapshot；操作为 no-op 时返回原 Snapshot 且不写存储
        """
        async with self._lock:
            new_state = operation(*args, self._state, self._clock)
            if new_state is self._state:
                log.debug("sync_operation_noop", operation=operation.__name__)
                return self._state

            log.info("sync_operation_applied", operation=operation.__name__)
            self._state = new_state
            await self._persist()
            self._hub.broadcast(self._state)
            return self._state

    async def handle_remote_snapshot(self, server: Snapshot) -> MergeResult | None:
        """远端变化回调：与本地三方合并

        Returns:
            MergeResult；远端内容与本地一致时返回 None
        """
        async with self._lock:
            if fingerprint(server) == fingerprint(self._state):
                log.debug("sync_remote_unchanged")
                self._baseline = self._state
                return None

            result = self._merge(server)
            await self._persist()
            self._hub.broadcast(self._state)
            return result

    async def resolve(self, choices: dict[str, ConflictChoice]) -> Snapshot:
        """按用户选择处理最近一次合并的冲突并持久化"""
        async with self._lock:
            if self._last_result is None or not self._last_result.has_true_conflicts:
                return self._state

            self._state = resolve_conflicts(self._last_result, choices, self._clock)
            self._last_result = None
            await self._persist()
            self._hub.broadcast(self._state)
            return self._state

    def tasks(self, now: int | None = None) -> list[DerivedTask]:
        """当前状态下按排序偏好排列的任务视图"""
        at = now if now is not None else self._clock()
        return sort_tasks(get_all_tasks(self._state, at), self._state.sort_mode)

    async def export_to(self, directory: str | Path) -> Path:
        """导出当前状态到目录下的 JSON 文件"""
        return export_snapshot(Path(directory) / EXPORT_FILE_NAME, self._state)

    async def import_from(self, path: str | Path) -> Snapshot:
        """从 JSON 文件导入并整体替换当前状态（会同步到所有设备）"""
        async with self._lock:
            self._state = import_snapshot(path, self._clock)
            await self._persist()
            self._hub.broadcast(self._state)
            return self._state

    def _merge(self, server: Snapshot) -> MergeResult:
        result = reconcile(self._state, server, self._baseline, self._clock)
        self._state = result.data
        self._last_result = result
        return result

    async def _persist(self) -> None:
        """写本地，再写远端

        写远端前先读取远端当前内容；它已偏离 baseline（其他设备写入过）时
        先三方合并，避免覆盖掉尚未收到推送的远端变更。
        远端读写失败时降级为仅本地，不推进 baseline。
        """
        server = None
        if self._remote is not None:
            try:
                server = await self._remote.load()
            except Exception as e:
                log.warning("sync_remote_load_failed_fallback_local", error=str(e))
            else:
                if self._baseline is None or fingerprint(server) != fingerprint(self._baseline):
                    log.info("sync_remote_diverged", task_count=len(server.tasks))
                    self._merge(server)

        try:
            await self._local.save(self._state)
        except Exception as e:
            raise StorageProviderError("local", "save", e) from e

        if server is None:
            return

        try:
            await self._remote.save(self._state)
        except Exception as e:
            log.warning("sync_remote_save_failed_fallback_local", error=str(e))
            return
        self._baseline = self._state
