"""StorageProvider 的 JSON 文件实现

整个 Snapshot 存为一个 JSON 文件；写入先落到临时文件再原子替换，
避免并发轮询读到半截内容。
"""

import os
from pathlib import Path

import structlog

from ..clock import Clock, system_clock
from ..config import POLL_INTERVAL_S
from ..models.snapshot import Snapshot
from ..serialization import deserialize_snapshot, serialize_snapshot
from .listener import PollingListener
from .protocols import SnapshotCallback

log = structlog.get_logger()


class JsonFileStorageProvider:
    """单文件 JSON Snapshot 存储"""

    def __init__(
        self,
        path: str | Path,
        clock: Clock = system_clock,
        poll_interval_s: float = POLL_INTERVAL_S,
    ) -> None:
        self._path = Path(path)
        self._clock = clock
        self._listener = PollingListener(self.load, poll_interval_s, name="json_file")

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> Snapshot:
        if not self._path.exists():
            return Snapshot.empty(self._clock())
        return deserialize_snapshot(self._path.read_bytes(), self._clock)

    async def save(self, snapshot: Snapshot) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(serialize_snapshot(snapshot), encoding="utf-8")
        os.replace(tmp_path, self._path)

        self._listener.mark_known(snapshot)
        log.debug(
            "file_store_saved",
            path=str(self._path),
            task_count=len(snapshot.tasks),
            event_count=len(snapshot.events),
        )

    async def clear(self) -> None:
        self._path.unlink(missing_ok=True)
        log.info("file_store_cleared", path=str(self._path))

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
