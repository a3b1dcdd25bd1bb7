"""存储后端与同步服务工厂

显式依赖注入：每次调用创建新实例，不缓存进程级单例。
"""

from clocktasks.core.clock import Clock, system_clock
from clocktasks.core.config import POLL_INTERVAL_S
from clocktasks.core.store import (
    InMemoryStorageProvider,
    InMemoryStore,
    JsonFileStorageProvider,
    StorageProvider,
    create_sqlite_provider,
)

from .config import SyncConfig
from .exceptions import SyncError, UnknownStorageBackendError
from .hub import SnapshotHub
from .service import SyncService


async def create_storage_provider(
    backend: str,
    path: str | None = None,
    clock: Clock = system_clock,
    poll_interval_s: float = POLL_INTERVAL_S,
    memory_store: InMemoryStore | None = None,
) -> StorageProvider:
    """按名称创建存储后端

    Args:
        backend: memory / sqlite / file
        path: sqlite 数据库路径或 JSON 文件路径（memory 忽略）
        clock: 时钟
        poll_interval_s: 轮询监听间隔
        memory_store: memory 后端共享的内存 store（多客户端模拟）

    Raises:
        UnknownStorageBackendError: 后端名称未知
        SyncError: sqlite / file 后端缺少路径
    """
    if backend == "memory":
        return InMemoryStorageProvider(memory_store, clock=clock)
    if backend not in ("sqlite", "file"):
        raise UnknownStorageBackendError(backend)
    if not path:
        raise SyncError(f"存储后端 {backend} 需要路径", recoverable=False)
    if backend == "sqlite":
        return await create_sqlite_provider(path, clock=clock, poll_interval_s=poll_interval_s)
    return JsonFileStorageProvider(path, clock=clock, poll_interval_s=poll_interval_s)


def _backend_path(backend: str, config: SyncConfig, override: str | None = None) -> str | None:
    if override:
        return override
    if backend == "sqlite":
        return config.db_path
    if backend == "file":
        return config.snapshot_path
    return None


async def create_sync_service(
    config: SyncConfig,
    clock: Clock = system_clock,
    hub: SnapshotHub | None = None,
) -> SyncService:
    """根据配置组装 SyncService（未调用 start()）

    Raises:
        SyncError: 本地与远端解析到同一个存储位置
    """
    local_path = _backend_path(config.local_backend, config)
    remote_path = None
    if config.remote_backend is not None:
        remote_path = _backend_path(config.remote_backend, config, config.remote_path)
        if remote_path is not None and remote_path == local_path:
            raise SyncError(f"本地与远端使用了同一个存储位置: {remote_path}", recoverable=False)

    local = await create_storage_provider(
        config.local_backend, local_path, clock, config.poll_interval_s
    )
    remote = None
    if config.remote_backend is not None:
        remote = await create_storage_provider(
            config.remote_backend, remote_path, clock, config.poll_interval_s
        )
    return SyncService(local, remote, clock=clock, hub=hub)
