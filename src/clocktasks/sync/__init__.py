"""clocktasks Sync -- 存储后端编排与多设备同步

SyncService 及其配置、工厂、异常的公开导出。
"""

from .config import SyncConfig, load_sync_config
from .exceptions import StorageProviderError, SyncError, UnknownStorageBackendError
from .factory import create_storage_provider, create_sync_service
from .hub import SnapshotHub
from .logging_config import setup_logging
from .service import SyncService

__all__ = [
    "SyncService",
    "SnapshotHub",
    "SyncConfig",
    "load_sync_config",
    "create_storage_provider",
    "create_sync_service",
    "setup_logging",
    "SyncError",
    "StorageProviderError",
    "UnknownStorageBackendError",
]
