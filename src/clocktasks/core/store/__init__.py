"""clocktasks Core Store -- Snapshot 存储后端

内存 / SQLite / JSON 文件三种实现共享 StorageProvider 接口。
"""

from .file_store import JsonFileStorageProvider
from .listener import PollingListener, fingerprint
from .memory_store import InMemoryStorageProvider, InMemoryStore
from .protocols import SnapshotCallback, StorageProvider
from .sqlite_init import init_db
from .sqlite_store import SqliteStorageProvider, create_sqlite_provider

__all__ = [
    "StorageProvider",
    "SnapshotCallback",
    "PollingListener",
    "fingerprint",
    "InMemoryStore",
    "InMemoryStorageProvider",
    "SqliteStorageProvider",
    "create_sqlite_provider",
    "JsonFileStorageProvider",
    "init_db",
]
