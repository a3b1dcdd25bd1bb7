"""SyncConfig -- 同步服务配置加载

从环境变量加载配置，无效值记录 warning 后使用默认值，不阻塞启动。
"""

import os
from typing import Literal, get_args

import structlog
from pydantic import BaseModel, Field

from clocktasks.core.config import POLL_INTERVAL_S, get_db_path, get_snapshot_path

log = structlog.get_logger()

StorageBackendName = Literal["memory", "sqlite", "file"]


class SyncConfig(BaseModel):
    """同步服务配置

    环境变量:
        CLOCKTASKS_LOCAL_BACKEND: 本地存储后端（memory/sqlite/file，默认 sqlite）
        CLOCKTASKS_REMOTE_BACKEND: 远端存储后端（memory/sqlite/file，未设置时不同步）
        CLOCKTASKS_DB_PATH: SQLite 数据库路径
        CLOCKTASKS_SNAPSHOT_PATH: JSON 快照文件路径
        CLOCKTASKS_REMOTE_PATH: 远端存储路径
        CLOCKTASKS_POLL_INTERVAL_S: 远端轮询间隔（秒）
    """

    local_backend: StorageBackendName = Field(default="sqlite", description="本地存储后端")
    remote_backend: StorageBackendName | None = Field(
        default=None,
        description="远端存储后端，None 表示仅本地",
    )
    db_path: str = Field(default_factory=get_db_path, description="SQLite 数据库路径")
    snapshot_path: str = Field(
        default_factory=lambda: str(get_snapshot_path()),
        description="JSON 快照文件路径",
    )
    remote_path: str | None = Field(
        default=None,
        description="远端 sqlite / file 后端的路径，None 时使用 db_path / snapshot_path",
    )
    poll_interval_s: float = Field(
        default=POLL_INTERVAL_S,
        gt=0,
        description="轮询间隔（秒）",
    )


def load_sync_config() -> SyncConfig:
    """从环境变量加载同步配置

    Returns:
        SyncConfig 实例
    """
    kwargs: dict = {}

    for env_var, field in (
        ("CLOCKTASKS_LOCAL_BACKEND", "local_backend"),
        ("CLOCKTASKS_REMOTE_BACKEND", "remote_backend"),
    ):
        if val := os.environ.get(env_var):
            if val in get_args(StorageBackendName):
                kwargs[field] = val
            else:
                log.warning("invalid_backend_config", env_var=env_var, value=val)

    if val := os.environ.get("CLOCKTASKS_REMOTE_PATH"):
        kwargs["remote_path"] = val

    if val := os.environ.get("CLOCKTASKS_POLL_INTERVAL_S"):
        try:
            interval = float(val)
        except ValueError:
            interval = 0.0
        if interval > 0:
            kwargs["poll_interval_s"] = interval
        else:
            log.warning(
                "invalid_poll_interval_config",
                env_var="CLOCKTASKS_POLL_INTERVAL_S",
                value=val,
                fallback=POLL_INTERVAL_S,
            )

    return SyncConfig(**kwargs)
