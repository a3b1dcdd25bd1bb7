"""配置常量模块 -- 可通过环境变量覆盖

包含数据目录、SQLite 路径、JSON 快照文件路径等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("CLOCKTASKS_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "CLOCKTASKS_DB_PATH",
        str(_get_base_dir() / "sqlite" / "clocktasks.db"),
    )


def get_snapshot_path() -> Path:
    """获取 JSON 快照文件路径"""
    return Path(
        os.environ.get(
            "CLOCKTASKS_SNAPSHOT_PATH",
            str(_get_base_dir() / "clock-tasks.json"),
        )
    )


# 轮询型监听器的默认检查间隔（秒），运行时由 CLOCKTASKS_POLL_INTERVAL_S 覆盖
POLL_INTERVAL_S: float = 10.0

# 导出文件默认名称
EXPORT_FILE_NAME: str = "clock-tasks.json"
