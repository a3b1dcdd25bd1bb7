"""clocktasks Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import ConflictChoice, ConflictType, SortMode
from .event import STOP_SENTINEL_TASK_ID, ActivationEvent
from .merge import MergeConflict, MergeResult, MergeSummary
from .snapshot import Snapshot
from .task import DerivedTask, Task, TaskStats

__all__ = [
    # 枚举
    "SortMode",
    "ConflictType",
    "ConflictChoice",
    # Task
    "Task",
    "TaskStats",
    "DerivedTask",
    # Event
    "ActivationEvent",
    "STOP_SENTINEL_TASK_ID",
    # Snapshot
    "Snapshot",
    # Merge
    "MergeConflict",
    "MergeSummary",
    "MergeResult",
]
