"""clocktasks Core -- 计时推导引擎与三方合并

框架无关的纯逻辑层：
- stats / projection: 从激活事件日志推导任务时长
- operations: 纯函数状态变更
- reconciliation: 本地 / 服务端 / baseline 三方合并
- serialization: Snapshot JSON 编解码
"""

from .clock import Clock, ManualClock, system_clock
from .models import (
    STOP_SENTINEL_TASK_ID,
    ActivationEvent,
    ConflictChoice,
    ConflictType,
    DerivedTask,
    MergeConflict,
    MergeResult,
    MergeSummary,
    Snapshot,
    SortMode,
    Task,
    TaskStats,
)
from .operations import (
    add_and_start_task,
    add_task,
    delete_all_tasks,
    delete_task,
    pause_current_task,
    reset_all_tasks,
    set_sort_mode,
    start_task,
    stop_all_tasks,
    update_task_name,
)
from .projection import (
    derive_task,
    get_all_tasks,
    get_task,
    get_total_elapsed_time,
    project_all,
    sort_tasks,
    task_exists,
)
from .reconciliation import merge_events, reconcile, resolve_conflicts
from .serialization import (
    deserialize_snapshot,
    export_snapshot,
    import_snapshot,
    serialize_snapshot,
    validate_snapshot,
)
from .stats import (
    calculate_task_percentage,
    calculate_task_stats,
    calculate_total_elapsed_time,
    get_current_running_task_id,
)
from .time_format import format_time

__all__ = [
    # 时钟
    "Clock",
    "ManualClock",
    "system_clock",
    # 模型
    "Task",
    "TaskStats",
    "DerivedTask",
    "ActivationEvent",
    "STOP_SENTINEL_TASK_ID",
    "Snapshot",
    "SortMode",
    "ConflictType",
    "ConflictChoice",
    "MergeConflict",
    "MergeSummary",
    "MergeResult",
    # 统计
    "calculate_task_stats",
    "get_current_running_task_id",
    "calculate_total_elapsed_time",
    "calculate_task_percentage",
    # 投影
    "derive_task",
    "project_all",
    "get_all_tasks",
    "get_task",
    "task_exists",
    "get_total_elapsed_time",
    "sort_tasks",
    # 操作
    "add_task",
    "add_and_start_task",
    "start_task",
    "update_task_name",
    "delete_task",
    "delete_all_tasks",
    "reset_all_tasks",
    "stop_all_tasks",
    "pause_current_task",
    "set_sort_mode",
    # 合并
    "reconcile",
    "resolve_conflicts",
    "merge_events",
    # 序列化
    "serialize_snapshot",
    "deserialize_snapshot",
    "validate_snapshot",
    "export_snapshot",
    "import_snapshot",
    # 格式化
    "format_time",
]
