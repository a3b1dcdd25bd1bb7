"""三方合并结果模型

冲突不是错误，而是交给调用方（UI / 同步服务）决定如何处理的数据。
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import ConflictType
from .snapshot import Snapshot
from .task import Task


class MergeConflict(BaseModel):
    """无法自动解决的冲突：同名任务在两侧被不同地修改"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: ConflictType = Field(default=ConflictType.TASK_MODIFIED)
    task_name: str = Field(alias="taskName")
    local_version: Task = Field(alias="localVersion")
    server_version: Task = Field(alias="serverVersion")


class MergeSummary(BaseModel):
    """合并统计（相对本地 Snapshot，仅供展示）"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tasks_kept: int = Field(default=0, alias="tasksKept")
    tasks_added: int = Field(default=0, alias="tasksAdded")
    tasks_removed: int = Field(default=0, alias="tasksRemoved")
    events_added: int = Field(default=0, alias="eventsAdded")
    events_removed: int = Field(default=0, alias="eventsRemoved")


class MergeResult(BaseModel):
    """reconcile() 的返回值"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data: Snapshot
    conflicts: list[MergeConflict] = Field(default_factory=list)
    summary: MergeSummary = Field(default_factory=MergeSummary)

    @computed_field(alias="hasTrueConflicts")
    @property
    def has_true_conflicts(self) -> bool:
        return len(self.conflicts) > 0
