"""Snapshot Domain Model

Snapshot 是持久化与三方合并的基本单元：任务列表 + 事件日志 + 元数据。
所有操作都返回新的 Snapshot（model_copy），从不修改输入。
"""

from pydantic import BaseModel, ConfigDict, Field

from .enums import SortMode
from .event import ActivationEvent
from .task import Task


class Snapshot(BaseModel):
    """完整持久化状态

    events 中引用的 task_id 应当对应 tasks 中的某个任务，
    但推导与合并逻辑都容忍孤立事件。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tasks: list[Task] = Field(default_factory=list, description="任务列表（插入顺序）")
    events: list[ActivationEvent] = Field(
        default_factory=list,
        description="激活事件日志（插入顺序）",
    )
    last_modified: int = Field(default=0, alias="lastModified", description="最后修改时刻（毫秒）")
    sort_mode: SortMode | None = Field(default=None, alias="sortMode", description="排序偏好")

    @classmethod
    def empty(cls, last_modified: int = 0) -> "Snapshot":
        """构造空 Snapshot"""
        return cls(tasks=[], events=[], last_modified=last_modified, sort_mode=SortMode.TOTAL)
