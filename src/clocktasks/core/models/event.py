"""ActivationEvent Domain Model

事件日志按插入顺序追加，是所有计时数据的唯一来源。
timestamp 为毫秒整数；推导时长时除以 1000 并向下取整。
"""

from pydantic import BaseModel, ConfigDict, Field

# "全部停止" 哨兵任务 ID，不会与任何真实任务 ID 冲突（真实 ID 为纯数字字符串）
STOP_SENTINEL_TASK_ID = "__stop__"


class ActivationEvent(BaseModel):
    """任务激活事件：task_id 在 timestamp 时刻成为当前活动任务"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    task_id: str = Field(alias="taskId", description="被激活的任务 ID")
    timestamp: int = Field(description="激活时刻（毫秒）")

    @property
    def is_stop(self) -> bool:
        """是否为 "全部停止" 哨兵事件"""
        return self.task_id == STOP_SENTINEL_TASK_ID
