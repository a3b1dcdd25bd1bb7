"""Task Domain Model

Task 是唯一需要持久化的任务身份记录，只有 id 和 name。
运行状态和时长全部从激活事件日志推导（DerivedTask），不落盘。
"""

from pydantic import BaseModel, ConfigDict, Field


class Task(BaseModel):
    """持久化任务记录

    id 在创建时由时钟值生成，之后不可变；name 写入时去除首尾空白。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="任务 ID（创建时刻的毫秒时间戳字符串）")
    name: str = Field(description="任务名称")


class TaskStats(BaseModel):
    """单个任务的计时统计（单位：秒）"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    current_session_time: int = Field(
        default=0, alias="currentSessionTime", description="最近一次会话时长"
    )
    last_session_time: int = Field(
        default=0, alias="lastSessionTime", description="上一次已结束会话时长"
    )
    total_time: int = Field(default=0, alias="totalTime", description="累计时长")


class DerivedTask(BaseModel):
    """推导视图 -- 每次查询从 Snapshot + now 重新计算，不存储"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    is_running: bool = Field(default=False, alias="isRunning")
    current_session_time: int = Field(default=0, alias="currentSessionTime")
    last_session_time: int = Field(default=0, alias="lastSessionTime")
    total_time: int = Field(default=0, alias="totalTime")
