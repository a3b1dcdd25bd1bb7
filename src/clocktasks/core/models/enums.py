"""枚举定义

包含排序模式 SortMode、合并冲突类型 ConflictType 以及冲突处理选项 ConflictChoice。
"""

from enum import StrEnum


class SortMode(StrEnum):
    """任务列表排序模式（作为 UI 偏好随 Snapshot 一起持久化）"""

    TOTAL = "total"
    ALPHABETICAL = "alphabetical"


class ConflictType(StrEnum):
    """三方合并冲突类型"""

    # 同一任务在本地和服务端被不同地修改（或独立创建但内容不同）
    TASK_MODIFIED = "task-modified"


class ConflictChoice(StrEnum):
    """用户对单个冲突的处理选择"""

    LOCAL = "local"
    SERVER = "server"
