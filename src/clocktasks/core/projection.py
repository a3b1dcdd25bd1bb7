"""任务投影 -- 将 Stats Engine 应用到所有任务，生成 DerivedTask 视图

DerivedTask 每次查询重新计算，从不存储或就地修改。
输出顺序与输入 tasks 的插入顺序一致，排序交给 sort_tasks()。
"""

from collections.abc import Iterable, Sequence

from .models.enums import SortMode
from .models.event import ActivationEvent
from .models.snapshot import Snapshot
from .models.task import DerivedTask, Task
from .stats import calculate_task_stats, calculate_total_elapsed_time


# derive_task 未显式给出运行中任务时，从事件日志推断
_UNSET = object()


def _last_task_id(events: Sequence[ActivationEvent]) -> str | None:
    return events[-1].task_id if events else None


def derive_task(
    task: Task,
    events: Sequence[ActivationEvent],
    now: int,
    running_task_id: str | None | object = _UNSET,
) -> DerivedTask:
    """将单个 Task 转换为带计时数据的 DerivedTask

    运行中的任务只展示当前会话（上次会话已计入累计时长）；
    未运行的任务只展示上次会话，即它最近一次已经结束的会话。
    running_task_id 显式传入 None 表示没有任务在运行。
    """
    if running_task_id is _UNSET:
        running_task_id = _last_task_id(events)
    is_running = task.id == running_task_id
    stats = calculate_task_stats(task.id, events, now)

    if is_running:
        return DerivedTask(
            id=task.id,
            name=task.name,
            is_running=True,
            current_session_time=stats.current_session_time,
            last_session_time=0,
            total_time=stats.total_time,
        )

    # 任务不在运行时，它最后一次激活开启的会话已被其他事件结束
    return DerivedTask(
        id=task.id,
        name=task.name,
        is_running=False,
        current_session_time=0,
        last_session_time=stats.current_session_time,
        total_time=stats.total_time,
    )


def project_all(
    tasks: Iterable[Task],
    events: Sequence[ActivationEvent],
    now: int,
) -> list[DerivedTask]:
    """按 tasks 顺序投影所有任务"""
    running_task_id = _last_task_id(events)
    return [derive_task(t, events, now, running_task_id) for t in tasks]


def get_all_tasks(snapshot: Snapshot, now: int) -> list[DerivedTask]:
    """Snapshot 上的全部任务视图"""
    return project_all(snapshot.tasks, snapshot.events, now)


def get_task(task_id: str, snapshot: Snapshot, now: int) -> DerivedTask | None:
    """查询单个任务视图，不存在时返回 None"""
    for task in snapshot.tasks:
        if task.id == task_id:
            return derive_task(task, snapshot.events, now)
    return None


def task_exists(task_id: str, snapshot: Snapshot) -> bool:
    return any(t.id == task_id for t in snapshot.tasks)


def get_total_elapsed_time(snapshot: Snapshot, now: int) -> int:
    """所有任务累计时长之和（秒）"""
    return calculate_total_elapsed_time(get_all_tasks(snapshot, now))


def sort_tasks(tasks: Iterable[DerivedTask], sort_mode: SortMode | None) -> list[DerivedTask]:
    """按排序偏好返回新列表

    - total: 累计时长降序（相同时保持原顺序）
    - alphabetical: 名称不区分大小写升序
    """
    if sort_mode == SortMode.ALPHABETICAL:
        return sorted(tasks, key=lambda t: t.name.casefold())
    return sorted(tasks, key=lambda t: t.total_time, reverse=True)
