"""状态变更操作 -- 纯函数，(参数..., state, clock) -> 新 state

每个操作返回新的 Snapshot，从不修改输入；
产生变更的操作都会把 last_modified 设为 clock()。
无效输入（空白名称、空日志）直接返回原 state 对象，不抛异常。
"""

import structlog

from .clock import Clock, system_clock
from .models.enums import SortMode
from .models.event import STOP_SENTINEL_TASK_ID, ActivationEvent
from .models.snapshot import Snapshot
from .models.task import Task

log = structlog.get_logger()


def add_task(name: str, state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """追加新任务（不启动）

    任务 ID 取创建时刻的时钟值字符串；同一时钟刻度内创建的两个任务会得到相同 ID。
    """
    trimmed = name.strip()
    if not trimmed:
        log.debug("add_task_blank_name_ignored")
        return state

    timestamp = clock()
    task = Task(id=str(timestamp), name=trimmed)
    return state.model_copy(
        update={"tasks": [*state.tasks, task], "last_modified": timestamp}
    )


def add_and_start_task(name: str, state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """追加新任务并立即激活"""
    trimmed = name.strip()
    if not trimmed:
        log.debug("add_task_blank_name_ignored")
        return state

    timestamp = clock()
    task_id = str(timestamp)
    return state.model_copy(
        update={
            "tasks": [*state.tasks, Task(id=task_id, name=trimmed)],
            "events": [*state.events, ActivationEvent(task_id=task_id, timestamp=timestamp)],
            "last_modified": timestamp,
        }
    )


def start_task(task_id: str, state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """激活任务（task_id 不要求存在于 tasks 中）"""
    timestamp = clock()
    return state.model_copy(
        update={
            "events": [*state.events, ActivationEvent(task_id=task_id, timestamp=timestamp)],
            "last_modified": timestamp,
        }
    )


def update_task_name(
    task_id: str,
    name: str,
    state: Snapshot,
    clock: Clock = system_clock,
) -> Snapshot:
    """重命名任务；允许改为空名称，task_id 不存在时为 no-op"""
    if not any(t.id == task_id for t in state.tasks):
        return state

    tasks = [
        t.model_copy(update={"name": name.strip()}) if t.id == task_id else t
        for t in state.tasks
    ]
    return state.model_copy(update={"tasks": tasks, "last_modified": clock()})


def delete_task(task_id: str, state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """删除任务及其全部激活事件（只按真实 ID 清理，哨兵事件保留）"""
    tasks = [t for t in state.tasks if t.id != task_id]
    events = [e for e in state.events if e.task_id != task_id]
    if len(tasks) == len(state.tasks) and len(events) == len(state.events):
        return state

    return state.model_copy(
        update={"tasks": tasks, "events": events, "last_modified": clock()}
    )


def delete_all_tasks(state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """清空任务和事件（排序偏好保留）"""
    return state.model_copy(update={"tasks": [], "events": [], "last_modified": clock()})


def reset_all_tasks(state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """清空事件日志，保留任务；所有时长归零"""
    return state.model_copy(update={"events": [], "last_modified": clock()})


def stop_all_tasks(state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """追加 "全部停止" 哨兵事件，使没有任务处于运行状态，同时保留历史"""
    if not state.events:
        return state

    timestamp = clock()
    return state.model_copy(
        update={
            "events": [
                *state.events,
                ActivationEvent(task_id=STOP_SENTINEL_TASK_ID, timestamp=timestamp),
            ],
            "last_modified": timestamp,
        }
    )


def pause_current_task(state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """撤销最近一次激活（移除日志中最后一个事件）"""
    if not state.events:
        return state
    return state.model_copy(update={"events": state.events[:-1], "last_modified": clock()})


def set_sort_mode(sort_mode: SortMode, state: Snapshot, clock: Clock = system_clock) -> Snapshot:
    """更新排序偏好"""
    if state.sort_mode == sort_mode:
        return state
    return state.model_copy(update={"sort_mode": sort_mode, "last_modified": clock()})
