"""计时统计引擎 -- 从激活事件日志推导单个任务的会话时长

纯函数：不做 I/O，不读取全局时间，now 由调用方显式传入。
会话 = 某任务的一次激活，到全局日志中下一个更晚事件（任意任务）为止；
没有更晚事件时会话仍在进行，结束于 now。
"""

from collections.abc import Iterable, Sequence

from .models.event import ActivationEvent
from .models.task import DerivedTask, TaskStats
from .time_format import to_fixed1


def _session_end(click_ts: int, events: Sequence[ActivationEvent], now: int) -> int:
    """在全局日志中找第一个严格晚于 click_ts 的事件时刻，找不到则为 now"""
    for event in events:
        if event.timestamp > click_ts:
            return event.timestamp
    return now


def calculate_task_stats(
    task_id: str,
    events: Sequence[ActivationEvent],
    now: int,
) -> TaskStats:
    """计算单个任务的当前会话、上次会话与累计时长（秒）

    Args:
        task_id: 任务 ID
        events: 全局激活事件日志（调用方保证插入顺序，不在此重排）
        now: 查询时刻（毫秒）

    Returns:
        TaskStats；任务没有任何事件时全部为 0
    """
    task_clicks = [e for e in events if e.task_id == task_id]
    if not task_clicks:
        return TaskStats()

    total_time = 0
    current_session_time = 0
    last_session_time = 0
    previous_session = 0

    for i, click in enumerate(task_clicks):
        end = _session_end(click.timestamp, events, now)
        # 向下取整到秒；时钟回拨导致的负值不做截断
        duration = (end - click.timestamp) // 1000
        total_time += duration

        if i == len(task_clicks) - 1:
            current_session_time = duration
            last_session_time = previous_session
        else:
            previous_session = duration

    return TaskStats(
        current_session_time=current_session_time,
        last_session_time=last_session_time,
        total_time=total_time,
    )


def get_current_running_task_id(events: Sequence[ActivationEvent]) -> str | None:
    """当前运行中的任务 ID（日志中最后一个事件的任务）

    日志为空或最后一个事件是 "全部停止" 哨兵时返回 None。
    """
    if not events:
        return None
    last = events[-1]
    if last.is_stop:
        return None
    return last.task_id


def calculate_total_elapsed_time(tasks: Iterable[DerivedTask]) -> int:
    """所有任务累计时长之和（秒）"""
    return sum(t.total_time for t in tasks)


def calculate_task_percentage(task_total_time: int, grand_total: int) -> str:
    """任务累计时长占总时长的百分比，保留一位小数"""
    if grand_total == 0:
        return "0"
    return to_fixed1(task_total_time / grand_total * 100)
