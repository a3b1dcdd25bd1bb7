"""三方合并 -- 以 baseline 为参照合并本地与服务端 Snapshot

策略：
1. 任务按名称（而不是 ID）合并，两侧各自新增的任务可以直接组合
2. 事件日志取并集，按 (task_id, timestamp) 去重后按时间升序排列
3. 只有同一任务在两侧被不同地修改时才记为冲突，默认采用本地版本
4. baseline 中存在、任一侧缺失的任务视为被删除，删除优先于修改
"""

from collections.abc import Iterable

import structlog

from .clock import Clock, system_clock
from .models.enums import ConflictChoice
from .models.event import ActivationEvent
from .models.merge import MergeConflict, MergeResult, MergeSummary
from .models.snapshot import Snapshot
from .models.task import Task

log = structlog.get_logger()


def _by_name(tasks: Iterable[Task]) -> dict[str, Task]:
    # 同名任务以最后出现者为准
    return {t.name: t for t in tasks}


def _merge_task(
    name: str,
    base: Task | None,
    local: Task | None,
    server: Task | None,
    conflicts: list[MergeConflict],
) -> Task | None:
    """对单个任务名做三方裁决，返回合并结果（None 表示删除）"""
    if base is None:
        if local is not None and server is None:
            log.debug("task_added_locally", task_name=name)
            return local
        if local is None and server is not None:
            log.debug("task_added_on_server", task_name=name)
            return server
        if local is not None and server is not None:
            if local == server:
                log.debug("task_added_identically", task_name=name)
                return local
            log.warning("task_created_differently_on_both_sides", task_name=name)
            conflicts.append(
                MergeConflict(task_name=name, local_version=local, server_version=server)
            )
            return local
        return None

    if local is None:
        # 本地删除优先，不论服务端是否修改
        log.debug("task_deleted_locally", task_name=name, server_exists=server is not None)
        return None
    if server is None:
        log.debug("task_deleted_on_server", task_name=name)
        return None

    if local == server:
        return local
    if base == server:
        log.debug("task_changed_locally", task_name=name)
        return local
    if base == local:
        log.debug("task_changed_on_server", task_name=name)
        return server

    log.warning("task_modified_on_both_sides", task_name=name)
    conflicts.append(MergeConflict(task_name=name, local_version=local, server_version=server))
    return local


def merge_events(*logs: Iterable[ActivationEvent]) -> list[ActivationEvent]:
    """合并事件日志：按 (task_id, timestamp) 去重，按 timestamp 稳定升序"""
    seen: dict[tuple[str, int], ActivationEvent] = {}
    for events in logs:
        for event in events:
            seen.setdefault((event.task_id, event.timestamp), event)
    return sorted(seen.values(), key=lambda e: e.timestamp)


def reconcile(
    local: Snapshot,
    server: Snapshot,
    baseline: Snapshot | None,
    clock: Clock = system_clock,
) -> MergeResult:
    """三方合并

    Args:
        local: 本地 Snapshot
        server: 服务端 Snapshot
        baseline: 双方分叉前最后一次一致的 Snapshot，None 视为空
        clock: 时钟，用于 last_modified

    Returns:
        MergeResult；冲突默认采用本地版本，冲突列表交给调用方决定是否提示
    """
    base = baseline if baseline is not None else Snapshot()
    log.debug(
        "reconcile_started",
        local_tasks=len(local.tasks),
        local_events=len(local.events),
        server_tasks=len(server.tasks),
        server_events=len(server.events),
        baseline_tasks=len(base.tasks),
        has_baseline=baseline is not None,
    )

    base_tasks = _by_name(base.tasks)
    local_tasks = _by_name(local.tasks)
    server_tasks = _by_name(server.tasks)

    # 有序并集：baseline -> local -> server
    all_names = dict.fromkeys([*base_tasks, *local_tasks, *server_tasks])

    conflicts: list[MergeConflict] = []
    merged_tasks: list[Task] = []
    for name in all_names:
        merged = _merge_task(
            name,
            base_tasks.get(name),
            local_tasks.get(name),
            server_tasks.get(name),
            conflicts,
        )
        if merged is not None:
            merged_tasks.append(merged)

    merged_events = merge_events(local.events, server.events)

    summary = MergeSummary(
        tasks_kept=len(merged_tasks),
        tasks_added=max(0, len(merged_tasks) - len(local.tasks)),
        tasks_removed=max(0, len(local.tasks) - len(merged_tasks)),
        events_added=max(0, len(merged_events) - len(local.events)),
        events_removed=max(0, len(local.events) - len(merged_events)),
    )

    data = Snapshot(
        tasks=merged_tasks,
        events=merged_events,
        last_modified=max(local.last_modified, server.last_modified, clock()),
        sort_mode=local.sort_mode or server.sort_mode,
    )

    log.info(
        "reconcile_completed",
        tasks_kept=summary.tasks_kept,
        events_added=summary.events_added,
        conflict_count=len(conflicts),
    )
    if conflicts:
        log.warning(
            "reconcile_unresolved_conflicts",
            task_names=[c.task_name for c in conflicts],
        )

    return MergeResult(data=data, conflicts=conflicts, summary=summary)


def resolve_conflicts(
    result: MergeResult,
    choices: dict[str, ConflictChoice],
    clock: Clock = system_clock,
) -> Snapshot:
    """按用户选择处理冲突，返回最终 Snapshot

    choices 以任务名为键；未给出选择的冲突保持合并时的默认（本地版本）。
    选择服务端版本时，按本地版本的 ID 定位并替换；服务端版本 ID 不同时，
    本地 ID 下的事件会迁移到服务端 ID 上，保证计时历史不丢失。
    """
    replacements: dict[str, Task] = {}
    for conflict in result.conflicts:
        if choices.get(conflict.task_name) == ConflictChoice.SERVER:
            replacements[conflict.local_version.id] = conflict.server_version

    if not replacements:
        return result.data

    tasks = [replacements.get(t.id, t) for t in result.data.tasks]
    events = [
        e.model_copy(update={"task_id": replacements[e.task_id].id})
        if e.task_id in replacements
        else e
        for e in result.data.events
    ]
    log.info("conflicts_resolved", server_choices=len(replacements))
    return result.data.model_copy(
        update={
            "tasks": tasks,
            "events": merge_events(events),
            "last_modified": max(result.data.last_modified, clock()),
        }
    )
