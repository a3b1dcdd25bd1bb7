"""Snapshot 序列化 -- JSON 编解码与容错校验

反序列化从不抛异常：解析失败或字段缺失时退化为空状态，
单条畸形的任务 / 事件被丢弃而不是让整个 Snapshot 失效。
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from .clock import Clock, system_clock
from .models.enums import SortMode
from .models.event import ActivationEvent
from .models.snapshot import Snapshot
from .models.task import Task

log = structlog.get_logger()

# 事件日志在历史版本中使用过的键名（按优先级）
_EVENT_KEYS = ("events", "history", "clickHistory")


def serialize_snapshot(snapshot: Snapshot) -> str:
    """序列化为 camelCase JSON 字符串"""
    return snapshot.model_dump_json(by_alias=True)


def _parse_items(raw: Any, model: type[Task] | type[ActivationEvent], kind: str) -> list:
    if not isinstance(raw, list):
        return []
    items = []
    for entry in raw:
        try:
            items.append(model.model_validate(entry))
        except ValidationError as e:
            log.warning("snapshot_entry_dropped", kind=kind, entry=entry, error_count=e.error_count())
    return items


def _parse_last_modified(value: Any, clock: Clock) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return clock()


def _parse_sort_mode(value: Any) -> SortMode:
    if isinstance(value, str) and value in SortMode._value2member_map_:
        return SortMode(value)
    return SortMode.TOTAL


def validate_snapshot(data: Any, clock: Clock = system_clock) -> Snapshot:
    """将任意已解析的数据规范化为合法 Snapshot

    - tasks / events 非列表 -> []
    - 畸形条目逐条丢弃
    - lastModified 缺失或非整数 -> clock()
    - sortMode 未知 -> total
    """
    if isinstance(data, Snapshot):
        return data
    if not isinstance(data, Mapping):
        log.warning("snapshot_not_a_mapping", type=type(data).__name__)
        return Snapshot.empty(clock())

    events_raw = next((data[k] for k in _EVENT_KEYS if k in data), [])
    last_modified = data.get("lastModified", data.get("last_modified"))
    sort_mode = data.get("sortMode", data.get("sort_mode"))

    return Snapshot(
        tasks=_parse_items(data.get("tasks"), Task, "task"),
        events=_parse_items(events_raw, ActivationEvent, "event"),
        last_modified=_parse_last_modified(last_modified, clock),
        sort_mode=_parse_sort_mode(sort_mode),
    )


def deserialize_snapshot(raw: str | bytes | None, clock: Clock = system_clock) -> Snapshot:
    """从 JSON 文本恢复 Snapshot；空输入或解析失败时返回空 Snapshot"""
    if not raw:
        log.debug("snapshot_empty_input")
        return Snapshot.empty(clock())
    try:
        data = json.loads(raw)
    except (ValueError, TypeError) as e:
        log.error("snapshot_parse_failed", error=str(e))
        return Snapshot.empty(clock())
    return validate_snapshot(data, clock)


def export_snapshot(path: str | Path, snapshot: Snapshot) -> Path:
    """导出 Snapshot 到 JSON 文件"""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(serialize_snapshot(snapshot), encoding="utf-8")
    log.info(
        "snapshot_exported",
        path=str(target),
        task_count=len(snapshot.tasks),
        event_count=len(snapshot.events),
    )
    return target


def import_snapshot(path: str | Path, clock: Clock = system_clock) -> Snapshot:
    """从 JSON 文件导入 Snapshot，并把 last_modified 更新为导入时刻

    文件不存在等 I/O 错误直接抛出，由调用方决定如何提示；
    文件内容畸形时按 deserialize_snapshot 的规则退化。
    """
    raw = Path(path).read_text(encoding="utf-8")
    snapshot = deserialize_snapshot(raw, clock)
    log.info(
        "snapshot_imported",
        path=str(path),
        task_count=len(snapshot.tasks),
        event_count=len(snapshot.events),
    )
    return snapshot.model_copy(update={"last_modified": clock()})
