"""SyncService 测试 -- 本地持久化、多设备推送、三方合并与降级"""

import pytest

from clocktasks.core.models import ActivationEvent, ConflictChoice, SortMode, Task
from clocktasks.core.operations import (
    add_and_start_task,
    add_task,
    delete_task,
    set_sort_mode,
    start_task,
    stop_all_tasks,
    update_task_name,
)
from clocktasks.core.store import InMemoryStore, JsonFileStorageProvider
from clocktasks.sync import SnapshotHub, StorageProviderError, SyncService


class TestLocalOnly:
    """仅本地存储"""

    async def test_start_empty(self, make_provider, clock):
        service = SyncService(make_provider(), clock=clock)
        state = await service.start()
        assert state.tasks == []
        assert service.baseline is None

    async def test_apply_persists(self, make_provider, clock):
        local = make_provider()
        service = SyncService(local, clock=clock)
        await service.start()

        state = await service.apply(add_task, "Write")

        assert [t.name for t in state.tasks] == ["Write"]
        assert (await local.load()).tasks == state.tasks

    async def test_noop_not_persisted(self, make_provider, clock):
        local = make_provider()
        service = SyncService(local, clock=clock)
        await service.start()

        before = service.state
        assert await service.apply(add_task, "   ") is before
        assert local.save_count == 0

    async def test_start_loads_existing(self, make_provider, abc_snapshot, clock):
        service = SyncService(make_provider(InMemoryStore(abc_snapshot)), clock=clock)
        assert await service.start() == abc_snapshot

    async def test_local_load_failure_raises(self, make_provider, clock):
        local = make_provider()
        local.fail_load = True
        service = SyncService(local, clock=clock)

        with pytest.raises(StorageProviderError) as exc_info:
            await service.start()
        assert exc_info.value.recoverable is False
        assert exc_info.value.operation == "load"

    async def test_local_save_failure_raises(self, make_provider, clock):
        local = make_provider()
        service = SyncService(local, clock=clock)
        await service.start()
        local.fail_save = True

        with pytest.raises(StorageProviderError) as exc_info:
            await service.apply(add_task, "A")
        assert exc_info.value.provider == "local"
        assert isinstance(exc_info.value.original_error, OSError)

    async def test_sorted_view(self, make_provider, clock):
        service = SyncService(make_provider(), clock=clock)
        await service.start()
        await service.apply(add_task, "beta")
        clock.advance(1)
        await service.apply(add_and_start_task, "Alpha")
        clock.advance(5000)

        assert [t.name for t in service.tasks()] == ["Alpha", "beta"]
        await service.apply(set_sort_mode, SortMode.ALPHABETICAL)
        assert [t.name for t in service.tasks()] == ["Alpha", "beta"]

        await service.apply(update_task_name, str(clock.now - 5000), "zeta")
        assert [t.name for t in service.tasks()] == ["beta", "zeta"]


class TestTwoDevices:
    """两台设备通过共享远端同步"""

    async def _device(self, make_provider, remote_store, clock):
        service = SyncService(make_provider(), make_provider(remote_store), clock=clock)
        await service.start()
        return service

    async def test_push_propagates_changes(self, make_provider, clock):
        remote_store = InMemoryStore()
        laptop = await self._device(make_provider, remote_store, clock)
        phone = await self._device(make_provider, remote_store, clock)

        await laptop.apply(add_and_start_task, "Focus")
        await remote_store.wait_idle()

        assert [t.name for t in phone.state.tasks] == ["Focus"]
        (view,) = phone.tasks()
        assert view.is_running is True
        await laptop.stop()
        await phone.stop()

    async def test_changes_flow_both_ways(self, make_provider, clock):
        remote_store = InMemoryStore()
        laptop = await self._device(make_provider, remote_store, clock)
        phone = await self._device(make_provider, remote_store, clock)

        await laptop.apply(add_task, "A")
        await remote_store.wait_idle()
        clock.advance(1000)
        await phone.apply(add_task, "B")
        await remote_store.wait_idle()

        assert [t.name for t in laptop.state.tasks] == ["A", "B"]
        assert [t.name for t in phone.state.tasks] == ["A", "B"]
        assert laptop.baseline == laptop.state

    async def test_stop_stops_listening(self, make_provider, clock):
        remote = make_provider()
        service = SyncService(make_provider(), remote, clock=clock)
        await service.start()
        assert remote.is_listening() is True
        await service.stop()
        assert remote.is_listening() is False


class TestRemoteMerge:
    """handle_remote_snapshot 三方合并"""

    async def test_offline_additions_combine(self, make_provider, clock):
        """离线期间两侧各自新增任务，恢复后合并为两者之和"""
        remote = make_provider()
        service = SyncService(make_provider(), remote, clock=clock)
        await service.start()
        baseline = service.baseline

        remote.fail_save = True
        await service.apply(add_task, "Local")
        remote.fail_save = False

        server = baseline.model_copy(
            update={"tasks": [*baseline.tasks, Task(id="77", name="Server")]}
        )
        result = await service.handle_remote_snapshot(server)

        assert result is not None
        assert result.has_true_conflicts is False
        assert sorted(t.name for t in service.state.tasks) == ["Local", "Server"]
        assert service.baseline == service.state

    async def test_local_deletion_wins(self, make_provider, abc_snapshot, clock):
        remote = make_provider(InMemoryStore(abc_snapshot))
        service = SyncService(
            make_provider(InMemoryStore(abc_snapshot)),
            remote,
            clock=clock,
            baseline=abc_snapshot,
        )
        await service.start()

        remote.fail_save = True
        await service.apply(delete_task, "2000")
        remote.fail_save = False

        # 远端仍是删除前的内容
        await service.handle_remote_snapshot(abc_snapshot)

        assert [t.name for t in service.state.tasks] == ["A", "C"]
        assert service.last_result.conflicts == []

    async def test_unchanged_remote_returns_none(self, make_provider, clock):
        service = SyncService(make_provider(), make_provider(), clock=clock)
        await service.start()
        assert await service.handle_remote_snapshot(service.state) is None

    async def test_remote_events_merged(self, make_provider, clock):
        service = SyncService(make_provider(), make_provider(), clock=clock)
        await service.start()
        await service.apply(add_and_start_task, "A")
        task_id = service.state.tasks[0].id

        server = service.state.model_copy(
            update={
                "events": [
                    *service.state.events,
                    ActivationEvent(task_id=task_id, timestamp=clock.now + 3000),
                ]
            }
        )
        await service.handle_remote_snapshot(server)
        assert len(service.state.events) == 2


class TestConflicts:
    """冲突记录与用户选择"""

    async def _conflicted(self, make_provider, make_snapshot, clock):
        baseline = make_snapshot(tasks=[("1", "X")])
        local = make_snapshot(tasks=[("2", "X")], events=[("2", 1000)])
        server = make_snapshot(tasks=[("3", "X")], events=[("3", 2000)])
        service = SyncService(
            make_provider(InMemoryStore(local)),
            make_provider(InMemoryStore(server)),
            clock=clock,
            baseline=baseline,
        )
        await service.start()
        return service

    async def test_conflict_defaults_to_local(self, make_provider, make_snapshot, clock):
        service = await self._conflicted(make_provider, make_snapshot, clock)

        assert service.last_result is not None
        assert service.last_result.has_true_conflicts is True
        assert [t.id for t in service.state.tasks] == ["2"]

    async def test_resolve_with_server_choice(self, make_provider, make_snapshot, clock):
        service = await self._conflicted(make_provider, make_snapshot, clock)

        state = await service.resolve({"X": ConflictChoice.SERVER})

        assert [t.id for t in state.tasks] == ["3"]
        assert {e.task_id for e in state.events} == {"3"}
        assert service.last_result is None

    async def test_resolve_without_conflicts_is_noop(self, make_provider, clock):
        service = SyncService(make_provider(), clock=clock)
        await service.start()
        before = service.state
        assert await service.resolve({"X": ConflictChoice.SERVER}) is before


class TestRemoteFailure:
    """远端不可用时降级为仅本地"""

    async def test_remote_load_failure_still_starts(self, make_provider, clock):
        remote = make_provider()
        remote.fail_load = True
        service = SyncService(make_provider(), remote, clock=clock)

        await service.start()

        assert service.baseline is None
        assert remote.is_listening() is True

    async def test_remote_save_failure_falls_back(self, make_provider, clock):
        local = make_provider()
        remote = make_provider()
        service = SyncService(local, remote, clock=clock)
        await service.start()
        baseline = service.baseline
        remote.fail_save = True

        state = await service.apply(add_task, "Offline")

        assert (await local.load()).tasks == state.tasks
        # baseline 不推进
        assert service.baseline is baseline

        remote.fail_save = False
        clock.advance(1000)
        state = await service.apply(start_task, state.tasks[0].id)
        assert service.baseline == state
        assert (await remote.load()).tasks == state.tasks


class TestBroadcastAndTransfer:
    """SnapshotHub 广播 + 导入导出"""

    async def test_hub_receives_updates(self, make_provider, clock):
        hub = SnapshotHub()
        queue = hub.subscribe()
        service = SyncService(make_provider(), clock=clock, hub=hub)

        await service.start()
        await service.apply(add_task, "A")

        first = queue.get_nowait()
        second = queue.get_nowait()
        assert first.tasks == []
        assert [t.name for t in second.tasks] == ["A"]
        assert service.hub is hub

    async def test_export_import(self, make_provider, abc_snapshot, tmp_path, clock):
        source = SyncService(make_provider(InMemoryStore(abc_snapshot)), clock=clock)
        await source.start()
        path = await source.export_to(tmp_path / "export")
        assert path.name == "clock-tasks.json"

        target_local = make_provider()
        target = SyncService(target_local, clock=clock)
        await target.start()
        clock.advance(10)
        state = await target.import_from(path)

        assert state.tasks == abc_snapshot.tasks
        assert state.events == abc_snapshot.events
        assert state.last_modified == clock.now
        assert (await target_local.load()) == state


class TestPollingRemote:
    """共享 JSON 文件远端：写入前合并远端上其他设备的变更"""

    async def _device(self, make_provider, remote_path, clock):
        remote = JsonFileStorageProvider(remote_path, clock=clock, poll_interval_s=3600)
        service = SyncService(make_provider(), remote, clock=clock)
        await service.start()
        return service

    async def test_write_does_not_erase_unseen_remote_task(
        self, make_provider, tmp_snapshot_path, clock
    ):
        laptop = await self._device(make_provider, tmp_snapshot_path, clock)
        phone = await self._device(make_provider, tmp_snapshot_path, clock)
        try:
            await laptop.apply(add_task, "X")
            clock.advance(1000)
            # phone 尚未轮询到 X 就写入
            await phone.apply(add_task, "Y")

            assert sorted(t.name for t in phone.state.tasks) == ["X", "Y"]
            remote_state = await phone.remote.load()
            assert sorted(t.name for t in remote_state.tasks) == ["X", "Y"]

            await laptop.remote.poll_once()
            assert sorted(t.name for t in laptop.state.tasks) == ["X", "Y"]
        finally:
            await laptop.stop()
            await phone.stop()

    async def test_offline_edits_on_both_devices_combine(
        self, make_provider, tmp_snapshot_path, clock
    ):
        laptop = await self._device(make_provider, tmp_snapshot_path, clock)
        phone = await self._device(make_provider, tmp_snapshot_path, clock)
        try:
            await laptop.apply(add_and_start_task, "Write")
            clock.advance(2000)
            await phone.apply(add_and_start_task, "Read")
            clock.advance(3000)
            await laptop.apply(stop_all_tasks)

            await phone.remote.poll_once()
            assert sorted(t.name for t in phone.state.tasks) == ["Read", "Write"]
            assert phone.state.events == laptop.state.events
            assert not any(t.is_running for t in phone.tasks())
        finally:
            await laptop.stop()
            await phone.stop()
