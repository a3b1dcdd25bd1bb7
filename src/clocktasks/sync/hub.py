"""SnapshotHub -- 内存中 Snapshot 广播器

每个订阅者（UI 视图等）持有一个 asyncio.Queue，状态变化时收到最新 Snapshot。
"""

import asyncio

from clocktasks.core.models.snapshot import Snapshot


class SnapshotHub:
    """基于 asyncio.Queue 的发布/订阅"""

    def __init__(self, queue_maxsize: int = 100) -> None:
        self._subscribers: set[asyncio.Queue] = set()
        self._queue_maxsize = queue_maxsize

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        """订阅 Snapshot 变化

        Returns:
            asyncio.Queue 实例，新 Snapshot 会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    def broadcast(self, snapshot: Snapshot) -> None:
        """向所有订阅者广播；队列已满的订阅者被移除"""
        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(snapshot)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        for q in dead_queues:
            self._subscribers.discard(q)
