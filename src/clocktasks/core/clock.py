"""时钟注入

所有操作通过参数接收 "获取当前时刻" 函数，测试中传入可控时钟即可得到确定结果。
"""

import time
from collections.abc import Callable

# 零参数函数，返回当前时刻（毫秒整数）
Clock = Callable[[], int]


def system_clock() -> int:
    """系统墙钟（毫秒）"""
    return time.time_ns() // 1_000_000


class ManualClock:
    """手动推进的时钟 -- 用于测试和回放"""

    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        """向前推进 ms 毫秒，返回推进后的时刻"""
        self.now += ms
        return self.now

    def set(self, value: int) -> None:
        self.now = value
