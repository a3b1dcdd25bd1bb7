"""format_time 量级格式化测试"""

import pytest

from clocktasks.core.time_format import format_time


class TestFormatTime:
    """各量级边界与取整"""

    def test_seconds(self):
        assert format_time(45) == "45s"
        assert format_time(0) == "0s"

    def test_minutes(self):
        assert format_time(150) == "2.5m"

    def test_boundary_60_seconds(self):
        assert format_time(60) == "1.0m"

    def test_hours(self):
        assert format_time(4680) == "1.3h"
        assert format_time(3600) == "1.0h"

    def test_days(self):
        assert format_time(432000) == "5.0d"

    def test_weeks(self):
        # 14 天 = 2 周
        assert format_time(14 * 86400) == "2.0w"

    def test_months(self):
        # 60 天 / 30.44 ≈ 1.97
        assert format_time(60 * 86400) == "2.0mo"

    def test_years(self):
        assert format_time(730 * 86400) == "2.0y"

    def test_half_rounds_up(self):
        """恰好落在 .x5 时向上进位：135s = 2.25m"""
        assert format_time(135) == "2.3m"

    @pytest.mark.parametrize(
        ("seconds", "suffix"),
        [(59, "s"), (3599, "m"), (86399, "h"), (6 * 86400, "d")],
    )
    def test_upper_edges_stay_in_unit(self, seconds, suffix):
        assert format_time(seconds).endswith(suffix)
        assert not format_time(seconds).endswith("mo")
