"""时长格式化 -- 秒数转为可读的量级字符串

示例: "45s", "2.5m", "1.3h", "5.2d", "3.1w", "2.4mo", "1.2y"
"""

from decimal import ROUND_HALF_UP, Decimal

# 平均每月 / 每年天数
DAYS_PER_MONTH = 30.44
DAYS_PER_YEAR = 365.25

_ONE_PLACE = Decimal("0.1")


def to_fixed1(value: float) -> str:
    """保留一位小数，恰好落在 .x5 上时向上进位（135s -> 2.3m）"""
    return str(Decimal(value).quantize(_ONE_PLACE, rounding=ROUND_HALF_UP))


def format_time(seconds: int) -> str:
    """将秒数格式化为单一量级的字符串，保留一位小数（秒除外）"""
    if seconds < 60:
        return f"{seconds}s"

    minutes = seconds / 60
    if minutes < 60:
        return f"{to_fixed1(minutes)}m"

    hours = minutes / 60
    if hours < 24:
        return f"{to_fixed1(hours)}h"

    days = hours / 24
    if days < 7:
        return f"{to_fixed1(days)}d"

    weeks = days / 7
    if weeks < 4.3:
        return f"{to_fixed1(weeks)}w"

    months = days / DAYS_PER_MONTH
    if months < 12:
        return f"{to_fixed1(months)}mo"

    years = days / DAYS_PER_YEAR
    return f"{to_fixed1(years)}y"
