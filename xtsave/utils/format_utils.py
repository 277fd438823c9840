# -*- coding: utf-8 -*-
"""
格式化工具
提供保存格式中时间戳、计数器和参数的文本格式化
"""

import time
from typing import Optional


class FormatUtils:
    """格式化工具类"""

    @staticmethod
    def format_timestamp(now: Optional[float] = None) -> str:
        """格式化时间戳，与ctime格式一致，例如: Sat Oct 18 12:00:00 2026"""
        return time.ctime(time.time() if now is None else now)

    @staticmethod
    def format_counters(packets: int, bytes_: int) -> str:
        """格式化计数器，例如: [12:3456]"""
        return f"[{packets}:{bytes_}]"

    @staticmethod
    def format_legacy_counters(packets: int, bytes_: int) -> str:
        """格式化旧版计数器语法，例如: -c 12 3456"""
        return f"-c {packets} {bytes_}"

    @staticmethod
    def quote_argument(value: str) -> str:
        """参数含空白或引号时加双引号"""
        if value and not any(ch.isspace() or ch in '"\'' for ch in value):
            return value
        escaped = value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'

    @staticmethod
    def negate(option: str, inverted: bool) -> str:
        """为选项加上取反前缀"""
        return f"! {option}" if inverted else option
