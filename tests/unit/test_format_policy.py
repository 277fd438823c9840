# -*- coding: utf-8 -*-
"""
格式策略测试
"""

from xtsave.engine.format_policy import resolve
from xtsave.models.rule_models import DumpFormatFlags


class TestResolve:
    """测试格式标志计算"""

    def test_no_counters(self):
        """测试默认不输出计数器"""
        assert resolve(False, False) == DumpFormatFlags.NONE

    def test_explicit_counters(self):
        """测试显式指定计数器"""
        flags = resolve(True, False)

        assert DumpFormatFlags.INCLUDE_COUNTERS in flags
        assert DumpFormatFlags.LEGACY_COUNTER_SYNTAX not in flags

    def test_legacy_toggle_only(self):
        """测试仅开启旧版环境变量时使用旧版语法"""
        flags = resolve(False, True)

        assert flags == DumpFormatFlags.INCLUDE_COUNTERS | DumpFormatFlags.LEGACY_COUNTER_SYNTAX

    def test_explicit_counters_override_legacy_toggle(self):
        """测试显式计数器选项覆盖旧版环境变量"""
        assert resolve(True, True) == DumpFormatFlags.INCLUDE_COUNTERS
