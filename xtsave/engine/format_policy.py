# -*- coding: utf-8 -*-
"""
格式策略
根据命令行选项和旧版环境变量计算导出格式标志
"""

from xtsave.models.rule_models import DumpFormatFlags


def resolve(counter_option_given: bool, legacy_env_toggle_set: bool) -> DumpFormatFlags:
    """
    计算导出格式标志

    显式指定计数器时总是使用新语法；仅设置旧版环境变量时使用旧版计数器语法；
    两者都没有时不输出计数器。

    Args:
        counter_option_given: 是否显式指定了计数器选项
        legacy_env_toggle_set: 旧版计数器环境变量是否开启

    Returns:
        DumpFormatFlags
    """
    if counter_option_given:
        return DumpFormatFlags.INCLUDE_COUNTERS
    if legacy_env_toggle_set:
        return DumpFormatFlags.INCLUDE_COUNTERS | DumpFormatFlags.LEGACY_COUNTER_SYNTAX
    return DumpFormatFlags.NONE
