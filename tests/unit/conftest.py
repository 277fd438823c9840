# -*- coding: utf-8 -*-
"""
测试公共夹具
"""

import io

import pytest

from xtsave.data_access.rule_store import MemoryRuleStore
from xtsave.infrastructure.output_sink import OutputSink
from xtsave.models.rule_models import ChainDescriptor, Family, RuleEntry, TableState


@pytest.fixture
def filter_table() -> TableState:
    """构造filter表：三条内置链、一条用户链"""
    return TableState(
        name="filter",
        chains=[
            ChainDescriptor("INPUT", "ACCEPT", 10, 1000),
            ChainDescriptor("FORWARD", "DROP", 0, 0),
            ChainDescriptor("OUTPUT", "ACCEPT", 7, 700),
            ChainDescriptor("LOGDROP"),
        ],
        rules=[
            # 故意把用户链规则放在前面，输出时应按链声明顺序排列
            RuleEntry("LOGDROP", "-j DROP", 1, 60),
            RuleEntry("INPUT", "-i lo -j ACCEPT", 5, 300),
            RuleEntry("INPUT", "-p tcp -m tcp --dport 22 -j ACCEPT", 3, 180),
            RuleEntry("INPUT", "-j LOGDROP", 1, 60),
        ],
    )


@pytest.fixture
def nat_table() -> TableState:
    return TableState(
        name="nat",
        chains=[
            ChainDescriptor("PREROUTING", "ACCEPT"),
            ChainDescriptor("INPUT", "ACCEPT"),
            ChainDescriptor("OUTPUT", "ACCEPT"),
            ChainDescriptor("POSTROUTING", "ACCEPT", 2, 120),
        ],
        rules=[RuleEntry("POSTROUTING", "-o eth0 -j MASQUERADE", 2, 120)],
    )


@pytest.fixture
def incompatible_table() -> TableState:
    return TableState(
        name="mangle",
        chains=[ChainDescriptor("PREROUTING", "ACCEPT")],
        compatible=False,
    )


@pytest.fixture
def inet_store(filter_table, nat_table, incompatible_table):
    """IPv4内存存储：filter、nat、不兼容的mangle"""
    return MemoryRuleStore(
        Family.IPV4,
        [filter_table, nat_table, incompatible_table],
    )


@pytest.fixture
def buffer_sink():
    """写入内存缓冲区的输出目标"""
    buffer = io.StringIO()
    sink = OutputSink(stream=buffer)
    sink.acquire()
    yield sink, buffer
    sink.release()


@pytest.fixture
def fixed_clock():
    """固定为0的时间函数"""
    return lambda: 0.0
