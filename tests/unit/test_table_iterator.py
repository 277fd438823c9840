# -*- coding: utf-8 -*-
"""
表迭代器测试
"""

import pytest

from xtsave.data_access.rule_store import MemoryRuleStore
from xtsave.engine.table_iterator import TableIterator
from xtsave.infrastructure.error_handler import TableNotFoundError
from xtsave.models.rule_models import DumpRequest, Family, TableDescriptor, TableState
from xtsave.services.family_profiles import ARP_PROFILE, BRIDGE_PROFILE, FILTER_PROFILE


class TestWholeFamily:
    """测试整族导出模式"""

    def test_catalog_order(self, inet_store):
        """测试按目录顺序返回存在的内置表"""
        tables = TableIterator(inet_store, FILTER_PROFILE).enumerate(DumpRequest(Family.IPV4))

        assert [t.name for t in tables] == ["mangle", "filter", "nat"]
        assert all(t.is_builtin for t in tables)
        assert all(t.family is Family.IPV4 for t in tables)

    def test_non_builtin_tables_skipped(self, filter_table):
        """测试整族模式跳过非内置表"""
        store = MemoryRuleStore(Family.IPV4, [TableState(name="custom"), filter_table])

        tables = TableIterator(store, FILTER_PROFILE).enumerate(DumpRequest(Family.IPV4))

        assert [t.name for t in tables] == ["filter"]

    def test_empty_store(self):
        """测试没有任何表"""
        store = MemoryRuleStore(Family.BRIDGE)

        assert TableIterator(store, BRIDGE_PROFILE).enumerate(DumpRequest(Family.BRIDGE)) == []


class TestNamedTable:
    """测试指定表模式"""

    def test_existing_table(self, inet_store):
        """测试指定存在的表"""
        request = DumpRequest(Family.IPV4, table_name="nat")

        tables = TableIterator(inet_store, FILTER_PROFILE).enumerate(request)

        assert tables == [TableDescriptor("nat", Family.IPV4, True)]

    def test_existing_non_builtin_table(self):
        """测试指定存在的非内置表"""
        store = MemoryRuleStore(Family.IPV4, [TableState(name="custom")])
        request = DumpRequest(Family.IPV4, table_name="custom")

        tables = TableIterator(store, FILTER_PROFILE).enumerate(request)

        assert tables == [TableDescriptor("custom", Family.IPV4, False)]

    def test_missing_table(self, inet_store):
        """测试指定不存在的表"""
        request = DumpRequest(Family.IPV4, table_name="bogus")

        with pytest.raises(TableNotFoundError) as exc_info:
            TableIterator(inet_store, FILTER_PROFILE).enumerate(request)

        assert exc_info.value.table_name == "bogus"
        assert str(exc_info.value) == "Table 'bogus' does not exist"

    def test_uncreated_builtin_table_known_for_filter_family(self, inet_store):
        """测试过滤规则族中尚未创建的内置表视为存在"""
        request = DumpRequest(Family.IPV4, table_name="raw")

        tables = TableIterator(inet_store, FILTER_PROFILE).enumerate(request)

        assert [t.name for t in tables] == ["raw"]

    def test_uncreated_builtin_table_missing_for_bridge_family(self):
        """测试网桥规则族中尚未创建的内置表视为不存在"""
        store = MemoryRuleStore(Family.BRIDGE)
        request = DumpRequest(Family.BRIDGE, table_name="nat")

        with pytest.raises(TableNotFoundError):
            TableIterator(store, BRIDGE_PROFILE).enumerate(request)


class TestFixedTable:
    """测试ARP固定表"""

    def test_fixed_table_present(self):
        """测试固定表存在"""
        store = MemoryRuleStore(Family.ARP, [TableState(name="filter")])

        tables = TableIterator(store, ARP_PROFILE).enumerate(DumpRequest(Family.ARP))

        assert tables == [TableDescriptor("filter", Family.ARP, True)]

    def test_fixed_table_absent(self):
        """测试固定表不存在时无事可做"""
        store = MemoryRuleStore(Family.ARP)

        assert TableIterator(store, ARP_PROFILE).enumerate(DumpRequest(Family.ARP)) == []

    def test_fixed_table_ignores_requested_name(self):
        """测试固定表规则族忽略指定的表名"""
        store = MemoryRuleStore(Family.ARP, [TableState(name="filter"), TableState(name="other")])
        request = DumpRequest(Family.ARP, table_name="other")

        tables = TableIterator(store, ARP_PROFILE).enumerate(request)

        assert [t.name for t in tables] == ["filter"]
