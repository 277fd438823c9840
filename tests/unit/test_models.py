# -*- coding: utf-8 -*-
"""
数据模型测试
"""

import pytest
from xtsave.models.rule_models import ChainDescriptor, DumpRequest, Family, RuleEntry, TableState
from xtsave.models.catalog import builtin_chains, builtin_table_names, is_builtin_table


class TestFamily:
    """测试规则族枚举"""

    def test_is_inet(self):
        """测试IPv4/IPv6属于过滤规则族"""
        assert Family.IPV4.is_inet
        assert Family.IPV6.is_inet
        assert not Family.BRIDGE.is_inet
        assert not Family.ARP.is_inet

    def test_values_match_nft_family_names(self):
        """测试枚举值与nft规则族名称一致"""
        assert [f.value for f in Family] == ["ip", "ip6", "bridge", "arp"]


class TestChainAndTable:
    """测试链和表数据类"""

    def test_chain_builtin_by_policy(self):
        """测试有默认策略的链为内置链"""
        assert ChainDescriptor("INPUT", "ACCEPT").is_builtin
        assert not ChainDescriptor("mychain").is_builtin

    def test_rules_of_keeps_order(self):
        """测试按链获取规则保持原有顺序"""
        table = TableState(
            name="filter",
            rules=[
                RuleEntry("INPUT", "-j A"),
                RuleEntry("OUTPUT", "-j B"),
                RuleEntry("INPUT", "-j C"),
            ],
        )

        assert [r.text for r in table.rules_of("INPUT")] == ["-j A", "-j C"]
        assert table.rules_of("FORWARD") == []

    def test_dump_request_defaults(self):
        """测试导出请求默认值"""
        request = DumpRequest(family=Family.IPV4)

        assert request.table_name is None
        assert request.counters is False
        assert request.legacy_counters is False
        assert request.dump is False

        with pytest.raises(AttributeError):
            request.counters = True


class TestCatalog:
    """测试内置表目录"""

    def test_inet_table_order(self):
        """测试IPv4/IPv6内置表顺序"""
        assert builtin_table_names(Family.IPV4) == ["mangle", "security", "raw", "filter", "nat"]
        assert builtin_table_names(Family.IPV6) == builtin_table_names(Family.IPV4)

    def test_bridge_and_arp_tables(self):
        """测试网桥和ARP内置表"""
        assert builtin_table_names(Family.BRIDGE) == ["filter", "nat", "broute"]
        assert builtin_table_names(Family.ARP) == ["filter"]

    def test_builtin_lookup(self):
        """测试内置表和内置链查询"""
        assert is_builtin_table(Family.IPV4, "nat")
        assert not is_builtin_table(Family.ARP, "nat")
        assert builtin_chains(Family.BRIDGE, "broute") == ("BROUTING",)
        assert builtin_chains(Family.IPV4, "custom") is None
