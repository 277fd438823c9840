# -*- coding: utf-8 -*-
"""
nftables规则翻译器
将nft JSON规则表达式翻译为对应规则族的旧版保存格式文本
无法翻译的表达式抛出UnsupportedExpression，调用方据此判定表不兼容
"""

from typing import Any, Dict, List, Optional, Tuple

from xtsave.models.rule_models import Family, RuleEntry
from xtsave.utils.format_utils import FormatUtils
from xtsave.utils.ip_utils import IPUtils


class UnsupportedExpression(Exception):
    """无法用旧版保存格式表示的表达式"""
    pass


_ETHER_TYPES = {
    'ip': 'IPv4',
    'ip6': 'IPv6',
    'arp': 'ARP',
    'vlan': '802_1Q',
}

_ARP_OPCODES = {
    'request': '1',
    'reply': '2',
}

_SIMPLE_VERDICTS = {
    'accept': 'ACCEPT',
    'drop': 'DROP',
    'return': 'RETURN',
    'continue': 'CONTINUE',
}

_PORT_PROTOCOLS = ('tcp', 'udp', 'sctp', 'dccp')


class NftRuleTranslator:
    """nft JSON规则翻译器"""

    def __init__(self, family: Family):
        self.family = family
        self._protocol: Optional[str] = None

    def translate(self, rule: Dict[str, Any]) -> RuleEntry:
        """
        翻译单条规则

        Args:
            rule: nft JSON中的rule对象

        Returns:
            RuleEntry对象，text不含链名

        Raises:
            UnsupportedExpression: 规则包含无法表示的表达式
        """
        parts: List[str] = []
        verdict: Optional[str] = None
        packets = bytes_ = 0
        self._protocol = None

        for expr in rule.get('expr', []):
            if not isinstance(expr, dict) or len(expr) != 1:
                raise UnsupportedExpression(f"无法识别的表达式: {expr}")
            key, value = next(iter(expr.items()))

            if key == 'counter':
                packets = int((value or {}).get('packets', 0))
                bytes_ = int((value or {}).get('bytes', 0))
            elif key == 'match':
                self._translate_match(value, parts)
            else:
                if verdict is not None:
                    raise UnsupportedExpression(f"规则包含多个动作: {key}")
                verdict = self._translate_statement(key, value)

        comment = rule.get('comment')
        if comment:
            if not self.family.is_inet:
                raise UnsupportedExpression("comment")
            parts.append(f"-m comment --comment {FormatUtils.quote_argument(comment)}")

        if verdict:
            parts.append(verdict)

        return RuleEntry(
            chain=rule.get('chain', ''),
            text=' '.join(parts),
            packets=packets,
            bytes=bytes_,
        )

    def _translate_match(self, match: Dict[str, Any], parts: List[str]):
        """翻译match表达式"""
        left = match.get('left', {})
        right = match.get('right')
        op = match.get('op', '==')
        if op not in ('==', '!=', 'in'):
            raise UnsupportedExpression(f"不支持的操作符: {op}")
        inverted = op == '!='

        if 'payload' in left:
            self._translate_payload(left['payload'], right, inverted, parts)
        elif 'meta' in left:
            self._translate_meta(left['meta'].get('key'), right, inverted, parts)
        elif 'ct' in left and self.family.is_inet and left['ct'].get('key') == 'state':
            states = ','.join(str(state).upper() for state in self._values(right))
            parts.append(f"-m conntrack {FormatUtils.negate('--ctstate', inverted)} {states}")
        else:
            raise UnsupportedExpression(f"不支持的匹配: {left}")

    def _translate_payload(self, payload: Dict[str, Any], right: Any, inverted: bool, parts: List[str]):
        """翻译payload匹配（协议字段）"""
        protocol = payload.get('protocol')
        field = payload.get('field')

        if self.family.is_inet and protocol in ('ip', 'ip6'):
            if field in ('saddr', 'daddr'):
                option = '-s' if field == 'saddr' else '-d'
                parts.append(f"{FormatUtils.negate(option, inverted)} {self._address(right)}")
                return
            if field in ('protocol', 'nexthdr'):
                self._add_protocol(right, inverted, parts)
                return

        elif self.family.is_inet and protocol in _PORT_PROTOCOLS and field in ('sport', 'dport'):
            if self._protocol != protocol:
                self._add_protocol(protocol, False, parts)
            option = FormatUtils.negate(f"--{field}", inverted)
            match_prefix = f"-m {protocol}"
            # 同一协议的端口匹配合并为一个 -m 子句
            if parts and parts[-1].startswith(match_prefix):
                parts[-1] = f"{parts[-1]} {option} {self._port(right)}"
            else:
                parts.append(f"{match_prefix} {option} {self._port(right)}")
            return

        elif self.family is Family.BRIDGE and protocol == 'ether':
            if field in ('saddr', 'daddr'):
                option = '-s' if field == 'saddr' else '-d'
                parts.append(f"{FormatUtils.negate(option, inverted)} {self._scalar(right)}")
                return
            if field == 'type':
                parts.append(f"{FormatUtils.negate('-p', inverted)} {self._ether_type(right)}")
                return

        elif self.family is Family.ARP and protocol == 'arp':
            options = {
                'saddr ip': '-s',
                'daddr ip': '-d',
                'saddr ether': '--source-mac',
                'daddr ether': '--destination-mac',
            }
            if field in options:
                value = right if 'ether' in field else self._address(right)
                parts.append(f"{FormatUtils.negate(options[field], inverted)} {self._scalar(value)}")
                return
            if field == 'operation':
                opcode = _ARP_OPCODES.get(str(right), str(right))
                parts.append(f"{FormatUtils.negate('--opcode', inverted)} {opcode}")
                return

        raise UnsupportedExpression(f"不支持的payload匹配: {protocol} {field}")

    def _translate_meta(self, key: Optional[str], right: Any, inverted: bool, parts: List[str]):
        """翻译meta匹配（元数据）"""
        options = {'iifname': '-i', 'oifname': '-o'}
        if self.family is Family.BRIDGE:
            options.update({'ibrname': '--logical-in', 'obrname': '--logical-out'})

        if key in options:
            parts.append(f"{FormatUtils.negate(options[key], inverted)} {self._interface(right)}")
        elif key == 'l4proto' and self.family.is_inet:
            self._add_protocol(right, inverted, parts)
        elif key == 'protocol' and self.family is Family.BRIDGE:
            parts.append(f"{FormatUtils.negate('-p', inverted)} {self._ether_type(right)}")
        else:
            raise UnsupportedExpression(f"不支持的meta匹配: {key}")

    def _translate_statement(self, key: str, value: Any) -> str:
        """翻译动作语句"""
        if key in _SIMPLE_VERDICTS:
            if key == 'continue' and self.family is not Family.BRIDGE:
                raise UnsupportedExpression(key)
            return f"-j {_SIMPLE_VERDICTS[key]}"

        if key == 'jump':
            return f"-j {value['target']}"
        if key == 'goto' and self.family.is_inet:
            return f"-g {value['target']}"

        if self.family.is_inet:
            if key == 'reject':
                if isinstance(value, dict) and value.get('type') == 'tcp reset':
                    return "-j REJECT --reject-with tcp-reset"
                return "-j REJECT"
            if key == 'log':
                return self._log_target(value or {})
            if key == 'masquerade':
                return "-j MASQUERADE"
            if key in ('snat', 'dnat'):
                return self._nat_target(key, value or {})

        raise UnsupportedExpression(f"不支持的语句: {key}")

    def _add_protocol(self, value: Any, inverted: bool, parts: List[str]):
        """添加 -p 协议匹配"""
        protocol = self._scalar(value)
        parts.append(f"{FormatUtils.negate('-p', inverted)} {protocol}")
        if not inverted:
            self._protocol = protocol

    def _log_target(self, log: Dict[str, Any]) -> str:
        """翻译LOG目标"""
        target = "-j LOG"
        if log.get('prefix'):
            target = f"{target} --log-prefix {FormatUtils.quote_argument(log['prefix'])}"
        if log.get('level'):
            target = f"{target} --log-level {log['level']}"
        return target

    def _nat_target(self, key: str, nat: Dict[str, Any]) -> str:
        """翻译SNAT/DNAT目标"""
        addr = nat.get('addr')
        port = nat.get('port')
        if not addr:
            raise UnsupportedExpression(f"{key}缺少地址")
        to = f"{self._scalar(addr)}:{self._port(port)}" if port is not None else self._scalar(addr)
        option = '--to-source' if key == 'snat' else '--to-destination'
        return f"-j {key.upper()} {option} {to}"

    def _address(self, value: Any) -> str:
        address = IPUtils.format_nft_address(value)
        if address is None:
            raise UnsupportedExpression(f"不支持的地址: {value}")
        return address

    def _port(self, value: Any) -> str:
        if isinstance(value, dict) and 'range' in value:
            low, high = value['range']
            return f"{low}:{high}"
        return self._scalar(value)

    def _interface(self, value: Any) -> str:
        name = self._scalar(value)
        # nft通配符 eth* 对应旧格式 eth+
        return f"{name[:-1]}+" if name.endswith('*') else name

    def _ether_type(self, value: Any) -> str:
        if isinstance(value, int):
            return f"0x{value:04x}"
        return _ETHER_TYPES.get(str(value), str(value))

    def _values(self, value: Any) -> Tuple[Any, ...]:
        if isinstance(value, dict) and 'set' in value:
            value = value['set']
        if isinstance(value, list):
            return tuple(value)
        return (value,)

    def _scalar(self, value: Any) -> str:
        if isinstance(value, (dict, list)):
            raise UnsupportedExpression(f"不支持的取值: {value}")
        return str(value)
