# -*- coding: utf-8 -*-
"""
CLI主入口
提供过滤(IPv4/IPv6)、网桥、ARP三个规则族的保存命令
"""

import os
import sys
from pathlib import Path
from typing import List, Optional

import click
import typer

from xtsave.data_access.store_adapter import open_store
from xtsave.infrastructure.config import Config, VERSION
from xtsave.infrastructure.error_handler import XtSaveError
from xtsave.infrastructure.logger import logger
from xtsave.infrastructure.output_sink import OutputSink
from xtsave.models.rule_models import DumpRequest, Family
from xtsave.services.dump_service import DumpOrchestrator
from xtsave.services.family_profiles import (
    ARP_PROFILE, BRIDGE_PROFILE, FILTER_PROFILE, FamilyProfile,
)


def _configure_logging(config: Config, debug: bool):
    """按配置设置日志"""
    log_file = config.get('logging.file')
    if log_file:
        logger.add_file_handler(log_file)
    logger.set_level("DEBUG" if debug else config.get('logging.level', 'WARNING'))


def _load_config(config_file: Optional[Path]) -> Config:
    try:
        return Config(str(config_file) if config_file else None)
    except XtSaveError as e:
        typer.echo(f"❌ 配置加载失败: {e}", err=True)
        raise typer.Exit(1)


def _backend_label(config: Config, family: Family) -> str:
    """版本信息中显示的后端名称"""
    if family.is_inet and config.get('backend.inet') == 'xtables':
        return "legacy"
    return "nf_tables"


def _print_version(program: str, family: Family, config_file: Optional[Path]):
    """输出版本信息并退出，配置文件有误时按默认配置显示"""
    version, label = VERSION, "nf_tables"
    try:
        config = Config(str(config_file) if config_file else None)
    except XtSaveError as e:
        logger.debug(f"读取配置失败，按默认配置显示版本: {e}")
    else:
        version = config.get('program.version', VERSION)
        label = _backend_label(config, family)
    typer.echo(f"{program} v{version} ({label})")
    raise typer.Exit(0)


def _select_family(family: Family):
    """-4/-6 的回调，参数按命令行顺序处理，最后出现的生效"""
    def callback(ctx: typer.Context, value: bool) -> bool:
        if value:
            ctx.meta['family'] = family
        return value
    return callback


def _execute(
    program: str,
    profile: FamilyProfile,
    config: Config,
    request: DumpRequest,
    output_file: Optional[Path]
) -> int:
    """获取输出目标并执行导出"""
    try:
        with OutputSink(str(output_file) if output_file else None) as sink:
            orchestrator = DumpOrchestrator(
                profile,
                lambda family: open_store(family, config),
                sink,
                program_name=program,
                version=config.get('program.version', VERSION),
            )
            return orchestrator.run(request)
    except XtSaveError as e:
        logger.error(f"导出失败: {e}")
        typer.echo(f"{program}: {e}", err=True)
        return 1


def _build_filter_app(program: str, default_family: Family) -> typer.Typer:
    """构建IPv4/IPv6过滤规则保存命令"""
    app = typer.Typer(
        name=program,
        help="以旧版保存格式导出IPv4/IPv6过滤规则",
        add_completion=False
    )

    @app.command()
    def save(
        ctx: typer.Context,
        counters: bool = typer.Option(False, "--counters", "-c", help="输出数据包和字节计数器"),
        table: Optional[str] = typer.Option(None, "--table", "-t", help="只导出指定的表"),
        output_file: Optional[Path] = typer.Option(None, "--file", "-f", help="输出到文件而不是标准输出"),
        ipv4: bool = typer.Option(False, "--ipv4", "-4", help="导出IPv4规则", callback=_select_family(Family.IPV4)),
        ipv6: bool = typer.Option(False, "--ipv6", "-6", help="导出IPv6规则", callback=_select_family(Family.IPV6)),
        dump: bool = typer.Option(False, "--dump", "-d", help="无论结果如何都以0退出"),
        binary: bool = typer.Option(False, "--binary", "-b", help="二进制输出（未实现）"),
        version: bool = typer.Option(False, "--version", "-V", help="显示版本信息"),
        config_file: Optional[Path] = typer.Option(None, "--config", help="配置文件路径"),
        debug: bool = typer.Option(False, "--debug", help="开启调试日志"),
    ):
        """导出IPv4/IPv6过滤规则"""
        family = ctx.meta.get('family', default_family)
        if version:
            _print_version(program, family, config_file)

        config = _load_config(config_file)
        _configure_logging(config, debug)

        if binary:
            typer.echo("-b/--binary option is not implemented", err=True)

        request = DumpRequest(family=family, table_name=table, counters=counters, dump=dump)
        raise typer.Exit(_execute(program, FILTER_PROFILE, config, request, output_file))

    return app


filter_app = _build_filter_app("xtsave", Family.IPV4)
filter6_app = _build_filter_app("xtsave6", Family.IPV6)

bridge_app = typer.Typer(
    name="ebsave",
    help="以旧版保存格式导出网桥过滤规则",
    add_completion=False
)


@bridge_app.command()
def bridge_save(
    counters: bool = typer.Option(False, "--counters", "-c", help="输出数据包和字节计数器"),
    table: Optional[str] = typer.Option(None, "--table", "-t", help="只导出指定的表"),
    output_file: Optional[Path] = typer.Option(None, "--file", "-f", help="输出到文件而不是标准输出"),
    version: bool = typer.Option(False, "--version", "-V", help="显示版本信息"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="配置文件路径"),
    debug: bool = typer.Option(False, "--debug", help="开启调试日志"),
):
    """导出网桥过滤规则"""
    program = "ebsave"
    if version:
        _print_version(program, Family.BRIDGE, config_file)

    config = _load_config(config_file)
    _configure_logging(config, debug)

    # 旧版计数器格式仅在未显式指定 -c 时生效
    legacy = os.environ.get(BRIDGE_PROFILE.legacy_counter_env, '') == 'yes'
    request = DumpRequest(
        family=Family.BRIDGE,
        table_name=table,
        counters=counters,
        legacy_counters=legacy and not counters,
    )
    raise typer.Exit(_execute(program, BRIDGE_PROFILE, config, request, output_file))


arp_app = typer.Typer(
    name="arpsave",
    help="以旧版保存格式导出ARP过滤规则",
    add_completion=False
)


@arp_app.command()
def arp_save(
    counters: bool = typer.Option(False, "--counters", "-c", help="输出数据包和字节计数器"),
    output_file: Optional[Path] = typer.Option(None, "--file", "-f", help="输出到文件而不是标准输出"),
    version: bool = typer.Option(False, "--version", "-V", help="显示版本信息"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="配置文件路径"),
    debug: bool = typer.Option(False, "--debug", help="开启调试日志"),
):
    """导出ARP过滤规则"""
    program = "arpsave"
    if version:
        _print_version(program, Family.ARP, config_file)

    config = _load_config(config_file)
    _configure_logging(config, debug)

    request = DumpRequest(family=Family.ARP, counters=counters)
    raise typer.Exit(_execute(program, ARP_PROFILE, config, request, output_file))


def _run(app: typer.Typer, program: str, args: Optional[List[str]] = None):
    """运行命令，参数错误统一以1退出"""
    try:
        code = app(args=args, prog_name=program, standalone_mode=False)
    except click.UsageError as e:
        typer.echo(f"{program}: {e.format_message()}", err=True)
        typer.echo(f"Look at manual page `{program}.8' for more information.", err=True)
        sys.exit(1)
    except (KeyboardInterrupt, click.Abort):
        sys.exit(1)
    sys.exit(code or 0)


def main(args: Optional[List[str]] = None):
    """IPv4保存命令入口"""
    _run(filter_app, "xtsave", args)


def main6(args: Optional[List[str]] = None):
    """IPv6保存命令入口"""
    _run(filter6_app, "xtsave6", args)


def bridge_main(args: Optional[List[str]] = None):
    """网桥保存命令入口"""
    _run(bridge_app, "ebsave", args)


def arp_main(args: Optional[List[str]] = None):
    """ARP保存命令入口"""
    _run(arp_app, "arpsave", args)


if __name__ == "__main__":
    main()
