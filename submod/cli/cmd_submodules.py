"""子模块解析命令"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import click

from submod.core.config import DEFAULT_CONFIG_FILE, Config, init_config
from submod.core.exceptions import SubmodError
from submod.core.models import ModuleInfo
from submod.core.registry import ModuleRegistry
from submod.core.submodule import RemoteIndexClient, SubmoduleResolver


def register(main: click.Group) -> None:
    """注册子模块相关命令"""
    main.add_command(resolve)
    main.add_command(list_submodules)
    main.add_command(show_ledger)


def _fail(e: SubmodError) -> NoReturn:
    """输出 `错误 [<code>]: <message>` 到 stderr，以状态 1 退出"""
    click.echo(f"错误 [{e.code}]: {e}", err=True)
    sys.exit(1)


def _load(config: str, module: str | None) -> tuple[Config, ModuleInfo]:
    try:
        cfg = init_config(config)
        info = ModuleRegistry(Path(module or cfg.module_file)).load()
    except SubmodError as e:
        _fail(e)
    return cfg, info


@click.command()
@click.option("--module", "-m", default=None, help="模块清单路径（默认取配置 module_file）")
@click.option("--platform", "-p", default=None, help="目标平台（默认按主机推断）")
@click.option("--source/--binary", default=None, help="源码模式 / 二进制模式（默认取配置）")
@click.option("--config", "-c", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
def resolve(
    module: str | None, platform: str | None, source: bool | None, config: str,
) -> None:
    """按声明顺序解析全部子模块"""
    cfg, info = _load(config, module)
    plat = platform or cfg.effective_platform
    want_source = cfg.source if source is None else source

    resolver = SubmoduleResolver(
        info.root, fetcher=RemoteIndexClient(timeout=cfg.fetch_timeout),
    )
    try:
        outcomes = resolver.resolve_all(info.submodules, plat, want_source)
    except SubmodError as e:
        _fail(e)

    if not outcomes:
        click.echo("没有声明子模块。")
        return
    for o in outcomes:
        click.echo(f"  {o.ref.folder:30s} {o.ref.git_ref:12s} [{o.mode}]")


@click.command(name="list")
@click.option("--module", "-m", default=None, help="模块清单路径（默认取配置 module_file）")
@click.option("--platform", "-p", default=None, help="目标平台（默认按主机推断）")
@click.option("--config", "-c", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
def list_submodules(module: str | None, platform: str | None, config: str) -> None:
    """列出声明的子模块及本地状态（不访问网络）"""
    cfg, info = _load(config, module)
    plat = platform or cfg.effective_platform
    if not info.submodules:
        click.echo("没有声明子模块。")
        return
    resolver = SubmoduleResolver(info.root)
    for ref in info.submodules:
        state = resolver.state(ref, plat)
        click.echo(f"  {ref.folder:30s} {ref.git_ref:12s} [{state:7s}] {ref.uri}")


@click.command(name="ledger")
@click.option("--module", "-m", default=None, help="模块清单路径（默认取配置 module_file）")
@click.option("--config", "-c", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
def show_ledger(module: str | None, config: str) -> None:
    """显示模块所在仓库的排除清单"""
    _, info = _load(config, module)
    resolver = SubmoduleResolver(info.root)
    exclude = resolver.ledger.exclude_path(info.root, include_self=True)
    if exclude is None:
        click.echo("模块不在版本控制仓库中。")
        return
    entries = resolver.ledger.entries(info.root, include_self=True)
    click.echo(f"{exclude}:")
    for line in entries:
        click.echo(f"  {line}")
