"""submod 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from submod import __version__
from submod.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="日志级别（默认取 SUBMOD_LOG_LEVEL 或 INFO）")
@click.option("--log-json", is_flag=True, default=False, help="输出 JSON 格式日志（CI 使用）")
def main(log_level: str | None, log_json: bool) -> None:
    """submod - 子模块解析工具（源码 checkout / 预编译平台包）"""
    setup_logging(
        level=log_level or os.getenv("SUBMOD_LOG_LEVEL", "INFO"),
        json_output=log_json or os.getenv("SUBMOD_LOG_JSON", "") == "1",
    )


# 注册各领域子命令
from submod.cli.cmd_submodules import register as _reg_submodules  # noqa: E402

_reg_submodules(main)
