"""领域协议定义

解析策略只依赖这里的抽象，不直接使用 urllib / subprocess，
测试时注入假实现即可脱离网络和 git 运行。
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from submod.utils.shell import CommandResult


class IndexFetcher(Protocol):
    """远程索引拉取协议"""

    def fetch_lines(self, uri: str) -> list[str]:
        """拉取换行分隔的文本，返回非空行（保持顺序）"""
        ...

    def fetch_binary(self, uri: str) -> bytes:
        """拉取二进制内容（包归档）"""
        ...


class VcsRunner(Protocol):
    """版本控制命令执行协议

    cwd 为 None 时在声明模块根目录执行；非零退出码抛 VersionControlError。
    """

    def run(self, args: list[str], *, cwd: Path | None = None) -> CommandResult:
        ...
