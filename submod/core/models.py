"""子模块数据模型

数据类:
- SubmoduleRef: 声明的外部依赖（索引根 URI + 本地目录 + 固定 ref）
- ModuleInfo: 声明子模块的模块
- RemoteIndex: 远程索引（首行为源码仓库地址，其余为已发布二进制包的 ref）
- ResolveOutcome: 单个子模块的解析结果
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from submod.core.exceptions import InvalidIndexError

# 源码模式标记：子模块目录下的 .git（文件或目录）
SOURCE_MARKER = ".git"
# 二进制模式标记：<folder>/<platform>/.pkg 空文件
PACKAGE_MARKER = ".pkg"

MODE_SOURCE = "source"
MODE_BINARY = "binary"
MODE_FALLBACK = "source-fallback"
MODE_SKIPPED = "skipped"


@dataclass(frozen=True)
class SubmoduleRef:
    """单个子模块引用

    uri 为索引根地址，folder 相对于声明模块根目录，
    git_ref 同时作为版本控制 ref 和已发布包 ref 使用。
    """

    uri: str
    folder: str
    git_ref: str = "master"


@dataclass
class ModuleInfo:
    """声明子模块的模块"""

    name: str
    root: Path
    submodules: list[SubmoduleRef] = field(default_factory=list)


@dataclass(frozen=True)
class RemoteIndex:
    """远程索引 <uri>/index 的内容"""

    lines: tuple[str, ...]

    @classmethod
    def from_lines(cls, lines: list[str], uri: str = "") -> RemoteIndex:
        if not lines:
            raise InvalidIndexError(
                f"子模块引用无效: 索引为空 {uri}", uri=uri,
            )
        # 首行会作为 git 参数使用，不能是选项
        if lines[0].startswith("-"):
            raise InvalidIndexError(
                f"子模块引用无效: 源码地址非法 {lines[0]!r} ({uri})", uri=uri,
            )
        return cls(lines=tuple(lines))

    @property
    def source_uri(self) -> str:
        return self.lines[0]

    @property
    def published_refs(self) -> tuple[str, ...]:
        return self.lines[1:]


@dataclass
class ResolveOutcome:
    """单个子模块的解析结果"""

    ref: SubmoduleRef
    mode: str
    path: Path

    @property
    def changed(self) -> bool:
        return self.mode != MODE_SKIPPED
