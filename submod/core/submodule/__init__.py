"""子模块解析模块

拆分说明:
- index_client.py: 远程索引拉取
- ledger.py: .git/info/exclude 排除清单
- vcs.py: git 命令执行
- source.py: 源码模式策略
- binary.py: 二进制模式策略（无可用包时回退源码模式）
- resolver.py: 解析入口，按声明顺序分派
"""

from submod.core.submodule.binary import BinaryStrategy
from submod.core.submodule.index_client import RemoteIndexClient
from submod.core.submodule.ledger import IgnoreLedger
from submod.core.submodule.resolver import SubmoduleResolver
from submod.core.submodule.source import SourceStrategy
from submod.core.submodule.vcs import GitRunner

__all__ = [
    "RemoteIndexClient",
    "IgnoreLedger",
    "GitRunner",
    "SourceStrategy",
    "BinaryStrategy",
    "SubmoduleResolver",
]
