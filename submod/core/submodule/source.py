"""源码模式解析

确保子模块目录是一个固定在声明 ref 上的 git 子模块 checkout:

  1. 目录下已有 .git → 已就绪，不做任何操作
  2. 否则清空目录、移出排除清单，执行 submodule update --init --recursive
  3. 仍没有 .git（子模块从未注册过）→ submodule add、checkout ref、
     再次 update，最后暂存 .gitmodules 和子模块目录

源码目录需要对版本控制可见，因此不会重新加入排除清单。
任一 git 命令失败即中止，不回滚（已删除的目录保持删除状态）。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from submod.core.models import MODE_SKIPPED, MODE_SOURCE, SOURCE_MARKER, SubmoduleRef
from submod.core.protocols import VcsRunner
from submod.core.submodule.ledger import IgnoreLedger

logger = logging.getLogger(__name__)

_UPDATE_ARGS = ["submodule", "update", "--init", "--recursive"]


class SourceStrategy:
    """源码模式解析策略"""

    def __init__(self, root: Path, vcs: VcsRunner, ledger: IgnoreLedger) -> None:
        self.root = root
        self.vcs = vcs
        self.ledger = ledger

    def is_resolved(self, ref: SubmoduleRef) -> bool:
        return (self.root / ref.folder / SOURCE_MARKER).exists()

    def resolve(self, ref: SubmoduleRef, source_uri: str) -> str:
        folder = self.root / ref.folder
        if self.is_resolved(ref):
            logger.info("源码已就绪: %s", ref.folder)
            return MODE_SKIPPED

        if folder.exists():
            shutil.rmtree(folder)
        self.ledger.unmark_ignored(folder)
        self.vcs.run(_UPDATE_ARGS)

        if not self.is_resolved(ref):
            logger.info("子模块未注册，添加: %s -> %s@%s", source_uri, ref.folder, ref.git_ref)
            rel = Path(ref.folder).as_posix()
            self.vcs.run(["submodule", "add", "--", source_uri, rel])
            self.vcs.run(["checkout", "-f", ref.git_ref], cwd=folder)
            self.vcs.run(_UPDATE_ARGS)
            self.vcs.run(["add", ".gitmodules"])
            self.vcs.run(["add", rel])

        logger.info("源码就绪: %s@%s", ref.folder, ref.git_ref)
        return MODE_SOURCE
