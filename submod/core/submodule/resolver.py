"""子模块解析入口

按声明顺序逐个解析子模块：拉取 <uri>/index，按模式分派到源码或二进制策略。
顺序执行、遇错即停，后续子模块不再处理。
"""

from __future__ import annotations

import logging
from pathlib import Path

from submod.core.models import (
    MODE_BINARY,
    MODE_SKIPPED,
    MODE_SOURCE,
    RemoteIndex,
    ResolveOutcome,
    SubmoduleRef,
)
from submod.core.protocols import IndexFetcher, VcsRunner
from submod.core.submodule.binary import BinaryStrategy
from submod.core.submodule.index_client import RemoteIndexClient
from submod.core.submodule.ledger import IgnoreLedger
from submod.core.submodule.source import SourceStrategy
from submod.core.submodule.vcs import GitRunner
from submod.utils.net import join_url

logger = logging.getLogger(__name__)


class SubmoduleResolver:
    """子模块解析器

    fetcher / vcs / ledger 均可注入，默认分别使用 RemoteIndexClient、
    在模块根目录执行的 GitRunner 和 IgnoreLedger。
    """

    def __init__(
        self,
        root: Path,
        fetcher: IndexFetcher | None = None,
        vcs: VcsRunner | None = None,
        ledger: IgnoreLedger | None = None,
    ) -> None:
        self.root = root
        self.fetcher = fetcher or RemoteIndexClient()
        self.vcs = vcs or GitRunner(root)
        self.ledger = ledger or IgnoreLedger()
        self.source = SourceStrategy(root, self.vcs, self.ledger)
        self.binary = BinaryStrategy(root, self.fetcher, self.ledger, self.source)

    def state(self, ref: SubmoduleRef, platform: str) -> str:
        """本地状态（不访问网络）: binary / source / missing"""
        if self.binary.is_resolved(ref, platform):
            return MODE_BINARY
        if self.source.is_resolved(ref):
            return MODE_SOURCE
        return "missing"

    def resolve_all(
        self, references: list[SubmoduleRef] | None, platform: str, source: bool,
    ) -> list[ResolveOutcome]:
        if not references:
            logger.info("没有声明子模块，跳过解析")
            return []

        mode = MODE_SOURCE if source else MODE_BINARY
        logger.info(
            "开始解析 %d 个子模块 (模式=%s, 平台=%s)", len(references), mode, platform,
        )
        outcomes = [self.resolve(ref, platform, source) for ref in references]
        logger.info("子模块解析完成")
        return outcomes

    def resolve(self, ref: SubmoduleRef, platform: str, source: bool) -> ResolveOutcome:
        extra = {"submodule": ref.uri, "platform": platform}
        logger.info("解析: %s -> %s", ref.uri, ref.folder, extra=extra)

        # 标记已存在时不拉取索引，重复解析不产生网络访问
        folder = self.root / ref.folder
        if source:
            resolved = self.source.is_resolved(ref)
        else:
            resolved = self.binary.is_resolved(ref, platform) or self.source.is_resolved(ref)
        if resolved:
            logger.info("已就绪，跳过: %s", ref.folder, extra={**extra, "mode": MODE_SKIPPED})
            return ResolveOutcome(ref=ref, mode=MODE_SKIPPED, path=folder)

        index_uri = join_url(ref.uri, "index")
        index = RemoteIndex.from_lines(self.fetcher.fetch_lines(index_uri), uri=index_uri)

        folder.mkdir(parents=True, exist_ok=True)

        if source:
            mode = self.source.resolve(ref, index.source_uri)
        else:
            mode = self.binary.resolve(ref, platform, index)

        logger.info("已解析: %s [%s]", ref.folder, mode, extra={**extra, "mode": mode})
        return ResolveOutcome(ref=ref, mode=mode, path=folder)
