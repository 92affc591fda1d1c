"""二进制模式解析

确保 <folder>/<platform> 下存在已下载解压的平台包:

  1. <folder>/<platform>/.pkg 已存在，或 <folder> 已是源码 checkout → 已就绪，不访问网络
  2. 清空 <folder>/<platform>，并把 <folder> 加入排除清单
  3. ref 不在已发布列表中 → 回退源码模式
  4. 拉取 <uri>/<ref>/platforms，平台不在其中 → 回退源码模式
  5. 下载 <uri>/<ref>/<platform>.tar.gz，解压到 <folder>/<platform>，写入 .pkg

拉取或解压失败直接抛出，除第 2 步已清空的目录外不做清理。
"""

from __future__ import annotations

import io
import logging
import shutil
import tarfile
import zlib
from pathlib import Path

from submod.core.exceptions import ExtractionError
from submod.core.models import (
    MODE_BINARY,
    MODE_FALLBACK,
    MODE_SKIPPED,
    PACKAGE_MARKER,
    RemoteIndex,
    SubmoduleRef,
)
from submod.core.protocols import IndexFetcher
from submod.core.submodule.ledger import IgnoreLedger
from submod.core.submodule.source import SourceStrategy
from submod.utils.net import join_url

logger = logging.getLogger(__name__)


class BinaryStrategy:
    """二进制模式解析策略，无可用包时委托给 SourceStrategy"""

    def __init__(
        self,
        root: Path,
        fetcher: IndexFetcher,
        ledger: IgnoreLedger,
        source: SourceStrategy,
    ) -> None:
        self.root = root
        self.fetcher = fetcher
        self.ledger = ledger
        self.source = source

    def is_resolved(self, ref: SubmoduleRef, platform: str) -> bool:
        return (self.root / ref.folder / platform / PACKAGE_MARKER).exists()

    def resolve(self, ref: SubmoduleRef, platform: str, index: RemoteIndex) -> str:
        folder = self.root / ref.folder
        target = folder / platform
        if self.is_resolved(ref, platform):
            logger.info("二进制包已就绪: %s (%s)", ref.folder, platform)
            return MODE_SKIPPED

        # 已有源码 checkout（此前回退过）时保持原样，不重复写排除清单
        if self.source.is_resolved(ref):
            logger.info("已有源码 checkout，跳过二进制包: %s", ref.folder)
            return MODE_SKIPPED

        if target.exists():
            shutil.rmtree(target)
        self.ledger.mark_ignored(folder)

        if ref.git_ref not in index.published_refs:
            logger.info("ref %s 未发布二进制包，回退源码模式: %s", ref.git_ref, ref.folder)
            return self._fallback(ref, index)

        platforms = self.fetcher.fetch_lines(join_url(ref.uri, ref.git_ref, "platforms"))
        if platform not in platforms:
            logger.info(
                "ref %s 没有 %s 平台的包 (可用: %s)，回退源码模式",
                ref.git_ref, platform, ", ".join(platforms) or "无",
            )
            return self._fallback(ref, index)

        package_uri = join_url(ref.uri, ref.git_ref, f"{platform}.tar.gz")
        logger.info("  下载: %s", package_uri)
        data = self.fetcher.fetch_binary(package_uri)

        target.mkdir(parents=True, exist_ok=True)
        extract_package(data, target, label=package_uri)
        (target / PACKAGE_MARKER).touch()
        logger.info("二进制包就绪: %s@%s (%s)", ref.folder, ref.git_ref, platform)
        return MODE_BINARY

    def _fallback(self, ref: SubmoduleRef, index: RemoteIndex) -> str:
        mode = self.source.resolve(ref, index.source_uri)
        return MODE_SKIPPED if mode == MODE_SKIPPED else MODE_FALLBACK


def extract_package(data: bytes, dest: Path, *, label: str = "") -> None:
    """解压 gzip 压缩的 tar 包到 dest

    使用 tarfile 的 data 过滤器，拒绝绝对路径、越界路径和设备文件。
    """
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tf:
            tf.extractall(path=str(dest), filter="data")
    except (tarfile.TarError, zlib.error, EOFError, OSError) as e:
        raise ExtractionError(f"包解压失败: {label or dest} - {e}") from e
