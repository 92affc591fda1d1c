"""版本控制排除清单维护

二进制模式的子模块目录写入所在仓库的 .git/info/exclude，对版本控制隐藏；
目录转为源码 checkout 时再从清单中移除。

清单按行读写，每次操作都整体重写文件。标记不去重（重复标记会产生重复行），
取消标记只删除第一处匹配。没有加锁，只支持单进程顺序调用。
"""

from __future__ import annotations

import logging
from pathlib import Path

from submod.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

REPO_MARKER_DIR = ".git"


class IgnoreLedger:
    """.git/info/exclude 排除清单"""

    @staticmethod
    def find_repo_root(folder: Path, *, include_self: bool = False) -> Path | None:
        """从 folder 的上级目录开始向上查找包含 .git 目录的仓库根目录，找不到返回 None

        默认 folder 自身不参与查找：目录不能把自己写进自己的排除清单。
        """
        current = folder.resolve()
        candidates = (current, *current.parents) if include_self else current.parents
        for candidate in candidates:
            if (candidate / REPO_MARKER_DIR).is_dir():
                return candidate
        return None

    def exclude_path(self, folder: Path, *, include_self: bool = False) -> Path | None:
        root = self.find_repo_root(folder, include_self=include_self)
        if root is None:
            return None
        return root / REPO_MARKER_DIR / "info" / "exclude"

    def mark_ignored(self, folder: Path) -> None:
        located = self._locate(folder)
        if located is None:
            return
        exclude, entry = located
        lines = self._read(exclude)
        lines.append(entry)
        self._write(exclude, lines)
        logger.debug("已加入排除清单: %s -> %s", entry, exclude)

    def unmark_ignored(self, folder: Path) -> None:
        located = self._locate(folder)
        if located is None:
            return
        exclude, entry = located
        lines = self._read(exclude)
        if entry in lines:
            lines.remove(entry)
            logger.debug("已移出排除清单: %s -> %s", entry, exclude)
        self._write(exclude, lines)

    def entries(self, folder: Path, *, include_self: bool = False) -> list[str]:
        """读取 folder 所在仓库的排除清单（无仓库时为空）"""
        exclude = self.exclude_path(folder, include_self=include_self)
        if exclude is None:
            return []
        return self._read(exclude)

    def _locate(self, folder: Path) -> tuple[Path, str] | None:
        """返回 (排除文件路径, 清单条目)；条目为 folder 相对仓库根的 POSIX 路径"""
        root = self.find_repo_root(folder)
        if root is None:
            logger.debug("未找到版本控制根目录，跳过排除清单: %s", folder)
            return None
        entry = folder.resolve().relative_to(root).as_posix()
        return root / REPO_MARKER_DIR / "info" / "exclude", entry

    @staticmethod
    def _read(exclude: Path) -> list[str]:
        if not exclude.exists():
            return []
        return exclude.read_text(encoding="utf-8").splitlines()

    @staticmethod
    def _write(exclude: Path, lines: list[str]) -> None:
        atomic_write(exclude, "".join(f"{line}\n" for line in lines))
