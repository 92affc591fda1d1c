"""模块清单加载

从 YAML 模块清单读取声明的子模块列表:

    name: MyProject
    submodules:
      - uri: https://packages.example.com/lib
        folder: Libraries/Lib
        ref: v1

模块根目录为清单文件所在目录，folder 相对于该目录。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from submod.core.exceptions import ConfigError, ValidationError
from submod.core.models import ModuleInfo, SubmoduleRef
from submod.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

_SAFE_REF_RE = re.compile(r"^[a-zA-Z0-9_./@\-]+$")


def validate_ref(git_ref: str) -> None:
    """ref 会直接作为 git 参数和 URL 路径段使用，只允许安全字符"""
    if not _SAFE_REF_RE.match(git_ref) or git_ref.startswith("-"):
        raise ValidationError(f"ref 包含非法字符: {git_ref}")


def validate_folder(folder: str) -> None:
    """folder 必须是模块根目录下的相对路径"""
    p = PurePosixPath(folder.replace("\\", "/"))
    if p.is_absolute() or ".." in p.parts or not p.parts or folder.startswith("-"):
        raise ValidationError(f"子模块目录必须是模块内的相对路径: {folder}")


class ModuleRegistry:
    """模块清单 - 从 YAML 文件加载子模块声明"""

    def __init__(self, module_path: Path) -> None:
        self.module_path = module_path

    def load(self) -> ModuleInfo:
        if not self.module_path.exists():
            raise ConfigError(f"模块清单不存在: {self.module_path}")

        try:
            data = load_yaml(self.module_path)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"模块清单无法解析: {self.module_path} - {e}") from e

        root = self.module_path.resolve().parent
        name = str(data.get("name") or root.name)
        submodules = [
            self._parse_entry(i, entry)
            for i, entry in enumerate(data.get("submodules") or [])
        ]

        seen: set[str] = set()
        for ref in submodules:
            key = PurePosixPath(ref.folder).as_posix()
            if key in seen:
                raise ConfigError(f"子模块目录重复: {ref.folder}")
            seen.add(key)

        logger.info("已加载模块 %s: %d 个子模块", name, len(submodules))
        return ModuleInfo(name=name, root=root, submodules=submodules)

    def _parse_entry(self, index: int, entry: Any) -> SubmoduleRef:
        if not isinstance(entry, dict):
            raise ConfigError(f"submodules[{index}] 必须是映射: {entry!r}")
        uri = str(entry.get("uri") or "").strip()
        folder = str(entry.get("folder") or "").strip()
        if not uri or not folder:
            raise ConfigError(
                f"submodules[{index}] 缺少 uri 或 folder ({self.module_path})"
            )
        git_ref = str(entry.get("ref") or "master").strip()
        validate_folder(folder)
        validate_ref(git_ref)
        return SubmoduleRef(uri=uri, folder=folder, git_ref=git_ref)
