"""集中配置管理

支持从 YAML 文件加载 + 命令行参数覆盖。
"""

from __future__ import annotations

import logging
import platform as _platform
from dataclasses import asdict, dataclass, field
from typing import Any

from submod.core.exceptions import ConfigError
from submod.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "configs/submod.yml"

# 主机系统名 → 包平台名
_HOST_PLATFORMS = {
    "Windows": "Windows",
    "Darwin": "MacOS",
    "Linux": "Linux",
}


def detect_platform() -> str:
    """按当前主机推断默认包平台名，未知系统回退为 Linux"""
    system = _platform.system()
    return _HOST_PLATFORMS.get(system, "Linux")


@dataclass
class Config:
    """全局配置"""

    # 声明子模块的模块清单
    module_file: str = "module.yml"

    # 解析
    platform: str = ""          # 空表示按主机自动推断
    source: bool = False        # True: 源码模式; False: 二进制模式（无包时回退源码）
    fetch_timeout: int = 60     # 单次远程请求超时（秒）

    # 放不到字段里的配置项
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def effective_platform(self) -> str:
        return self.platform or detect_platform()

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，文件不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        timeout = matched.get("fetch_timeout", 60)
        if not isinstance(timeout, int) or timeout <= 0:
            raise ConfigError(f"fetch_timeout 必须是正整数: {timeout!r} ({path})")
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
