"""统一异常体系

所有业务异常继承 SubmodError，CLI 层据此输出友好提示（错误码 + 描述）。
核心解析流程不捕获、不重试任何异常：出错即终止当前子模块及整个解析过程。
"""

from __future__ import annotations


class SubmodError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(SubmodError):
    """配置文件或模块清单缺失、内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(SubmodError):
    """输入数据校验失败（URL 协议、ref 字符等）"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class RemoteFetchError(SubmodError):
    """远程索引 / 平台清单 / 包下载失败（网络错误、非 2xx、超时）"""

    code = "REMOTE_FETCH_ERROR"

    def __init__(self, message: str, uri: str = "") -> None:
        super().__init__(message)
        self.uri = uri


class InvalidIndexError(SubmodError):
    """远程索引为空或格式无效"""

    code = "INVALID_INDEX"

    def __init__(self, message: str, uri: str = "") -> None:
        super().__init__(message)
        self.uri = uri


class VersionControlError(SubmodError):
    """版本控制命令执行失败（非零退出码或 git 不可用）"""

    code = "VCS_ERROR"

    def __init__(
        self, message: str, args_line: str = "", returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.args_line = args_line
        self.returncode = returncode


class ExtractionError(SubmodError):
    """包解压失败（gzip / tar 流损坏）"""

    code = "EXTRACTION_ERROR"
