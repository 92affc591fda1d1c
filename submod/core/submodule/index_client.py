"""远程索引客户端

每次调用都执行一次同步 GET，不缓存、不重试；
任何网络错误、非 2xx 响应或超时都转换为 RemoteFetchError 直接抛出。
"""

from __future__ import annotations

import logging
import re
import urllib.error
import urllib.request

from submod.core.exceptions import RemoteFetchError, ValidationError
from submod.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(r"[\r\n]+")


class RemoteIndexClient:
    """索引协议客户端: fetch_lines 拉取文本列表, fetch_binary 拉取包归档"""

    def __init__(self, timeout: int = 60) -> None:
        self.timeout = timeout

    def fetch_lines(self, uri: str) -> list[str]:
        data = self._get(uri)
        text = data.decode("utf-8-sig", errors="replace")
        return [line for line in _LINE_SPLIT_RE.split(text) if line]

    def fetch_binary(self, uri: str) -> bytes:
        return self._get(uri)

    def _get(self, uri: str) -> bytes:
        try:
            validate_url_scheme(uri, context="submodule index")
        except ValidationError as e:
            raise RemoteFetchError(str(e), uri=uri) from e

        logger.debug("GET %s", uri)
        try:
            with urllib.request.urlopen(uri, timeout=self.timeout) as resp:  # nosec B310
                status = getattr(resp, "status", 200)
                if not 200 <= status < 300:
                    raise RemoteFetchError(f"请求失败 (HTTP {status}): {uri}", uri=uri)
                return resp.read()
        except urllib.error.HTTPError as e:
            logger.error("拉取失败: %s (HTTP %s)", uri, e.code)
            raise RemoteFetchError(f"请求失败 (HTTP {e.code}): {uri}", uri=uri) from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            logger.error("拉取失败: %s - %s", uri, e)
            raise RemoteFetchError(f"请求失败: {uri} - {e}", uri=uri) from e
