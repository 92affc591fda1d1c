"""git 命令执行器

基于 CommandExecutor 执行 git，非零退出码或 git 不可用时抛 VersionControlError。
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from submod.core.exceptions import VersionControlError
from submod.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)


class GitRunner:
    """在声明模块根目录（或其子目录）执行 git 命令"""

    def __init__(
        self,
        root: Path,
        executor: CommandExecutor | None = None,
        git: str = "git",
        timeout: int | None = None,
    ) -> None:
        self.root = root
        self.executor = executor or get_executor()
        self.git = git
        self.timeout = timeout

    def run(self, args: list[str], *, cwd: Path | None = None) -> CommandResult:
        workdir = cwd if cwd is not None else self.root
        line = " ".join([self.git, *args])
        logger.info("  git: %s (cwd=%s)", line, workdir)
        try:
            r = self.executor.execute(
                [self.git, *args], cwd=str(workdir), timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise VersionControlError(
                f"git 不可用: {e}", args_line=line,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise VersionControlError(
                f"git 命令超时: {line}", args_line=line,
            ) from e
        if not r.success:
            raise VersionControlError(
                f"git 命令失败 (rc={r.returncode}): {line} - {r.stderr.strip()[:500]}",
                args_line=line,
                returncode=r.returncode,
            )
        return r
