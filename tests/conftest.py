"""共享 fixture — 假索引服务 + 假 git 执行器 + 内存 tar 包

  FakeFetcher   按 URI 返回预置文本/字节，记录每次请求，未预置的 URI 抛 RemoteFetchError
  FakeVcs       记录 git 调用；submodule add 时模拟生成 <folder>/.git
  RegisteredVcs 子模块已注册：submodule update 即生成 .git
  make_tarball  在内存中构造 .tar.gz 字节
"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path

import pytest

from submod.core.exceptions import RemoteFetchError, VersionControlError
from submod.utils.shell import CommandResult


class FakeFetcher:
    def __init__(self, documents: dict[str, str | bytes] | None = None) -> None:
        self.documents: dict[str, str | bytes] = dict(documents or {})
        self.calls: list[str] = []

    def fetch_lines(self, uri: str) -> list[str]:
        data = self._get(uri)
        text = data.decode() if isinstance(data, bytes) else data
        return [line for line in text.replace("\r", "\n").split("\n") if line]

    def fetch_binary(self, uri: str) -> bytes:
        data = self._get(uri)
        return data.encode() if isinstance(data, str) else data

    def _get(self, uri: str) -> str | bytes:
        self.calls.append(uri)
        if uri not in self.documents:
            raise RemoteFetchError(f"请求失败 (HTTP 404): {uri}", uri=uri)
        return self.documents[uri]


class FakeVcs:
    def __init__(self, root: Path, *, fail_on: str = "") -> None:
        self.root = root
        self.fail_on = fail_on
        self.calls: list[tuple[tuple[str, ...], Path | None]] = []

    def run(self, args: list[str], *, cwd: Path | None = None) -> CommandResult:
        self.calls.append((tuple(args), cwd))
        line = " ".join(args)
        if self.fail_on and line.startswith(self.fail_on):
            raise VersionControlError(f"git 命令失败 (rc=1): git {line}", args_line=line, returncode=1)
        if args[:2] == ["submodule", "add"]:
            folder = self.root / args[-1]
            folder.mkdir(parents=True, exist_ok=True)
            (folder / ".git").write_text("gitdir: ../.git/modules/x\n")
        return CommandResult(returncode=0, stdout="", stderr="")

    @property
    def commands(self) -> list[str]:
        return [" ".join(args) for args, _ in self.calls]


class RegisteredVcs(FakeVcs):
    """子模块已在 .gitmodules 中注册：update --init 即检出所有 folder"""

    def __init__(self, root: Path, folders: list[str]) -> None:
        super().__init__(root)
        self.folders = folders

    def run(self, args: list[str], *, cwd: Path | None = None) -> CommandResult:
        result = super().run(args, cwd=cwd)
        if args[:2] == ["submodule", "update"]:
            for f in self.folders:
                (self.root / f).mkdir(parents=True, exist_ok=True)
                (self.root / f / ".git").write_text("gitdir: ../.git/modules/x\n")
        return result


def make_tarball(files: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tf.addfile(info, io.BytesIO(content))
    return buf.getvalue()


@pytest.fixture()
def repo_root(tmp_path: Path) -> Path:
    """带 .git 目录的声明模块根目录"""
    root = tmp_path / "project"
    (root / ".git" / "info").mkdir(parents=True)
    return root
