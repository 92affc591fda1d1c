"""子模块解析入口测试 — 顺序、遇错即停、幂等"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from conftest import FakeFetcher, FakeVcs, make_tarball

from submod.core.exceptions import InvalidIndexError, RemoteFetchError
from submod.core.models import (
    MODE_BINARY,
    MODE_FALLBACK,
    MODE_SKIPPED,
    MODE_SOURCE,
    SubmoduleRef,
)
from submod.core.submodule.resolver import SubmoduleResolver

LIB = SubmoduleRef(uri="https://p.example.com/lib", folder="Libraries/Lib", git_ref="v1")
UTIL = SubmoduleRef(uri="https://p.example.com/util/", folder="Libraries/Util", git_ref="v2")


def _documents() -> dict[str, str | bytes]:
    return {
        "https://p.example.com/lib/index": "https://git.example.com/lib.git\nv1\n",
        "https://p.example.com/lib/v1/platforms": "Linux\n",
        "https://p.example.com/lib/v1/Linux.tar.gz": make_tarball({"lib.so": b"x"}),
        "https://p.example.com/util/index": "https://git.example.com/util.git\n",
    }


class TestResolveAll:
    def test_binary_and_fallback_in_order(self, repo_root: Path) -> None:
        fetcher = FakeFetcher(_documents())
        vcs = FakeVcs(repo_root)
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=vcs)

        outcomes = resolver.resolve_all([LIB, UTIL], "Linux", source=False)

        assert [o.mode for o in outcomes] == [MODE_BINARY, MODE_FALLBACK]
        assert [o.path for o in outcomes] == [
            repo_root / "Libraries/Lib", repo_root / "Libraries/Util",
        ]
        assert fetcher.calls[0] == "https://p.example.com/lib/index"
        assert "https://p.example.com/util/index" in fetcher.calls
        assert "submodule add -- https://git.example.com/util.git Libraries/Util" in vcs.commands

    def test_source_mode_skips_packages(self, repo_root: Path) -> None:
        fetcher = FakeFetcher(_documents())
        vcs = FakeVcs(repo_root)
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=vcs)

        outcomes = resolver.resolve_all([LIB], "Linux", source=True)

        assert outcomes[0].mode == MODE_SOURCE
        assert fetcher.calls == ["https://p.example.com/lib/index"]
        assert "submodule add -- https://git.example.com/lib.git Libraries/Lib" in vcs.commands

    @pytest.mark.parametrize("refs", [None, []])
    def test_no_submodules(self, repo_root: Path, refs: list[SubmoduleRef] | None) -> None:
        fetcher = FakeFetcher()
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=FakeVcs(repo_root))
        assert resolver.resolve_all(refs, "Linux", source=False) == []
        assert fetcher.calls == []

    def test_fail_fast(self, repo_root: Path) -> None:
        docs = _documents()
        del docs["https://p.example.com/lib/index"]
        fetcher = FakeFetcher(docs)
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=FakeVcs(repo_root))

        with pytest.raises(RemoteFetchError):
            resolver.resolve_all([LIB, UTIL], "Linux", source=False)
        assert fetcher.calls == ["https://p.example.com/lib/index"]
        assert not (repo_root / "Libraries" / "Util").exists()

    def test_logs_progress_per_reference(
        self, repo_root: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        resolver = SubmoduleResolver(
            repo_root, fetcher=FakeFetcher(_documents()), vcs=FakeVcs(repo_root),
        )
        with caplog.at_level(logging.INFO, logger="submod"):
            resolver.resolve_all([LIB, UTIL], "Linux", source=False)

        messages = [r.getMessage() for r in caplog.records]
        assert "解析: https://p.example.com/lib -> Libraries/Lib" in messages
        assert "已解析: Libraries/Util [source-fallback]" in messages
        assert messages[-1] == "子模块解析完成"


class TestInvalidIndex:
    def test_empty_index(self, repo_root: Path) -> None:
        fetcher = FakeFetcher({"https://p.example.com/lib/index": "\n\r\n"})
        vcs = FakeVcs(repo_root)
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=vcs)

        with pytest.raises(InvalidIndexError) as exc_info:
            resolver.resolve(LIB, "Linux", source=False)

        assert exc_info.value.uri == "https://p.example.com/lib/index"
        assert not (repo_root / "Libraries").exists()
        assert vcs.calls == []

    def test_option_like_source_uri_never_reaches_git(self, repo_root: Path) -> None:
        fetcher = FakeFetcher({"https://p.example.com/lib/index": "--reference=/tmp/evil\nv1\n"})
        vcs = FakeVcs(repo_root)
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=vcs)

        for source in (True, False):
            with pytest.raises(InvalidIndexError, match="源码地址非法"):
                resolver.resolve(LIB, "Linux", source=source)

        assert vcs.calls == []
        assert not (repo_root / "Libraries").exists()


class TestIdempotence:
    @pytest.mark.parametrize("source", [True, False])
    def test_second_run_no_network_no_mutation(self, repo_root: Path, source: bool) -> None:
        fetcher = FakeFetcher(_documents())
        vcs = FakeVcs(repo_root)
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=vcs)
        resolver.resolve(LIB, "Linux", source=source)

        exclude = repo_root / ".git" / "info" / "exclude"
        before = exclude.read_text() if exclude.exists() else None
        fetches, commands = len(fetcher.calls), len(vcs.calls)

        outcome = resolver.resolve(LIB, "Linux", source=source)

        assert outcome.mode == MODE_SKIPPED
        assert not outcome.changed
        assert len(fetcher.calls) == fetches
        assert len(vcs.calls) == commands
        assert (exclude.read_text() if exclude.exists() else None) == before

    def test_repeated_binary_runs_after_fallback(self, repo_root: Path) -> None:
        """回退到源码后再以二进制模式解析：不重复写排除清单，不再访问网络"""
        fetcher = FakeFetcher(_documents())
        vcs = FakeVcs(repo_root)
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=vcs)
        exclude = repo_root / ".git" / "info" / "exclude"

        modes = [resolver.resolve(UTIL, "Linux", source=False).mode]
        fetches, commands = len(fetcher.calls), len(vcs.calls)
        modes += [resolver.resolve(UTIL, "Linux", source=False).mode for _ in range(2)]

        assert modes == [MODE_FALLBACK, MODE_SKIPPED, MODE_SKIPPED]
        lines = exclude.read_text().splitlines() if exclude.exists() else []
        assert "Libraries/Util" not in lines
        assert len(fetcher.calls) == fetches
        assert len(vcs.calls) == commands

    def test_binary_mode_keeps_existing_checkout(self, repo_root: Path) -> None:
        folder = repo_root / "Libraries" / "Lib"
        folder.mkdir(parents=True)
        (folder / ".git").write_text("gitdir: x\n")
        fetcher = FakeFetcher(_documents())
        resolver = SubmoduleResolver(repo_root, fetcher=fetcher, vcs=FakeVcs(repo_root))

        assert resolver.resolve(LIB, "Linux", source=False).mode == MODE_SKIPPED
        assert fetcher.calls == []
        assert not (folder / "Linux").exists()


class TestState:
    def test_state_reports_markers(self, repo_root: Path) -> None:
        resolver = SubmoduleResolver(repo_root, fetcher=FakeFetcher(), vcs=FakeVcs(repo_root))
        assert resolver.state(LIB, "Linux") == "missing"

        (repo_root / "Libraries" / "Lib" / "Linux").mkdir(parents=True)
        (repo_root / "Libraries" / "Lib" / "Linux" / ".pkg").touch()
        assert resolver.state(LIB, "Linux") == MODE_BINARY

        (repo_root / "Libraries" / "Util").mkdir(parents=True)
        (repo_root / "Libraries" / "Util" / ".git").write_text("gitdir: x\n")
        assert resolver.state(UTIL, "Linux") == MODE_SOURCE
