"""Tests for built-in shell functions."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from shellup.config import ShellupConfig
from shellup.context import SessionContext
from shellup.errors import ToolError
from shellup.functions import FunctionRegistry
from shellup.functions import docker, git, kube, nav, zoxide
from shellup.gitutils import BranchStatus
from shellup.host import PromptToolkitHost
from shellup.tools import ToolProbe


@pytest.fixture
def host(tmp_path: Path) -> PromptToolkitHost:
    return PromptToolkitHost(tmp_path / "history", interactive=False)


@pytest.fixture
def probe() -> MagicMock:
    probe = MagicMock(spec=ToolProbe)
    probe.has.return_value = True
    return probe


@pytest.fixture
def ctx(host: PromptToolkitHost, probe: MagicMock, tmp_path: Path) -> SessionContext:
    context = SessionContext(
        config=ShellupConfig(),
        probe=probe,
        host=host,
        profile_entry=tmp_path / "profile.py",
    )
    host.context = context
    return context


# =============================================================================
# Registry
# =============================================================================


class TestFunctionRegistry:
    def test_help_from_docstring(self) -> None:
        registry = FunctionRegistry()

        def sample(ctx, args):
            """Do the thing.

            More detail.
            """

        registry.register("sample", sample)
        assert registry.get("sample").help == "Do the thing."

    def test_command_decorator_aliases(self) -> None:
        registry = FunctionRegistry()

        @registry.command("ll", "la", help="List")
        def listing(ctx, args):
            return 0

        assert registry.names() == ["la", "ll"]
        assert len(registry) == 2
        assert [f.name for f in registry] == ["la", "ll"]

    def test_redefine(self) -> None:
        registry = FunctionRegistry()
        registry.register("x", lambda ctx, args: 1)
        registry.register("x", lambda ctx, args: 2)
        assert registry.get("x").func(None, []) == 2


# =============================================================================
# Navigation
# =============================================================================


class TestNavigation:
    def test_up_and_back(self, ctx: SessionContext, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        deep = tmp_path / "a" / "b" / "c"
        deep.mkdir(parents=True)
        monkeypatch.chdir(deep)

        assert nav.up_two(ctx, []) == 0
        assert Path.cwd() == (tmp_path / "a").resolve()

        assert nav.back(ctx, []) == 0
        assert Path.cwd() == deep.resolve()

        assert nav.up_one(ctx, []) == 0
        assert Path.cwd() == (tmp_path / "a" / "b").resolve()

    def test_back_without_history(self, ctx: SessionContext) -> None:
        assert nav.back(ctx, []) == 1

    def test_home(self, ctx: SessionContext, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.chdir("/")
        assert nav.home(ctx, []) == 0
        assert Path.cwd() == tmp_path.resolve()

    def test_register_defines_all(self) -> None:
        registry = FunctionRegistry()
        nav.register(registry)
        assert set(nav.NAVIGATION_FUNCTIONS) <= set(registry.names())

    def test_edit_profile_uses_editor(
        self, ctx: SessionContext, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.setenv("EDITOR", "code --wait")
        target = tmp_path / "notes.py"

        with patch("shellup.functions.nav.subprocess.call", return_value=0) as call:
            assert nav.edit_profile(ctx, [str(target)]) == 0

        call.assert_called_once_with(["code", "--wait", str(target)])


# =============================================================================
# Git
# =============================================================================


class TestGitFunctions:
    def test_switch_named_branch(self, ctx: SessionContext) -> None:
        with patch("shellup.functions.git.supports_switch", return_value=True), patch(
            "shellup.functions.git.switch_branch"
        ) as switch:
            assert git.git_switch(ctx, ["feature"]) == 0
        switch.assert_called_once_with("feature", use_switch=True)

    def test_switch_picks_with_fzf(self, ctx: SessionContext) -> None:
        with patch("shellup.functions.git.branch_names", return_value=["main", "dev"]), patch(
            "shellup.functions.git.pick", return_value="dev"
        ), patch("shellup.functions.git.supports_switch", return_value=False), patch(
            "shellup.functions.git.switch_branch"
        ) as switch:
            assert git.git_switch(ctx, []) == 0
        switch.assert_called_once_with("dev", use_switch=False)

    def test_switch_cancelled(self, ctx: SessionContext) -> None:
        with patch("shellup.functions.git.branch_names", return_value=["main"]), patch(
            "shellup.functions.git.pick", return_value=None
        ), patch("shellup.functions.git.switch_branch") as switch:
            assert git.git_switch(ctx, []) == 0
        switch.assert_not_called()

    def test_switch_without_git(self, ctx: SessionContext, probe: MagicMock) -> None:
        probe.has.return_value = False
        assert git.git_switch(ctx, ["main"]) == 1

    def test_cleanup_dry_run_flag(self, ctx: SessionContext) -> None:
        with patch("shellup.functions.git.cleanup_branches", return_value=["old"]) as cleanup:
            assert git.git_cleanup(ctx, ["-n"]) == 0
        cleanup.assert_called_once_with(dry_run=True)

    def test_branch_table(self) -> None:
        table = git.branch_table(
            [
                BranchStatus("main", "origin/main", 0, 0, is_current=True),
                BranchStatus("old", "origin/old", upstream_gone=True),
            ]
        )
        assert table.row_count == 2


# =============================================================================
# kubectl
# =============================================================================


class TestKubeTools:
    def test_contexts_cached(self, probe: MagicMock) -> None:
        probe.lines.return_value = ["dev", "prod"]
        kube_tools = kube.KubeTools(probe)

        assert kube_tools.contexts() == ["dev", "prod"]
        assert kube_tools.contexts() == ["dev", "prod"]
        assert probe.lines.call_count == 1

        kube_tools.contexts(refresh=True)
        assert probe.lines.call_count == 2

    def test_namespaces_per_context(self, probe: MagicMock) -> None:
        probe.output.side_effect = ["dev", "dev", "prod"]
        probe.lines.side_effect = [["namespace/default", "namespace/app"], ["namespace/kube-system"]]
        kube_tools = kube.KubeTools(probe)

        assert kube_tools.namespaces() == ["default", "app"]
        assert kube_tools.namespaces() == ["default", "app"]
        assert kube_tools.namespaces() == ["kube-system"]

    def test_kctx_with_name(self, ctx: SessionContext, probe: MagicMock) -> None:
        assert kube.kube_context(ctx, ["prod"]) == 0
        probe.run.assert_called_once_with(["kubectl", "config", "use-context", "prod"], timeout=10.0)

    def test_kns_picks_with_fzf(self, ctx: SessionContext, probe: MagicMock) -> None:
        probe.output.return_value = "dev"
        probe.lines.return_value = ["namespace/app"]
        with patch("shellup.functions.kube.pick", return_value="app"):
            assert kube.kube_namespace(ctx, []) == 0
        probe.run.assert_called_once_with(
            ["kubectl", "config", "set-context", "--current", "--namespace=app"], timeout=10.0
        )

    def test_kctx_tool_error(self, ctx: SessionContext, probe: MagicMock) -> None:
        probe.run.side_effect = ToolError("no such context", tool="kubectl")
        assert kube.kube_context(ctx, ["nope"]) == 1


# =============================================================================
# docker
# =============================================================================


class TestDocker:
    def test_dps(self, ctx: SessionContext, probe: MagicMock) -> None:
        probe.lines.return_value = ["web", "db"]
        assert docker.docker_ps(ctx, []) == 0
        probe.lines.assert_called_once_with(["docker", "ps", "--format", "{{.Names}}"], timeout=10.0)

    def test_dsh_named(self, ctx: SessionContext) -> None:
        with patch("shellup.functions.docker.subprocess.call", return_value=0) as call:
            assert docker.docker_shell(ctx, ["web", "bash"]) == 0
        call.assert_called_once_with(["docker", "exec", "-it", "web", "bash"])

    def test_dsh_cancelled(self, ctx: SessionContext, probe: MagicMock) -> None:
        probe.lines.return_value = ["web"]
        with patch("shellup.functions.docker.pick", return_value=None), patch(
            "shellup.functions.docker.subprocess.call"
        ) as call:
            assert docker.docker_shell(ctx, []) == 0
        call.assert_not_called()

    def test_dprune_without_docker(self, ctx: SessionContext, probe: MagicMock) -> None:
        probe.has.return_value = False
        assert docker.docker_prune(ctx, []) == 1


# =============================================================================
# zoxide
# =============================================================================


class TestZoxide:
    def test_existing_directory_skips_query(
        self, ctx: SessionContext, probe: MagicMock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "proj").mkdir()
        monkeypatch.chdir(tmp_path)

        assert zoxide.z(ctx, ["proj"]) == 0
        assert Path.cwd() == (tmp_path / "proj").resolve()
        probe.output.assert_not_called()

    def test_keyword_query(
        self, ctx: SessionContext, probe: MagicMock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = tmp_path / "deep" / "project"
        target.mkdir(parents=True)
        monkeypatch.chdir(tmp_path)
        probe.output.return_value = str(target)

        assert zoxide.z(ctx, ["proj", "dee"]) == 0
        assert Path.cwd() == target.resolve()
        args = probe.output.call_args.args[0]
        assert args[:3] == ["zoxide", "query", "--exclude"]
        assert args[-3:] == ["--", "proj", "dee"]

    def test_no_match(self, ctx: SessionContext, probe: MagicMock) -> None:
        probe.output.side_effect = ToolError("no match found", tool="zoxide", returncode=1)
        assert zoxide.z(ctx, ["nothing-like-this"]) == 1

    def test_install_adds_hook(self, ctx: SessionContext, host: PromptToolkitHost, probe: MagicMock) -> None:
        zoxide.install(ctx)

        assert "z" in host.functions
        assert "zi" in host.functions
        hook = host.directory_hooks[-1]
        hook(Path("/tmp"))
        probe.run.assert_called_once_with(["zoxide", "add", "--", "/tmp"], timeout=2.0)
