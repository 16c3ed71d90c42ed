"""Tests for shellup CLI commands and command registration."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from shellup.cli import cli
from shellup.errors import GitError
from shellup.gitutils import BranchStatus


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner."""
    return CliRunner()


class TestCLIHelp:
    """Tests for CLI help output and command registration."""

    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "fast-starting" in result.output

    def test_main_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "shellup" in result.output.lower()

    def test_commands_registered(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for cmd in ["run", "tools", "branches", "config", "check-history"]:
            assert cmd in result.output, f"Command '{cmd}' not found in help output"

    @pytest.mark.parametrize("cmd", ["run", "tools", "branches", "config", "check-history"])
    def test_subcommand_help(self, runner: CliRunner, cmd: str) -> None:
        result = runner.invoke(cli, [cmd, "--help"])
        assert result.exit_code == 0


class TestRunCommand:
    def test_single_command_is_non_interactive(self, runner: CliRunner) -> None:
        with patch("shellup.session.start_shell", return_value=3) as start:
            result = runner.invoke(cli, ["run", "-c", "gbr"])

        assert result.exit_code == 3
        kwargs = start.call_args.kwargs
        assert kwargs["interactive"] is False
        assert kwargs["script"].read() == "gbr"

    def test_profile_option(self, runner: CliRunner, tmp_path: Path) -> None:
        entry = tmp_path / "profile.py"
        with patch("shellup.session.start_shell", return_value=0) as start:
            result = runner.invoke(cli, ["run", "--profile", str(entry), "--no-interactive"])

        assert result.exit_code == 0
        assert start.call_args.kwargs["profile_entry"] == entry
        assert start.call_args.kwargs["interactive"] is False


class TestCheckHistoryCommand:
    def test_recorded(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["check-history", "git status"])
        assert result.exit_code == 0
        assert "recorded" in result.output

    def test_redacted(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["check-history", "export GITHUB_TOKEN=abc"])
        assert result.exit_code == 1
        assert "redacted" in result.output


class TestConfigCommand:
    def test_prints_default(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0
        assert "[prompt]" in result.output

    def test_write(self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        result = runner.invoke(cli, ["config", "--write"])

        assert result.exit_code == 0
        assert (tmp_path / "shellup" / "config.toml").exists()

        again = runner.invoke(cli, ["config", "--write"])
        assert again.exit_code == 1

    def test_effective_honours_env(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHELLUP_PROMPT__ENGINE", "starship")
        result = runner.invoke(cli, ["config", "--effective"])

        assert result.exit_code == 0
        assert json.loads(result.output)["prompt"]["engine"] == "starship"


class TestToolsCommand:
    def test_json(self, runner: CliRunner) -> None:
        with patch("shellup.tools.shutil.which", side_effect=lambda n: "/usr/bin/git" if n == "git" else None):
            result = runner.invoke(cli, ["tools", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["git"]["path"] == "/usr/bin/git"
        assert data["fzf"]["path"] is None
        assert data["git"]["status"] == "present"
        assert data["fzf"]["status"] == "absent"
        assert list(data) == sorted(data)

    def test_table(self, runner: CliRunner) -> None:
        with patch("shellup.tools.shutil.which", return_value=None):
            result = runner.invoke(cli, ["tools"])
        assert result.exit_code == 0


class TestBranchesCommand:
    def test_json(self, runner: CliRunner) -> None:
        branches = [
            BranchStatus("merged", "origin/merged", 0, 1),
            BranchStatus("local"),
        ]
        with patch("shellup.gitutils.list_branches", return_value=branches):
            result = runner.invoke(cli, ["branches", "--json"])

        assert result.exit_code == 0
        data = {b["name"]: b for b in json.loads(result.output)}
        assert data["merged"]["safety"] == "safe"
        assert data["local"]["safety"] == "indeterminate"

    def test_cleanup_dry_run(self, runner: CliRunner) -> None:
        with patch("shellup.gitutils.cleanup_branches", return_value=["merged"]) as cleanup:
            result = runner.invoke(cli, ["branches", "--cleanup", "--dry-run", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"dry_run": True, "branches": ["merged"]}
        assert cleanup.call_args.kwargs["dry_run"] is True

    def test_git_error(self, runner: CliRunner) -> None:
        with patch("shellup.gitutils.list_branches", side_effect=GitError("Not a git repository")):
            result = runner.invoke(cli, ["branches"])
        assert result.exit_code == 4
