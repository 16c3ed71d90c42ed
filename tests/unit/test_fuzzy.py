"""Tests for fzf selection."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from shellup.errors import ToolError, ToolNotFoundError
from shellup.fuzzy import pick
from shellup.tools import ToolProbe


@pytest.fixture
def probe() -> ToolProbe:
    """Probe with fzf on PATH."""
    probe = ToolProbe()
    with patch("shellup.tools.shutil.which", return_value="/usr/bin/fzf"):
        probe.probe("fzf")
    return probe


class TestPick:
    """Tests for pick()."""

    def test_empty_candidates_skip_fzf(self, probe: ToolProbe) -> None:
        """Nothing to choose from means no fzf process at all."""
        with patch("shellup.fuzzy.subprocess.run") as run:
            assert pick([], probe) is None
            assert pick(["", ""], probe) is None
        run.assert_not_called()

    def test_missing_fzf_raises(self) -> None:
        probe = ToolProbe()
        with patch("shellup.tools.shutil.which", return_value=None):
            with pytest.raises(ToolNotFoundError):
                pick(["a"], probe)

    def test_returns_selection(self, probe: ToolProbe) -> None:
        result = subprocess.CompletedProcess([], 0, stdout="feature/x\n")
        with patch("shellup.fuzzy.subprocess.run", return_value=result) as run:
            assert pick(["main", "feature/x"], probe, prompt="branch") == "feature/x"

        args = run.call_args[0][0]
        assert args[0] == "/usr/bin/fzf"
        assert "--prompt=branch> " in args
        assert run.call_args.kwargs["input"] == "main\nfeature/x"

    @pytest.mark.parametrize("code", [1, 130])
    def test_cancel_returns_none(self, probe: ToolProbe, code: int) -> None:
        """No match (1) and Esc/Ctrl-C (130) are cancellations."""
        result = subprocess.CompletedProcess([], code, stdout="")
        with patch("shellup.fuzzy.subprocess.run", return_value=result):
            assert pick(["a", "b"], probe) is None

    def test_other_failure_raises(self, probe: ToolProbe) -> None:
        result = subprocess.CompletedProcess([], 2, stdout="")
        with patch("shellup.fuzzy.subprocess.run", return_value=result):
            with pytest.raises(ToolError):
                pick(["a"], probe)

    def test_query_passed(self, probe: ToolProbe) -> None:
        result = subprocess.CompletedProcess([], 0, stdout="dev\n")
        with patch("shellup.fuzzy.subprocess.run", return_value=result) as run:
            pick(["dev", "prod"], probe, query="de")
        assert "--query=de" in run.call_args[0][0]
