"""Tests for external-tool completers."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document

from shellup.completion import (
    ArgcompleteCompleter,
    CobraCompleter,
    DispatchCompleter,
    DotnetCompleter,
    ZoxideCompleter,
)
from shellup.completion.completers import ToolCompleter, split_command_line
from shellup.errors import ToolError
from shellup.functions import FunctionRegistry
from shellup.tools import ToolProbe


def complete(completer, text: str) -> list[str]:
    document = Document(text, len(text))
    return [c.text for c in completer.get_completions(document, CompleteEvent())]


@pytest.fixture
def probe() -> MagicMock:
    return MagicMock(spec=ToolProbe)


class TestSplitCommandLine:
    def test_trailing_space_starts_new_word(self) -> None:
        assert split_command_line("kubectl get ") == ["kubectl", "get", ""]

    def test_partial_word(self) -> None:
        assert split_command_line("kubectl ge") == ["kubectl", "ge"]

    def test_unbalanced_quote(self) -> None:
        assert split_command_line('echo "abc') == ["echo", '"abc']

    def test_empty(self) -> None:
        assert split_command_line("") == [""]


# =============================================================================
# Guards
# =============================================================================


class TestToolCompleterGuards:
    """The min-chars guard and error absorption shared by every completer."""

    class Recording(ToolCompleter):
        tool = "demo"

        def __init__(self, *args, results=(), error=None, **kwargs) -> None:
            super().__init__(*args, **kwargs)
            self.results = list(results)
            self.error = error
            self.calls: list[tuple[str, int]] = []

        def candidates(self, line: str, point: int) -> list[tuple[str, str]]:
            self.calls.append((line, point))
            if self.error is not None:
                raise self.error
            return self.results

    def test_candidates_must_be_implemented(self, probe: MagicMock) -> None:
        class NoCandidates(ToolCompleter):
            tool = "demo"

        with pytest.raises(TypeError):
            NoCandidates(probe)

    def test_empty_word_never_calls_tool(self, probe: MagicMock) -> None:
        completer = self.Recording(probe, results=[("x", "")])
        assert complete(completer, "demo ") == []
        assert completer.calls == []

    def test_min_chars_is_at_least_one(self, probe: MagicMock) -> None:
        completer = self.Recording(probe, min_chars=0)
        assert completer.min_chars == 1

    def test_short_word_below_threshold(self, probe: MagicMock) -> None:
        completer = self.Recording(probe, min_chars=3, results=[("build", "")])
        assert complete(completer, "demo bu") == []
        assert completer.calls == []
        assert complete(completer, "demo bui") == ["build"]

    def test_prefix_filter(self, probe: MagicMock) -> None:
        completer = self.Recording(probe, results=[("build", ""), ("test", "")])
        assert complete(completer, "demo b") == ["build"]

    def test_tool_error_yields_nothing(self, probe: MagicMock) -> None:
        completer = self.Recording(probe, error=ToolError("timed out", tool="demo"))
        assert complete(completer, "demo b") == []
        assert len(completer.calls) == 1


# =============================================================================
# Protocols
# =============================================================================


class TestDotnetCompleter:
    def test_invokes_complete_with_position(self, probe: MagicMock) -> None:
        probe.lines.return_value = ["build", "build-server"]
        completer = DotnetCompleter(probe, timeout=0.5)

        assert complete(completer, "dotnet bu") == ["build", "build-server"]
        probe.lines.assert_called_once_with(
            ["dotnet", "complete", "--position", "9", "dotnet bu"], timeout=0.5
        )


class TestCobraCompleter:
    def test_parses_descriptions_and_skips_directive(self, probe: MagicMock) -> None:
        probe.run.return_value = subprocess.CompletedProcess(
            [], 0, stdout="get\tDisplay resources\ngraph\n:4\n", stderr=""
        )
        completer = CobraCompleter(probe, "kubectl")

        assert completer.candidates("kubectl g", 9) == [
            ("get", "Display resources"),
            ("graph", ""),
        ]
        probe.run.assert_called_once_with(
            ["kubectl", "__complete", "g"], timeout=1.5, check=False
        )

    def test_display_meta(self, probe: MagicMock) -> None:
        probe.run.return_value = subprocess.CompletedProcess(
            [], 0, stdout="ps\tList containers\n:4\n", stderr=""
        )
        completer = CobraCompleter(probe, "docker")
        document = Document("docker p", 8)
        (completion,) = list(completer.get_completions(document, CompleteEvent()))

        assert completion.text == "ps"
        assert completion.start_position == -1
        assert completion.display_meta_text == "List containers"


class TestArgcompleteCompleter:
    def test_reads_candidates_from_tempfile(self, probe: MagicMock) -> None:
        seen: dict[str, str] = {}

        def fake_run(args, timeout=None, env=None, check=True):
            seen.update(env)
            Path(env["_ARGCOMPLETE_STDOUT_FILENAME"]).write_text("vm\nvmss\n")
            return subprocess.CompletedProcess(args, 0, stdout="", stderr="")

        probe.run.side_effect = fake_run
        completer = ArgcompleteCompleter(probe)

        assert complete(completer, "az v") == ["vm", "vmss"]
        assert seen["_ARGCOMPLETE"] == "1"
        assert seen["_ARGCOMPLETE_SHELL"] == "bash"
        assert seen["COMP_LINE"] == "az v"
        assert seen["COMP_POINT"] == "4"
        assert not Path(seen["_ARGCOMPLETE_STDOUT_FILENAME"]).exists()


class TestZoxideCompleter:
    def test_paths_replace_keyword(self, probe: MagicMock) -> None:
        probe.lines.return_value = ["/home/u/src/proj", "/srv/proj"]
        completer = ZoxideCompleter(probe)

        assert complete(completer, "z proj") == ["/home/u/src/proj", "/srv/proj"]
        probe.lines.assert_called_once_with(
            ["zoxide", "query", "--list", "--", "proj"], timeout=1.5
        )


# =============================================================================
# Dispatch
# =============================================================================


class TestDispatchCompleter:
    @pytest.fixture
    def functions(self) -> FunctionRegistry:
        registry = FunctionRegistry()
        registry.register("gsw", lambda ctx, args: 0)
        registry.register("gbr", lambda ctx, args: 0)
        registry.register("kctx", lambda ctx, args: 0)
        return registry

    def test_first_word_completes_functions(self, functions: FunctionRegistry) -> None:
        dispatch = DispatchCompleter(functions)
        assert complete(dispatch, "gs") == ["gsw"]
        assert complete(dispatch, "g") == ["gbr", "gsw"]

    def test_routes_arguments_to_registered_completer(
        self, functions: FunctionRegistry, probe: MagicMock
    ) -> None:
        probe.lines.return_value = ["build"]
        dispatch = DispatchCompleter(functions)
        dispatch.add("dotnet", DotnetCompleter(probe))

        assert complete(dispatch, "dotnet b") == ["build"]

    def test_unregistered_command_completes_paths(
        self, functions: FunctionRegistry, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "notes.txt").write_text("")
        monkeypatch.chdir(tmp_path)
        dispatch = DispatchCompleter(functions)

        assert "tes.txt" in complete(dispatch, "cat no")
