"""Tests for output formatters."""

import json

import pytest
from rich.console import Console

from fathom.analysis import run_analysis
from fathom.config import FathomConfig
from fathom.formatters import JsonFormatter, RichFormatter, TextFormatter, get_formatter


@pytest.fixture
def result(call_statement, shared_symbols):
    return run_analysis(call_statement, shared_symbols, config=FathomConfig(verbosity=2))


class TestTextFormatter:
    def test_report(self, result):
        assert TextFormatter().format(result).splitlines() == [
            "4     tokens",
            "1     expression",
            "1     statement",
            "1     subroutine",
            "readability is 2.56 (very readable)",
        ]

    def test_skipped_at_verbosity_one(self, result):
        lines = TextFormatter(verbosity=1).format(result).splitlines()
        assert lines[0] == "Skipping imported sub 'main.helper'"
        assert len(lines) == 6

    def test_render_prints_to_stdout(self, result, capsys):
        TextFormatter().render(result)
        assert "readability is 2.56" in capsys.readouterr().out


class TestJsonFormatter:
    def test_trace_hidden_below_verbosity_two(self, result):
        data = json.loads(JsonFormatter().format(result))
        assert "trace" not in data
        assert data["readability"]["opinion"] == "very readable"
        assert data["skipped"] == ["main.helper"]

    def test_trace_at_verbosity_two(self, result):
        data = json.loads(JsonFormatter(verbosity=2).format(result))
        assert len(data["trace"]) == result.nodes_visited
        assert data["trace"][0]["category"] == "scope-exit-paired"


class TestRichFormatter:
    def _format(self, result, verbosity=0):
        console = Console(width=120, force_terminal=False, color_system=None)
        return RichFormatter(verbosity=verbosity, console=console).format(result)

    def test_counts_and_verdict(self, result):
        output = self._format(result)
        assert "expression" in output
        assert "very readable" in output
        assert "2.56" in output
        assert "Op trace" not in output

    def test_skipped_at_verbosity_one(self, result):
        assert "main.helper" in self._format(result, verbosity=1)

    def test_trace_at_verbosity_two(self, result):
        output = self._format(result, verbosity=2)
        assert "Op trace" in output
        assert "entersub" in output


class TestGetFormatter:
    @pytest.mark.parametrize(
        "name,cls", [("text", TextFormatter), ("rich", RichFormatter), ("json", JsonFormatter)]
    )
    def test_known(self, name, cls):
        formatter = get_formatter(name, verbosity=1)
        assert isinstance(formatter, cls)
        assert formatter.verbosity == 1

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown formatter"):
            get_formatter("xml")
