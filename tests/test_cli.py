"""Tests for the fathom command line."""

import json
import warnings

import pytest
from typer.testing import CliRunner

from fathom import __version__
from fathom.cli import app

runner = CliRunner()

SHARED = {
    "main": {
        "name": "leave",
        "children": [
            {"name": "nextstate"},
            {"name": "entersub", "family": "unary", "children": [{"name": "pushmark"}]},
        ],
    },
    "code": {"helper": {"name": "leavesub", "family": "unary"}},
    "symbols": {
        "name": "main",
        "entries": {
            "helper": {"code": "helper"},
            "alias": {"code": "helper"},
        },
    },
}


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "hello.py"
    path.write_text("print('hello')\n")
    return path


@pytest.fixture
def dump(tmp_path):
    path = tmp_path / "program.json"
    path.write_text(json.dumps(SHARED))
    return path


class TestReport:
    """Test successful runs."""

    def test_text_report(self, script):
        result = runner.invoke(app, [str(script)])
        assert result.exit_code == 0, result.output
        assert "6     tokens" in result.output
        assert "readability is 3.66 (readable)" in result.output

    def test_verbose_lists_skipped(self, dump):
        result = runner.invoke(app, ["-v", str(dump)])
        assert result.exit_code == 0, result.output
        assert "Skipping imported sub 'main.alias'" in result.output

    def test_skipped_hidden_by_default(self, dump):
        result = runner.invoke(app, [str(dump)])
        assert "Skipping imported sub" not in result.output

    def test_verbose_logs_collection_summary(self, dump, tmp_path):
        log_path = tmp_path / "run.log"
        result = runner.invoke(app, ["-v", "--log-file", str(log_path), str(dump)])
        assert result.exit_code == 0, result.output
        log = log_path.read_text()
        assert "0 subroutines queued, 1 re-exported skipped" in log
        assert "Skipping imported sub" not in log

    def test_default_log_level_is_warning(self, dump, tmp_path):
        log_path = tmp_path / "run.log"
        result = runner.invoke(app, ["--log-file", str(log_path), str(dump)])
        assert result.exit_code == 0, result.output
        assert "re-exported skipped" not in log_path.read_text()

    def test_json_format(self, dump):
        result = runner.invoke(app, ["--format", "json", str(dump)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["readability"]["score"] == 2.56
        assert data["skipped"] == ["main.alias"]

    def test_rich_format(self, script):
        result = runner.invoke(app, ["-f", "rich", str(script)])
        assert result.exit_code == 0, result.output
        assert "readable" in result.output

    def test_config_file(self, tmp_path, script):
        config = tmp_path / "ci.toml"
        config.write_text("[fathom]\noutput_format = 'json'\n")
        result = runner.invoke(app, ["--config", str(config), str(script)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["readability"]["tokens"] == 6

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestExitCodes:
    """Test failures and the CI threshold."""

    def test_fail_above_exceeded(self, script):
        result = runner.invoke(app, ["--fail-above", "3.0", str(script)])
        assert result.exit_code == 1
        assert "exceeds threshold" in result.output

    def test_fail_above_met(self, script):
        result = runner.invoke(app, ["--fail-above", "4.0", str(script)])
        assert result.exit_code == 0, result.output

    def test_degenerate_program(self, tmp_path):
        path = tmp_path / "empty.py"
        path.write_text("")
        result = runner.invoke(app, [str(path)])
        assert result.exit_code == 1
        assert "No tokens" in result.output

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "broken.py"
        path.write_text("def broken(:\n")
        result = runner.invoke(app, [str(path)])
        assert result.exit_code == 1
        assert "Failed to parse" in result.output

    def test_undecodable_document(self, tmp_path):
        path = tmp_path / "program.json"
        path.write_bytes(b'{"main": {"name": "\xff"}}')
        result = runner.invoke(app, [str(path)])
        assert result.exit_code == 1
        assert "Failed to parse" in result.output

    def test_invalid_format(self, script):
        result = runner.invoke(app, ["--format", "xml", str(script)])
        assert result.exit_code == 1
        assert "output_format" in result.output

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, [str(tmp_path / "missing.py")])
        assert result.exit_code == 2

    def test_warnings_flag(self, tmp_path):
        path = tmp_path / "program.json"
        document = dict(SHARED, code={"helper": None})
        path.write_text(json.dumps(document))
        result = runner.invoke(app, ["--warnings", str(path)])
        assert result.exit_code == 0, result.output
        assert "unresolvable symbol 'main.alias'" in result.output

    def test_warnings_repeat_across_runs(self, tmp_path):
        path = tmp_path / "program.json"
        path.write_text(json.dumps(dict(SHARED, code={"helper": None})))
        for _ in range(2):
            result = runner.invoke(app, ["--warnings", str(path)])
            assert "unresolvable symbol 'main.alias'" in result.output

    def test_warning_display_is_restored(self, tmp_path):
        path = tmp_path / "program.json"
        path.write_text(json.dumps(dict(SHARED, code={"helper": None})))
        before = warnings.showwarning
        runner.invoke(app, ["--warnings", str(path)])
        assert warnings.showwarning is before
