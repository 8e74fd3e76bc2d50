"""Tests for aidss/cli.py - command wiring with the mock adapter."""

import json

import pytest
from click.testing import CliRunner

from aidss import __version__
from aidss.cli import cli
from aidss.core.exceptions import ExitCode

pytestmark = pytest.mark.unit


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tree(isolated, make_node):
    """A tree under the isolated project with one answerable node."""
    root = isolated / "tree"
    make_node(root, "root question", "root answer")
    make_node(root / "child", prompt="\n\nfollow up")
    return root


class TestGroup:
    """Test top-level options."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("watch", "process", "branch", "summarize", "adapters"):
            assert name in result.output


class TestProcessCommand:
    """Test one-shot node processing."""

    def test_writes_response(self, runner, tree):
        node = tree / "child"
        result = runner.invoke(
            cli, ["process", str(node), "--root", str(tree), "--adapter", "mock"]
        )
        assert result.exit_code == 0, result.output
        assert (node / "response.txt").read_text() == "This is a mock response."
        assert "Reply written" in result.output

    def test_json_output(self, runner, tree):
        node = tree / "child"
        result = runner.invoke(
            cli, ["process", str(node), "-r", str(tree), "-a", "mock", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["messages"] == 4
        assert data["warnings"] == []

    def test_model_selects_adapter(self, runner, tree):
        node = tree / "child"
        result = runner.invoke(
            cli, ["process", str(node), "-r", str(tree), "-m", "mock-model"]
        )
        assert result.exit_code == 0, result.output
        assert (node / "response.txt").exists()

    def test_missing_attachment_exit_code(self, runner, tree, make_node):
        node = make_node(tree / "needs_input", prompt="In: missing.txt\n\nRead it.")
        result = runner.invoke(cli, ["process", str(node), "-r", str(tree), "-a", "mock"])
        assert result.exit_code == ExitCode.ATTACHMENT_NOT_FOUND
        assert not (node / "response.txt").exists()

    def test_malformed_document_exit_code(self, runner, tree, make_node):
        node = make_node(tree / "broken", prompt="no separator")
        result = runner.invoke(cli, ["process", str(node), "-r", str(tree), "-a", "mock"])
        assert result.exit_code == ExitCode.MALFORMED_DOCUMENT

    def test_json_errors(self, runner, tree, make_node):
        node = make_node(tree / "needs_input", prompt="In: missing.txt\n\nRead it.")
        result = runner.invoke(
            cli, ["--json-errors", "process", str(node), "-r", str(tree), "-a", "mock"]
        )
        assert result.exit_code == ExitCode.ATTACHMENT_NOT_FOUND
        start = result.output.index("{")
        error = json.loads(result.output[start:])["error"]
        assert error["type"] == "AttachmentNotFound"
        assert error["path"] == "missing.txt"
        assert error["context"]["node"] == str(node)

    def test_warnings_pass_without_strict(self, runner, tree, make_node):
        node = make_node(tree / "wants_output", prompt="Out: result.txt\n\nWrite it.")
        result = runner.invoke(cli, ["process", str(node), "-r", str(tree), "-a", "mock"])
        assert result.exit_code == 0
        assert (node / "response.txt").exists()

    def test_strict_fails_on_warnings(self, runner, tree, make_node):
        node = make_node(tree / "wants_output", prompt="Out: result.txt\n\nWrite it.")
        result = runner.invoke(
            cli, ["process", str(node), "-r", str(tree), "-a", "mock", "--strict"]
        )
        assert result.exit_code == ExitCode.EXTRACTION_INCOMPLETE

    def test_backend_from_config_defaults(self, runner, tree, isolated):
        (isolated / ".aidss.yaml").write_text(
            "defaults:\n  adapter: mock\n  model: house-model\n"
        )
        node = tree / "child"
        result = runner.invoke(cli, ["process", str(node), "-r", str(tree), "--json"])
        assert result.exit_code == 0, result.output
        assert (node / "response.txt").read_text() == "This is a mock response."

    def test_unknown_adapter(self, runner, tree):
        result = runner.invoke(
            cli, ["process", str(tree / "child"), "-r", str(tree), "-a", "nope"]
        )
        assert result.exit_code == 2
        assert "Unknown adapter" in result.output


class TestBranchCommand:
    """Test node creation."""

    def test_creates_child(self, runner, tree):
        result = runner.invoke(cli, ["branch", str(tree), "option b"])
        assert result.exit_code == 0
        path = result.output.strip()
        assert path.startswith(str(tree / "option_b_"))
        assert (tree / path.rsplit("/", 1)[-1]).is_dir()

    def test_missing_parent(self, runner, tmp_path):
        result = runner.invoke(cli, ["branch", str(tmp_path / "nope"), "x"])
        assert result.exit_code != 0


class TestSummarizeCommand:
    """Test conversation summaries."""

    def test_writes_summary(self, runner, tree):
        node = tree / "child"
        result = runner.invoke(cli, ["summarize", str(node), "-r", str(tree), "-a", "mock"])
        assert result.exit_code == 0, result.output
        assert (node / "summary.txt").read_text() == "This is a mock response."


class TestAdaptersCommand:
    """Test adapter listing."""

    def test_table(self, runner):
        result = runner.invoke(cli, ["adapters"])
        assert result.exit_code == 0
        assert "mock" in result.output
        assert "openai" in result.output

    def test_json(self, runner):
        result = runner.invoke(cli, ["adapters", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["mock"] == ["mock-model"]
        assert "gpt-4" in data["openai"]
