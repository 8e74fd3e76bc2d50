"""Shared fixtures for aidss tests."""

import logging
from pathlib import Path

import pytest

from aidss.core.config import clear_config_cache


@pytest.fixture(autouse=True)
def fresh_config():
    """Never let a cached .aidss.yaml leak between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture(autouse=True)
def restore_aidss_logger():
    """CLI invocations install handlers on captured streams; drop them afterwards."""
    logger = logging.getLogger("aidss")
    level, handlers = logger.level, list(logger.handlers)
    root_level = logging.getLogger().level
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers
    logging.getLogger().setLevel(root_level)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with cwd and home inside tmp_path so no real .aidss.yaml is found."""
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    (project / ".git").mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def base_dir(tmp_path) -> Path:
    """Project directory: parent of the tree root, where In/Out paths resolve."""
    return tmp_path


@pytest.fixture
def tree_root(base_dir) -> Path:
    """The watched conversation tree."""
    root = base_dir / "tree"
    root.mkdir()
    return root


def write_node(node: Path, prompt: str = None, response: str = None) -> Path:
    """Create a node directory with optional request/reply artifacts."""
    node.mkdir(parents=True, exist_ok=True)
    if prompt is not None:
        (node / "prompt.txt").write_text(prompt)
    if response is not None:
        (node / "response.txt").write_text(response)
    return node


@pytest.fixture
def make_node():
    return write_node
