"""Pytest configuration for integration tests.

Everything under this directory is marked ``integration`` and may touch
real watchdog observers and several tree levels at once.
"""

import pytest


def pytest_collection_modifyitems(items):
    """Mark tests collected from tests/integration as integration tests."""
    for item in items:
        if "integration" in item.path.parts:
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def decisions(base_dir, make_node):
    """A small decision tree: a root question with two branches."""
    (base_dir / "requirements.txt").write_text("must be cheap\nmust be fast\n")
    root = make_node(
        base_dir / "decisions",
        "In: requirements.txt\n\nWhich database should we use?",
        "Consider Postgres or SQLite.",
    )
    make_node(root / "postgres_1", "\n\nTell me more about Postgres.")
    make_node(root / "sqlite_2", "\n\nTell me more about SQLite.")
    return root
