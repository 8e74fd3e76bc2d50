"""
Integration tests for a whole conversation tree.

Drives real NodeProcessor and watcher instances with the mock adapter.
"""

import threading
import time

import pytest

from aidss.adapters.mock import MockAdapter
from aidss.core.messages import Role
from aidss.core.node import NodeProcessor, create_node
from aidss.watcher import NodeEventHandler, start_watching

pytestmark = pytest.mark.integration


class TestMultiTurnTree:
    """Turns taken down different branches see only their own ancestry."""

    def test_branches_are_independent(self, decisions):
        adapter = MockAdapter(["Postgres scales.", "SQLite is embedded."])
        processor = NodeProcessor(adapter, decisions, lock=threading.Lock())

        processor.process(decisions / "postgres_1")
        processor.process(decisions / "sqlite_2")

        pg_context = [m.content for m in adapter.calls[0]]
        lite_context = [m.content for m in adapter.calls[1]]
        assert "Tell me more about SQLite." not in " ".join(pg_context)
        assert "Tell me more about Postgres." not in " ".join(lite_context)
        assert pg_context[1] == lite_context[1] == "Consider Postgres or SQLite."
        assert (decisions / "postgres_1" / "response.txt").read_text() == "Postgres scales."

    def test_reply_feeds_next_turn(self, decisions, make_node):
        adapter = MockAdapter(["Postgres scales.", "Use pgbouncer."])
        processor = NodeProcessor(adapter, decisions, lock=threading.Lock())

        processor.process(decisions / "postgres_1")
        deeper = create_node(decisions / "postgres_1", "pooling")
        make_node(deeper, "\n\nHow do I pool connections?")
        processor.process(deeper)

        turn = adapter.calls[1]
        assert [m.role for m in turn] == [
            Role.USER, Role.ASSISTANT, Role.USER, Role.ASSISTANT, Role.USER, Role.USER,
        ]
        assert turn[3].content == "Postgres scales."
        assert (deeper / "response.txt").read_text() == "Use pgbouncer."

    def test_root_attachment_resolved_from_project_dir(self, decisions):
        adapter = MockAdapter(["Pick SQLite."])
        processor = NodeProcessor(adapter, decisions, lock=threading.Lock())

        processor.process(decisions)

        final = adapter.calls[0][-1].content
        assert final.startswith("Which database should we use?\n\n")
        assert '<IN filename="requirements.txt">\nmust be cheap\nmust be fast\n\n</IN>\n' in final

    def test_outputs_land_beside_tree(self, base_dir, decisions, make_node):
        reply = (
            "Here is the schema and a README.\n"
            '<OUT filename="db/schema.sql">CREATE TABLE t (id INT);\n</OUT>\n'
            '<OUT filename="README.md">Example: <OUT filename="x">y</OUT></OUT>'
        )
        node = make_node(
            decisions / "postgres_1",
            "Out: db/schema.sql README.md\n\nWrite the schema.",
        )
        processor = NodeProcessor(MockAdapter([reply]), decisions, lock=threading.Lock())

        result = processor.process(node)

        assert (base_dir / "db" / "schema.sql").read_text() == "CREATE TABLE t (id INT);\n"
        assert (base_dir / "README.md").read_text() == 'Example: <OUT filename="x">y</OUT>'
        assert not (base_dir / "x").exists()
        assert result.report.ok


class TestWatcherDrivesPipeline:
    """Events from a real observer run turns end to end."""

    def wait_for(self, path, timeout=10.0):
        deadline = time.monotonic() + timeout
        while not path.exists() and time.monotonic() < deadline:
            time.sleep(0.1)
        return path.exists()

    def test_saved_prompt_gets_reply(self, decisions):
        processor = NodeProcessor(MockAdapter(["Watched reply."]), decisions, lock=threading.Lock())
        handler = NodeEventHandler(processor, debounce=0.0, pdf_handler=None)
        observer = start_watching(decisions, handler, polling=True)
        try:
            time.sleep(0.2)
            node = create_node(decisions, "new question")
            (node / "prompt.txt").write_text("\n\nAnything else?")
            assert self.wait_for(node / "response.txt")
        finally:
            observer.stop()
            observer.join(timeout=5)

        assert (node / "response.txt").read_text() == "Watched reply."

    def test_bad_node_does_not_stop_watcher(self, decisions):
        processor = NodeProcessor(MockAdapter(["ok"]), decisions, lock=threading.Lock())
        handler = NodeEventHandler(processor, debounce=0.0, pdf_handler=None)
        observer = start_watching(decisions, handler, polling=True)
        try:
            time.sleep(0.2)
            bad = create_node(decisions, "bad")
            (bad / "prompt.txt").write_text("In: nowhere.txt\n\nRead it.")
            good = create_node(decisions, "good")
            (good / "prompt.txt").write_text("\n\nHello?")
            assert self.wait_for(good / "response.txt")
            assert observer.is_alive()
        finally:
            observer.stop()
            observer.join(timeout=5)

        assert not (bad / "response.txt").exists()
