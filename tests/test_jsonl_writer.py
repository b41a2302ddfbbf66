"""
Tests for backend/logging/jsonl_writer.py.
"""

import pytest

from backend.logging.jsonl_writer import JsonlWriter, read_jsonl
from derivation.stepwise import ReductionSession


class TestJsonlWriter:
    def test_appends_in_order(self, tmp_path):
        path = tmp_path / "out.jsonl"
        with JsonlWriter(path) as writer:
            writer.write({"b": 1, "a": 2})
            writer.write({"c": 3})
        assert path.read_text(encoding="utf-8") == '{"b":1,"a":2}\n{"c":3}\n'

    def test_glyphs_written_literally(self, tmp_path):
        path = tmp_path / "out.jsonl"
        with JsonlWriter(path) as writer:
            writer.write({"content": "(1 ∧ 0)"})
        assert "∧" in path.read_text(encoding="utf-8")

    def test_reopen_appends(self, tmp_path):
        path = tmp_path / "out.jsonl"
        with JsonlWriter(path) as writer:
            writer.write({"n": 1})
        with JsonlWriter(path) as writer:
            writer.write({"n": 2})
        assert [r["n"] for r in read_jsonl(path)] == [1, 2]

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "out.jsonl"
        with JsonlWriter(path) as writer:
            writer.write({"ok": True})
        assert path.exists()

    def test_write_after_close_raises(self, tmp_path):
        writer = JsonlWriter(tmp_path / "out.jsonl")
        writer.close()
        assert writer.closed
        with pytest.raises(ValueError):
            writer.write({"n": 1})

    def test_write_session(self, tmp_path):
        session = ReductionSession("P ∧ Q", {"P": 1, "Q": 1})
        session.solve()
        path = tmp_path / "history.jsonl"
        with JsonlWriter(path) as writer:
            count = writer.write_session("abc", "P ∧ Q", session.to_records())
        records = read_jsonl(path)
        assert count == len(session.history) == len(records)
        assert records[0] == {"session": "abc", "formula": "P ∧ Q", "step": 0, "kind": "formula", "content": "(P ∧ Q)"}
        assert records[-1]["content"] == "1"
