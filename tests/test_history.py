"""Tests for the bounded undo/redo history."""

from __future__ import annotations

import pytest

from resumer.editor.document_model import Document, Section
from resumer.editor.history import HistoryManager, HistoryState


def _doc(title: str) -> Document:
    return Document(sections=[Section(id="header", type="header", data={"fullName": title}, locked=True)], section_order=["header"], title=title)


class TestHistoryStates:
    def test_empty(self) -> None:
        history = HistoryManager()

        assert history.state is HistoryState.EMPTY
        assert history.undo(_doc("now")) is None
        assert history.redo(_doc("now")) is None

    def test_state_progression(self) -> None:
        history = HistoryManager()
        history.record(_doc("v0"))
        history.record(_doc("v1"))

        assert history.state is HistoryState.AT_TOP
        history.undo(_doc("v2"))
        assert history.state is HistoryState.MID_STACK
        history.undo(_doc("v1"))
        assert history.state is HistoryState.AT_BOTTOM
        assert history.can_undo is False
        assert history.can_redo is True

    def test_limit_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            HistoryManager(limit=0)


class TestUndoRedo:
    def test_undo_then_redo_restores_current(self) -> None:
        history = HistoryManager()
        history.record(_doc("v0"))

        restored = history.undo(_doc("v1"))
        assert restored is not None and restored.title == "v0"

        again = history.redo(restored)
        assert again is not None and again.title == "v1"

    def test_record_truncates_redo_branch(self) -> None:
        history = HistoryManager()
        history.record(_doc("v0"))
        history.record(_doc("v1"))
        history.undo(_doc("v2"))

        history.record(_doc("v1b"))

        assert history.can_redo is False
        assert len(history) == 2

    def test_oldest_entry_evicted_at_limit(self) -> None:
        history = HistoryManager(limit=3)
        for index in range(5):
            history.record(_doc(f"v{index}"))

        assert len(history) == 3
        titles = []
        current = _doc("v5")
        while (restored := history.undo(current)) is not None:
            titles.append(restored.title)
            current = restored
        assert titles == ["v4", "v3", "v2"]

    def test_snapshots_are_deep_copies(self) -> None:
        history = HistoryManager()
        live = _doc("v0")
        history.record(live)

        live.sections[0].data["fullName"] = "mutated"
        restored = history.undo(_doc("v1"))

        assert restored is not None
        assert restored.sections[0].data["fullName"] == "v0"

    def test_clear(self) -> None:
        history = HistoryManager()
        history.record(_doc("v0"))

        history.clear()

        assert history.state is HistoryState.EMPTY
        assert history.cursor == 0

    def test_resize_drops_oldest_undo_entries(self) -> None:
        history = HistoryManager(limit=10)
        for index in range(4):
            history.record(_doc(f"v{index}"))

        history.resize(2)

        assert len(history) == 2
        restored = history.undo(_doc("v4"))
        assert restored is not None and restored.title == "v3"
