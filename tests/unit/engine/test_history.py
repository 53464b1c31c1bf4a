"""
Тесты для HistoryManager: курсор, отмена/повтор, ограничение ёмкости.
"""

import pytest

from richdelta.engine.history import DEFAULT_CAPACITY, HistoryEntry, HistoryManager
from richdelta.model.run import Run
from richdelta.model.selection import Selection


def _entry(text: str) -> HistoryEntry:
    return HistoryEntry.capture([Run(text)], Selection())


class TestHistoryEntry:
    def test_capture_is_deep(self) -> None:
        run = Run("a", {"bold": True})
        entry = HistoryEntry.capture([run], Selection(1, 0))
        assert run.attributes is not None
        run.attributes["bold"] = False
        assert entry.runs[0].attributes == {"bold": True}

    def test_restore_returns_fresh_copies(self) -> None:
        entry = _entry("a")
        restored = entry.restore_runs()
        assert restored == list(entry.runs)
        assert restored[0] is not entry.runs[0]


class TestHistoryManager:
    """Модель курсора истории."""

    def test_defaults(self) -> None:
        history = HistoryManager()
        assert history.capacity == DEFAULT_CAPACITY == 50
        assert not history.can_undo
        assert not history.can_redo
        assert history.undo(_entry("live")) is None
        assert history.redo() is None

    @pytest.mark.parametrize("capacity", [0, -5])
    def test_invalid_capacity(self, capacity: int) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            HistoryManager(capacity)

    def test_undo_stores_live_head(self) -> None:
        history = HistoryManager()
        history.record(_entry("v0"))
        entry = history.undo(_entry("v1"))
        assert entry is not None and entry.runs[0].text == "v0"
        assert history.can_redo
        redone = history.redo()
        assert redone is not None and redone.runs[0].text == "v1"
        assert not history.can_redo

    def test_full_sweep(self) -> None:
        """Полный цикл undo/redo заканчивается на исходном состоянии."""
        history = HistoryManager()
        for version in ("v0", "v1", "v2"):
            history.record(_entry(version))

        texts = []
        live = _entry("v3")
        while (entry := history.undo(live)) is not None:
            texts.append(entry.runs[0].text)
        assert texts == ["v2", "v1", "v0"]

        while (entry := history.redo()) is not None:
            texts.append(entry.runs[0].text)
        assert texts[-1] == "v3"

    def test_record_truncates_redo_tail(self) -> None:
        history = HistoryManager()
        history.record(_entry("v0"))
        history.record(_entry("v1"))
        history.undo(_entry("v2"))
        history.undo(_entry("v2"))
        history.record(_entry("v0"))
        assert not history.can_redo
        assert len(history) == 1

    def test_capacity_evicts_oldest(self) -> None:
        history = HistoryManager(capacity=3)
        for version in range(5):
            history.record(_entry(f"v{version}"))
        assert len(history) == 3

        undone = []
        live = _entry("v5")
        while (entry := history.undo(live)) is not None:
            undone.append(entry.runs[0].text)
        assert undone == ["v4", "v3", "v2"]

    def test_capacity_of_one(self) -> None:
        history = HistoryManager(capacity=1)
        history.record(_entry("v0"))
        history.record(_entry("v1"))
        entry = history.undo(_entry("v2"))
        assert entry is not None and entry.runs[0].text == "v1"
        assert history.undo(_entry("v2")) is None
        assert history.position == 0

    def test_clear(self) -> None:
        history = HistoryManager()
        history.record(_entry("v0"))
        history.clear()
        assert len(history) == 0
        assert not history.can_undo
        assert "entries=0" in repr(history)
