"""
Тесты для RunStore: разбиение, склейка, splice и удаление диапазонов.
"""

import pytest

from richdelta.engine.store import DEFAULT_CONTENT, RunStore
from richdelta.exceptions import IndexOutOfRangeError
from richdelta.model.run import Run

MENTION = {
    "mention": True,
    "mentionType": "user",
    "mentionId": "u1",
    "mentionDisplay": "Dev",
    "mentionValue": "dev",
    "color": "#1e40af",
    "backgroundColor": "#dbeafe",
}


def _texts(store: RunStore) -> list[str]:
    return [run.text for run in store]


def _mention_store() -> RunStore:
    """'Hi ' + '@dev' + ' there\\n'."""
    return RunStore([Run("Hi "), Run("@dev", dict(MENTION)), Run(" there\n")])


class TestConstruction:
    """Инициализация и минимальное содержимое."""

    def test_empty_store_holds_newline(self) -> None:
        store = RunStore()
        assert store.text() == DEFAULT_CONTENT
        assert store.run_count == 1

    def test_empty_runs_dropped(self) -> None:
        store = RunStore([Run(""), Run("a\n")])
        assert _texts(store) == ["a\n"]

    def test_input_copied(self) -> None:
        run = Run("a\n", {"bold": True})
        store = RunStore([run])
        assert store.run_at(0) is not run

    def test_snapshot_is_deep(self) -> None:
        store = RunStore([Run("a\n", {"bold": True})])
        snapshot = store.snapshot()
        assert snapshot[0].attributes is not None
        snapshot[0].attributes["bold"] = False
        assert store.run_at(0).attributes == {"bold": True}


class TestSplit:
    """Разбиение run по индексу."""

    def test_split_inside_run(self) -> None:
        store = RunStore([Run("Hello World", {"bold": True})])
        assert store.split_at(5) == 5
        assert _texts(store) == ["Hello", " World"]
        assert store.run_at(1).attributes == {"bold": True}

    def test_split_on_boundary_is_noop(self) -> None:
        store = RunStore([Run("ab"), Run("cd")])
        for index in (0, 2, 4):
            store.split_at(index)
        assert _texts(store) == ["ab", "cd"]

    def test_split_inside_mention_moves_to_end(self) -> None:
        store = _mention_store()
        assert store.split_at(5) == 7
        assert _texts(store) == ["Hi ", "@dev", " there\n"]

    def test_split_inside_mention_prefer_start(self) -> None:
        store = _mention_store()
        assert store.split_at(5, prefer_start=True) == 3

    def test_boundary_for_does_not_mutate(self) -> None:
        store = RunStore([Run("Hello\n")])
        assert store.boundary_for(2) == 2
        assert store.run_count == 1

    @pytest.mark.parametrize("index", [-1, 100])
    def test_split_out_of_range(self, index: int) -> None:
        with pytest.raises(IndexOutOfRangeError):
            RunStore([Run("abc")]).split_at(index)


class TestSplice:
    def test_splice_replaces_runs(self) -> None:
        store = RunStore([Run("ab"), Run("cd"), Run("\n")])
        removed = store.splice_runs(2, 4, [Run("XY", {"bold": True})])
        assert removed == [Run("cd")]
        assert _texts(store) == ["ab", "XY", "\n"]

    def test_splice_requires_boundaries(self) -> None:
        store = RunStore([Run("abcd")])
        with pytest.raises(ValueError, match="not aligned"):
            store.splice_runs(1, 3, [])

    def test_splice_rejects_reversed_range(self) -> None:
        with pytest.raises(ValueError, match="after end"):
            RunStore([Run("ab"), Run("cd")]).splice_runs(2, 0, [])

    def test_insert_runs_without_merging(self) -> None:
        store = RunStore([Run("ac\n")])
        assert store.insert_runs(1, [Run("b")]) == 1
        assert _texts(store) == ["a", "b", "c\n"]

    def test_insert_runs_inside_mention(self) -> None:
        """Вставка внутрь упоминания происходит после него."""
        store = _mention_store()
        assert store.insert_runs(4, [Run("!")]) == 7
        assert _texts(store) == ["Hi ", "@dev", "!", " there\n"]


class TestDeleteRange:
    def test_delete_across_runs(self) -> None:
        store = RunStore([Run("Hello", {"bold": True}), Run(" World\n")])
        assert store.delete_range(3, 4) == (3, 7)
        assert store.text() == "Helorld\n"

    def test_delete_widens_over_partial_mention(self) -> None:
        store = _mention_store()
        assert store.delete_range(5, 4) == (3, 9)
        assert store.text() == "Hi here\n"

    def test_zero_length_is_noop(self) -> None:
        store = _mention_store()
        assert store.delete_range(5, 0) == (5, 5)
        assert _texts(store) == ["Hi ", "@dev", " there\n"]


class TestMerge:
    def test_merge_equal_neighbours(self) -> None:
        store = RunStore([Run("a"), Run("b"), Run("c", {"bold": True}), Run("\n")])
        store.merge()
        assert _texts(store) == ["ab", "c", "\n"]

    def test_merge_keeps_mentions(self) -> None:
        store = _mention_store()
        store.merge()
        assert store.run_count == 3

    def test_replace_all_and_ensure_content(self) -> None:
        store = RunStore([Run("abc\n")])
        store.replace_all([])
        assert store.text() == "\n"

    def test_overlapping(self) -> None:
        store = RunStore([Run("ab"), Run("cd"), Run("\n")])
        assert [(i, start) for i, start, _ in store.overlapping(1, 2)] == [(0, 0), (1, 2)]
        assert store.overlapping(2, 0) == []
