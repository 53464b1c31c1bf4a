"""
Тесты для FormatEngine: эффективное форматирование и семантика переключения.
"""

import pytest

from richdelta.engine.formatting import FormatEngine, intersect_formats, line_list_type
from richdelta.engine.mentions import build_mention_run
from richdelta.engine.store import RunStore
from richdelta.model.run import Run


def _engine(*runs: Run) -> tuple[RunStore, FormatEngine]:
    store = RunStore(runs)
    return store, FormatEngine(store)


class TestHelpers:
    def test_line_list_type(self) -> None:
        text = "• a\n2. b\nplain\n"
        assert line_list_type(text, 1) == "bullet"
        assert line_list_type(text, 5) == "ordered"
        assert line_list_type(text, 10) is None

    def test_intersect_formats(self) -> None:
        formats = [
            {"bold": True, "color": "#FF0000"},
            {"bold": True, "color": "#ff0000", "italic": True},
        ]
        assert intersect_formats(formats) == {"bold": True, "color": "#FF0000"}
        assert intersect_formats([]) == {}


class TestGetFormatAt:
    """Пересечение атрибутов runs, покрывающих диапазон."""

    def test_uniform_range(self) -> None:
        _, engine = _engine(Run("Hello", {"bold": True}), Run(" World\n"))
        assert engine.get_format_at(0, 5) == {"bold": True}

    def test_mixed_range_is_empty(self) -> None:
        _, engine = _engine(Run("Hello", {"bold": True}), Run(" World\n"))
        assert engine.get_format_at(3, 4) == {}

    def test_empty_range(self) -> None:
        _, engine = _engine(Run("Hello", {"bold": True}), Run("\n"))
        assert engine.get_format_at(2, 0) == {}

    def test_list_type_reported(self) -> None:
        _, engine = _engine(Run("• item\n"))
        assert engine.get_format_at(0, 6) == {"list": "bullet"}

    def test_leading_newline_takes_next_line_list_type(self) -> None:
        """Run, начинающийся с "\\n", относится к строке после перевода строки."""
        _, engine = _engine(Run("• a", {"italic": True}), Run("\nb", {"bold": True}), Run("\n"))
        assert engine.get_format_at(3, 2) == {"bold": True}
        assert engine.get_format_at(3, 1) == {"bold": True, "list": "bullet"}

    def test_mentions_can_be_excluded(self) -> None:
        mention = build_mention_run({"userName": "dev", "name": "Dev", "id": 1}, "@")
        _, engine = _engine(Run("a", {"bold": True}), mention, Run("b", {"bold": True}), Run("\n"))
        assert engine.get_format_at(0, 6) == {}
        assert engine.get_format_at(0, 6, include_mentions=False) == {"bold": True}


class TestFormatInline:
    """Применение и переключение inline-форматирования."""

    def test_apply_bold(self) -> None:
        store, engine = _engine(Run("Hello World\n"))
        assert engine.format_inline(0, 5, {"bold": True}) is True
        assert [r.to_dict() for r in store] == [
            {"insert": "Hello", "attributes": {"bold": True}},
            {"insert": " World\n"},
        ]

    def test_toggle_is_involution(self) -> None:
        """Двойное применение одного формата возвращает исходные runs."""
        store, engine = _engine(Run("Hello "), Run("World", {"italic": True}), Run("\n"))
        before = store.snapshot()
        engine.format_inline(2, 7, {"bold": True})
        engine.format_inline(2, 7, {"bold": True})
        assert store.snapshot() == before

    def test_partially_formatted_range_is_set(self) -> None:
        store, engine = _engine(Run("He", {"bold": True}), Run("llo\n"))
        engine.format_inline(0, 5, {"bold": True})
        assert store.run_at(0) == Run("Hello", {"bold": True})

    def test_toggle_off_keeps_other_keys(self) -> None:
        store, engine = _engine(Run("Hello", {"bold": True, "italic": True}), Run("\n"))
        engine.format_inline(0, 5, {"bold": True})
        assert store.run_at(0).attributes == {"italic": True}

    def test_color_replaced_not_toggled(self) -> None:
        store, engine = _engine(Run("Hello", {"color": "red"}), Run("\n"))
        engine.format_inline(0, 5, {"color": "blue"})
        assert store.run_at(0).attributes == {"color": "blue"}

    def test_none_removes_key(self) -> None:
        store, engine = _engine(Run("Hello", {"color": "red", "bold": True}), Run("\n"))
        engine.format_inline(0, 5, {"color": None})
        assert store.run_at(0).attributes == {"bold": True}

    def test_mention_untouched(self) -> None:
        mention = build_mention_run({"ticketName": "T-1", "id": 7}, "#")
        store, engine = _engine(Run("a "), mention, Run(" b\n"))
        engine.format_inline(0, 9, {"bold": True})
        assert store.run_at(1) == mention
        assert store.run_at(0).attributes == {"bold": True}

    def test_mention_only_range_reports_no_change(self) -> None:
        mention = build_mention_run({"ticketName": "T-1", "id": 7}, "#")
        store, engine = _engine(mention, Run("\n"))
        assert engine.format_inline(0, 4, {"bold": True}) is False
        assert store.run_count == 2

    def test_split_inside_mention_widens(self) -> None:
        mention = build_mention_run({"userName": "dev", "name": "Dev", "id": 1}, "@")
        store, engine = _engine(Run("ab"), mention, Run("cd\n"))
        engine.format_inline(4, 3, {"italic": True})
        assert [r.text for r in store] == ["ab", "@dev", "c", "d\n"]
        assert store.run_at(2).attributes == {"italic": True}

    @pytest.mark.parametrize("length,bundle", [(0, {"bold": True}), (3, {})])
    def test_noop(self, length: int, bundle: dict) -> None:
        store, engine = _engine(Run("Hello\n"))
        assert engine.format_inline(0, length, bundle) is False
        assert store.run_count == 1


class TestClearFormat:
    def test_clear_all_inline(self) -> None:
        store, engine = _engine(Run("Hi", {"bold": True, "color": "red"}), Run(" there\n"))
        assert engine.clear_format(0, 8) is True
        assert [r.to_dict() for r in store] == [{"insert": "Hi there\n"}]

    def test_clear_plain_reports_no_change(self) -> None:
        _, engine = _engine(Run("Hi\n"))
        assert engine.clear_format(0, 2) is False

    def test_clear_keeps_mentions(self) -> None:
        mention = build_mention_run({"userName": "dev", "name": "Dev", "id": 1}, "@")
        store, engine = _engine(Run("a", {"bold": True}), mention, Run("\n"))
        engine.clear_format(0, 5)
        assert store.run_at(1).is_mention
