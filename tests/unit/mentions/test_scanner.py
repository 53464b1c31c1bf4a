"""
Тесты отложенного сканирования упоминаний с учётом поколения правок.
"""

import asyncio
from typing import Optional

from richdelta.mentions.provider import StaticSuggestionProvider
from richdelta.mentions.scanner import MentionLookup, MentionScanner
from richdelta.mentions.query import MentionQuery
from richdelta.model.document import DeltaDocument

PROVIDER = StaticSuggestionProvider(
    {
        "@": [{"userName": "dev", "name": "Dev", "id": "u1"}],
        "#": [{"ticketName": "BUG-1", "id": 1}],
    }
)


class FakeSource:
    def __init__(self, text: str) -> None:
        self.text = text
        self.generation = 0

    def get_text(self) -> str:
        return self.text

    def edit(self, text: str) -> None:
        self.text = text
        self.generation += 1


def _scan(scanner: MentionScanner, cursor: int) -> Optional[MentionLookup]:
    return scanner.run(scanner.schedule(cursor))


class TestMentionScanner:
    """Билеты сканирования: актуальные, вытесненные и устаревшие."""

    def test_scheduled_scan(self) -> None:
        scanner = MentionScanner(FakeSource("Hi @d\n"), PROVIDER)
        lookup = _scan(scanner, 5)
        assert lookup is not None
        assert lookup.query == MentionQuery("@", "d", 3, 5)
        assert [c.primary_name for c in lookup.candidates] == ["dev"]
        assert scanner.pending is None

    def test_superseded_ticket(self) -> None:
        scanner = MentionScanner(FakeSource("@d\n"), PROVIDER)
        first = scanner.schedule(2)
        second = scanner.schedule(2)
        assert scanner.run(first) is None
        assert scanner.run(second) is not None

    def test_stale_ticket_dropped(self) -> None:
        """Скан, запланированный до правки, не выполняется."""
        source = FakeSource("@d\n")
        scanner = MentionScanner(source, PROVIDER)
        ticket = scanner.schedule(2)
        source.edit("x@d\n")
        assert scanner.run(ticket) is None
        assert scanner.pending is None

    def test_ticket_runs_once(self) -> None:
        scanner = MentionScanner(FakeSource("@d\n"), PROVIDER)
        ticket = scanner.schedule(2)
        assert scanner.run(ticket) is not None
        assert scanner.run(ticket) is None

    def test_cancel(self) -> None:
        scanner = MentionScanner(FakeSource("@d\n"), PROVIDER)
        ticket = scanner.schedule(2)
        scanner.cancel()
        assert scanner.run(ticket) is None

    def test_no_trigger_or_no_candidates(self) -> None:
        assert _scan(MentionScanner(FakeSource("plain\n"), PROVIDER), 5) is None
        empty = StaticSuggestionProvider({"@": []})
        assert _scan(MentionScanner(FakeSource("@d\n"), empty), 2) is None

    def test_no_matches_still_reports_query(self) -> None:
        lookup = _scan(MentionScanner(FakeSource("#zzz\n"), PROVIDER), 4)
        assert lookup is not None
        assert lookup.candidates == ()

    def test_works_with_document_generation(self) -> None:
        doc = DeltaDocument()
        doc.insert(0, "@de")
        scanner = MentionScanner(doc, PROVIDER)
        ticket = scanner.schedule(3)
        doc.insert(3, "v")
        assert scanner.run(ticket) is None
        assert _scan(scanner, 4) is not None


class TestScheduleSoon:
    def test_runs_on_next_iteration(self) -> None:
        source = FakeSource("#B\n")
        scanner = MentionScanner(source, PROVIDER)
        results: list[Optional[MentionLookup]] = []

        loop = asyncio.new_event_loop()
        try:
            scanner.schedule_soon(loop, 2, results.append)
            assert results == []
            loop.run_until_complete(asyncio.sleep(0))
        finally:
            loop.close()

        assert len(results) == 1
        assert results[0] is not None
        assert results[0].query.trigger == "#"

    def test_reschedule_cancels_previous(self) -> None:
        scanner = MentionScanner(FakeSource("@d\n"), PROVIDER)
        results: list[Optional[MentionLookup]] = []

        loop = asyncio.new_event_loop()
        try:
            scanner.schedule_soon(loop, 1, results.append)
            scanner.schedule_soon(loop, 2, results.append)
            loop.run_until_complete(asyncio.sleep(0))
        finally:
            loop.close()

        assert len(results) == 1
        assert results[0] is not None and results[0].query.cursor_index == 2

    def test_edit_before_callback_drops_result(self) -> None:
        source = FakeSource("@d\n")
        scanner = MentionScanner(source, PROVIDER)
        results: list[Optional[MentionLookup]] = []

        loop = asyncio.new_event_loop()
        try:
            scanner.schedule_soon(loop, 2, results.append)
            source.edit("@dx\n")
            loop.run_until_complete(asyncio.sleep(0))
        finally:
            loop.close()

        assert results == [None]
