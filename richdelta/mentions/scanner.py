"""
Deferred mention scans keyed by the document's edit generation.

A scan is requested after an edit (typically once the view has settled) and
runs later. Each request returns a :class:`ScanTicket` capturing the
document generation at scheduling time. When the ticket runs:

    - a newer ticket supersedes it: the result is None;
    - the document changed since scheduling (generation differs): the scan
      is stale and its cursor may point at shifted text, so it is dropped.

Only a ticket that is both current and fresh reads the text.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Final, Optional, Protocol

from richdelta.mentions.candidates import MentionCandidate
from richdelta.mentions.provider import SuggestionProvider
from richdelta.mentions.query import MentionQuery, find_mention_query

logger: Final = logging.getLogger(__name__)


class EditSource(Protocol):
    """What the scanner needs from a document."""

    @property
    def generation(self) -> int: ...

    def get_text(self) -> str: ...


@dataclass(frozen=True, slots=True)
class ScanTicket:
    serial: int
    generation: int
    cursor: int


@dataclass(frozen=True, slots=True)
class MentionLookup:
    """Active mention query together with the matching candidates."""

    query: MentionQuery
    candidates: tuple[MentionCandidate, ...]


class MentionScanner:
    def __init__(self, source: EditSource, provider: SuggestionProvider) -> None:
        self._source = source
        self._provider = provider
        self._serial = 0
        self._pending: Optional[ScanTicket] = None
        self._handle: Optional[asyncio.Handle] = None

    @property
    def pending(self) -> Optional[ScanTicket]:
        return self._pending

    def schedule(self, cursor: int) -> ScanTicket:
        """Request a scan at ``cursor``; any earlier pending ticket is superseded."""
        self._serial += 1
        ticket = ScanTicket(serial=self._serial, generation=self._source.generation, cursor=cursor)
        self._pending = ticket
        return ticket

    def cancel(self) -> None:
        """Drop the pending ticket and any scheduled callback."""
        self._pending = None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def run(self, ticket: ScanTicket) -> Optional[MentionLookup]:
        """
        Execute a ticket.

        Returns:
            The lookup, or None if the ticket is superseded or stale, no
            trigger precedes the cursor, or the provider has no candidates
            for the trigger.
        """
        if self._pending is None or self._pending.serial != ticket.serial:
            logger.debug(f"Mention scan #{ticket.serial} superseded")
            return None
        self._pending = None

        if ticket.generation != self._source.generation:
            logger.debug(
                f"Mention scan #{ticket.serial} stale: generation {ticket.generation} "
                f"!= {self._source.generation}"
            )
            return None

        query = find_mention_query(self._source.get_text(), ticket.cursor)
        if query is None or not self._provider.has_trigger(query.trigger):
            return None

        candidates = tuple(self._provider.lookup(query.trigger, query.query))
        return MentionLookup(query=query, candidates=candidates)

    def schedule_soon(
        self,
        loop: asyncio.AbstractEventLoop,
        cursor: int,
        callback: Callable[[Optional[MentionLookup]], None],
    ) -> asyncio.Handle:
        """
        Run a scan on the next loop iteration and pass the result to ``callback``.

        A previously scheduled callback is cancelled.
        """
        if self._handle is not None:
            self._handle.cancel()

        ticket = self.schedule(cursor)

        def _fire() -> None:
            self._handle = None
            callback(self.run(ticket))

        self._handle = loop.call_soon(_fire)
        return self._handle


__all__ = ["EditSource", "ScanTicket", "MentionLookup", "MentionScanner"]
