"""Mention trigger detection and candidate filtering."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final, Iterable, Mapping, Optional, TypeVar, Union

from richdelta.mentions.candidates import MentionCandidate, primary_field
from richdelta.model.enums import MentionType

# Trigger followed by the query typed so far, anchored at the caret.
MENTION_QUERY_RE: Final[re.Pattern[str]] = re.compile(r"[@#]([a-zA-Z0-9_\s]*)$")

CandidateT = TypeVar("CandidateT", bound=Union[Mapping, MentionCandidate])


@dataclass(frozen=True, slots=True)
class MentionQuery:
    """
    An in-progress mention before the caret.

    ``start_index`` is the trigger position; ``trigger + query`` spans
    ``[start_index, cursor_index)``.
    """

    trigger: str
    query: str
    start_index: int
    cursor_index: int

    @property
    def length(self) -> int:
        return self.cursor_index - self.start_index

    @property
    def mention_type(self) -> MentionType:
        mention_type = MentionType.from_trigger(self.trigger)
        if mention_type is None:
            raise ValueError(f"Unknown mention trigger {self.trigger!r}")
        return mention_type


def find_mention_query(text: str, cursor: int) -> Optional[MentionQuery]:
    """
    Detect a trigger and query right before ``cursor``.

    Example:
        >>> find_mention_query("Hi @de", 6)
        MentionQuery(trigger='@', query='de', start_index=3, cursor_index=6)
    """
    cursor = max(0, min(cursor, len(text)))
    match = MENTION_QUERY_RE.search(text[:cursor])
    if match is None:
        return None
    return MentionQuery(
        trigger=match.group(0)[0],
        query=match.group(1),
        start_index=cursor - len(match.group(0)),
        cursor_index=cursor,
    )


def filter_candidates(
    candidates: Iterable[CandidateT], trigger: str, query: str
) -> list[CandidateT]:
    """Keep candidates whose primary name contains ``query`` (case-insensitive), in order."""
    mention_type = MentionType.from_trigger(trigger)
    if mention_type is None:
        return []
    needle = query.lower()
    return [c for c in candidates if needle in primary_field(c, mention_type).lower()]


__all__ = ["MENTION_QUERY_RE", "MentionQuery", "find_mention_query", "filter_candidates"]
