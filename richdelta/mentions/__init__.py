"""
Упоминания (@пользователь, #тикет): кандидаты, поиск запроса, провайдеры.

Glue around the engine's mention runs: detecting an in-progress query before
the caret, filtering candidates, deferred scans keyed by edit generation, and
extracting mentions from a saved delta.
"""

from richdelta.mentions.candidates import (
    MentionCandidate,
    TicketCandidate,
    UserCandidate,
    as_candidate,
    candidate_from_dict,
)
from richdelta.mentions.extraction import extract_mentions
from richdelta.mentions.provider import (
    StaticSuggestionProvider,
    StoreSuggestionProvider,
    SuggestionProvider,
)
from richdelta.mentions.query import MentionQuery, filter_candidates, find_mention_query
from richdelta.mentions.scanner import MentionLookup, MentionScanner, ScanTicket

__all__ = [
    "MentionCandidate",
    "UserCandidate",
    "TicketCandidate",
    "as_candidate",
    "candidate_from_dict",
    "extract_mentions",
    "SuggestionProvider",
    "StaticSuggestionProvider",
    "StoreSuggestionProvider",
    "MentionQuery",
    "find_mention_query",
    "filter_candidates",
    "MentionLookup",
    "MentionScanner",
    "ScanTicket",
]
