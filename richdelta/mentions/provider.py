"""
Suggestion providers for mention lookup.

The engine never owns candidate data: a provider is injected wherever
lookups happen (see :class:`richdelta.mentions.scanner.MentionScanner`).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final, Iterable, Mapping, Optional, Protocol, Sequence

from richdelta.exceptions import InvalidAttributeBundleError
from richdelta.mentions.candidates import MentionCandidate, as_candidate
from richdelta.mentions.query import filter_candidates
from richdelta.model.enums import MENTION_TRIGGERS, MentionType

if TYPE_CHECKING:
    from richdelta.persistence.store import DeltaStore

logger: Final = logging.getLogger(__name__)


class SuggestionProvider(Protocol):
    def lookup(self, trigger: str, query: str) -> Sequence[MentionCandidate]: ...

    def has_trigger(self, trigger: str) -> bool: ...


class StaticSuggestionProvider:
    """
    Provider over a fixed ``{"@": [...], "#": [...]}`` mapping.

    Entries may be candidate objects or wire mappings; malformed entries are
    skipped with a warning.

    Example:
        >>> provider = StaticSuggestionProvider({"@": [{"userName": "dev", "name": "Dev", "id": "u1"}]})
        >>> [c.user_name for c in provider.lookup("@", "DE")]
        ['dev']
    """

    def __init__(self, candidates: Mapping[str, Iterable[Any]]) -> None:
        self._candidates: dict[str, list[MentionCandidate]] = {}
        for trigger, entries in candidates.items():
            mention_type = MentionType.from_trigger(trigger)
            if mention_type is None:
                logger.warning(f"Ignoring candidates for unknown trigger {trigger!r}")
                continue
            parsed: list[MentionCandidate] = []
            for entry in entries:
                try:
                    parsed.append(as_candidate(entry, mention_type))
                except InvalidAttributeBundleError as e:
                    logger.warning(f"Skipping {mention_type.value} candidate: {e}")
            self._candidates[trigger] = parsed

    def has_trigger(self, trigger: str) -> bool:
        return bool(self._candidates.get(trigger))

    def lookup(self, trigger: str, query: str) -> list[MentionCandidate]:
        if trigger not in MENTION_TRIGGERS:
            return []
        return filter_candidates(self._candidates.get(trigger, []), trigger, query)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Wire form, as stored under ``requiredMentions``."""
        return {
            trigger: [candidate.to_dict() for candidate in entries]
            for trigger, entries in self._candidates.items()
        }


class StoreSuggestionProvider:
    """
    Provider backed by the required-mentions mapping of a :class:`DeltaStore`.

    The mapping is fetched on first use and cached until :meth:`refresh`.
    """

    def __init__(self, store: "DeltaStore") -> None:
        self._store = store
        self._cached: Optional[StaticSuggestionProvider] = None

    def refresh(self) -> StaticSuggestionProvider:
        mapping = self._store.load_required_mentions()
        self._cached = StaticSuggestionProvider(mapping)
        logger.debug(f"Loaded required mentions for triggers {sorted(mapping)}")
        return self._cached

    def _provider(self) -> StaticSuggestionProvider:
        if self._cached is None:
            return self.refresh()
        return self._cached

    def has_trigger(self, trigger: str) -> bool:
        return self._provider().has_trigger(trigger)

    def lookup(self, trigger: str, query: str) -> list[MentionCandidate]:
        return self._provider().lookup(trigger, query)


__all__ = ["SuggestionProvider", "StaticSuggestionProvider", "StoreSuggestionProvider"]
