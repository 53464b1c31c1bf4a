"""
Mention Inserter: atomic mention runs.

A mention run's text is the trigger plus the candidate's primary name
(``@userName`` or ``#ticketName``); its attributes are the fixed mention
bundle including the color pair of the mention type.
"""

from __future__ import annotations

import logging
from typing import Any, Final

from richdelta.engine.store import RunStore
from richdelta.exceptions import InvalidAttributeBundleError
from richdelta.mentions.candidates import MentionCandidate, as_candidate
from richdelta.model.attributes import Attributes
from richdelta.model.enums import MentionType
from richdelta.model.run import Run

logger: Final = logging.getLogger(__name__)


def mention_attributes(candidate: MentionCandidate) -> Attributes:
    mention_type = candidate.mention_type
    return {
        "mention": True,
        "mentionType": mention_type.value,
        "mentionId": candidate.id,
        "mentionDisplay": candidate.display,
        "mentionValue": candidate.primary_name,
        "color": mention_type.text_color,
        "backgroundColor": mention_type.background_color,
    }


def build_mention_run(descriptor: Any, trigger: str) -> Run:
    """
    Build the mention run for ``descriptor`` typed after ``trigger``.

    Raises:
        InvalidAttributeBundleError: For an unknown trigger or a descriptor
            missing its name or id.

    Example:
        >>> build_mention_run({"userName": "dev", "name": "Dev", "id": "u1"}, "@").text
        '@dev'
    """
    mention_type = MentionType.from_trigger(trigger)
    if mention_type is None:
        raise InvalidAttributeBundleError(f"Unknown mention trigger {trigger!r}")
    candidate = as_candidate(descriptor, mention_type)
    return Run(text=trigger + candidate.primary_name, attributes=mention_attributes(candidate))


class MentionInserter:
    def __init__(self, store: RunStore) -> None:
        self._store = store

    def insert_mention(self, index: int, descriptor: Any, trigger: str) -> tuple[int, int]:
        """
        Splice a mention run in at ``index``.

        Neighbouring runs are split as needed; the mention never merges with
        them. An index inside another mention resolves to that mention's end.

        Returns:
            ``(at, length)``: where the mention landed and its text length.
        """
        run = build_mention_run(descriptor, trigger)
        at = self._store.insert_runs(index, [run])
        self._store.merge()
        logger.debug(f"Inserted mention {run.text!r} at {at}")
        return at, len(run.text)


__all__ = ["MentionInserter", "build_mention_run", "mention_attributes"]
