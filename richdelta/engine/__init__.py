"""
Ядро редактора: хранилище runs и операции над ним.

Components, leaves first: RunStore, position helpers, FormatEngine,
ListEngine, HistoryManager, MentionInserter. None of them keeps state
besides the store and the history; the public entry point is
:class:`richdelta.model.document.DeltaDocument`.
"""

from richdelta.engine.formatting import FormatEngine
from richdelta.engine.history import HistoryEntry, HistoryManager
from richdelta.engine.lists import ListEngine
from richdelta.engine.mentions import MentionInserter, build_mention_run
from richdelta.engine.position import check_range, line_bounds, locate
from richdelta.engine.store import RunStore

__all__ = [
    "RunStore",
    "locate",
    "check_range",
    "line_bounds",
    "FormatEngine",
    "ListEngine",
    "HistoryEntry",
    "HistoryManager",
    "MentionInserter",
    "build_mention_run",
]
