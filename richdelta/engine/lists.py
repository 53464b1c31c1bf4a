"""
List Engine: line-oriented list markers.

A line's list type is never stored; it is read back from the marker at the
start of the line (``"• "`` or ``"<n>. "``). Every edit here is built from
Run Store primitives (split, splice, merge) and rewrites only the marker
text, so formatting and mentions in the rest of the line survive.

Module: richdelta/engine/lists.py
"""

from __future__ import annotations

import logging
import re
from typing import Final, Optional

from richdelta.engine.formatting import FormatEngine
from richdelta.engine.position import line_bounds
from richdelta.engine.store import RunStore
from richdelta.model.enums import (
    BULLET_GLYPH,
    BULLET_MARKER,
    LIST_MARKER_RE,
    ORDERED_MARKER_RE,
    ListType,
    strip_list_marker,
)
from richdelta.model.run import Run

logger: Final = logging.getLogger(__name__)

# Text before the caret when it sits right after a bare ordered marker.
_BARE_ORDERED_RE: Final[re.Pattern[str]] = re.compile(r"\d+\. ")


def ordered_marker(number: int) -> str:
    return f"{number}. "


class ListEngine:
    """
    Bullet and numbered list handling over a run store.

    Example:
        >>> store = RunStore([Run("Hello\\n")])
        >>> lists = ListEngine(store, FormatEngine(store))
        >>> lists.toggle_list(0, ListType.ORDERED)
        True
        >>> store.text()
        '1. Hello\\n'
    """

    def __init__(self, store: RunStore, formatter: FormatEngine) -> None:
        self._store = store
        self._formatter = formatter

    def current_list_type(self, line_start: int) -> Optional[ListType]:
        """List type of the line starting at ``line_start``, as reported by the format engine."""
        current = self._formatter.get_format_at(line_start, 1)
        return ListType.from_string(current.get("list"))

    def toggle_list(self, index: int, list_type: ListType) -> bool:
        """
        Toggle ``list_type`` on the line containing ``index``.

        The same type removes the marker. A different type (or none) replaces
        any existing marker with ``"• "`` or ``"<n>. "`` where ``n`` comes
        from :meth:`next_ordered_number`.

        Returns:
            True if the line changed.
        """
        text = self._store.text()
        line_start, line_end = line_bounds(text, index)
        line_text = text[line_start:line_end]

        match = LIST_MARKER_RE.match(line_text)
        old_marker = match.group(0) if match else ""

        if self.current_list_type(line_start) is list_type:
            new_marker = ""
        elif list_type is ListType.BULLET:
            new_marker = BULLET_MARKER
        else:
            new_marker = ordered_marker(self.next_ordered_number(line_start))

        if old_marker == new_marker:
            return False

        if old_marker:
            self._store.delete_range(line_start, len(old_marker))
        if new_marker:
            self._store.insert_runs(line_start, [Run(new_marker)])
        self._store.merge()

        logger.debug(
            f"Line at {line_start}: marker {old_marker!r} -> {new_marker!r} ({list_type.value})"
        )
        return True

    def next_ordered_number(self, line_start: int) -> int:
        """
        Number for a new ordered item starting at ``line_start``.

        Walks the preceding lines upwards: blank lines and bullet lines are
        skipped, the first ``"<k>. "`` line gives ``k + 1``, and any other
        line (or the document start) ends the walk with ``1``.

        Example:
            >>> store = RunStore([Run("1. a\\n2. b\\n\\n")])
            >>> ListEngine(store, FormatEngine(store)).next_ordered_number(10)
            3
        """
        text = self._store.text()
        for raw_line in reversed(text[:line_start].split("\n")):
            line = raw_line.strip()
            if not line:
                continue
            match = ORDERED_MARKER_RE.match(raw_line.lstrip())
            if match:
                return int(match.group(1)) + 1
            if line.startswith(BULLET_GLYPH):
                continue
            break
        return 1

    def handle_enter(self, index: int) -> Optional[int]:
        """
        Enter key inside a list item.

        An item with nothing after its marker leaves the list: the marker is
        removed and a bare newline inserted. An item with content continues
        the list on a new line with ``"• "`` or ``"<n+1>. "``.

        Returns:
            The new caret index, or None when the caret is not in a list line
            (nothing is changed then).
        """
        text = self._store.text()
        line_start = text.rfind("\n", 0, index) + 1
        current_line = text[line_start:index]

        ordered = ORDERED_MARKER_RE.match(current_line)
        is_bullet = current_line.startswith(BULLET_MARKER)
        if not is_bullet and ordered is None:
            return None

        if not strip_list_marker(current_line).strip():
            self._store.delete_range(line_start, index - line_start)
            self._store.insert_runs(line_start, [Run("\n")])
            self._store.merge()
            logger.debug(f"Empty list item at {line_start}: list exited")
            return line_start + 1

        if ordered is None:
            marker = BULLET_MARKER
        else:
            marker = ordered_marker(int(ordered.group(1)) + 1)

        # A caret inside a mention breaks the line after the mention.
        at = self._store.insert_runs(index, [Run("\n" + marker)])
        self._store.merge()
        return at + 1 + len(marker)

    def handle_backspace(self, index: int) -> Optional[int]:
        """
        Backspace right after a bare marker at the start of a line.

        Removes the marker and returns the line start as the new caret, or
        returns None (unchanged) for any other position.
        """
        if index <= 0:
            return None

        text = self._store.text()
        line_start = text.rfind("\n", 0, index) + 1
        current_line = text[line_start:index]
        if current_line != BULLET_MARKER and not _BARE_ORDERED_RE.fullmatch(current_line):
            return None

        self._store.delete_range(line_start, len(current_line))
        self._store.merge()
        return line_start


__all__ = ["ListEngine", "ordered_marker"]
