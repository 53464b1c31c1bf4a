"""
Format Engine: effective formatting over a range and toggle semantics.

The engine holds no state of its own; it works on the :class:`RunStore` it
is given. Callers validate ranges and bundles beforehand.

Module: richdelta/engine/formatting.py
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Final, Mapping, Optional

from richdelta.engine.position import line_bounds
from richdelta.engine.store import RunStore
from richdelta.model.attributes import Attributes, attributes_equal, values_equal
from richdelta.model.enums import detect_list_type
from richdelta.model.run import Run

logger: Final = logging.getLogger(__name__)


def line_list_type(text: str, index: int) -> Optional[str]:
    """List type value (``"bullet"``/``"ordered"``) of the line holding ``index``."""
    line_start, line_end = line_bounds(text, index)
    list_type = detect_list_type(text[line_start:line_end])
    return list_type.value if list_type is not None else None


def _first_line_char(text: str, begin: int, end: int) -> int:
    """First index in ``[begin, end)`` that is not a newline; ``begin`` if there is none."""
    for position in range(begin, end):
        if text[position] != "\n":
            return position
    return begin


def intersect_formats(formats: list[Dict[str, Any]]) -> Dict[str, Any]:
    """Keys of the first set kept only where every other set has an equal value."""
    if not formats:
        return {}
    result = dict(formats[0])
    for other in formats[1:]:
        for key in list(result):
            if key not in other or not values_equal(key, result[key], other[key]):
                del result[key]
    return result


class FormatEngine:
    """
    Inline formatting over a run store.

    Example:
        >>> store = RunStore([Run("Hello World\\n")])
        >>> engine = FormatEngine(store)
        >>> engine.format_inline(0, 5, {"bold": True})
        True
        >>> engine.get_format_at(0, 5)
        {'bold': True}
    """

    def __init__(self, store: RunStore) -> None:
        self._store = store

    def get_format_at(
        self, index: int, length: int, include_mentions: bool = True
    ) -> Dict[str, Any]:
        """
        Formatting shared by every run overlapping ``[index, index + length)``.

        Each run contributes its stored attributes plus the implicit ``list``
        value of the line holding its first overlapping character that is not a
        newline (a run covering only newlines uses its first one). A plain
        run contributes an empty set, so any unformatted text in the range
        empties the result (apart from a shared list type).

        Args:
            include_mentions: When False, mention runs are left out of the
                intersection (used for toggle decisions).

        Returns:
            The intersection; ``{}`` for an empty or non-overlapping range.
        """
        if length <= 0:
            return {}

        text = self._store.text()
        formats: list[Dict[str, Any]] = []
        for _, run_begin, run in self._store.overlapping(index, length):
            if run.is_mention and not include_mentions:
                continue
            current: Dict[str, Any] = dict(run.attributes or {})
            begin = max(run_begin, index)
            end = min(run_begin + len(run.text), index + length)
            list_value = line_list_type(text, _first_line_char(text, begin, end))
            if list_value is not None:
                current.setdefault("list", list_value)
            formats.append(current)

        return intersect_formats(formats)

    def format_inline(self, index: int, length: int, attributes: Mapping[str, Any]) -> bool:
        """
        Apply ``attributes`` to ``[index, index + length)`` with toggle semantics.

        If any requested key already has the requested value across the range
        the bundle is "on": each run drops the keys whose value equals the
        request and takes the others. Otherwise every key is set. ``None``
        always removes the key. Mention runs are left untouched.

        Returns:
            True if any run changed.
        """
        if length <= 0 or not attributes:
            return False

        current = self.get_format_at(index, length, include_mentions=False)
        toggle_off = any(
            value is not None and key in current and values_equal(key, current[key], value)
            for key, value in attributes.items()
        )

        start = self._store.split_at(index, prefer_start=True)
        end = self._store.split_at(index + length)

        changed = False
        replacement: list[Run] = []
        for _, _, run in self._store.overlapping(start, end - start):
            if run.is_mention:
                replacement.append(run)
                continue
            updated: Attributes = dict(run.attributes or {})
            for key, value in attributes.items():
                if value is None:
                    updated.pop(key, None)
                elif toggle_off and values_equal(key, updated.get(key), value):
                    del updated[key]
                else:
                    updated[key] = value
            if not attributes_equal(run.attributes, updated):
                changed = True
            replacement.append(Run(run.text, updated))

        self._store.splice_runs(start, end, replacement)
        self._store.merge()
        logger.debug(
            f"format_inline [{start}, {end}) keys={sorted(attributes)} toggle_off={toggle_off}"
        )
        return changed

    def clear_format(self, index: int, length: int) -> bool:
        """
        Drop every inline attribute in the range; mention runs keep their bundle.

        Returns:
            True if any run lost attributes.
        """
        if length <= 0:
            return False

        start = self._store.split_at(index, prefer_start=True)
        end = self._store.split_at(index + length)

        changed = False
        replacement: list[Run] = []
        for _, _, run in self._store.overlapping(start, end - start):
            if run.is_mention or not run.attributes:
                replacement.append(run)
                continue
            changed = True
            replacement.append(Run(run.text))

        self._store.splice_runs(start, end, replacement)
        self._store.merge()
        return changed


__all__ = ["FormatEngine", "intersect_formats", "line_list_type"]
