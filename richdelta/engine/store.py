"""
Run Store: the ordered run sequence and its splitting/merging primitives.

The store exclusively owns its run list. Everything handed out or taken in
is copied, so callers (history snapshots in particular) never alias the live
sequence.

Module: richdelta/engine/store.py
"""

from __future__ import annotations

import logging
from typing import Final, Iterable, Iterator, List, Optional, Sequence

from richdelta.engine.position import locate, run_index_at_boundary
from richdelta.exceptions import IndexOutOfRangeError
from richdelta.model.run import Run, merge_consecutive_runs, runs_length, runs_text

logger: Final = logging.getLogger(__name__)

DEFAULT_CONTENT: Final[str] = "\n"


class RunStore:
    """
    Ordered sequence of text runs.

    Example:
        >>> store = RunStore([Run("Hello World")])
        >>> store.split_at(5)
        5
        >>> [r.text for r in store]
        ['Hello', ' World']
        >>> store.merge()
        >>> [r.text for r in store]
        ['Hello World']
    """

    def __init__(self, runs: Optional[Iterable[Run]] = None) -> None:
        self._runs: List[Run] = [run.copy() for run in runs or () if run.text]
        self.ensure_content()

    # --- read access ---

    @property
    def length(self) -> int:
        """Length of the flattened text."""
        return runs_length(self._runs)

    @property
    def run_count(self) -> int:
        return len(self._runs)

    def text(self) -> str:
        return runs_text(self._runs)

    def run_at(self, run_index: int) -> Run:
        return self._runs[run_index]

    def snapshot(self) -> tuple[Run, ...]:
        """Deep copies of all runs."""
        return tuple(run.copy() for run in self._runs)

    def overlapping(self, index: int, length: int) -> list[tuple[int, int, Run]]:
        """
        Runs intersecting ``[index, index + length)``.

        Returns:
            ``(run_index, run_start, run)`` triples with live run objects.
        """
        result: list[tuple[int, int, Run]] = []
        if length <= 0:
            return result
        end = index + length
        offset = 0
        for run_index, run in enumerate(self._runs):
            run_end = offset + len(run.text)
            if offset >= end:
                break
            if run_end > index:
                result.append((run_index, offset, run))
            offset = run_end
        return result

    def __iter__(self) -> Iterator[Run]:
        return iter(self._runs)

    def __len__(self) -> int:
        return len(self._runs)

    # --- primitives ---

    def split_at(self, index: int, prefer_start: bool = False) -> int:
        """
        Ensure a run boundary at ``index``.

        An index inside a plain run splits it into two runs with the same
        attributes; an existing boundary is left alone. Mention runs are never
        cut: an index inside one resolves to the mention's end, or to its start
        when ``prefer_start`` is set.

        Returns:
            The flattened index of the resulting boundary.

        Raises:
            IndexOutOfRangeError: If ``index`` is outside ``[0, len]``.
        """
        boundary = self.boundary_for(index, prefer_start)
        if boundary != index:
            logger.debug(f"Index {index} inside mention run; boundary moved to {boundary}")
            return boundary

        run_index, offset = locate(self._runs, index)
        if run_index >= len(self._runs):
            return index

        run = self._runs[run_index]
        if offset == 0 or offset == len(run.text):
            return index

        left, right = run.split_at(offset)
        self._runs[run_index : run_index + 1] = [left, right]
        return index

    def boundary_for(self, index: int, prefer_start: bool = False) -> int:
        """
        The boundary :meth:`split_at` would resolve ``index`` to, without
        changing the store.

        Raises:
            IndexOutOfRangeError: If ``index`` is outside ``[0, len]``.
        """
        total = self.length
        if index < 0 or index > total:
            raise IndexOutOfRangeError(index, 0, total)

        run_index, offset = locate(self._runs, index)
        if run_index >= len(self._runs):
            return index

        run = self._runs[run_index]
        if run.is_mention and 0 < offset < len(run.text):
            run_begin = index - offset
            return run_begin if prefer_start else run_begin + len(run.text)
        return index

    def splice_runs(self, start: int, end: int, replacement: Sequence[Run]) -> list[Run]:
        """
        Replace the whole runs covering ``[start, end)``.

        Both indices must already be run boundaries (see :meth:`split_at`).
        Replacement runs are copied; empty ones are skipped.

        Returns:
            The removed runs.

        Raises:
            ValueError: If ``start > end`` or either index is not a boundary.
        """
        if start > end:
            raise ValueError(f"Splice start {start} is after end {end}")

        first = run_index_at_boundary(self._runs, start)
        last = run_index_at_boundary(self._runs, end)
        if first is None or last is None:
            raise ValueError(f"Splice range [{start}, {end}) is not aligned to run boundaries")

        removed = self._runs[first:last]
        self._runs[first:last] = [run.copy() for run in replacement if run.text]
        logger.debug(
            f"Spliced [{start}, {end}): removed {len(removed)} runs, inserted {len(replacement)}"
        )
        return removed

    def insert_runs(self, index: int, runs: Sequence[Run]) -> int:
        """
        Splice ``runs`` in at ``index`` without merging.

        An index inside a mention resolves to the mention's end.

        Returns:
            The index the runs were actually inserted at.
        """
        boundary = self.split_at(index)
        self.splice_runs(boundary, boundary, runs)
        return boundary

    def delete_range(self, index: int, length: int) -> tuple[int, int]:
        """
        Remove ``[index, index + length)``, widened to cover any partially
        selected mention.

        Returns:
            The ``(start, end)`` range that was removed.
        """
        if length <= 0:
            return index, index
        start = self.split_at(index, prefer_start=True)
        end = self.split_at(index + length)
        self.splice_runs(start, end, [])
        return start, end

    def merge(self) -> None:
        """Concatenate adjacent equal-formatted non-mention runs; drop empty runs."""
        self._runs = merge_consecutive_runs(self._runs)

    def ensure_content(self) -> None:
        """Keep the minimum document content (a single newline)."""
        if not self._runs:
            self._runs = [Run(DEFAULT_CONTENT)]

    def replace_all(self, runs: Iterable[Run]) -> None:
        """Replace the whole sequence with copies of ``runs``."""
        self._runs = [run.copy() for run in runs if run.text]
        self.ensure_content()

    def __repr__(self) -> str:
        return f"RunStore(runs={len(self._runs)}, length={self.length})"


__all__ = ["DEFAULT_CONTENT", "RunStore"]
