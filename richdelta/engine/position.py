"""
Position Resolver: flat character indices to run-local offsets.

Used by every mutator. Boundaries resolve to the earliest run, so an index
that sits exactly between two runs maps to the end of the left one.
"""

from __future__ import annotations

from typing import Optional, Sequence

from richdelta.exceptions import IndexOutOfRangeError
from richdelta.model.run import Run, runs_length


def locate(runs: Sequence[Run], index: int) -> tuple[int, int]:
    """
    Map a flattened index to ``(run_index, local_offset)``.

    The sum of the lengths of the runs before ``run_index`` plus
    ``local_offset`` equals ``index``.

    Raises:
        IndexOutOfRangeError: If ``index`` is outside ``[0, len]``.

    Example:
        >>> locate([Run("ab"), Run("cd")], 2)
        (0, 2)
        >>> locate([Run("ab"), Run("cd")], 3)
        (1, 1)
    """
    total = runs_length(runs)
    if index < 0 or index > total:
        raise IndexOutOfRangeError(index, 0, total)

    offset = 0
    for run_index, run in enumerate(runs):
        end = offset + len(run.text)
        if index <= end:
            return run_index, index - offset
        offset = end
    return len(runs), 0


def run_index_at_boundary(runs: Sequence[Run], index: int) -> Optional[int]:
    """
    Index of the run that starts at ``index``.

    Returns ``len(runs)`` for the document end and None when ``index`` falls
    inside a run.
    """
    offset = 0
    for run_index, run in enumerate(runs):
        if offset == index:
            return run_index
        if offset > index:
            return None
        offset += len(run.text)
    return len(runs) if offset == index else None


def run_start(runs: Sequence[Run], run_index: int) -> int:
    """Flattened index at which ``runs[run_index]`` starts."""
    return sum(len(run.text) for run in runs[:run_index])


def check_range(index: int, length: int, document_length: int) -> int:
    """
    Validate a range and return its length clamped to the document end.

    Raises:
        IndexOutOfRangeError: If ``index`` is outside ``[0, document_length]``
            or ``length`` is negative.
    """
    if index < 0 or index > document_length or length < 0:
        raise IndexOutOfRangeError(index, length, document_length)
    return min(length, document_length - index)


def line_bounds(text: str, index: int) -> tuple[int, int]:
    """
    ``(line_start, line_end)`` of the line containing ``index``.

    ``line_end`` is the position of the terminating newline (or the text
    length), so ``text[line_start:line_end]`` is the line without its newline.
    """
    line_start = text.rfind("\n", 0, index) + 1
    line_end = text.find("\n", index)
    if line_end == -1:
        line_end = len(text)
    return line_start, line_end


__all__ = ["locate", "run_index_at_boundary", "run_start", "check_range", "line_bounds"]
