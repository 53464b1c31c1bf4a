"""Selection range over the flattened document text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Selection:
    """
    Half-open range ``[index, index + length)``.

    Example:
        >>> Selection(8, 5).clamp(10)
        Selection(index=8, length=2)
    """

    index: int = 0
    length: int = 0

    @property
    def end(self) -> int:
        return self.index + self.length

    @property
    def is_collapsed(self) -> bool:
        return self.length == 0

    def clamp(self, document_length: int) -> "Selection":
        """Return this range clamped to ``[0, document_length]``."""
        index = min(max(0, self.index), document_length)
        length = min(max(0, self.length), document_length - index)
        if index == self.index and length == self.length:
            return self
        return Selection(index, length)

    def to_dict(self) -> dict[str, int]:
        return {"index": self.index, "length": self.length}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Selection":
        return Selection(index=int(data.get("index", 0)), length=int(data.get("length", 0)))
