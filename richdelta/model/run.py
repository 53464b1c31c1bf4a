"""
Модель текстового фрагмента (Run) с единообразным форматированием.

A run is the atomic unit of storage in a delta document: a non-empty piece of
text that carries one attribute set. Unformatted runs carry ``attributes=None``
(never an empty mapping). Mention runs are indivisible tokens that are never
split or merged with their neighbours.

Module: richdelta/model/run.py
"""

import logging
from dataclasses import dataclass
from typing import Any, Final, Iterable, Optional

from richdelta.model.attributes import (
    Attributes,
    attributes_equal,
    copy_attributes,
    is_mention_bundle,
    validate_bundle,
)

logger: Final = logging.getLogger(__name__)

REQUIRED_MENTION_KEYS: Final[tuple[str, ...]] = (
    "mention",
    "mentionType",
    "mentionId",
    "mentionDisplay",
    "mentionValue",
)


@dataclass(slots=True)
class Run:
    """
    Contiguous text with uniform formatting.

    Attributes:
        text: The text content of the run. Must be non-empty in a document.
        attributes: Attribute name to value, or None when unformatted.

    Example:
        >>> run = Run(text="Hello World", attributes={"bold": True})
        >>> left, right = run.split_at(5)
        >>> left.text, right.text
        ('Hello', ' World')
        >>> left.merge_with(right) == run
        True
    """

    text: str
    attributes: Optional[Attributes] = None

    def __post_init__(self) -> None:
        """Lightweight normalization: text is a str, empty attributes become None."""
        if not isinstance(self.text, str):
            self.text = "" if self.text is None else str(self.text)
        if not self.attributes:
            self.attributes = None

    @property
    def is_mention(self) -> bool:
        return is_mention_bundle(self.attributes)

    def validate(self) -> None:
        """
        Validate run content and attributes.

        Raises:
            ValueError: If text is empty, attributes are malformed, or a
                mention run lacks part of its fixed bundle.
            TypeError: If text is not a string.
        """
        if not isinstance(self.text, str):
            raise TypeError(f"Run text must be str, got {type(self.text).__name__}")

        if not self.text:
            raise ValueError("Run text cannot be empty")

        if self.attributes is not None:
            validate_bundle(self.attributes)

        if self.is_mention:
            missing = [k for k in REQUIRED_MENTION_KEYS if k not in (self.attributes or {})]
            if missing:
                raise ValueError(f"Mention run is missing attributes: {', '.join(missing)}")

        logger.debug(f"Validated Run: len={len(self.text)}, formatting={self._format_summary()}")

    def can_merge_with(self, other: object) -> bool:
        """
        Check if this run can be concatenated with ``other``.

        Mention runs never merge, in either direction. Other runs merge when
        their attribute sets are equal by value.
        """
        if not isinstance(other, Run):
            return False
        if self.is_mention or other.is_mention:
            return False
        return attributes_equal(self.attributes, other.attributes)

    def merge_with(self, other: "Run") -> "Run":
        """
        Merge this run with another run.

        Returns:
            A new Run with concatenated text and this run's attributes.

        Raises:
            ValueError: If the runs cannot be merged.
        """
        if not self.can_merge_with(other):
            raise ValueError(
                f"Cannot merge runs with different formatting: "
                f"{self._format_summary()} != {other._format_summary()}"
            )
        return Run(text=self.text + other.text, attributes=copy_attributes(self.attributes))

    def split_at(self, position: int) -> tuple["Run", "Run"]:
        """
        Split this run at a local offset.

        Raises:
            ValueError: If the position is not strictly inside the text, or
                the run is a mention.
        """
        if self.is_mention:
            raise ValueError("Mention runs cannot be split")
        if not (0 < position < len(self.text)):
            raise ValueError(
                f"Split position {position} out of bounds for text length {len(self.text)}"
            )

        left_run = self.copy()
        left_run.text = self.text[:position]

        right_run = self.copy()
        right_run.text = self.text[position:]

        return left_run, right_run

    def copy(self) -> "Run":
        """Create a deep copy of the run."""
        return Run(text=self.text, attributes=copy_attributes(self.attributes))

    def to_dict(self) -> dict[str, Any]:
        """Serialize the run as a delta op; ``attributes`` is omitted when unformatted."""
        result: dict[str, Any] = {"insert": self.text}
        if self.attributes:
            result["attributes"] = copy_attributes(self.attributes)
        return result

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Run":
        """Deserialize a run from a delta op."""
        if not isinstance(data, dict):
            raise TypeError(f"Expected dict, got {type(data).__name__}")

        if "insert" not in data:
            raise KeyError("Missing required key 'insert' in op data")

        attributes = data.get("attributes")
        if attributes is not None and not isinstance(attributes, dict):
            raise TypeError(f"Op attributes must be dict, got {type(attributes).__name__}")

        return Run(text=data["insert"], attributes=copy_attributes(attributes))

    def _format_summary(self) -> str:
        """Compact summary of the attribute set for logs and repr."""
        if not self.attributes:
            return "plain"
        if self.is_mention:
            return f"mention={self.attributes.get('mentionType')}:{self.attributes.get('mentionId')}"
        parts: list[str] = []
        for key, value in self.attributes.items():
            if value is True:
                parts.append(key)
            else:
                parts.append(f"{key}={value}")
        return ", ".join(parts)

    def __len__(self) -> int:
        """Return the length of the text content."""
        return len(self.text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Run):
            return NotImplemented
        return self.text == other.text and attributes_equal(self.attributes, other.attributes)

    def __repr__(self) -> str:
        text_preview = self.text[:20] + "..." if len(self.text) > 20 else self.text
        return f"Run(text={text_preview!r}, len={len(self.text)}, {self._format_summary()})"


# Utility functions


def merge_consecutive_runs(runs: list[Run]) -> list[Run]:
    """
    Merge adjacent runs with equal formatting.

    Scans pairs right-to-left; empty runs are dropped and mention runs are
    never merged. Returns a new list of copies and is idempotent.
    """
    merged: list[Run] = [run.copy() for run in runs if run.text]

    for i in range(len(merged) - 1, 0, -1):
        current = merged[i]
        previous = merged[i - 1]
        if previous.can_merge_with(current):
            merged[i - 1] = previous.merge_with(current)
            del merged[i]

    if len(merged) != len(runs):
        logger.debug(f"Merged {len(runs)} runs into {len(merged)} runs")
    return merged


def runs_text(runs: Iterable[Run]) -> str:
    """Flattened text of a run sequence."""
    return "".join(run.text for run in runs)


def runs_length(runs: Iterable[Run]) -> int:
    return sum(len(run.text) for run in runs)


__all__ = [
    "REQUIRED_MENTION_KEYS",
    "Run",
    "merge_consecutive_runs",
    "runs_text",
    "runs_length",
]
