"""
model/enums.py

(Краткое RU: Перечисления модели delta-документа: типы списков, упоминаний и виды атрибутов.)

EN: Domain enums for the delta document model. Attribute names are the wire
names used in serialized deltas (camelCase where the exchange format uses it).
NO editing logic here!
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Final, Optional

_logger: Final[logging.Logger] = logging.getLogger(__name__)

# === MARKERS ===
BULLET_GLYPH: Final[str] = "•"
BULLET_MARKER: Final[str] = "• "
ORDERED_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"^(\d+)\.\s")
LIST_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"^(• |\d+\.\s)")

# === DOMAINS ===


class ListType(str, Enum):
    BULLET = "bullet"
    ORDERED = "ordered"

    @classmethod
    def from_string(cls, value: object) -> Optional["ListType"]:
        if isinstance(value, ListType):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class MentionType(str, Enum):
    USER = "user"
    TICKET = "ticket"

    @property
    def trigger(self) -> str:
        return "@" if self is MentionType.USER else "#"

    @property
    def text_color(self) -> str:
        # Blue for users, green for tickets
        return "#1e40af" if self is MentionType.USER else "#059669"

    @property
    def background_color(self) -> str:
        return "#dbeafe" if self is MentionType.USER else "#d1fae5"

    @property
    def primary_key(self) -> str:
        """Candidate field shown after the trigger character."""
        return "userName" if self is MentionType.USER else "ticketName"

    @property
    def display_key(self) -> str:
        """Candidate field holding the human-readable name."""
        return "name" if self is MentionType.USER else "ticketName"

    @classmethod
    def from_trigger(cls, trigger: str) -> Optional["MentionType"]:
        if trigger == "@":
            return cls.USER
        if trigger == "#":
            return cls.TICKET
        return None


class AttributeKind(str, Enum):
    STYLE = "style"  # boolean on/off styles
    COLOR = "color"  # CSS color strings
    LIST = "list"  # list-marker type
    LINK = "link"  # baseUrl + queryParams
    MENTION = "mention"  # fixed mention bundle
    OTHER = "other"  # unknown keys, plain equality


MENTION_TRIGGERS: Final[frozenset[str]] = frozenset({"@", "#"})


# === LINE HELPERS ===
def detect_list_type(line_text: str) -> Optional[ListType]:
    """
    Derive the list type of a line from its leading text.

    Pure function of the line: the list attribute is never stored, it is
    read back from the marker (``"• "`` or ``"<n>. "``).
    """
    if line_text.startswith(BULLET_MARKER):
        return ListType.BULLET
    if ORDERED_MARKER_RE.match(line_text):
        return ListType.ORDERED
    return None


def strip_list_marker(line_text: str) -> str:
    """Return ``line_text`` without a leading list marker."""
    return LIST_MARKER_RE.sub("", line_text, count=1)


__all__ = [
    "BULLET_GLYPH",
    "BULLET_MARKER",
    "ORDERED_MARKER_RE",
    "LIST_MARKER_RE",
    "MENTION_TRIGGERS",
    "ListType",
    "MentionType",
    "AttributeKind",
    "detect_list_type",
    "strip_list_marker",
]
