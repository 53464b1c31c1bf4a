"""
Виды атрибутов форматирования и их сравнение.

Every attribute name maps to an :class:`AttributeKind`. Each kind carries its
own validation and equality function, so two attribute sets are compared
value by value according to the kind of each key (colors case-insensitively,
list types through :class:`ListType`, ...) rather than by serialized form.

Module: richdelta/model/attributes.py
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Final, Mapping, Optional

from richdelta.exceptions import InvalidAttributeBundleError
from richdelta.model.enums import AttributeKind, ListType, MentionType

logger: Final = logging.getLogger(__name__)

Attributes = Dict[str, Any]

ATTRIBUTE_KINDS: Final[Mapping[str, AttributeKind]] = {
    "bold": AttributeKind.STYLE,
    "italic": AttributeKind.STYLE,
    "underline": AttributeKind.STYLE,
    "strike": AttributeKind.STYLE,
    "color": AttributeKind.COLOR,
    "backgroundColor": AttributeKind.COLOR,
    "list": AttributeKind.LIST,
    "baseUrl": AttributeKind.LINK,
    "queryParams": AttributeKind.LINK,
    "mention": AttributeKind.MENTION,
    "mentionType": AttributeKind.MENTION,
    "mentionId": AttributeKind.MENTION,
    "mentionDisplay": AttributeKind.MENTION,
    "mentionValue": AttributeKind.MENTION,
}

INLINE_STYLE_KEYS: Final[tuple[str, ...]] = ("bold", "italic", "underline", "strike")


def kind_of(key: str) -> AttributeKind:
    return ATTRIBUTE_KINDS.get(key, AttributeKind.OTHER)


# === PER-KIND RULES ===


def _plain_equals(a: Any, b: Any) -> bool:
    return bool(a == b)


def _color_equals(a: Any, b: Any) -> bool:
    if isinstance(a, str) and isinstance(b, str):
        return a.strip().casefold() == b.strip().casefold()
    return bool(a == b)


def _list_equals(a: Any, b: Any) -> bool:
    left, right = ListType.from_string(a), ListType.from_string(b)
    if left is None or right is None:
        return bool(a == b)
    return left is right


def _validate_style(key: str, value: Any) -> bool:
    return isinstance(value, bool)


def _validate_color(key: str, value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _validate_list(key: str, value: Any) -> bool:
    return ListType.from_string(value) is not None


def _validate_link(key: str, value: Any) -> bool:
    if key == "queryParams":
        return isinstance(value, (Mapping, str))
    return isinstance(value, str) and bool(value)


def _validate_mention(key: str, value: Any) -> bool:
    if key == "mention":
        return isinstance(value, bool)
    if key == "mentionType":
        return value in {m.value for m in MentionType}
    return isinstance(value, (str, int))


def _validate_other(key: str, value: Any) -> bool:
    return True


@dataclass(frozen=True, slots=True)
class AttributeRule:
    """Validation and equality for one attribute kind."""

    kind: AttributeKind
    validate: Callable[[str, Any], bool]
    equals: Callable[[Any, Any], bool]


ATTRIBUTE_RULES: Final[Mapping[AttributeKind, AttributeRule]] = {
    AttributeKind.STYLE: AttributeRule(AttributeKind.STYLE, _validate_style, _plain_equals),
    AttributeKind.COLOR: AttributeRule(AttributeKind.COLOR, _validate_color, _color_equals),
    AttributeKind.LIST: AttributeRule(AttributeKind.LIST, _validate_list, _list_equals),
    AttributeKind.LINK: AttributeRule(AttributeKind.LINK, _validate_link, _plain_equals),
    AttributeKind.MENTION: AttributeRule(AttributeKind.MENTION, _validate_mention, _plain_equals),
    AttributeKind.OTHER: AttributeRule(AttributeKind.OTHER, _validate_other, _plain_equals),
}


def rule_for(key: str) -> AttributeRule:
    return ATTRIBUTE_RULES[kind_of(key)]


# === COMPARISON ===


def values_equal(key: str, a: Any, b: Any) -> bool:
    """Compare two values of attribute ``key`` using its kind's equality."""
    if a is None or b is None:
        return a is None and b is None
    return rule_for(key).equals(a, b)


def attributes_equal(a: Optional[Mapping[str, Any]], b: Optional[Mapping[str, Any]]) -> bool:
    """
    Value equality of two attribute sets.

    ``None`` and an empty mapping are the same set. Key order is irrelevant.
    """
    left = a or {}
    right = b or {}
    if left.keys() != right.keys():
        return False
    return all(values_equal(key, left[key], right[key]) for key in left)


def is_mention_bundle(attributes: Optional[Mapping[str, Any]]) -> bool:
    return bool(attributes) and attributes.get("mention") is True  # type: ignore[union-attr]


# === VALIDATION ===


def validate_bundle(bundle: Any, allow_none: bool = False) -> Attributes:
    """
    Validate a requested attribute bundle and return a shallow copy.

    Args:
        bundle: Mapping of attribute name to value.
        allow_none: Accept ``None`` values (meaning "remove this key").

    Raises:
        InvalidAttributeBundleError: If the bundle is not a mapping, is empty,
            or carries a value of the wrong kind for a known key.
    """
    if not isinstance(bundle, Mapping):
        raise InvalidAttributeBundleError(
            f"Attribute bundle must be a mapping, got {type(bundle).__name__}"
        )
    if not bundle:
        raise InvalidAttributeBundleError("Attribute bundle is empty")

    result: Attributes = {}
    for key, value in bundle.items():
        if not isinstance(key, str) or not key:
            raise InvalidAttributeBundleError(f"Invalid attribute name {key!r}")
        if value is None:
            if not allow_none:
                raise InvalidAttributeBundleError(f"Attribute {key!r} has no value", key=key)
        elif not rule_for(key).validate(key, value):
            raise InvalidAttributeBundleError(
                f"Invalid value {value!r} for {kind_of(key).value} attribute {key!r}", key=key
            )
        result[key] = value
    return result


def normalize_attributes(attributes: Optional[Mapping[str, Any]]) -> Optional[Attributes]:
    """
    Normalize attributes for storage on a run.

    ``None`` values are dropped and an empty result becomes ``None``.

    Raises:
        InvalidAttributeBundleError: On a malformed non-empty bundle.
    """
    if attributes is None:
        return None
    if isinstance(attributes, Mapping) and not attributes:
        return None
    checked = validate_bundle(attributes, allow_none=True)
    cleaned = {k: v for k, v in checked.items() if v is not None}
    return copy.deepcopy(cleaned) if cleaned else None


def copy_attributes(attributes: Optional[Mapping[str, Any]]) -> Optional[Attributes]:
    """Deep copy of an attribute set (``None`` stays ``None``)."""
    if not attributes:
        return None
    return copy.deepcopy(dict(attributes))


__all__ = [
    "Attributes",
    "ATTRIBUTE_KINDS",
    "ATTRIBUTE_RULES",
    "INLINE_STYLE_KEYS",
    "AttributeRule",
    "kind_of",
    "rule_for",
    "values_equal",
    "attributes_equal",
    "is_mention_bundle",
    "validate_bundle",
    "normalize_attributes",
    "copy_attributes",
]
