"""Mention extraction from a serialized delta."""

from typing import Any, Mapping

from richdelta.model.attributes import is_mention_bundle


def extract_mentions(delta: Mapping[str, Any]) -> list[dict[str, Any]]:
    """
    List the mentions of a delta in document order.

    Example:
        >>> extract_mentions({"ops": [{"insert": "@dev", "attributes": {
        ...     "mention": True, "mentionType": "user", "mentionId": "u1",
        ...     "mentionDisplay": "Dev", "mentionValue": "dev"}}]})
        [{'type': 'user', 'id': 'u1', 'display': 'Dev', 'value': 'dev'}]
    """
    mentions: list[dict[str, Any]] = []
    for op in delta.get("ops", []):
        attributes = op.get("attributes") if isinstance(op, Mapping) else None
        if not is_mention_bundle(attributes):
            continue
        mentions.append(
            {
                "type": attributes.get("mentionType"),
                "id": attributes.get("mentionId"),
                "display": attributes.get("mentionDisplay"),
                "value": attributes.get("mentionValue"),
            }
        )
    return mentions


__all__ = ["extract_mentions"]
