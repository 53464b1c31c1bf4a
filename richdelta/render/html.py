"""
HTML projection of a delta.

One element per line segment of each op, ``<br>`` between lines. Ops with
both ``baseUrl`` and ``queryParams`` become links; everything else is a
``<span>`` with inline styles. Mention runs get ``class="mention"`` and
``data-mention-*`` attributes.
"""

from __future__ import annotations

import html
import logging
from typing import Any, Final, Mapping
from urllib.parse import parse_qsl, urlencode

from richdelta.model.attributes import is_mention_bundle

logger: Final = logging.getLogger(__name__)

_MENTION_DEFAULT_COLOR: Final[str] = "black"
_MENTION_DEFAULT_BACKGROUND: Final[str] = "#eee"


def build_href(base_url: str, query_params: Any) -> str:
    """``base_url`` followed by the url-encoded query (appended as is, no ``?``)."""
    if not query_params:
        return base_url
    if isinstance(query_params, Mapping):
        query = urlencode({str(k): str(v) for k, v in query_params.items()})
    else:
        query = urlencode(parse_qsl(str(query_params).lstrip("?"), keep_blank_values=True))
    return f"{base_url}{query}"


def _style(attributes: Mapping[str, Any]) -> list[str]:
    rules: list[str] = []
    if is_mention_bundle(attributes):
        rules.append("font-weight: 600")
        rules.append(f"color: {attributes.get('color') or _MENTION_DEFAULT_COLOR}")
        rules.append(
            f"background-color: {attributes.get('backgroundColor') or _MENTION_DEFAULT_BACKGROUND}"
        )
        rules.append("border-radius: 4px")
        rules.append("padding: 2px 4px")
        return rules

    if attributes.get("bold"):
        rules.append("font-weight: bold")
    if attributes.get("italic"):
        rules.append("font-style: italic")
    if attributes.get("underline"):
        rules.append("text-decoration: underline")
    if attributes.get("color"):
        rules.append(f"color: {attributes['color']}")
    if attributes.get("backgroundColor"):
        rules.append(f"background-color: {attributes['backgroundColor']}")
        rules.append("padding: 2px 4px")
        rules.append("border-radius: 4px")
    return rules


def _attribute_markup(attributes: Mapping[str, Any]) -> str:
    parts: list[str] = []
    if is_mention_bundle(attributes):
        parts.append('class="mention"')
        for key, name in (
            ("mentionType", "data-mention-type"),
            ("mentionId", "data-mention-id"),
            ("mentionDisplay", "data-mention-display"),
        ):
            if attributes.get(key) is not None:
                parts.append(f'{name}="{html.escape(str(attributes[key]))}"')

    rules = _style(attributes)
    if rules:
        parts.append(f'style="{html.escape("; ".join(rules))}"')
    return (" " + " ".join(parts)) if parts else ""


def render_segment(text: str, attributes: Mapping[str, Any]) -> str:
    """Markup of one line segment of an op."""
    markup = _attribute_markup(attributes)
    content = html.escape(text)
    if attributes.get("baseUrl") and attributes.get("queryParams"):
        href = html.escape(build_href(str(attributes["baseUrl"]), attributes["queryParams"]))
        return f'<a href="{href}" target="_blank"{markup}>{content}</a>'
    return f"<span{markup}>{content}</span>"


def render_html(delta: Mapping[str, Any]) -> str:
    """
    Render a delta as an HTML fragment.

    Example:
        >>> render_html({"ops": [{"insert": "Hi", "attributes": {"bold": True}}, {"insert": "\\n"}]})
        '<span style="font-weight: bold">Hi</span><br>'
    """
    ops = delta.get("ops") if isinstance(delta, Mapping) else None
    if not isinstance(ops, list):
        return ""

    out: list[str] = []
    for op in ops:
        text = op.get("insert") if isinstance(op, Mapping) else None
        if not isinstance(text, str):
            logger.debug(f"Skipping non-text op: {op!r}")
            continue
        attributes = op.get("attributes") or {}
        lines = text.split("\n")
        for position, line in enumerate(lines):
            if line:
                out.append(render_segment(line, attributes))
            if position < len(lines) - 1:
                out.append("<br>")
    return "".join(out)


__all__ = ["build_href", "render_segment", "render_html"]
