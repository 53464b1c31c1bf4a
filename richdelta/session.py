"""
Editing session: input-adapter glue over a :class:`DeltaDocument`.

Translates editor-level actions (typing, paste, Enter, Backspace, toolbar
commands, picking a mention from the dropdown) into document operations and
keeps the state a view needs: the pending inline format for a collapsed
caret and the active mention lookup.

Mention scans are deferred. After typing or deleting, a scan is scheduled
for the new caret; it runs either on the next iteration of an attached
``asyncio`` loop or when :meth:`EditingSession.flush_mention_scan` is
called. A scan that finds the document changed since scheduling is dropped.

Example:
    >>> provider = StaticSuggestionProvider({"@": [{"userName": "dev", "name": "Dev", "id": "u1"}]})
    >>> session = EditingSession(DeltaDocument(), provider)
    >>> session.type_text("Hi @de")
    >>> lookup = session.flush_mention_scan()
    >>> session.select_mention(lookup.candidates[0])
    4
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Final, Optional

from richdelta.exceptions import InvalidAttributeBundleError
from richdelta.mentions.provider import StaticSuggestionProvider, SuggestionProvider
from richdelta.mentions.scanner import MentionLookup, MentionScanner
from richdelta.model.attributes import INLINE_STYLE_KEYS, validate_bundle
from richdelta.model.document import DeltaDocument
from richdelta.model.selection import Selection

logger: Final = logging.getLogger(__name__)

COMMANDS: Final[frozenset[str]] = frozenset(
    {"bold", "italic", "underline", "color", "list", "undo", "redo", "clear"}
)


class EditingSession:
    """
    One editing session over one document.

    Args:
        document: The document being edited.
        provider: Candidate source for mention lookups. Without one, no
            mention dropdown is ever opened.
        loop: Optional event loop; when given, mention scans run through
            ``loop.call_soon`` instead of waiting for
            :meth:`flush_mention_scan`.
        on_mention: Callback receiving each finished scan result.
    """

    def __init__(
        self,
        document: DeltaDocument,
        provider: Optional[SuggestionProvider] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_mention: Optional[Callable[[Optional[MentionLookup]], None]] = None,
    ) -> None:
        self.document = document
        self.pending_format: Dict[str, Any] = {}
        self.active_mention: Optional[MentionLookup] = None
        self._loop = loop
        self._on_mention = on_mention
        self._scanner = MentionScanner(document, provider or StaticSuggestionProvider({}))

    @property
    def selection(self) -> Selection:
        return self.document.selection

    def set_selection(self, index: int, length: int = 0) -> Selection:
        return self.document.set_selection(index, length)

    # --- text input ---

    def type_text(self, text: str) -> None:
        """Type ``text`` over the selection using the pending format."""
        attributes = self._pending_attributes()
        index = self._replace_selection()
        at = self.document.insert(index, text, attributes)
        caret = self.document.set_selection(at + len(text)).index
        self._request_mention_scan(caret)

    def paste(self, text: str) -> None:
        """Paste plain text over the selection using the pending format."""
        attributes = self._pending_attributes()
        index = self._replace_selection()
        at = self.document.insert(index, text, attributes)
        self.document.set_selection(at + len(text))

    def press_enter(self) -> None:
        """Continue or leave a list, or insert a plain newline."""
        index = self._replace_selection()
        if not self.document.handle_enter(index):
            at = self.document.insert(index, "\n")
            self.document.set_selection(at + 1)
        self.close_mention()

    def backspace(self) -> None:
        selection = self.selection
        if not selection.is_collapsed:
            start, _ = self.document.delete(selection.index, selection.length)
            self.document.set_selection(start)
        elif selection.index > 0:
            if not self.document.handle_backspace(selection.index):
                start, _ = self.document.delete(selection.index - 1, 1)
                self.document.set_selection(start)
        self._request_mention_scan(self.selection.index)

    def delete_forward(self) -> None:
        selection = self.selection
        length = selection.length or 1
        if selection.index + length > self.document.length:
            return
        start, _ = self.document.delete(selection.index, length)
        self.document.set_selection(start)

    # --- toolbar ---

    def command(self, name: str, value: Any = None) -> bool:
        """
        Execute a toolbar command.

        ``bold``/``italic``/``underline``/``color`` format the selection, or
        change the pending format when the caret is collapsed. ``list``
        toggles the current line's marker; ``clear`` removes formatting.

        Returns:
            True if the document or the pending format changed.
        """
        if name not in COMMANDS:
            logger.warning(f"Unknown editor command {name!r}")
            return False

        selection = self.selection
        if name in INLINE_STYLE_KEYS:
            if not selection.is_collapsed:
                return self.document.format_inline(selection.index, selection.length, {name: True})
            if self.pending_format.pop(name, None) is None:
                self.pending_format[name] = True
            return True

        if name == "color":
            if not selection.is_collapsed:
                return self.document.format_inline(
                    selection.index, selection.length, {"color": value}
                )
            if not value:
                self.pending_format.pop("color", None)
                return True
            try:
                validate_bundle({"color": value})
            except InvalidAttributeBundleError as e:
                logger.warning(f"color command ignored: {e}")
                return False
            self.pending_format["color"] = value
            return True

        if name == "list":
            return self.document.format_block(
                selection.index, max(selection.length, 1), {"list": value}
            )

        if name == "undo":
            return self.document.undo()

        if name == "redo":
            return self.document.redo()

        changed = bool(self.pending_format)
        self.pending_format = {}
        if not selection.is_collapsed:
            changed = self.document.clear_format(selection.index, selection.length) or changed
        return changed

    def format_state(self) -> Dict[str, Any]:
        """Toolbar state: the pending format for a caret, else the selection's format."""
        selection = self.selection
        if selection.is_collapsed:
            return dict(self.pending_format)
        return self.document.get_format_at(selection.index, selection.length)

    # --- mentions ---

    def flush_mention_scan(self) -> Optional[MentionLookup]:
        """Run the pending mention scan now, if any."""
        ticket = self._scanner.pending
        if ticket is None:
            return self.active_mention
        self._accept_lookup(self._scanner.run(ticket))
        return self.active_mention

    def select_mention(self, candidate: Any) -> int:
        """
        Replace the active ``trigger + query`` with a mention of ``candidate``.

        Returns:
            Length of the inserted mention, 0 when no mention query is active.
        """
        lookup = self.active_mention
        if lookup is None:
            return 0

        query = lookup.query
        self.document.delete(query.start_index, query.length)
        inserted = self.document.insert_mention(query.start_index, candidate, query.trigger)
        if not inserted:
            self.document.set_selection(query.start_index)
        self.close_mention()
        return inserted

    def close_mention(self) -> None:
        self._scanner.cancel()
        self.active_mention = None

    def _request_mention_scan(self, cursor: int) -> None:
        if self._loop is not None:
            self._scanner.schedule_soon(self._loop, cursor, self._accept_lookup)
        else:
            self._scanner.schedule(cursor)

    def _accept_lookup(self, lookup: Optional[MentionLookup]) -> None:
        self.active_mention = lookup
        if self._on_mention is not None:
            self._on_mention(lookup)

    # --- helpers ---

    def _replace_selection(self) -> int:
        """Delete a non-empty selection and return the insertion index."""
        selection = self.selection
        if selection.is_collapsed:
            return selection.index
        start, _ = self.document.delete(selection.index, selection.length)
        return start

    def _pending_attributes(self) -> Optional[Dict[str, Any]]:
        """Validated copy of the pending format, checked before the selection is touched."""
        if not self.pending_format:
            return None
        return validate_bundle(self.pending_format)


__all__ = ["COMMANDS", "EditingSession"]
