"""
Delta Document: public facade of the editing engine.

This module provides the document model the input adapter talks to. It owns
the run store, the selection and the undo history, and wires the engine
components together:

    validate arguments -> snapshot -> locate/split -> mutate -> merge

Every public mutation records exactly one history entry, and only when it
actually changes the document. Out-of-range arguments raise
:class:`IndexOutOfRangeError` before anything is touched; empty or malformed
attribute bundles on formatting and mention calls are logged and ignored.

Module: richdelta/model/document.py
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional, Union
from uuid import UUID, uuid4

from richdelta.engine.formatting import FormatEngine
from richdelta.engine.history import DEFAULT_CAPACITY, HistoryEntry, HistoryManager
from richdelta.engine.lists import ListEngine
from richdelta.engine.mentions import MentionInserter
from richdelta.engine.position import check_range, line_bounds
from richdelta.engine.store import DEFAULT_CONTENT, RunStore
from richdelta.exceptions import DeltaFormatError, InvalidAttributeBundleError, PersistenceError
from richdelta.model.attributes import (
    Attributes,
    is_mention_bundle,
    kind_of,
    normalize_attributes,
    validate_bundle,
)
from richdelta.model.delta import delta_to_runs, runs_to_delta
from richdelta.model.enums import AttributeKind, ListType
from richdelta.model.run import Run
from richdelta.model.selection import Selection

if TYPE_CHECKING:
    from richdelta.persistence.store import DeltaStore

logger = logging.getLogger(__name__)


@dataclass
class DocumentMetadata:
    """
    Метаданные документа.

    Атрибуты:
        title: Заголовок документа
        author: Автор документа
        created: Временная метка создания
        modified: Временная метка последнего изменения
        version: Версия формата документа
    """

    title: str = ""
    author: str = ""
    created: datetime = field(default_factory=datetime.now)
    modified: datetime = field(default_factory=datetime.now)
    version: str = "1.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DocumentMetadata:
        """Создает метаданные из словаря."""
        return cls(
            title=data.get("title", ""),
            author=data.get("author", ""),
            created=datetime.fromisoformat(data.get("created", datetime.now().isoformat())),
            modified=datetime.fromisoformat(data.get("modified", datetime.now().isoformat())),
            version=data.get("version", "1.0"),
        )


class DeltaDocument:
    """
    Rich-text document: runs, selection and undo history.

    Атрибуты:
        id: Уникальный идентификатор документа
        metadata: Метаданные документа
        file_path: Путь к файлу сохранённого документа
        generation: Счётчик правок (растёт при каждой мутации, undo и redo)

    Example:
        >>> doc = DeltaDocument()
        >>> doc.insert(0, "Hello World")
        0
        >>> doc.insert_mention(5, {"userName": "dev", "name": "Dev", "id": "u1"}, "@")
        4
        >>> doc.get_text()
        'Hello@dev World\\n'
        >>> doc.undo()
        True
        >>> doc.get_text()
        'Hello World\\n'
    """

    def __init__(
        self,
        initial_text: str = DEFAULT_CONTENT,
        runs: Optional[Iterable[Run]] = None,
        metadata: Optional[DocumentMetadata] = None,
        history_limit: int = DEFAULT_CAPACITY,
    ) -> None:
        """
        Args:
            initial_text: Content of a fresh document (ignored when ``runs``
                is given).
            runs: Initial runs; copied and merged.
            metadata: Document metadata (created by default if None).
            history_limit: Undo history capacity.
        """
        self.id: UUID = uuid4()
        self.metadata: DocumentMetadata = metadata or DocumentMetadata()
        self.file_path: Optional[Path] = None

        initial_runs = list(runs) if runs is not None else [Run(initial_text or DEFAULT_CONTENT)]
        self._store = RunStore(initial_runs)
        self._store.merge()
        self._store.ensure_content()

        self._formatter = FormatEngine(self._store)
        self._lists = ListEngine(self._store, self._formatter)
        self._mentions = MentionInserter(self._store)
        self._history = HistoryManager(history_limit)

        self._selection = Selection()
        self._generation = 0
        self._is_modified = False

        logger.debug(f"Created document {self.id} ({self._store.run_count} runs)")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> DeltaDocument:
        """
        Fresh document from a :func:`richdelta.load_config` mapping.

        Uses ``initial_text`` and ``history_limit``; missing keys fall back
        to the defaults.
        """
        return cls(
            initial_text=str(config.get("initial_text") or DEFAULT_CONTENT),
            history_limit=int(config.get("history_limit", DEFAULT_CAPACITY)),
        )

    # --- state ---

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def length(self) -> int:
        return self._store.length

    @property
    def runs(self) -> tuple[Run, ...]:
        """Deep copies of the current runs."""
        return self._store.snapshot()

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def is_modified(self) -> bool:
        """Был ли документ изменён с момента последнего сохранения."""
        return self._is_modified

    @is_modified.setter
    def is_modified(self, value: bool) -> None:
        self._is_modified = value
        if value:
            self.metadata.modified = datetime.now()

    def get_text(self) -> str:
        return self._store.text()

    def get_delta(self) -> Dict[str, Any]:
        """``{"ops": [...]}`` view of the document (deep copies)."""
        return runs_to_delta(self._store)

    def set_selection(self, index: Union[int, Selection], length: int = 0) -> Selection:
        """Set the selection, clamped to the document."""
        selection = index if isinstance(index, Selection) else Selection(index, length)
        self._selection = selection.clamp(self.length)
        return self._selection

    # --- mutations ---

    def insert(self, index: int, text: str, attributes: Optional[Mapping[str, Any]] = None) -> int:
        """
        Insert ``text`` with ``attributes`` at ``index``.

        An index inside a mention inserts after the mention. Empty text is a
        no-op.

        Returns:
            The index the text was inserted at.

        Raises:
            IndexOutOfRangeError: If ``index`` is outside ``[0, len]``.
            InvalidAttributeBundleError: If ``attributes`` is malformed or
                is a mention bundle (use :meth:`insert_mention`).
        """
        check_range(index, 0, self.length)
        attrs = normalize_attributes(attributes)
        if is_mention_bundle(attrs):
            raise InvalidAttributeBundleError("Mention runs are inserted with insert_mention()")
        if not text:
            return index

        pre = self._capture()
        at = self._store.insert_runs(index, [Run(text, attrs)])
        self._store.merge()
        self._commit(pre)
        logger.debug(f"Inserted {len(text)} chars at {at}")
        return at

    def delete(self, index: int, length: int) -> tuple[int, int]:
        """
        Delete ``[index, index + length)``; ``length`` is clamped to the end.

        A partially covered mention is deleted whole. Deleting everything
        leaves a single newline.

        Returns:
            The ``(start, end)`` range actually removed (empty for a no-op).

        Raises:
            IndexOutOfRangeError: For a negative length or an index outside
                ``[0, len]``.
        """
        length = check_range(index, length, self.length)
        if length == 0:
            return index, index

        pre = self._capture()
        start, end = self._store.delete_range(index, length)
        self._store.merge()
        self._commit(pre)
        logger.debug(f"Deleted [{start}, {end})")
        return start, end

    def format_inline(self, index: int, length: int, attributes: Mapping[str, Any]) -> bool:
        """
        Toggle inline ``attributes`` over ``[index, index + length)``.

        Returns:
            False when nothing changed: an empty range, a rejected bundle
            or a range covered only by mentions.

        Raises:
            IndexOutOfRangeError: If the range is outside the document.
        """
        length = check_range(index, length, self.length)
        bundle = self._checked_bundle(attributes, "format_inline", allow_list=False)
        if bundle is None or length == 0:
            return False

        pre = self._capture()
        if not self._formatter.format_inline(index, length, bundle):
            return False
        self._commit(pre)
        return True

    def format_block(self, index: int, length: int, attributes: Mapping[str, Any]) -> bool:
        """
        Block formatting of the line containing ``index``.

        ``{"list": "bullet"|"ordered"}`` toggles the line's marker
        (``{"list": None}`` removes it). Other keys are applied inline over the
        whole line.

        Returns:
            True if the document changed.

        Raises:
            IndexOutOfRangeError: If the range is outside the document.
        """
        check_range(index, length, self.length)
        bundle = self._checked_bundle(attributes, "format_block", allow_list=True)
        if bundle is None:
            return False

        list_type: Optional[ListType] = None
        if "list" in bundle and bundle["list"] is not None:
            list_type = ListType.from_string(bundle["list"])
        inline = {k: v for k, v in bundle.items() if k != "list"}

        line_start, _ = line_bounds(self._store.text(), index)

        pre = self._capture()
        changed = False
        if "list" in bundle:
            if list_type is None:
                list_type = self._lists.current_list_type(line_start)
                if list_type is not None:
                    changed = self._lists.toggle_list(index, list_type)
            else:
                changed = self._lists.toggle_list(index, list_type)

        if inline:
            text = self._store.text()
            _, line_end = line_bounds(text, line_start)
            if self._formatter.format_inline(line_start, line_end - line_start, inline):
                changed = True

        if changed:
            self._commit(pre)
        return changed

    def clear_format(self, index: int, length: int) -> bool:
        """Remove all inline formatting in the range (mentions keep theirs)."""
        length = check_range(index, length, self.length)
        if length == 0:
            return False

        pre = self._capture()
        if not self._formatter.clear_format(index, length):
            return False
        self._commit(pre)
        return True

    def insert_mention(self, index: int, descriptor: Any, trigger: str) -> int:
        """
        Insert an atomic mention run for ``descriptor`` at ``index``.

        An index inside another mention inserts after that mention, so the
        caret is placed right after the new mention by this call; read it
        back from :attr:`selection` rather than computing ``index + length``.

        Args:
            descriptor: ``UserCandidate``/``TicketCandidate`` or wire mapping
                (``{userName, name, id}`` / ``{ticketName, id}``).
            trigger: ``"@"`` or ``"#"``.

        Returns:
            Length of the inserted text, 0 when the descriptor is rejected.

        Raises:
            IndexOutOfRangeError: If ``index`` is outside ``[0, len]``.
        """
        check_range(index, 0, self.length)

        pre = self._capture()
        try:
            at, inserted = self._mentions.insert_mention(index, descriptor, trigger)
        except InvalidAttributeBundleError as e:
            logger.warning(f"insert_mention ignored: {e}")
            return 0
        self._commit(pre, Selection(at + inserted))
        return inserted

    def handle_enter(self, index: int) -> bool:
        """
        List-aware Enter at ``index``.

        Returns:
            True if the list engine handled it (the caret is moved); False if
            the caller should insert a plain newline.
        """
        check_range(index, 0, self.length)

        pre = self._capture()
        caret = self._lists.handle_enter(index)
        if caret is None:
            return False
        self._commit(pre, Selection(caret))
        return True

    def handle_backspace(self, index: int) -> bool:
        """
        List-aware Backspace at ``index``: a bare marker before the caret is
        removed and the caret moves to the line start.
        """
        check_range(index, 0, self.length)

        pre = self._capture()
        caret = self._lists.handle_backspace(index)
        if caret is None:
            return False
        self._commit(pre, Selection(caret))
        return True

    # --- queries ---

    def get_format_at(self, index: int, length: int) -> Dict[str, Any]:
        """
        Formatting common to the whole range, including the implicit
        ``list`` type of list lines.
        """
        length = check_range(index, length, self.length)
        return self._formatter.get_format_at(index, length)

    def next_ordered_number(self, line_start: int) -> int:
        check_range(line_start, 0, self.length)
        return self._lists.next_ordered_number(line_start)

    # --- history ---

    def undo(self) -> bool:
        entry = self._history.undo(self._capture())
        if entry is None:
            return False
        self._restore(entry)
        logger.debug(f"Undo: generation {self._generation}")
        return True

    def redo(self) -> bool:
        entry = self._history.redo()
        if entry is None:
            return False
        self._restore(entry)
        logger.debug(f"Redo: generation {self._generation}")
        return True

    def _capture(self) -> HistoryEntry:
        return HistoryEntry.capture(self._store, self._selection)

    def _restore(self, entry: HistoryEntry) -> None:
        self._store.replace_all(entry.restore_runs())
        self._selection = entry.selection.clamp(self.length)
        self._touch()

    def _commit(self, pre: HistoryEntry, selection: Optional[Selection] = None) -> None:
        """Record the pre-image of a finished mutation and refresh derived state."""
        self._history.record(pre)
        self._store.ensure_content()
        if selection is not None:
            self._selection = selection
        self._selection = self._selection.clamp(self.length)
        self._touch()

    def _touch(self) -> None:
        self._generation += 1
        self.is_modified = True

    def _checked_bundle(
        self, attributes: Any, operation: str, allow_list: bool
    ) -> Optional[Attributes]:
        try:
            bundle = validate_bundle(attributes, allow_none=True)
        except InvalidAttributeBundleError as e:
            logger.warning(f"{operation} ignored: {e}")
            return None

        for key in bundle:
            kind = kind_of(key)
            if kind is AttributeKind.MENTION or (kind is AttributeKind.LIST and not allow_list):
                logger.warning(f"{operation} ignored: {key!r} cannot be applied here")
                return None
        return bundle

    # --- serialization and persistence ---

    def to_dict(self) -> Dict[str, Any]:
        """
        Сериализует документ в формат словаря.

        Возвращает:
            Представление словаря, подходящее для экспорта JSON
        """
        return {
            "id": str(self.id),
            "metadata": self.metadata.to_dict(),
            "delta": self.get_delta(),
            "selection": self._selection.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], history_limit: int = DEFAULT_CAPACITY) -> DeltaDocument:
        """
        Десериализует документ из формата словаря.

        Accepts the full document form (see :meth:`to_dict`) as well as a bare
        delta ``{"ops": [...]}``.

        Raises:
            DeltaFormatError: If the delta is malformed.
        """
        if not isinstance(data, Mapping):
            raise DeltaFormatError(f"Document must be an object, got {type(data).__name__}")

        delta = data.get("delta", data)
        doc = cls(
            runs=delta_to_runs(delta),
            metadata=DocumentMetadata.from_dict(data.get("metadata", {})),
            history_limit=history_limit,
        )

        if "id" in data:
            doc.id = UUID(str(data["id"]))
        if isinstance(data.get("selection"), Mapping):
            doc.set_selection(Selection.from_dict(data["selection"]))

        doc._is_modified = False
        logger.info(f"Loaded document {doc.id} with {doc._store.run_count} runs")
        return doc

    def save_to_file(self, file_path: Union[str, Path]) -> None:
        """
        Сохраняет документ в файл JSON.

        Raises:
            PersistenceError: Если файл не может быть записан
        """
        file_path = Path(file_path)

        try:
            with file_path.open("w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to save document to {file_path}: {e}")
            raise PersistenceError(f"Cannot save document: {e}", url=str(file_path)) from e

        self.file_path = file_path
        self._is_modified = False
        logger.info(f"Document saved to {file_path}")

    @classmethod
    def load_from_file(cls, file_path: Union[str, Path]) -> DeltaDocument:
        """
        Загружает документ из файла JSON.

        Raises:
            PersistenceError: Если файл не может быть прочитан
            DeltaFormatError: Если формат файла невалиден
        """
        file_path = Path(file_path)

        try:
            with file_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            raise DeltaFormatError(f"Invalid document format: {e.msg}", context={"line": e.lineno}) from e
        except OSError as e:
            logger.error(f"Failed to load document from {file_path}: {e}")
            raise PersistenceError(f"Cannot load document: {e}", url=str(file_path)) from e

        doc = cls.from_dict(data)
        doc.file_path = file_path
        logger.info(f"Document loaded from {file_path}")
        return doc

    def save(self, store: "DeltaStore") -> Dict[str, Any]:
        """
        Send the current delta to ``store``.

        The document is never modified by a save; on failure the
        :class:`PersistenceError` propagates and ``is_modified`` is unchanged.

        Returns:
            The delta as stored.
        """
        stored = store.save_delta(self.get_delta())
        self._is_modified = False
        return stored

    @classmethod
    def load_latest(cls, store: "DeltaStore", history_limit: int = DEFAULT_CAPACITY) -> DeltaDocument:
        """
        Document built from the first delta held by ``store``; a blank
        document when the store is empty.

        Entries may be bare deltas or ``{"delta": {...}}`` wrappers.
        """
        entries = store.load_deltas()
        if not entries:
            logger.info("Store holds no deltas; starting a blank document")
            return cls(history_limit=history_limit)

        first = entries[0]
        delta = first.get("delta", first) if isinstance(first, Mapping) else first
        doc = cls(runs=delta_to_runs(delta), history_limit=history_limit)
        doc._is_modified = False
        return doc

    def __repr__(self) -> str:
        return (
            f"DeltaDocument(id={self.id}, runs={self._store.run_count}, "
            f"length={self.length}, generation={self._generation}, modified={self._is_modified})"
        )

    def __len__(self) -> int:
        """Length of the flattened text."""
        return self.length


__all__ = ["DocumentMetadata", "DeltaDocument"]
