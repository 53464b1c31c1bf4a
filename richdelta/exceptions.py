"""
Централизованные исключения richdelta.

Typed exception hierarchy shared by the engine, the delta codec and the
persistence layer.

Example:
    >>> from richdelta.exceptions import DeltaError
    >>> try:
    ...     doc.delete(100, 5)
    ... except DeltaError as e:
    ...     logger.error(f"Edit rejected: {e}")
    ...     print(e.context)

Иерархия:
    DeltaError (базовое)
    ├── IndexOutOfRangeError
    ├── InvalidAttributeBundleError
    ├── DeltaFormatError
    └── PersistenceError
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__: list[str] = [
    "DeltaError",
    "IndexOutOfRangeError",
    "InvalidAttributeBundleError",
    "DeltaFormatError",
    "PersistenceError",
]


class DeltaError(Exception):
    """
    Базовое исключение для всех ошибок richdelta.

    Attributes:
        message: Human readable error message.
        context: Extra debugging data (indices, lengths, keys).
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context) if context else {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class IndexOutOfRangeError(DeltaError, IndexError):
    """
    Index or length outside ``[0, document_length]``.

    Raised before any state is touched: the document and its history are
    unchanged when this propagates.
    """

    def __init__(self, index: int, length: int, document_length: int) -> None:
        super().__init__(
            f"Range [{index}, {index + length}) is outside the document [0, {document_length}]",
            context={"index": index, "length": length, "document_length": document_length},
        )
        self.index = index
        self.length = length
        self.document_length = document_length


class InvalidAttributeBundleError(DeltaError, ValueError):
    """Attribute bundle is empty or contains a value of the wrong kind."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message, context={"key": key} if key is not None else None)
        self.key = key


class DeltaFormatError(DeltaError, ValueError):
    """Serialized delta does not follow ``{"ops": [{"insert": str, ...}]}``."""


class PersistenceError(DeltaError):
    """
    Persistence service failure (transport error, bad status, bad payload).

    The in-memory document is never modified by a failed save.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        context: Dict[str, Any] = {}
        if status_code is not None:
            context["status_code"] = status_code
        if url is not None:
            context["url"] = url
        super().__init__(message, context=context)
        self.status_code = status_code
        self.url = url
