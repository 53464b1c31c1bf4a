"""
persistence

Хранение delta-документов и списка упоминаний.

Public API:
    - DeltaStore: протокол хранилища
    - FileDeltaStore: JSON-файл {"deltas": [...], "requiredMentions": {...}}
    - HttpDeltaStore: HTTP-сервис сохранения (httpx)

Зависимости:
    httpx
"""

from .store import DeltaStore, FileDeltaStore, HttpDeltaStore

__all__ = ["DeltaStore", "FileDeltaStore", "HttpDeltaStore"]
