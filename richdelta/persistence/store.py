"""
Хранилища delta-документов: JSON-файл и HTTP-сервис.

Both stores keep the same data layout:

    {"deltas": [<delta>], "requiredMentions": {"@": [...], "#": [...]}}

Saving a delta replaces the stored list with that single delta. The HTTP
store talks to a service exposing:

    POST /api/save-delta              body: delta, returns it
    GET  /api/get-deltas              returns the list of deltas
    POST /api/save-required-mentions  body: mapping, returns it
    GET  /api/get-required-mentions   returns the mapping

Module: richdelta/persistence/store.py
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Final, List, Mapping, Optional, Protocol, Union

import httpx

from richdelta.exceptions import PersistenceError

logger: Final = logging.getLogger(__name__)

DEFAULT_BASE_URL: Final[str] = "http://localhost:5000"
DEFAULT_TIMEOUT: Final[float] = 10.0
DEFAULT_DATA_FILE: Final[str] = "delta-data.json"


class DeltaStore(Protocol):
    def save_delta(self, delta: Mapping[str, Any]) -> Dict[str, Any]: ...

    def load_deltas(self) -> List[Any]: ...

    def save_required_mentions(self, mentions: Mapping[str, Any]) -> Dict[str, Any]: ...

    def load_required_mentions(self) -> Dict[str, Any]: ...


def _empty_db() -> Dict[str, Any]:
    return {"deltas": [], "requiredMentions": {}}


class FileDeltaStore:
    """
    Store backed by a single JSON file.

    A missing file starts empty. An unreadable or corrupt file is logged and
    the store starts fresh; the file is only overwritten by the next save.

    Example:
        >>> store = FileDeltaStore("delta-data.json")
        >>> store.save_delta({"ops": [{"insert": "Hi\\n"}]})
        {'ops': [{'insert': 'Hi\\n'}]}
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_DATA_FILE) -> None:
        self.path = Path(path)
        self._db = self._read()

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "FileDeltaStore":
        """Build from a :func:`richdelta.load_config` mapping (``data_file``)."""
        return cls(config.get("data_file") or DEFAULT_DATA_FILE)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return _empty_db()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {self.path}, starting fresh: {e}")
            return _empty_db()

        if not isinstance(data, dict):
            logger.error(f"Unexpected content in {self.path}, starting fresh")
            return _empty_db()

        db = _empty_db()
        if isinstance(data.get("deltas"), list):
            db["deltas"] = data["deltas"]
        if isinstance(data.get("requiredMentions"), dict):
            db["requiredMentions"] = data["requiredMentions"]
        return db

    def _write(self, db: Dict[str, Any]) -> None:
        try:
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(db, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to write {self.path}: {e}")
            raise PersistenceError(f"Cannot write data file: {e}", url=str(self.path)) from e

    def save_delta(self, delta: Mapping[str, Any]) -> Dict[str, Any]:
        stored = json.loads(json.dumps(delta))
        db = {**self._db, "deltas": [stored]}
        self._write(db)
        self._db = db
        logger.info(f"Delta saved to {self.path}")
        return stored

    def load_deltas(self) -> List[Any]:
        return json.loads(json.dumps(self._db["deltas"]))

    def save_required_mentions(self, mentions: Mapping[str, Any]) -> Dict[str, Any]:
        stored = json.loads(json.dumps(mentions))
        db = {**self._db, "requiredMentions": stored}
        self._write(db)
        self._db = db
        return stored

    def load_required_mentions(self) -> Dict[str, Any]:
        return json.loads(json.dumps(self._db["requiredMentions"]))


class HttpDeltaStore:
    """
    Store backed by the delta persistence service.

    Args:
        base_url: Service root, e.g. ``http://localhost:5000``.
        timeout: Request timeout in seconds.
        client: Optional preconfigured ``httpx.Client`` (owned by the caller).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "HttpDeltaStore":
        """Build from a :func:`richdelta.load_config` mapping."""
        return cls(
            base_url=str(config.get("persistence_url", DEFAULT_BASE_URL)),
            timeout=float(config.get("request_timeout_seconds", DEFAULT_TIMEOUT)),
        )

    def _request(self, method: str, path: str, payload: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.request(method, url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"{method} {url} timed out")
            raise PersistenceError("Persistence service timed out", url=url) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise PersistenceError(f"Failed to reach persistence service: {e}", url=url) from e

        if not response.is_success:
            snippet = (response.text or "").strip()
            if len(snippet) > 120:
                snippet = f"{snippet[:117]}..."
            reason = snippet or response.reason_phrase or "Unknown error"
            logger.error(f"{method} {url} responded with {response.status_code}: {reason}")
            raise PersistenceError(
                f"Service responded with {response.status_code}: {reason}",
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise PersistenceError(
                "Service returned invalid JSON", status_code=response.status_code, url=url
            ) from e

    def save_delta(self, delta: Mapping[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/save-delta", dict(delta))

    def load_deltas(self) -> List[Any]:
        data = self._request("GET", "/api/get-deltas")
        if not isinstance(data, list):
            raise PersistenceError("Expected a list of deltas", url=f"{self.base_url}/api/get-deltas")
        return data

    def save_required_mentions(self, mentions: Mapping[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/save-required-mentions", dict(mentions))

    def load_required_mentions(self) -> Dict[str, Any]:
        data = self._request("GET", "/api/get-required-mentions")
        if not isinstance(data, dict):
            raise PersistenceError(
                "Expected a required-mentions object",
                url=f"{self.base_url}/api/get-required-mentions",
            )
        return data

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpDeltaStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_DATA_FILE",
    "DEFAULT_TIMEOUT",
    "DeltaStore",
    "FileDeltaStore",
    "HttpDeltaStore",
]
