# RU: Сериализация delta-формата {"ops": [{"insert": str, "attributes"?: {...}}]}.
"""Delta exchange format: conversion between run sequences and ``{"ops": [...]}``."""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping

from richdelta.exceptions import DeltaFormatError
from richdelta.model.run import Run

logger = logging.getLogger(__name__)


def runs_to_delta(runs: Iterable[Run]) -> Dict[str, Any]:
    """Order-preserving ``{"ops": [...]}`` view of a run sequence (deep copies)."""
    return {"ops": [run.to_dict() for run in runs]}


def delta_to_runs(delta: Any) -> List[Run]:
    """
    Rebuild runs from a delta, without merging.

    Raises:
        DeltaFormatError: If the payload is not a delta of non-empty string
            inserts with optional mapping attributes.
    """
    if not isinstance(delta, Mapping):
        raise DeltaFormatError(f"Delta must be an object, got {type(delta).__name__}")

    ops = delta.get("ops")
    if not isinstance(ops, list):
        raise DeltaFormatError("Delta must contain an 'ops' list")

    runs: List[Run] = []
    for position, op in enumerate(ops):
        if not isinstance(op, Mapping):
            raise DeltaFormatError(
                f"Op must be an object, got {type(op).__name__}", context={"op": position}
            )
        text = op.get("insert")
        if not isinstance(text, str):
            raise DeltaFormatError(
                "Only string inserts are supported", context={"op": position}
            )
        if not text:
            raise DeltaFormatError("Insert text cannot be empty", context={"op": position})
        attributes = op.get("attributes")
        if attributes is not None and not isinstance(attributes, Mapping):
            raise DeltaFormatError(
                f"Op attributes must be an object, got {type(attributes).__name__}",
                context={"op": position},
            )
        runs.append(Run.from_dict({"insert": text, "attributes": dict(attributes) if attributes else None}))

    logger.debug(f"Decoded delta with {len(runs)} ops")
    return runs


def dumps_delta(delta: Mapping[str, Any], indent: int | None = 2) -> str:
    """JSON text of a delta (UTF-8 friendly, key order preserved)."""
    return json.dumps(delta, ensure_ascii=False, indent=indent)


def loads_delta(payload: str | bytes) -> List[Run]:
    """Parse JSON text into runs."""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise DeltaFormatError(f"Invalid delta JSON: {e.msg}", context={"line": e.lineno}) from e
    return delta_to_runs(data)


__all__ = ["runs_to_delta", "delta_to_runs", "dumps_delta", "loads_delta"]
