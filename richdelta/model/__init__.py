"""
model

Модель delta-документа: runs, атрибуты, выделение и формат обмена.

Public API:
    - Run: фрагмент текста с единым набором атрибутов
    - Selection: полуоткрытый диапазон [index, index + length)
    - ListType, MentionType, AttributeKind: перечисления модели
    - runs_to_delta / delta_to_runs: формат {"ops": [...]}

The document facade lives in :mod:`richdelta.model.document` and is exported
from the top-level package.
"""

from .delta import delta_to_runs, dumps_delta, loads_delta, runs_to_delta
from .enums import AttributeKind, ListType, MentionType, detect_list_type
from .run import Run, merge_consecutive_runs
from .selection import Selection

__all__ = [
    "Run",
    "merge_consecutive_runs",
    "Selection",
    "AttributeKind",
    "ListType",
    "MentionType",
    "detect_list_type",
    "runs_to_delta",
    "delta_to_runs",
    "dumps_delta",
    "loads_delta",
]
