"""
Пакет richdelta
===============

Rich-text document engine built around a "delta": an ordered sequence of
attribute-tagged text runs addressed by flat character positions.

Этот пакет предоставляет:
    - Хранилище runs с разбиением и слиянием (RunStore)
    - Inline-форматирование с семантикой переключения (bold, italic, color...)
    - Маркированные и нумерованные списки с автоматической нумерацией
    - Атомарные упоминания пользователей (@) и тикетов (#)
    - Ограниченную историю отмены/повтора (50 снимков)
    - Сериализацию в формат delta ({"ops": [...]}) и хранилища (файл, HTTP)

Пример базового использования:
    >>> from richdelta import DeltaDocument
    >>>
    >>> doc = DeltaDocument()
    >>> doc.insert(0, "Hello")
    0
    >>> doc.format_inline(0, 5, {"bold": True})
    True
    >>> doc.get_delta()
    {'ops': [{'insert': 'Hello', 'attributes': {'bold': True}}, {'insert': '\\n'}]}

Управление конфигурацией:
    >>> import os
    >>> os.environ['RICHDELTA_LOG_LEVEL'] = 'DEBUG'
    >>>
    >>> from richdelta import load_config, get_logger
    >>>
    >>> config = load_config()
    >>> config['history_limit']
    50

Version: 0.1.0
License: MIT
Python: 3.11+
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "richdelta contributors"
__description__ = "Rich-text delta document engine with lists, mentions and undo history"
__license__ = "MIT"
__python_requires__ = ">=3.11"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"richdelta requires Python 3.11 or newer. "
        f"Current version: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

_ROOT_LOGGER_NAME = "richdelta"


def _setup_logging() -> None:
    """
    Initialise package-wide logging.

    Configures the ``richdelta`` logger with:
    - a stderr handler for WARNING and above;
    - a rotating file handler for every level, only when the
      ``RICHDELTA_LOG_DIR`` environment variable names a directory;
    - a structured format with timestamp, level, module and message.

    The level comes from ``RICHDELTA_LOG_LEVEL`` (DEBUG, INFO, WARNING,
    ERROR, CRITICAL; INFO by default). Repeated calls are no-ops.
    """
    log_level_str = os.environ.get("RICHDELTA_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if root_logger.handlers:
        return

    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_dir_env = os.environ.get("RICHDELTA_LOG_DIR")
    if log_dir_env:
        try:
            log_dir = Path(log_dir_env)
            log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_dir / "richdelta.log",
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(
                f"Could not initialise file logging in {log_dir_env}: {e}. "
                f"Logging to console only."
            )

    root_logger.propagate = False


def get_logger(module_name: str) -> logging.Logger:
    """
    Return a logger namespaced under ``richdelta``.

    Args:
        module_name: Usually ``__name__``. Names outside the package
            namespace are prefixed with ``richdelta.``; ``__main__`` maps
            to ``richdelta.main``.

    Returns:
        A logger that inherits the package handlers.

    Example:
        >>> logger = get_logger("plugins.export")
        >>> logger.name
        'richdelta.plugins.export'
    """
    if not module_name.startswith(_ROOT_LOGGER_NAME):
        if module_name == "__main__":
            full_name = f"{_ROOT_LOGGER_NAME}.main"
        else:
            clean_name = module_name.lstrip(".")
            full_name = f"{_ROOT_LOGGER_NAME}.{clean_name}"
    else:
        full_name = module_name

    return logging.getLogger(full_name)


# =============================================================================
# УПРАВЛЕНИЕ КОНФИГУРАЦИЕЙ
# =============================================================================

_DEFAULT_CONFIG: Dict[str, Any] = {
    "history_limit": 50,
    "persistence_url": "http://localhost:5000",
    "request_timeout_seconds": 10.0,
    "data_file": "delta-data.json",
    "initial_text": "\n",
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from ``richdelta.json`` or fall back to defaults.

    Keys:
        - history_limit: int - undo history capacity
        - persistence_url: str - base URL of the delta persistence service
        - request_timeout_seconds: float - HTTP timeout for that service
        - data_file: str - JSON file used by the file-backed store
        - initial_text: str - content of a freshly created document

    Args:
        config_path: Optional path to the JSON file. Defaults to
            ``richdelta.json`` in the current directory.

    Returns:
        A dict that always contains every default key; user values override
        the defaults. Unreadable or malformed files are logged and ignored.
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path("richdelta.json")

    config = _DEFAULT_CONFIG.copy()

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)

            if not isinstance(user_config, dict):
                raise ValueError(
                    f"Config file must contain a JSON object, "
                    f"got {type(user_config).__name__}"
                )

            config.update(user_config)

            logger.info(f"Configuration loaded from {config_path}")
            logger.debug(f"Configuration: {config}")

        except json.JSONDecodeError as e:
            logger.warning(
                f"Could not parse {config_path}: invalid JSON "
                f"at line {e.lineno}, column {e.colno}. Using defaults."
            )
        except OSError as e:
            logger.warning(f"Could not read {config_path}: {e}. Using defaults.")
        except ValueError as e:
            logger.warning(f"Invalid configuration format: {e}. Using defaults.")
    else:
        logger.info(f"Config file {config_path} not found. Using defaults.")

    return config


def check_dependencies() -> Dict[str, bool]:
    """
    Report whether the required third-party libraries are importable.

    ``httpx`` is a hard dependency: :mod:`richdelta.persistence` imports it
    at module level. The check is meant for diagnosing a broken install.

    Returns:
        Mapping of distribution name to availability.
    """
    dependencies: Dict[str, bool] = {}

    try:
        import httpx  # noqa: F401

        dependencies["httpx"] = True
    except ImportError:
        dependencies["httpx"] = False

    return dependencies


_setup_logging()

# =============================================================================
# ИМПОРТЫ СЛОЯ МОДЕЛИ
# =============================================================================

# Imported after the utilities so that logging is configured first.

from .exceptions import (  # noqa: E402
    DeltaError,
    DeltaFormatError,
    IndexOutOfRangeError,
    InvalidAttributeBundleError,
    PersistenceError,
)
from .model.document import DeltaDocument  # noqa: E402
from .model.enums import ListType, MentionType  # noqa: E402
from .model.run import Run  # noqa: E402
from .model.selection import Selection  # noqa: E402

__all__ = [
    # Version metadata
    "__version__",
    "__author__",
    "__description__",
    "__license__",
    # Utilities
    "get_logger",
    "load_config",
    "check_dependencies",
    # Model
    "DeltaDocument",
    "Run",
    "Selection",
    "ListType",
    "MentionType",
    # Errors
    "DeltaError",
    "DeltaFormatError",
    "IndexOutOfRangeError",
    "InvalidAttributeBundleError",
    "PersistenceError",
]
