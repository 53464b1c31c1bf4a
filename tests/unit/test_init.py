"""
Модульные тесты для richdelta/__init__.py
Тестирует метаданные пакета, конфигурацию, логирование и публичный API.
"""

import json
import logging
import re
from pathlib import Path
from unittest import mock

import pytest

import richdelta
from richdelta.persistence.store import FileDeltaStore


class TestVersionMetadata:
    """Тестирование метаданных версии и констант."""

    def test_version_format(self) -> None:
        """Проверить, что __version__ следует семантическому версионированию."""
        assert re.match(r"^\d+\.\d+\.\d+$", richdelta.__version__)

    def test_version_components(self) -> None:
        expected = f"{richdelta.VERSION_MAJOR}.{richdelta.VERSION_MINOR}.{richdelta.VERSION_PATCH}"
        assert richdelta.__version__ == expected

    def test_metadata_attributes(self) -> None:
        """Проверить, что все атрибуты метаданных являются непустыми строками."""
        for value in (
            richdelta.__author__,
            richdelta.__description__,
            richdelta.__license__,
            richdelta.__python_requires__,
        ):
            assert isinstance(value, str) and value


class TestPublicAPI:
    """Тестирование экспортов публичного API."""

    def test_all_exports_exist(self) -> None:
        for name in richdelta.__all__:
            assert hasattr(richdelta, name), f"Имя '{name}' из __all__ не существует в модуле"

    def test_no_duplicate_exports(self) -> None:
        assert len(richdelta.__all__) == len(set(richdelta.__all__))

    def test_model_exported(self) -> None:
        for name in ("DeltaDocument", "Run", "Selection", "ListType", "MentionType"):
            assert name in richdelta.__all__

    def test_errors_share_base(self) -> None:
        for error in (
            richdelta.IndexOutOfRangeError,
            richdelta.InvalidAttributeBundleError,
            richdelta.DeltaFormatError,
            richdelta.PersistenceError,
        ):
            assert issubclass(error, richdelta.DeltaError)

    def test_document_from_package_root(self) -> None:
        doc = richdelta.DeltaDocument()
        doc.insert(0, "Hello")
        assert doc.format_inline(0, 5, {"bold": True}) is True
        assert doc.get_delta() == {
            "ops": [{"insert": "Hello", "attributes": {"bold": True}}, {"insert": "\n"}]
        }


class TestLogging:
    """Тестирование конфигурации логирования."""

    def test_get_logger_name_format(self) -> None:
        assert richdelta.get_logger("test_module").name == "richdelta.test_module"

    def test_get_logger_with_qualified_name(self) -> None:
        assert richdelta.get_logger("richdelta.engine.store").name == "richdelta.engine.store"

    def test_get_logger_with_main(self) -> None:
        assert richdelta.get_logger("__main__").name == "richdelta.main"

    def test_logger_is_configured(self) -> None:
        root_logger = logging.getLogger("richdelta")
        assert len(root_logger.handlers) >= 1
        assert root_logger.propagate is False

    def test_setup_is_idempotent(self) -> None:
        root_logger = logging.getLogger("richdelta")
        before = list(root_logger.handlers)
        richdelta._setup_logging()
        assert root_logger.handlers == before

    def test_log_level_and_file_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Уровень и каталог логов берутся из переменных окружения."""
        root_logger = logging.getLogger("richdelta")
        saved_handlers = list(root_logger.handlers)
        saved_level = root_logger.level
        monkeypatch.setenv("RICHDELTA_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("RICHDELTA_LOG_DIR", str(tmp_path / "logs"))
        try:
            for handler in saved_handlers:
                root_logger.removeHandler(handler)
            richdelta._setup_logging()

            assert root_logger.level == logging.DEBUG
            assert (tmp_path / "logs").is_dir()
            assert any(
                isinstance(h, logging.handlers.RotatingFileHandler) for h in root_logger.handlers
            )
        finally:
            for handler in list(root_logger.handlers):
                root_logger.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root_logger.addHandler(handler)
            root_logger.setLevel(saved_level)


class TestConfiguration:
    """Тестирование управления конфигурацией."""

    def test_load_config_defaults(self, tmp_path: Path) -> None:
        config = richdelta.load_config(tmp_path / "missing.json")
        assert config["history_limit"] == 50
        assert config["persistence_url"] == "http://localhost:5000"
        assert config["request_timeout_seconds"] == 10.0
        assert config["data_file"] == "delta-data.json"
        assert config["initial_text"] == "\n"
        assert "log_level" not in config

    def test_load_config_from_file(self, tmp_path: Path) -> None:
        config_path = tmp_path / "richdelta.json"
        config_path.write_text(
            json.dumps({"history_limit": 10, "custom_key": "custom_value"}), encoding="utf-8"
        )

        config = richdelta.load_config(config_path)

        assert config["history_limit"] == 10
        assert config["custom_key"] == "custom_value"
        assert config["persistence_url"] == "http://localhost:5000"

    @pytest.mark.parametrize(
        "content",
        ["{invalid json content", json.dumps(["not", "a", "dict"])],
        ids=["invalid-json", "non-object"],
    )
    def test_load_config_bad_file_falls_back(self, tmp_path: Path, content: str) -> None:
        config_path = tmp_path / "richdelta.json"
        config_path.write_text(content, encoding="utf-8")

        config = richdelta.load_config(config_path)

        assert config == richdelta._DEFAULT_CONFIG

    def test_load_config_unreadable_file(self, tmp_path: Path) -> None:
        config_path = tmp_path / "richdelta.json"
        config_path.write_text("{}", encoding="utf-8")

        with mock.patch("builtins.open", side_effect=PermissionError("denied")):
            config = richdelta.load_config(config_path)

        assert config == richdelta._DEFAULT_CONFIG

    def test_config_builds_document_and_store(self, tmp_path: Path) -> None:
        config_path = tmp_path / "richdelta.json"
        data_file = tmp_path / "deltas.json"
        config_path.write_text(
            json.dumps({"history_limit": 5, "initial_text": "Hi\n", "data_file": str(data_file)}),
            encoding="utf-8",
        )
        config = richdelta.load_config(config_path)

        doc = richdelta.DeltaDocument.from_config(config)
        store = FileDeltaStore.from_config(config)

        assert doc.get_text() == "Hi\n"
        assert doc.history.capacity == 5
        assert store.path == data_file

    def test_defaults_not_mutated(self, tmp_path: Path) -> None:
        config = richdelta.load_config(tmp_path / "missing.json")
        config["history_limit"] = 1
        assert richdelta._DEFAULT_CONFIG["history_limit"] == 50


class TestDependencyCheck:
    """Тестирование проверки зависимостей."""

    def test_check_dependencies_reports_httpx(self) -> None:
        deps = richdelta.check_dependencies()
        assert deps == {"httpx": True}

    def test_httpx_is_a_hard_dependency(self) -> None:
        """httpx импортируется хранилищем напрямую, поэтому он обязателен."""
        import httpx

        from richdelta.persistence import store as store_module

        assert store_module.httpx is httpx
        assert "required" in (richdelta.check_dependencies.__doc__ or "")

    def test_check_dependencies_missing(self) -> None:
        with mock.patch.dict("sys.modules", {"httpx": None}):
            deps = richdelta.check_dependencies()
        assert deps["httpx"] is False
