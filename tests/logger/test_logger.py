"""Tests for the debapps logging package."""

import logging
from logging.handlers import QueueHandler, RotatingFileHandler
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from debapps.constants import LOG_COLORS, LOG_CONSOLE_FORMAT
from debapps.logger import (
    ColoredConsoleFormatter,
    ConfigurationError,
    HybridConsoleFormatter,
    SimpleConsoleFormatter,
    get_logger,
    get_state,
    set_console_level,
)
from debapps.logger.config import (
    LOG_FILE_NAME,
    apply_levels,
    load_log_settings,
    update_logger_from_config,
)
from debapps.logger.handlers import ROOT_LOGGER_NAME, _create_file_handler


def make_record(level: int, msg: str = "Installing %s") -> logging.LogRecord:
    return logging.LogRecord(
        name="debapps.core.test",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=("obsidian",),
        exc_info=None,
    )


class TestFormatters:
    def test_simple_formatter_outputs_message_only(self):
        record = make_record(logging.WARNING)
        assert SimpleConsoleFormatter().format(record) == "Installing obsidian"

    def test_hybrid_prints_info_bare(self):
        formatter = HybridConsoleFormatter(LOG_CONSOLE_FORMAT)
        assert formatter.format(make_record(logging.INFO)) == (
            "Installing obsidian"
        )

    def test_hybrid_prints_warning_with_metadata(self):
        formatter = HybridConsoleFormatter(LOG_CONSOLE_FORMAT)
        output = formatter.format(make_record(logging.WARNING))

        assert "debapps.core.test" in output
        assert LOG_COLORS["WARNING"] in output
        assert output.endswith("Installing obsidian")

    def test_colored_formatter_restores_levelname(self):
        record = make_record(logging.ERROR)
        output = ColoredConsoleFormatter("%(levelname)s").format(record)

        assert output == f"{LOG_COLORS['ERROR']}ERROR{LOG_COLORS['RESET']}"
        assert record.levelname == "ERROR"

    def test_colored_formatter_unknown_level(self):
        record = make_record(25)
        record.levelname = "NOTICE"
        output = ColoredConsoleFormatter("%(levelname)s").format(record)
        assert output == "NOTICE"


class TestLoggerHierarchy:
    def test_child_logger_belongs_to_root(self):
        logger = get_logger("debapps.tests.hierarchy")

        assert logger.name == "debapps.tests.hierarchy"
        assert logger.handlers == []
        assert get_state().root_initialized

    def test_root_has_single_queue_handler(self):
        get_logger(__name__)
        root = logging.getLogger(ROOT_LOGGER_NAME)

        queue_handlers = [
            h for h in root.handlers if isinstance(h, QueueHandler)
        ]
        assert len(queue_handlers) == 1

    def test_set_console_level_leaves_file_handler(self):
        get_logger(__name__)
        listener = get_state().queue_listener
        console = next(
            h
            for h in listener.handlers
            if not isinstance(h, logging.FileHandler)
        )
        file_levels = [
            h.level
            for h in listener.handlers
            if isinstance(h, logging.FileHandler)
        ]
        original = console.level

        try:
            set_console_level("DEBUG")
            assert console.level == logging.DEBUG
            assert file_levels == [
                h.level
                for h in listener.handlers
                if isinstance(h, logging.FileHandler)
            ]
        finally:
            console.setLevel(original)


class TestLogConfig:
    def test_log_dir_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DEBAPPS_LOG_DIR", str(tmp_path))

        console_level, file_level, log_path = load_log_settings()

        assert console_level == "INFO"
        assert file_level == "INFO"
        assert log_path == tmp_path / LOG_FILE_NAME

    def test_apply_levels_by_handler_type(self, tmp_path):
        console = logging.StreamHandler()
        file_handler = RotatingFileHandler(tmp_path / "test.log")
        state = SimpleNamespace(
            queue_listener=SimpleNamespace(handlers=[console, file_handler])
        )

        try:
            apply_levels(state, "WARNING", "DEBUG")
            assert console.level == logging.WARNING
            assert file_handler.level == logging.DEBUG
        finally:
            file_handler.close()

    def test_apply_levels_without_listener(self):
        apply_levels(SimpleNamespace(queue_listener=None), "DEBUG", "DEBUG")

    def test_update_keeps_bootstrap_levels_on_error(self):
        state = SimpleNamespace(queue_listener=None, config_applied=False)
        with patch(
            "debapps.config.settings.SettingsManager.load",
            side_effect=OSError("read-only"),
        ):
            update_logger_from_config(state)
        assert state.config_applied is False

    def test_update_applies_settings(self):
        state = SimpleNamespace(queue_listener=None, config_applied=False)
        settings = SimpleNamespace(
            console_log_level="WARNING", log_level="DEBUG"
        )
        with patch(
            "debapps.config.settings.SettingsManager.load",
            return_value=settings,
        ):
            update_logger_from_config(state)
        assert state.config_applied is True


class TestFileHandler:
    def test_creates_log_directory(self, tmp_path):
        log_file = tmp_path / "nested" / "debapps.log"
        handler = _create_file_handler(log_file, "DEBUG")
        try:
            assert log_file.parent.is_dir()
            assert handler.level == logging.DEBUG
        finally:
            handler.close()

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(ConfigurationError, match="file logging"):
            _create_file_handler(blocker / "debapps.log", "INFO")
