"""Bootstrap log settings and runtime updates from settings.conf."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from debapps.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_CONFIG_SUBDIR,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
)

if TYPE_CHECKING:
    from debapps.logger.state import _LoggerState

LOG_DIR_ENV = "DEBAPPS_LOG_DIR"
LOG_FILE_NAME = "debapps.log"


def load_log_settings() -> tuple[str, str, Path]:
    """Return bootstrap console level, file level and log file path.

    The settings module imports the logger, so real values are applied
    later by update_logger_from_config(). DEBAPPS_LOG_DIR overrides the
    log directory; the test suite points it at a temporary directory.

    Returns:
        Tuple of (console_level, file_level, log_path)

    """
    env_log_dir = os.getenv(LOG_DIR_ENV)
    if env_log_dir:
        log_path = Path(env_log_dir).expanduser() / LOG_FILE_NAME
    else:
        log_path = (
            Path.home()
            / CONFIG_DIR_NAME
            / DEFAULT_CONFIG_SUBDIR
            / "logs"
            / LOG_FILE_NAME
        )
    return DEFAULT_CONSOLE_LOG_LEVEL, DEFAULT_LOG_LEVEL, log_path


def apply_levels(
    state: "_LoggerState", console_level: str, file_level: str
) -> None:
    """Set handler levels on the running QueueListener.

    Args:
        state: Logger state object
        console_level: Level name for the console handler
        file_level: Level name for the file handler

    """
    if state.queue_listener is None:
        return
    for handler in state.queue_listener.handlers:
        if isinstance(handler, RotatingFileHandler):
            handler.setLevel(getattr(logging, file_level, logging.INFO))
        elif isinstance(handler, logging.StreamHandler):
            handler.setLevel(getattr(logging, console_level, logging.INFO))


def update_logger_from_config(state: "_LoggerState") -> None:
    """Apply log levels from settings.conf to the running handlers.

    Args:
        state: Logger state object (from logger.state module)

    """
    try:
        from debapps.config.settings import SettingsManager  # noqa: PLC0415

        settings = SettingsManager().load()
    except (ImportError, OSError, ValueError):
        # Settings unavailable during early import; keep bootstrap levels
        return

    apply_levels(state, settings.console_log_level, settings.log_level)
    state.config_applied = True
