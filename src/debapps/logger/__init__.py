"""Logging utilities for debapps.

Structured logging with colored console output, a rotating log file and
an async-safe QueueHandler/QueueListener pipeline:

    Application → QueueHandler → Queue → QueueListener Thread
                                              ↓
                                    Console + File Handlers

Usage:
    >>> from debapps.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Resolving %s", app_id)  # %-style, never f-strings

Rules:
    1. Always use logger = get_logger(__name__)
    2. Never call logging.basicConfig()
    3. Only the root "debapps" logger has a handler (the QueueHandler)

Environment Variables:
    DEBAPPS_LOG_DIR: Override the log directory (used by the test suite)
"""

from debapps.logger.config import (
    update_logger_from_config as _update_config,
)
from debapps.logger.formatters import (
    ColoredConsoleFormatter,
    HybridConsoleFormatter,
    SimpleConsoleFormatter,
)
from debapps.logger.handlers import ConfigurationError
from debapps.logger.logger import (
    clear_logger_state,
    flush_all_handlers,
    get_logger,
    set_console_level,
    setup_logging,
)
from debapps.logger.state import _state, get_state

__all__ = [
    "ColoredConsoleFormatter",
    "ConfigurationError",
    "HybridConsoleFormatter",
    "SimpleConsoleFormatter",
    "_state",  # For testing only
    "clear_logger_state",
    "flush_all_handlers",
    "get_logger",
    "get_state",
    "set_console_level",
    "setup_logging",
    "update_logger_from_config",
]


def update_logger_from_config() -> None:
    """Apply log levels from settings.conf to the running handlers."""
    _update_config(get_state())
