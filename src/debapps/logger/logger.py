"""Public API of the debapps logging system.

- setup_logging(): initialize the root "debapps" logger once
- get_logger(): module-level logger accessor
- set_console_level(): change console verbosity (used by --verbose)
- flush_all_handlers(): drain the queue and flush handlers
- clear_logger_state(): reset everything between tests
"""

import atexit
import contextlib
import logging
import time
from pathlib import Path

from debapps.logger.config import apply_levels, load_log_settings
from debapps.logger.handlers import ROOT_LOGGER_NAME, setup_root_logger
from debapps.logger.state import get_state

FLUSH_TIMEOUT_SECONDS = 5.0


def flush_all_handlers() -> None:
    """Wait for the log queue to drain and flush every handler."""
    state = get_state()
    if state.queue_listener is None or state.log_queue is None:
        return

    start_time = time.time()
    while not state.log_queue.empty():
        if time.time() - start_time > FLUSH_TIMEOUT_SECONDS:
            break
        time.sleep(0.01)
    time.sleep(0.05)

    for handler in state.queue_listener.handlers:
        with contextlib.suppress(OSError, ValueError):
            handler.flush()


def _cleanup_logging() -> None:
    """Stop the QueueListener on interpreter exit."""
    state = get_state()
    if state.queue_listener is not None:
        flush_all_handlers()
        state.queue_listener.stop()
        state.queue_listener = None


atexit.register(_cleanup_logging)


def setup_logging(
    name: str = ROOT_LOGGER_NAME,
    console_level: str | None = None,
    file_level: str | None = None,
    log_file: Path | None = None,
    enable_file_logging: bool = True,  # noqa: FBT001, FBT002
) -> logging.Logger:
    """Initialize the root logger once and return the named logger.

    Child loggers ("debapps.core.ledger") get no handlers of their own;
    they propagate to "debapps", which forwards records to the queue.

    Args:
        name: Logger name, typically __name__
        console_level: Console log level override
        file_level: File log level override
        log_file: Log file path override
        enable_file_logging: Whether to log to a rotating file

    Returns:
        The requested logger

    """
    state = get_state()
    with state.lock:
        if not state.root_initialized:
            cfg_console, cfg_file, cfg_path = load_log_settings()
            setup_root_logger(
                state,
                console_level or cfg_console,
                file_level or cfg_file,
                log_file or cfg_path,
                enable_file_logging,
            )

    return logging.getLogger(name)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger in the debapps hierarchy.

    Usage:
        >>> logger = get_logger(__name__)
        >>> logger.info("Installing %s", app_id)

    """
    return setup_logging(name=name)


def set_console_level(level: str) -> None:
    """Change the console handler level, leaving the file handler alone."""
    state = get_state()
    if state.queue_listener is None:
        return
    for handler in state.queue_listener.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, logging.FileHandler
        ):
            handler.setLevel(getattr(logging, level, logging.INFO))


def clear_logger_state() -> None:
    """Reset logger state for test isolation.

    Stops the QueueListener, closes handlers and drops every logger in
    the "debapps" namespace. Not for production use.
    """
    state = get_state()
    with state.lock:
        if state.queue_listener is not None:
            flush_all_handlers()
            state.queue_listener.stop()
            state.queue_listener = None

        state.log_queue = None
        state.root_initialized = False
        state.config_applied = False

        for logger_name in list(logging.Logger.manager.loggerDict.keys()):
            if logger_name.startswith(ROOT_LOGGER_NAME):
                log_instance = logging.getLogger(logger_name)
                for handler in log_instance.handlers[:]:
                    handler.close()
                    log_instance.removeHandler(handler)
                logging.Logger.manager.loggerDict.pop(logger_name, None)


__all__ = [
    "apply_levels",
    "clear_logger_state",
    "flush_all_handlers",
    "get_logger",
    "set_console_level",
    "setup_logging",
]
