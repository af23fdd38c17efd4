"""Console formatters for debapps.

INFO records are printed as bare messages so that user-facing status lines
("✅ Installed obsidian 1.6.7") read cleanly. Every other level is printed
with timestamp, logger name and a colored level name.
"""

import logging

from debapps.constants import LOG_COLORS


class ColoredConsoleFormatter(logging.Formatter):
    """Formatter that wraps the level name in ANSI color codes."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record with a colored level name.

        The record's levelname is restored afterwards so other handlers
        (the rotating file handler) see the plain value.

        Args:
            record: The log record to format

        Returns:
            Formatted log line

        """
        if record.levelname not in LOG_COLORS:
            return super().format(record)

        original_levelname = record.levelname
        color = LOG_COLORS[original_levelname]
        record.levelname = f"{color}{original_levelname}{LOG_COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


class SimpleConsoleFormatter(logging.Formatter):
    """Formatter that only outputs the message content."""

    def format(self, record: logging.LogRecord) -> str:
        """Return the rendered message without metadata."""
        return record.getMessage()


class HybridConsoleFormatter(logging.Formatter):
    """Simple format for INFO, colored structured format for other levels.

    Example Output:
        INFO:     "📦 Installing Obsidian"
        WARNING:  "12:30:45 - debapps.core.appimage - WARNING - No icon"
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
    ) -> None:
        """Initialize hybrid formatter.

        Args:
            fmt: Format string for non-INFO records
            datefmt: Date format string for timestamps

        """
        super().__init__(fmt, datefmt)
        self._simple_formatter = SimpleConsoleFormatter()
        self._colored_formatter = ColoredConsoleFormatter(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """Pick the formatter by record level."""
        if record.levelno == logging.INFO:
            return self._simple_formatter.format(record)
        return self._colored_formatter.format(record)
