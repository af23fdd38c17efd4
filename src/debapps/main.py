"""Main CLI entry point for debapps.

This module provides the minimal entry point for the command-line
interface, delegating all functionality to the CLI runner and its
command handlers.
"""

import sys

import uvloop

from debapps.cli import CLIRunner
from debapps.logger import get_logger

logger = get_logger(__name__)


async def async_main() -> int:
    """Run the CLI asynchronously.

    Returns:
        Process exit status

    """
    logger.debug("CLI started")
    return await CLIRunner().run()


def main() -> None:
    """Run the CLI application on the uvloop event loop."""
    try:
        status = uvloop.run(async_main())
    except KeyboardInterrupt:
        logger.info("CLI cancelled by user")
        sys.exit(1)
    except Exception:
        logger.exception("❌ Unexpected error")
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    main()
