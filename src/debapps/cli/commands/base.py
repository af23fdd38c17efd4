"""Base command handler for debapps CLI commands.

This module provides the abstract base class that all command handlers
inherit from, ensuring a consistent interface across commands.
"""

from abc import ABC, abstractmethod
from argparse import Namespace

from debapps.core.context import AppContext
from debapps.logger import get_logger

logger = get_logger(__name__)


class BaseCommandHandler(ABC):
    """Abstract base class for all command handlers.

    CLIRunner is the composition root: it builds one AppContext per
    invocation and hands it to the handler of the selected command.
    """

    def __init__(self, ctx: AppContext) -> None:
        """Initialize the command handler.

        Args:
            ctx: Shared application context

        """
        self.ctx = ctx

    @abstractmethod
    async def execute(self, args: Namespace) -> int:
        """Execute the command with the given arguments.

        Args:
            args: Parsed command-line arguments

        Returns:
            Process exit status

        """
